"""CMR backend configuration module.

This module handles settings for talking to CMR:
- Search and ingest base URLs
- Request timeout
- Provider list refresh interval
"""

from dataclasses import dataclass

from cmr_stac.core.config.schema import ConfigSchema
from cmr_stac.core.config.validation import load_env_var


@dataclass(frozen=True)
class CmrConfig:
    """Configuration for the CMR search collaborator.

    This frozen dataclass is passed to CmrClient and ProviderCache via
    dependency injection so neither needs to import the config singleton.

    Attributes:
        cmr_url: Base URL of CMR (search lives under /search)
        ingest_url: Base URL of CMR ingest (providers live under /providers)
        request_timeout: Timeout in seconds applied to every CMR call
        provider_refresh_interval: Seconds between provider list refreshes
    """

    cmr_url: str
    ingest_url: str
    request_timeout: float
    provider_refresh_interval: float

    @property
    def search_url(self) -> str:
        return f"{self.cmr_url}/search"


class CmrSettings:
    """Manages CMR configuration from environment variables."""

    @staticmethod
    def load() -> CmrConfig:
        """Load CMR configuration using schema-based validation.

        Returns:
            CmrConfig with values from environment or defaults

        Raises:
            ConfigError: If any environment variable fails validation
        """
        cmr_url = load_env_var(ConfigSchema.CMR_URL)
        ingest_url = load_env_var(ConfigSchema.CMR_INGEST_URL) or f"{cmr_url}/ingest"
        return CmrConfig(
            cmr_url=cmr_url,
            ingest_url=ingest_url,
            request_timeout=load_env_var(ConfigSchema.REQUEST_TIMEOUT),
            provider_refresh_interval=load_env_var(ConfigSchema.PROVIDER_REFRESH_INTERVAL),
        )
