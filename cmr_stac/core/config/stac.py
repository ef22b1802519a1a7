"""STAC presentation configuration module."""

from dataclasses import dataclass

from cmr_stac.core.config.schema import ConfigSchema
from cmr_stac.core.config.validation import load_env_var


@dataclass(frozen=True)
class StacConfig:
    """Configuration for generated STAC documents.

    Attributes:
        stac_version: Version written to stac_version fields
        stac_root_path: Public path prefix of the STAC catalog
        cloud_stac_root_path: Public path prefix of the cloud-hosted catalog
        validate_responses: Whether documents are checked against JSON schemas
    """

    stac_version: str
    stac_root_path: str
    cloud_stac_root_path: str
    validate_responses: bool


class StacSettings:
    """Manages STAC configuration from environment variables."""

    @staticmethod
    def load() -> StacConfig:
        return StacConfig(
            stac_version=load_env_var(ConfigSchema.STAC_VERSION),
            stac_root_path=load_env_var(ConfigSchema.STAC_ROOT_PATH),
            cloud_stac_root_path=load_env_var(ConfigSchema.CLOUD_STAC_ROOT_PATH),
            validate_responses=load_env_var(ConfigSchema.VALIDATE_RESPONSES),
        )
