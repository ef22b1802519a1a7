"""Configuration singleton for CMR-STAC.

Configuration is organized into focused modules:
- server: Server settings (host, port, log level)
- cmr: CMR backend settings (URLs, timeout, provider refresh)
- stac: STAC presentation settings (version, root paths, validation)
"""

from cmr_stac.core.config.cmr import CmrConfig, CmrSettings
from cmr_stac.core.config.server import ServerSettings
from cmr_stac.core.config.stac import StacConfig, StacSettings


class Config:
    """Configuration singleton with direct access to all settings.

    All values are loaded at initialization time from environment variables
    using schema-based validation.
    """

    def __init__(self) -> None:
        self._server = ServerSettings.load()
        self._cmr = CmrSettings.load()
        self._stac = StacSettings.load()

    # Server settings
    @property
    def host(self) -> str:
        return self._server.host

    @property
    def port(self) -> int:
        return self._server.port

    @property
    def log_level(self) -> str:
        return self._server.log_level

    # CMR settings
    @property
    def cmr(self) -> CmrConfig:
        return self._cmr

    @property
    def cmr_url(self) -> str:
        return self._cmr.cmr_url

    @property
    def request_timeout(self) -> float:
        return self._cmr.request_timeout

    @property
    def provider_refresh_interval(self) -> float:
        return self._cmr.provider_refresh_interval

    # STAC settings
    @property
    def stac(self) -> StacConfig:
        return self._stac

    @property
    def stac_version(self) -> str:
        return self._stac.stac_version

    @property
    def validate_responses(self) -> bool:
        return self._stac.validate_responses


# Module-level singleton
config = Config()
