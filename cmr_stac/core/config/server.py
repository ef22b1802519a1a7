"""Server configuration module (host, port, log level)."""

from dataclasses import dataclass

from cmr_stac.core.config.schema import ConfigSchema
from cmr_stac.core.config.validation import load_env_var


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the HTTP server.

    Attributes:
        host: Address uvicorn binds to
        port: Port uvicorn listens on
        log_level: Root logging level name
    """

    host: str
    port: int
    log_level: str


class ServerSettings:
    """Loads server configuration from environment variables."""

    @staticmethod
    def load() -> ServerConfig:
        """Load server configuration using schema-based validation.

        Raises:
            ConfigError: If any environment variable fails validation
        """
        return ServerConfig(
            host=load_env_var(ConfigSchema.HOST),
            port=load_env_var(ConfigSchema.PORT),
            log_level=load_env_var(ConfigSchema.LOG_LEVEL),
        )
