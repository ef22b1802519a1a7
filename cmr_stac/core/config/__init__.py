"""Configuration package for CMR-STAC."""

from cmr_stac.core.config.config import Config, config
from cmr_stac.core.config.validation import ConfigError

__all__ = ["Config", "ConfigError", "config"]
