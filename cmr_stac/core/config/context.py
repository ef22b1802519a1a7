"""Context managers for test isolation without mutating global state."""

import os
from collections.abc import Generator
from contextlib import contextmanager

from cmr_stac.core.config.config import Config


@contextmanager
def temporary_config(env_overrides: dict[str, str] | None = None) -> Generator[Config, None, None]:
    """Create a temporary config instance for testing.

    The global singleton is not modified, so tests don't interfere with
    each other.

    Example:
        with temporary_config({"LOG_LEVEL": "DEBUG", "PORT": "9999"}) as config:
            assert config.log_level == "DEBUG"
            assert config.port == 9999
    """
    original_env = os.environ.copy()

    try:
        if env_overrides:
            os.environ.update(env_overrides)

        yield Config()

    finally:
        os.environ.clear()
        os.environ.update(original_env)
