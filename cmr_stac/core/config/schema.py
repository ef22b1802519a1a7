"""Declarative schema for environment variable configuration.

This module provides a single source of truth for all environment variables,
including automatic type coercion, validation, and documentation generation.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class EnvVarSpec:
    """Specification for a single environment variable.

    Attributes:
        name: Environment variable name (e.g., "PORT", "CMR_URL")
        default: Default value if env var not set
        type_hint: Type for validation (int, str, float, bool)
        description: Human-readable description for docs
        validator: Optional custom validation function
        coerce: Optional function to convert string to target type
    """

    name: str
    default: Any
    type_hint: type
    description: str
    validator: Callable[[Any], bool] | None = None
    coerce: Callable[[str], Any] | None = None


def _strip_trailing_slash(value: str) -> str:
    return value.rstrip("/")


class ConfigSchema:
    """Registry of all configuration environment variables."""

    # === Server Settings ===

    HOST = EnvVarSpec(
        name="HOST",
        default="0.0.0.0",
        type_hint=str,
        description="Server host address to bind to",
    )

    PORT = EnvVarSpec(
        name="PORT",
        default=3000,
        type_hint=int,
        description="Server port number",
        validator=lambda x: 1 <= x <= 65535,
    )

    LOG_LEVEL = EnvVarSpec(
        name="LOG_LEVEL",
        default="INFO",
        type_hint=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validator=lambda x: x.split()[0].upper()
        in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )

    # === CMR Settings ===

    CMR_URL = EnvVarSpec(
        name="CMR_URL",
        default="https://cmr.earthdata.nasa.gov",
        type_hint=str,
        description="Base URL of the CMR search service",
        validator=lambda x: x.startswith(("http://", "https://")),
        coerce=_strip_trailing_slash,
    )

    CMR_INGEST_URL = EnvVarSpec(
        name="CMR_INGEST_URL",
        default=None,
        type_hint=str,
        description="Base URL of the CMR ingest service (defaults to CMR_URL/ingest)",
        coerce=_strip_trailing_slash,
    )

    REQUEST_TIMEOUT = EnvVarSpec(
        name="REQUEST_TIMEOUT",
        default=30,
        type_hint=float,
        description="Timeout in seconds for requests sent to CMR",
        validator=lambda x: x > 0,
    )

    PROVIDER_REFRESH_INTERVAL = EnvVarSpec(
        name="PROVIDER_REFRESH_INTERVAL",
        default=3600,
        type_hint=float,
        description="Seconds between provider list refreshes (0 disables the background refresh)",
        validator=lambda x: x >= 0,
    )

    # === STAC Settings ===

    STAC_VERSION = EnvVarSpec(
        name="STAC_VERSION",
        default="1.0.0",
        type_hint=str,
        description="STAC version advertised in generated documents",
    )

    STAC_ROOT_PATH = EnvVarSpec(
        name="STAC_ROOT_PATH",
        default="/stac",
        type_hint=str,
        description="Public path prefix of the STAC root catalog",
        coerce=_strip_trailing_slash,
    )

    CLOUD_STAC_ROOT_PATH = EnvVarSpec(
        name="CLOUD_STAC_ROOT_PATH",
        default="/cloudstac",
        type_hint=str,
        description="Public path prefix of the cloud-hosted STAC root catalog",
        coerce=_strip_trailing_slash,
    )

    VALIDATE_RESPONSES = EnvVarSpec(
        name="VALIDATE_RESPONSES",
        default=True,
        type_hint=bool,
        description="Validate generated STAC documents against the bundled JSON schemas",
    )

    @classmethod
    def all_specs(cls) -> dict[str, EnvVarSpec]:
        """Get all environment variable specifications.

        Returns:
            Dictionary mapping attribute names to EnvVarSpec instances
        """
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if isinstance(getattr(cls, name), EnvVarSpec)
        }

    @classmethod
    def get_spec(cls, name: str) -> EnvVarSpec | None:
        """Get specification for a specific env var by name."""
        for spec in cls.all_specs().values():
            if spec.name == name:
                return spec
        return None

    @classmethod
    def generate_markdown_docs(cls) -> str:
        """Generate Markdown documentation for all environment variables."""
        lines = ["# Configuration Options\n\n"]
        lines.extend(
            [
                "This document is auto-generated from `ConfigSchema`.\n\n",
                "## Environment Variables\n\n",
            ]
        )

        specs = cls.all_specs()
        for _name, spec in sorted(specs.items()):
            default_repr = f"`{spec.default}`" if spec.default is not None else "None"
            lines.extend(
                [
                    f"### `{spec.name}`\n\n",
                    f"- **Type**: `{spec.type_hint.__name__}`\n",
                    f"- **Default**: {default_repr}\n",
                    f"- **Description**: {spec.description}\n\n",
                ]
            )

        return "\n".join(lines)
