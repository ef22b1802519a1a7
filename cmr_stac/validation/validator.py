"""JSON-schema validation of generated STAC documents.

A document that fails its schema is a bug in this service, not in the
client's request, so failures surface as ValidationFailure (HTTP 500).
"""

from __future__ import annotations

import asyncio
import json
import logging
from functools import lru_cache
from importlib import resources
from typing import Any

from jsonschema import Draft7Validator
from referencing import Registry, Resource

from cmr_stac.core.exceptions import ValidationFailure

logger = logging.getLogger(__name__)

SCHEMA_NAMES = ("catalog", "collection", "collections", "item", "items", "link")

# Only the first few violations are reported back
MAX_REPORTED_ERRORS = 10


def _load_schema(name: str) -> dict[str, Any]:
    schemas = resources.files("cmr_stac.validation").joinpath("schemas")
    text = schemas.joinpath(f"{name}.json").read_text(encoding="utf-8")
    return json.loads(text)


@lru_cache(maxsize=1)
def _registry() -> Registry:
    return Registry().with_resources(
        (f"{name}.json", Resource.from_contents(_load_schema(name))) for name in SCHEMA_NAMES
    )


class SchemaValidator:
    """Validates documents against the bundled STAC schemas."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        registry = _registry()
        self._validators = {
            name: Draft7Validator(registry.contents(f"{name}.json"), registry=registry)
            for name in SCHEMA_NAMES
        }

    def errors(self, schema_name: str, document: Any) -> list[str]:
        """All violations of ``schema_name`` as readable messages."""
        try:
            validator = self._validators[schema_name]
        except KeyError:
            raise ValueError(f"Unknown schema '{schema_name}'") from None
        return [
            f"{'/'.join(str(p) for p in error.absolute_path) or '<root>'}: {error.message}"
            for error in validator.iter_errors(document)
        ]

    async def validate(self, schema_name: str, document: Any) -> None:
        """Raise ValidationFailure if ``document`` does not conform.

        Raises:
            ValidationFailure: With up to MAX_REPORTED_ERRORS messages
        """
        if not self.enabled:
            return
        errors = await asyncio.to_thread(self.errors, schema_name, document)
        if errors:
            reported = errors[:MAX_REPORTED_ERRORS]
            logger.error(f"Generated {schema_name} document is invalid: {reported}")
            raise ValidationFailure(schema_name, reported)
