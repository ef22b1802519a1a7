"""Schema validation of generated STAC documents."""

from cmr_stac.validation.validator import SCHEMA_NAMES, SchemaValidator

__all__ = ["SCHEMA_NAMES", "SchemaValidator"]
