"""STAC API extensions applied to outgoing representations."""

from cmr_stac.conversion.pipeline.extensions.context import ContextExtension
from cmr_stac.conversion.pipeline.extensions.fields import FieldsExtension

__all__ = ["ContextExtension", "FieldsExtension"]
