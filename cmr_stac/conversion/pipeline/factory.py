"""Extension pipeline factory."""

from cmr_stac.conversion.pipeline.base import ExtensionPipeline, ResponseExtension
from cmr_stac.conversion.pipeline.extensions.context import ContextExtension
from cmr_stac.conversion.pipeline.extensions.fields import FieldsExtension


class ExtensionPipelineFactory:
    """Factory for creating extension pipelines."""

    @staticmethod
    def create_default() -> ExtensionPipeline:
        """Create the default extension pipeline.

        Extensions are executed in the following order:
        1. ContextExtension - Add result counts to item searches
        2. FieldsExtension - Restrict the fields of each feature
        """
        extensions: list[ResponseExtension] = [
            ContextExtension(),
            FieldsExtension(),
        ]
        return ExtensionPipeline(extensions)

    @staticmethod
    def create_custom(extensions: list[ResponseExtension]) -> ExtensionPipeline:
        return ExtensionPipeline(extensions)
