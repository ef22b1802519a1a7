"""STAC API extension pipeline.

Extension parameters (e.g. ``fields``) are stripped from the request before
it is converted for CMR, then each extension post-processes the response.
"""

from cmr_stac.conversion.pipeline.base import ExtensionPipeline, ResponseContext, ResponseExtension
from cmr_stac.conversion.pipeline.factory import ExtensionPipelineFactory

__all__ = ["ExtensionPipeline", "ExtensionPipelineFactory", "ResponseContext", "ResponseExtension"]
