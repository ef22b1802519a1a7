"""Base infrastructure for the STAC extension pipeline.

This module defines the core components of the pipeline:
- ResponseContext: Immutable data each extension may read
- ResponseExtension: Abstract base for one STAC API extension
- ExtensionPipeline: Strips extension parameters from a request and applies
  the extensions, in a fixed order, to the outgoing representation
"""

from __future__ import annotations

import dataclasses
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from cmr_stac.core.cmr_client import SearchResult


@dataclasses.dataclass(frozen=True)
class ResponseContext:
    """Immutable context handed to every extension.

    Attributes:
        search_result: The raw CMR result the representation was built from.
        query: The client query (query string merged with body) after
            extension parameters were stripped.
    """

    search_result: SearchResult | None = None
    query: Mapping[str, Any] = dataclasses.field(default_factory=dict)


class ResponseExtension(ABC):
    """Base class for one STAC API extension.

    Extensions must not mutate the representation they receive; they return
    a new one. An extension runs when its parameter is present, or always
    when ``always_on`` is set.
    """

    #: Request parameters owned by this extension
    param_names: tuple[str, ...] = ()
    always_on: bool = False

    @abstractmethod
    def apply(
        self,
        representation: dict[str, Any],
        params: Mapping[str, Any],
        context: ResponseContext,
    ) -> dict[str, Any]:
        """Return a new representation with this extension applied.

        Args:
            representation: The STAC document produced so far.
            params: This extension's own request parameters.
            context: Raw search result and merged query.
        """

    def is_requested(self, extension_params: Mapping[str, Any]) -> bool:
        return self.always_on or any(name in extension_params for name in self.param_names)

    @property
    def name(self) -> str:
        """Human-readable name for logging and debugging."""
        return self.__class__.__name__


class ExtensionPipeline:
    """Two-phase pipeline: strip() before CMR, apply() after.

    Extensions run in the order given at construction.
    """

    def __init__(self, extensions: list[ResponseExtension]) -> None:
        self.extensions = extensions
        self.logger = logging.getLogger(f"{__name__}.ExtensionPipeline")

    @property
    def param_names(self) -> frozenset[str]:
        return frozenset(name for ext in self.extensions for name in ext.param_names)

    def strip(self, params: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
        """Partition request parameters.

        Returns:
            ``(core_params, extension_params)``. Only ``core_params`` may be
            handed to the parameter converter.
        """
        owned = self.param_names
        core: dict[str, Any] = {}
        extension: dict[str, Any] = {}
        for key, value in params.items():
            (extension if key in owned else core)[key] = value
        if extension:
            self.logger.debug(f"Stripped extension parameters: {sorted(extension)}")
        return core, extension

    def apply(
        self,
        representation: dict[str, Any],
        extension_params: Mapping[str, Any],
        context: ResponseContext,
    ) -> dict[str, Any]:
        """Run every requested extension and return the final representation.

        Keys in ``extension_params`` that no extension owns are ignored.

        Raises:
            Exception: If an extension fails. The exception propagates after
                being logged with the failing extension's name.
        """
        result = representation
        for i, extension in enumerate(self.extensions):
            if not extension.is_requested(extension_params):
                continue
            self.logger.debug(
                f"Running extension [{i + 1}/{len(self.extensions)}]: {extension.name}"
            )
            own_params = {k: v for k, v in extension_params.items() if k in extension.param_names}
            try:
                result = extension.apply(result, own_params, context)
            except Exception as e:
                self.logger.error(f"Extension {extension.name} failed: {e}", exc_info=True)
                raise
        return result
