"""Context extension.

Adds result counts to item feature collections. It has no request
parameter and runs for every item search.
"""

from collections.abc import Mapping
from typing import Any

from cmr_stac.conversion.pipeline.base import ResponseContext, ResponseExtension

DEFAULT_LIMIT = 10


class ContextExtension(ResponseExtension):
    """Adds ``context``, ``numberMatched`` and ``numberReturned``.

    Representations without ``features`` are returned unchanged.
    """

    always_on = True

    def apply(
        self,
        representation: dict[str, Any],
        params: Mapping[str, Any],
        context: ResponseContext,
    ) -> dict[str, Any]:
        features = representation.get("features")
        if features is None:
            return representation

        returned = len(features)
        summary: dict[str, Any] = {"returned": returned, "limit": self._limit(context.query)}
        result = {**representation, "numberReturned": returned}

        if context.search_result is not None and context.search_result.total is not None:
            summary["matched"] = context.search_result.total
            result["numberMatched"] = context.search_result.total

        result["context"] = summary
        return result

    @staticmethod
    def _limit(query: Mapping[str, Any]) -> int:
        try:
            return int(query.get("limit", DEFAULT_LIMIT))
        except (TypeError, ValueError):
            return DEFAULT_LIMIT
