"""Fields extension.

``fields`` selects which properties of each returned object are kept. It
arrives either as a query-string value (``"id,properties.datetime,-links"``)
or as a body object (``{"include": [...], "exclude": [...]}``). Dotted paths
address nested members.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from cmr_stac.conversion.pipeline.base import ResponseContext, ResponseExtension

# Members that hold the objects the selection applies to, in lookup order
_CONTAINERS = ("features", "collections")


@dataclass(frozen=True)
class FieldSelection:
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.include and not self.exclude

    @classmethod
    def parse(cls, value: Any) -> FieldSelection:
        if value is None:
            return cls()
        if isinstance(value, Mapping):
            return cls(
                include=tuple(_as_terms(value.get("include"))),
                exclude=tuple(_as_terms(value.get("exclude"))),
            )

        include: list[str] = []
        exclude: list[str] = []
        for term in _as_terms(value):
            if term.startswith("-"):
                exclude.append(term[1:])
            else:
                include.append(term.lstrip("+"))
        return cls(include=tuple(include), exclude=tuple(exclude))


def _as_terms(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


_MISSING = object()


def _get_path(obj: Mapping[str, Any], path: str) -> Any:
    current: Any = obj
    for key in path.split("."):
        if not isinstance(current, Mapping) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _set_path(obj: dict[str, Any], path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    current = obj
    for key in parents:
        current = current.setdefault(key, {})
    current[leaf] = value


def _delete_path(obj: dict[str, Any], path: str) -> None:
    *parents, leaf = path.split(".")
    current: Any = obj
    for key in parents:
        if not isinstance(current, dict) or key not in current:
            return
        current = current[key]
    if isinstance(current, dict):
        current.pop(leaf, None)


def select_fields(obj: Mapping[str, Any], selection: FieldSelection) -> dict[str, Any]:
    """Return a new object restricted to ``selection``."""
    if selection.include:
        result: dict[str, Any] = {}
        for path in selection.include:
            value = _get_path(obj, path)
            if value is not _MISSING:
                _set_path(result, path, copy.deepcopy(value))
    else:
        result = copy.deepcopy(dict(obj))

    for path in selection.exclude:
        _delete_path(result, path)
    return result


class FieldsExtension(ResponseExtension):
    param_names = ("fields",)

    def apply(
        self,
        representation: dict[str, Any],
        params: Mapping[str, Any],
        context: ResponseContext,
    ) -> dict[str, Any]:
        selection = FieldSelection.parse(params.get("fields"))
        if selection.is_empty:
            return representation

        for container in _CONTAINERS:
            if container in representation:
                members = representation[container] or []
                return {
                    **representation,
                    container: [select_fields(member, selection) for member in members],
                }
        return select_fields(representation, selection)
