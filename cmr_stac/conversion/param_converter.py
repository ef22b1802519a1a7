"""STAC to CMR search parameter conversion.

A ConversionMap declares, for one search mode, how each STAC parameter is
renamed and reshaped for CMR, and what happens to parameters it does not
know about. convert_params() is the only entry point and never raises on
unknown keys.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from cmr_stac.core.exceptions import InvalidParameter

logger = logging.getLogger(__name__)


class UnknownKeyPolicy(str, Enum):
    """What convert_params() does with keys missing from the map."""

    PASS_THROUGH = "pass_through"
    DROP = "drop"


class Conversion(Protocol):
    def apply(self, value: Any) -> dict[str, Any]:
        """Return the CMR parameters produced by one STAC value."""
        ...


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True, slots=True)
class ParamConversion:
    """Rename a parameter and reshape its value.

    Attributes:
        backend_name: CMR parameter name
        transform: Value-shape transform applied before renaming
    """

    backend_name: str
    transform: Callable[[Any], Any] = _identity

    def apply(self, value: Any) -> dict[str, Any]:
        return {self.backend_name: self.transform(value)}


@dataclass(frozen=True)
class ConversionMap:
    """Declared conversions for one search mode.

    Attributes:
        name: Identifies the map in logs
        entries: STAC parameter name -> conversion
        unknown_keys: Policy for parameters absent from ``entries``
    """

    name: str
    entries: Mapping[str, Conversion] = field(default_factory=dict)
    unknown_keys: UnknownKeyPolicy = UnknownKeyPolicy.PASS_THROUGH

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def get(self, key: str) -> Conversion | None:
        return self.entries.get(key)


def convert_params(params: Mapping[str, Any], conversion_map: ConversionMap) -> dict[str, Any]:
    """Convert STAC parameters into CMR search parameters.

    Args:
        params: Client parameters, already stripped of extension parameters
        conversion_map: Conversions for the current search mode

    Returns:
        A new dict of CMR parameters. Output key order is not significant.
    """
    converted: dict[str, Any] = {}
    dropped: list[str] = []

    for key, value in params.items():
        conversion = conversion_map.get(key)
        if conversion is not None:
            converted.update(conversion.apply(value))
        elif conversion_map.unknown_keys is UnknownKeyPolicy.PASS_THROUGH:
            converted[key] = value
        else:
            dropped.append(key)

    if dropped:
        logger.debug(f"{conversion_map.name}: dropped unmapped parameters {sorted(dropped)}")
    return converted


# === Value-shape transforms ===


def to_comma_string(value: Any) -> str:
    """``[1, 2, 3]`` or ``"1,2,3"`` -> ``"1,2,3"``."""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def to_list(value: Any) -> list[str]:
    """``"a,b"`` or ``["a", "b"]`` -> ``["a", "b"]``."""
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def to_keyword(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


def to_int(value: Any) -> Any:
    # Unparseable values are left for CMR to reject
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def convert_datetime(value: Any) -> str:
    """STAC datetime interval -> CMR temporal range.

    ``a/b`` becomes ``a,b``; open ends (``..`` or empty) stay empty; a single
    instant becomes a zero-length range.
    """
    text = str(value).strip()
    if "/" not in text:
        return f"{text},{text}"
    start, end = (part.strip() for part in text.split("/", 1))
    start = "" if start == ".." else start
    end = "" if end == ".." else end
    return f"{start},{end}"


SORT_FIELD_MAP = {
    "datetime": "start_date",
    "start_datetime": "start_date",
    "end_datetime": "end_date",
    "id": "entry_title",
    "title": "entry_title",
}


def _sort_key(field_name: str, descending: bool) -> str:
    name = field_name.removeprefix("properties.")
    cmr_name = SORT_FIELD_MAP.get(name, name)
    return f"-{cmr_name}" if descending else cmr_name


def convert_sortby(value: Any) -> list[str]:
    """STAC sortby (``"-properties.datetime,+id"`` or a list of
    ``{"field": ..., "direction": ...}`` objects) -> CMR ``sort_key`` list.
    """
    keys: list[str] = []
    if isinstance(value, (list, tuple)) and value and isinstance(value[0], Mapping):
        for spec in value:
            descending = str(spec.get("direction", "asc")).lower() == "desc"
            keys.append(_sort_key(str(spec["field"]), descending))
        return keys

    for term in to_list(value):
        descending = term.startswith("-")
        keys.append(_sort_key(term.lstrip("+-"), descending))
    return keys


def _flatten_coordinates(positions: list[list[float]]) -> str:
    return ",".join(f"{position[0]},{position[1]}" for position in positions)


@dataclass(frozen=True, slots=True)
class GeometryConversion:
    """GeoJSON ``intersects`` -> CMR ``point[]``/``line[]``/``polygon[]``.

    Only exterior rings are sent for polygons. Multi-geometries are combined
    with an OR option so any member may match.
    """

    def apply(self, value: Any) -> dict[str, Any]:
        geometry = self._parse(value)
        geometry_type = geometry.get("type")
        coordinates = geometry.get("coordinates")
        if coordinates is None:
            raise InvalidParameter("intersects", "geometry has no coordinates", geometry_type)

        if geometry_type == "Point":
            return {"point[]": [_flatten_coordinates([coordinates])]}
        if geometry_type == "MultiPoint":
            return {
                "point[]": [_flatten_coordinates([p]) for p in coordinates],
                "options[point][or]": "true",
            }
        if geometry_type == "LineString":
            return {"line[]": [_flatten_coordinates(coordinates)]}
        if geometry_type == "MultiLineString":
            return {
                "line[]": [_flatten_coordinates(line) for line in coordinates],
                "options[line][or]": "true",
            }
        if geometry_type == "Polygon":
            return {"polygon[]": [_flatten_coordinates(coordinates[0])]}
        if geometry_type == "MultiPolygon":
            return {
                "polygon[]": [_flatten_coordinates(polygon[0]) for polygon in coordinates],
                "options[polygon][or]": "true",
            }
        raise InvalidParameter("intersects", "unsupported geometry type", geometry_type)

    @staticmethod
    def _parse(value: Any) -> dict[str, Any]:
        if isinstance(value, Mapping):
            return dict(value)
        try:
            parsed = json.loads(value)
        except (TypeError, ValueError) as e:
            raise InvalidParameter("intersects", f"not valid GeoJSON: {e}") from e
        if not isinstance(parsed, dict):
            raise InvalidParameter("intersects", "GeoJSON geometry must be an object")
        return parsed


# === Declared maps ===

_SHARED_ENTRIES: dict[str, Conversion] = {
    "bbox": ParamConversion("bounding_box", to_comma_string),
    "datetime": ParamConversion("temporal", convert_datetime),
    "intersects": GeometryConversion(),
    "limit": ParamConversion("page_size", to_int),
    "ids": ParamConversion("concept_id", to_list),
    "sortby": ParamConversion("sort_key", convert_sortby),
    "cursor": ParamConversion("cursor"),
    "provider": ParamConversion("provider"),
}

# Item search forwards parameters it does not recognize; CMR granule search
# accepts many native parameters (e.g. cloud_cover) that clients rely on.
ITEM_SEARCH_CONVERSION_MAP = ConversionMap(
    name="item-search",
    entries={
        **_SHARED_ENTRIES,
        "collections": ParamConversion("collection_concept_id", to_list),
    },
    unknown_keys=UnknownKeyPolicy.PASS_THROUGH,
)

COLLECTION_SEARCH_CONVERSION_MAP = ConversionMap(
    name="collection-search",
    entries={
        **_SHARED_ENTRIES,
        "q": ParamConversion("keyword", to_keyword),
        "cloud_hosted": ParamConversion("cloud_hosted"),
    },
    unknown_keys=UnknownKeyPolicy.DROP,
)
