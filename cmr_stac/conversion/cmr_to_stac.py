"""CMR JSON entries to STAC documents.

Builds the raw representations (items, collections, feature collections)
that the link assembly steps and extensions decorate afterwards. CMR
spatial strings are ``lat lon`` ordered; GeoJSON is ``lon lat``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote

from cmr_stac.stac.links import GEOJSON, JSON, Link

WHOLE_WORLD_BBOX = [-180.0, -90.0, 180.0, 90.0]

# CMR link relation suffix -> STAC asset key
_ASSET_ROLES = {
    "data#": ("data", ["data"]),
    "browse#": ("browse", ["overview"]),
    "metadata#": ("metadata", ["metadata"]),
}


def _floats(text: str) -> list[float]:
    return [float(v) for v in text.split()]


def _lat_lon_pairs(text: str) -> list[list[float]]:
    values = _floats(text)
    return [[values[i + 1], values[i]] for i in range(0, len(values) - 1, 2)]


def _box_ring(box: str) -> list[list[float]]:
    south, west, north, east = _floats(box)
    return [[west, south], [east, south], [east, north], [west, north], [west, south]]


def cmr_spatial_to_geometry(entry: Mapping[str, Any]) -> dict[str, Any] | None:
    """GeoJSON geometry from an entry's ``polygons``, ``boxes`` or ``points``."""
    rings: list[list[list[float]]] = []
    for polygon in entry.get("polygons") or []:
        # Each polygon is a list of rings; the first is the exterior
        if polygon:
            rings.append(_lat_lon_pairs(polygon[0]))
    for box in entry.get("boxes") or []:
        rings.append(_box_ring(box))

    if len(rings) == 1:
        return {"type": "Polygon", "coordinates": [rings[0]]}
    if rings:
        return {"type": "MultiPolygon", "coordinates": [[ring] for ring in rings]}

    points = [_lat_lon_pairs(point)[0] for point in entry.get("points") or []]
    if len(points) == 1:
        return {"type": "Point", "coordinates": points[0]}
    if points:
        return {"type": "MultiPoint", "coordinates": points}
    return None


def _positions(coordinates: Any) -> Iterable[list[float]]:
    if coordinates and isinstance(coordinates[0], (int, float)):
        yield coordinates
        return
    for child in coordinates:
        yield from _positions(child)


def geometry_to_bbox(geometry: Mapping[str, Any] | None) -> list[float] | None:
    if not geometry:
        return None
    positions = list(_positions(geometry["coordinates"]))
    if not positions:
        return None
    lons = [p[0] for p in positions]
    lats = [p[1] for p in positions]
    return [min(lons), min(lats), max(lons), max(lats)]


def _cmr_links(entry: Mapping[str, Any]) -> list[dict[str, Any]]:
    return [link for link in entry.get("links") or [] if link.get("href")]


def _assets(entry: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    assets: dict[str, dict[str, Any]] = {}
    counters: dict[str, int] = {}
    for link in _cmr_links(entry):
        if link.get("inherited"):
            continue
        rel = str(link.get("rel", ""))
        for suffix, (key, roles) in _ASSET_ROLES.items():
            if rel.endswith(suffix):
                counters[key] = counters.get(key, 0) + 1
                asset_key = key if counters[key] == 1 else f"{key}{counters[key]}"
                asset = {"href": link["href"], "roles": roles}
                if link.get("title"):
                    asset["title"] = link["title"]
                if link.get("type"):
                    asset["type"] = link["type"]
                assets[asset_key] = asset
                break
    return assets


def granule_to_item(
    entry: Mapping[str, Any],
    stac_root: str,
    stac_version: str,
    cmr_search_url: str,
) -> dict[str, Any]:
    """One CMR granule as a STAC Item."""
    item_id = str(entry["id"])
    collection_id = str(entry.get("collection_concept_id", ""))
    provider_id = str(entry.get("data_center", ""))
    collection_url = f"{stac_root}/{provider_id}/collections/{quote(collection_id, safe='')}"

    geometry = cmr_spatial_to_geometry(entry)
    properties: dict[str, Any] = {
        "datetime": entry.get("time_start"),
        "start_datetime": entry.get("time_start"),
        "end_datetime": entry.get("time_end") or entry.get("time_start"),
    }
    if entry.get("title"):
        properties["title"] = entry["title"]
    if entry.get("updated"):
        properties["updated"] = entry["updated"]
    if entry.get("cloud_cover") is not None:
        properties["eo:cloud_cover"] = float(entry["cloud_cover"])

    links = [
        Link(rel="self", href=f"{collection_url}/items/{quote(item_id, safe='')}", type=GEOJSON),
        Link(rel="parent", href=collection_url, type=JSON),
        Link(rel="collection", href=collection_url, type=JSON),
        Link(rel="root", href=stac_root, type=JSON),
        Link(
            rel="via",
            href=f"{cmr_search_url}/concepts/{item_id}.json",
            type=JSON,
            title="CMR JSON metadata for item",
        ),
    ]

    item: dict[str, Any] = {
        "type": "Feature",
        "stac_version": stac_version,
        "id": item_id,
        "collection": collection_id,
        "geometry": geometry,
        "properties": properties,
        "assets": _assets(entry),
        "links": [link.to_dict() for link in links],
    }
    bbox = geometry_to_bbox(geometry)
    if bbox is not None:
        item["bbox"] = bbox
    return item


def granules_to_feature_collection(
    entries: Iterable[Mapping[str, Any]],
    stac_root: str,
    stac_version: str,
    cmr_search_url: str,
) -> dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "stac_version": stac_version,
        "features": [
            granule_to_item(entry, stac_root, stac_version, cmr_search_url) for entry in entries
        ],
        "links": [],
    }


def _is_stac_api_link(link: Mapping[str, Any]) -> bool:
    rel = str(link.get("rel", ""))
    title = str(link.get("title", ""))
    return rel.endswith("service#") and "STAC" in title.upper()


def collection_to_stac(
    entry: Mapping[str, Any],
    stac_version: str,
    cmr_search_url: str,
) -> dict[str, Any]:
    """One CMR collection as a STAC Collection.

    The producer provider is the CMR provider id, which is what links under
    the ALL provider are rewritten to. A CMR link advertising an external
    STAC API becomes the collection's ``items`` link.
    """
    collection_id = str(entry["id"])
    provider_id = str(entry.get("data_center", ""))

    bboxes = [
        geometry_to_bbox({"type": "Polygon", "coordinates": [_box_ring(box)]})
        for box in entry.get("boxes") or []
    ]
    if not bboxes:
        bbox = geometry_to_bbox(cmr_spatial_to_geometry(entry))
        bboxes = [bbox] if bbox else [WHOLE_WORLD_BBOX]

    links: list[Link] = []
    for link in _cmr_links(entry):
        if _is_stac_api_link(link):
            links.append(
                Link(rel="items", href=link["href"], type=GEOJSON, title="Collection Items")
            )
        elif str(link.get("rel", "")).endswith("metadata#"):
            links.append(
                Link(
                    rel="about",
                    href=link["href"],
                    type=link.get("type"),
                    title=link.get("title"),
                )
            )
    links.append(
        Link(
            rel="via",
            href=f"{cmr_search_url}/concepts/{collection_id}.json",
            type=JSON,
            title="CMR JSON metadata for collection",
        )
    )

    return {
        "type": "Collection",
        "stac_version": stac_version,
        "id": collection_id,
        "title": entry.get("title", collection_id),
        "description": entry.get("summary") or entry.get("title") or collection_id,
        "license": "not-provided",
        "extent": {
            "spatial": {"bbox": bboxes},
            "temporal": {"interval": [[entry.get("time_start"), entry.get("time_end")]]},
        },
        "providers": [
            {"name": provider_id, "roles": ["producer"]},
            {"name": "NASA EOSDIS", "roles": ["host"], "url": "https://earthdata.nasa.gov"},
        ],
        "links": [link.to_dict() for link in links],
    }
