"""Tests for hypermedia link assembly."""

import pytest

from cmr_stac.core.config.stac import StacConfig
from cmr_stac.stac.context import StacContext, get_base_url
from cmr_stac.stac.links import (
    GEOJSON,
    Link,
    assemble_links,
    ensure_items_link,
    prepend_links,
    provider_catalog_links,
    stringify_query,
)

STAC_CONFIG = StacConfig(
    stac_version="1.0.0",
    stac_root_path="/stac",
    cloud_stac_root_path="/cloudstac",
    validate_responses=True,
)


def _context(request_path: str, query_string: str = "", **headers: str) -> StacContext:
    return StacContext.build(
        headers={"host": "localhost:3000", **headers},
        request_path=request_path,
        query_string=query_string,
        stac_config=STAC_CONFIG,
    )


def _rels(links: list[Link]) -> list[str]:
    return [link.rel for link in links]


@pytest.mark.unit
def test_context_urls():
    context = _context("/LPDAAC_ECS/collections", "limit=10")

    assert context.id == "STAC"
    assert context.stac_root == "http://localhost:3000/stac"
    assert context.path == "http://localhost:3000/stac/LPDAAC_ECS/collections"
    assert context.self == "http://localhost:3000/stac/LPDAAC_ECS/collections?limit=10"


@pytest.mark.unit
def test_context_honours_forwarding_and_cloud_headers():
    context = _context(
        "/",
        **{
            "x-forwarded-proto": "https",
            "x-forwarded-host": "cmr.example.com",
            "cloud-stac": "true",
        },
    )

    assert context.id == "CLOUDSTAC"
    assert context.is_cloud_stac
    assert context.stac_root == "https://cmr.example.com/cloudstac"


@pytest.mark.unit
def test_assemble_links_without_cursor():
    links = assemble_links(_context("/LPDAAC_ECS/collections"))

    assert _rels(links) == ["self", "root", "parent"]
    assert links[2].href == "http://localhost:3000/stac/LPDAAC_ECS"


@pytest.mark.unit
def test_assemble_links_with_cursor_adds_one_next_link():
    context = _context("/LPDAAC_ECS/collections", "limit=10")

    links = assemble_links(context, "abc123", {"limit": "10"})

    assert _rels(links) == ["self", "root", "parent", "next"]
    assert links[3].href.endswith("?limit=10&cursor=abc123")
    assert links[3].href == (
        "http://localhost:3000/stac/LPDAAC_ECS/collections?limit=10&cursor=abc123"
    )


@pytest.mark.unit
def test_next_link_replaces_previous_cursor():
    context = _context("/ALL/search", "cursor=old&limit=5")

    links = assemble_links(
        context, "new", {"cursor": "old", "limit": "5"}, next_media_type=GEOJSON
    )

    assert links[-1].href.endswith("/ALL/search?limit=5&cursor=new")
    assert links[-1].type == GEOJSON


@pytest.mark.unit
def test_stringify_query_keeps_arrays_and_objects_on_one_key():
    query = stringify_query({"bbox": [1, 2, 3, 4], "intersects": {"type": "Point"}})

    assert query == "bbox=1%2C2%2C3%2C4&intersects=%7B%22type%22%3A+%22Point%22%7D"


@pytest.mark.unit
def test_stringify_query_writes_body_fields_and_sortby_in_query_form():
    query = stringify_query(
        {
            "fields": {"include": ["id", "properties.datetime"], "exclude": ["links"]},
            "sortby": [
                {"field": "properties.datetime", "direction": "desc"},
                {"field": "id", "direction": "asc"},
            ],
        }
    )

    assert query == (
        "fields=id%2Cproperties.datetime%2C-links&sortby=-properties.datetime%2Cid"
    )


@pytest.mark.unit
def test_stringify_query_leaves_query_string_fields_and_sortby_alone():
    query = stringify_query({"fields": "id,-links", "sortby": "-properties.datetime"})

    assert query == "fields=id%2C-links&sortby=-properties.datetime"


@pytest.mark.unit
def test_prepend_links_keeps_existing_links():
    existing = [Link(rel="about", href="https://example.com/doc")]

    links = prepend_links(assemble_links(_context("/P/collections/C1")), existing)

    assert _rels(links) == ["self", "root", "parent", "about"]


@pytest.mark.unit
def test_ensure_items_link_adds_candidate():
    links = ensure_items_link(
        [Link(rel="self", href="http://localhost:3000/stac/LPDAAC_ECS/collections/C123")],
        "http://localhost:3000/stac/LPDAAC_ECS/collections/C123/items",
    )

    items = [link for link in links if link.rel == "items"]
    assert len(items) == 1
    assert items[0].href == "http://localhost:3000/stac/LPDAAC_ECS/collections/C123/items"
    assert items[0].type == "application/geo+json"


@pytest.mark.unit
def test_ensure_items_link_is_idempotent():
    once = ensure_items_link([], "http://localhost/stac/P/collections/C1/items")
    twice = ensure_items_link(once, "http://localhost/stac/P/collections/C1/items")

    assert twice == once


@pytest.mark.unit
def test_ensure_items_link_keeps_declared_items_link():
    declared = [Link(rel="items", href="https://external.example.com/stac/items")]

    links = ensure_items_link(declared, "http://localhost/stac/P/collections/C1/items")

    assert links == declared


@pytest.mark.unit
def test_provider_catalog_links():
    links = provider_catalog_links(_context("/GES_DISC"))

    assert _rels(links) == ["self", "root", "parent", "data", "search"]
    assert links[3].href == "http://localhost:3000/stac/GES_DISC/collections"
    assert links[4].href == "http://localhost:3000/stac/GES_DISC/search"


@pytest.mark.unit
def test_get_base_url_strips_query_and_slash():
    assert get_base_url("http://h/stac/P/collections/?limit=1") == "http://h/stac/P/collections"
