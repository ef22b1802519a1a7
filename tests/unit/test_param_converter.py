"""Tests for STAC to CMR parameter conversion."""

import pytest

from cmr_stac.conversion.param_converter import (
    COLLECTION_SEARCH_CONVERSION_MAP,
    ITEM_SEARCH_CONVERSION_MAP,
    ConversionMap,
    ParamConversion,
    UnknownKeyPolicy,
    convert_datetime,
    convert_params,
    convert_sortby,
    to_comma_string,
    to_list,
)
from cmr_stac.core.exceptions import InvalidParameter


@pytest.mark.unit
def test_renames_declared_parameters():
    converted = convert_params(
        {"bbox": [-10, -5, 10, 5], "limit": "25", "ids": "G1,G2", "collections": ["C1"]},
        ITEM_SEARCH_CONVERSION_MAP,
    )

    assert converted == {
        "bounding_box": "-10,-5,10,5",
        "page_size": 25,
        "concept_id": ["G1", "G2"],
        "collection_concept_id": ["C1"],
    }


@pytest.mark.unit
def test_item_search_passes_unknown_keys_through():
    converted = convert_params({"cloud_cover": "0,20"}, ITEM_SEARCH_CONVERSION_MAP)

    assert converted == {"cloud_cover": "0,20"}


@pytest.mark.unit
def test_collection_search_drops_unknown_keys():
    converted = convert_params(
        {"q": "snow", "not_a_parameter": "x"}, COLLECTION_SEARCH_CONVERSION_MAP
    )

    assert converted == {"keyword": "snow"}


@pytest.mark.unit
def test_empty_params_convert_to_empty_query():
    assert convert_params({}, ITEM_SEARCH_CONVERSION_MAP) == {}


@pytest.mark.unit
def test_custom_map_with_drop_policy():
    conversion_map = ConversionMap(
        name="test",
        entries={"a": ParamConversion("b", str.upper)},
        unknown_keys=UnknownKeyPolicy.DROP,
    )

    assert "a" in conversion_map
    assert convert_params({"a": "x", "c": "y"}, conversion_map) == {"b": "X"}


@pytest.mark.unit
@pytest.mark.parametrize(
    ("stac", "cmr"),
    [
        ("2020-01-01T00:00:00Z/2020-02-01T00:00:00Z", "2020-01-01T00:00:00Z,2020-02-01T00:00:00Z"),
        ("../2020-02-01T00:00:00Z", ",2020-02-01T00:00:00Z"),
        ("2020-01-01T00:00:00Z/..", "2020-01-01T00:00:00Z,"),
        ("2020-01-01T00:00:00Z", "2020-01-01T00:00:00Z,2020-01-01T00:00:00Z"),
    ],
)
def test_convert_datetime(stac, cmr):
    assert convert_datetime(stac) == cmr


@pytest.mark.unit
def test_convert_sortby_string_and_objects():
    assert convert_sortby("-properties.datetime,+id") == ["-start_date", "entry_title"]
    assert convert_sortby([{"field": "properties.end_datetime", "direction": "desc"}]) == [
        "-end_date"
    ]


@pytest.mark.unit
def test_value_transforms():
    assert to_comma_string("1,2,3,4") == "1,2,3,4"
    assert to_list(" a , b ,") == ["a", "b"]


@pytest.mark.unit
def test_intersects_polygon_uses_exterior_ring():
    polygon = {
        "type": "Polygon",
        "coordinates": [[[0, 0], [10, 0], [10, 10], [0, 0]], [[1, 1], [2, 1], [2, 2], [1, 1]]],
    }

    converted = convert_params({"intersects": polygon}, ITEM_SEARCH_CONVERSION_MAP)

    assert converted == {"polygon[]": ["0,0,10,0,10,10,0,0"]}


@pytest.mark.unit
def test_intersects_from_query_string_json():
    converted = convert_params(
        {"intersects": '{"type": "MultiPoint", "coordinates": [[1, 2], [3, 4]]}'},
        ITEM_SEARCH_CONVERSION_MAP,
    )

    assert converted == {"point[]": ["1,2", "3,4"], "options[point][or]": "true"}


@pytest.mark.unit
@pytest.mark.parametrize(
    "value",
    ["not json", "[1, 2]", {"type": "Polygon"}, {"type": "GeometryCollection", "coordinates": []}],
)
def test_malformed_intersects_is_invalid_parameter(value):
    with pytest.raises(InvalidParameter) as exc_info:
        convert_params({"intersects": value}, ITEM_SEARCH_CONVERSION_MAP)

    assert exc_info.value.status_code == 400
    assert exc_info.value.name == "intersects"
