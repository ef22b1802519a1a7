"""Tests for the STAC extension pipeline."""

from typing import Any

import pytest

from cmr_stac.conversion.pipeline import (
    ExtensionPipeline,
    ExtensionPipelineFactory,
    ResponseContext,
    ResponseExtension,
)
from cmr_stac.conversion.pipeline.extensions.fields import FieldSelection, select_fields
from cmr_stac.core.cmr_client import SearchResult


def _feature(feature_id: str) -> dict[str, Any]:
    return {
        "type": "Feature",
        "id": feature_id,
        "geometry": None,
        "properties": {"datetime": "2020-01-01T00:00:00Z", "eo:cloud_cover": 10.0},
        "assets": {"data": {"href": "https://example.com/data"}},
        "links": [],
    }


def _feature_collection(*ids: str) -> dict[str, Any]:
    return {"type": "FeatureCollection", "features": [_feature(i) for i in ids], "links": []}


@pytest.fixture
def pipeline() -> ExtensionPipeline:
    return ExtensionPipelineFactory.create_default()


@pytest.mark.unit
def test_default_pipeline_order(pipeline):
    assert [ext.name for ext in pipeline.extensions] == ["ContextExtension", "FieldsExtension"]


@pytest.mark.unit
def test_strip_partitions_extension_params(pipeline):
    core, extension = pipeline.strip({"fields": "id", "limit": "2", "bbox": "1,2,3,4"})

    assert core == {"limit": "2", "bbox": "1,2,3,4"}
    assert extension == {"fields": "id"}


@pytest.mark.unit
def test_fields_round_trip_keeps_exactly_requested_fields(pipeline):
    _, extension = pipeline.strip({"fields": "id,properties.datetime"})

    result = pipeline.apply(_feature_collection("G1", "G2"), extension, ResponseContext())

    assert result["features"] == [
        {"id": "G1", "properties": {"datetime": "2020-01-01T00:00:00Z"}},
        {"id": "G2", "properties": {"datetime": "2020-01-01T00:00:00Z"}},
    ]


@pytest.mark.unit
def test_omitted_fields_return_full_representation(pipeline):
    representation = _feature_collection("G1")

    result = pipeline.apply(representation, {}, ResponseContext())

    assert result["features"] == representation["features"]


@pytest.mark.unit
def test_exclude_fields_from_body_object(pipeline):
    result = pipeline.apply(
        _feature_collection("G1"),
        {"fields": {"exclude": ["assets", "properties.eo:cloud_cover"]}},
        ResponseContext(),
    )

    feature = result["features"][0]
    assert "assets" not in feature
    assert feature["properties"] == {"datetime": "2020-01-01T00:00:00Z"}


@pytest.mark.unit
def test_apply_does_not_mutate_input(pipeline):
    representation = _feature_collection("G1")

    pipeline.apply(representation, {"fields": "id"}, ResponseContext())

    assert "properties" in representation["features"][0]
    assert "context" not in representation


@pytest.mark.unit
def test_context_extension_reports_counts(pipeline):
    context = ResponseContext(
        search_result=SearchResult(items=[{}, {}], cursor="c", total=42),
        query={"limit": "2"},
    )

    result = pipeline.apply(_feature_collection("G1", "G2"), {}, context)

    assert result["numberReturned"] == 2
    assert result["numberMatched"] == 42
    assert result["context"] == {"returned": 2, "limit": 2, "matched": 42}


@pytest.mark.unit
def test_context_extension_ignores_non_feature_documents(pipeline):
    representation = {"collections": [], "links": []}

    assert pipeline.apply(representation, {}, ResponseContext()) == representation


@pytest.mark.unit
def test_unknown_extension_params_are_ignored(pipeline):
    representation = _feature_collection("G1")

    unknown = {"query": {"eo:cloud_cover": {"lt": 5}}}

    result = pipeline.apply(representation, unknown, ResponseContext())

    assert result["features"] == representation["features"]


@pytest.mark.unit
def test_failing_extension_propagates():
    class Broken(ResponseExtension):
        always_on = True

        def apply(self, representation, params, context):
            raise RuntimeError("boom")

    pipeline = ExtensionPipelineFactory.create_custom([Broken()])

    with pytest.raises(RuntimeError, match="boom"):
        pipeline.apply({}, {}, ResponseContext())


@pytest.mark.unit
def test_extension_receives_only_its_own_params():
    seen: list[dict] = []

    class Recorder(ResponseExtension):
        param_names = ("sortby_extra",)

        def apply(self, representation, params, context):
            seen.append(dict(params))
            return representation

    ExtensionPipeline([Recorder()]).apply(
        {}, {"sortby_extra": 1, "fields": "id"}, ResponseContext()
    )

    assert seen == [{"sortby_extra": 1}]


@pytest.mark.unit
def test_field_selection_parse_string():
    selection = FieldSelection.parse("id,+bbox,-links")

    assert selection.include == ("id", "bbox")
    assert selection.exclude == ("links",)


@pytest.mark.unit
def test_select_fields_missing_path_is_skipped():
    assert select_fields({"id": "x"}, FieldSelection(include=("id", "nope.deep"))) == {"id": "x"}
