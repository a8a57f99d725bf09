"""Unit tests for the inventory document wire codec."""

from __future__ import annotations

import json

import pytest

from core.errors import DecodeError
from core.types import MetricBlueprint, MetricTypeBlueprint, MetricUnit, OtherBlueprint, ResourceBlueprint
from snapshot.document_codec import (
    compress_payload,
    decompress_payload,
    parse_document,
    serialize_document,
)
from tests.snapshot_builders import resource_document


def test_serialize_then_parse_preserves_document() -> None:
    """A serialized document should parse back unchanged."""
    document = resource_document("server-1", {"db": ["pool-size", "active"], "jvm": ["heap"]})

    assert parse_document(serialize_document(document)) == document


def test_parse_falls_back_to_root_path_entry() -> None:
    """A document without ``root`` should use the entity at path ``""``."""
    text = json.dumps({"structure": {"": {"kind": "resource", "id": "server-1"}}})

    document = parse_document(text)

    assert document.root == ResourceBlueprint(id="server-1") and document.structure[""] == document.root


def test_parse_reads_metric_type_fields() -> None:
    """Metric type unit, data type, and interval should be parsed."""
    text = json.dumps(
        {
            "root": {
                "kind": "metricType",
                "id": "heap",
                "unit": "megabytes",
                "metricDataType": "counter",
                "collectionInterval": 60,
            }
        }
    )

    root = parse_document(text).root

    assert isinstance(root, MetricTypeBlueprint)
    assert (root.unit, root.data_type.value, root.collection_interval) == (MetricUnit.MEGABYTES, "counter", 60)


def test_parse_keeps_unknown_kinds() -> None:
    """Entities of unmodelled kinds should be kept as other blueprints."""
    text = json.dumps(
        {
            "root": {"kind": "resource", "id": "server-1"},
            "structure": {"d;x": {"kind": "dataEntity", "id": "x", "role": "configuration"}},
        }
    )

    entity = parse_document(text).structure["d;x"]

    assert entity == OtherBlueprint(kind="dataEntity", id="x", fields={"role": "configuration"})


def test_parse_tolerates_null_collections() -> None:
    """Null structure and indices should read as empty."""
    text = json.dumps({"root": {"kind": "metric", "id": "m"}, "structure": None, "metricTypesIndex": None})

    document = parse_document(text)

    assert document.root == MetricBlueprint(id="m") and document.metric_types_index == {}


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        json.dumps({"structure": {}}),
        json.dumps({"root": {"kind": "metric"}}),
        json.dumps({"root": {"kind": "metric", "id": "m", "collectionInterval": True}}),
        json.dumps({"root": {"kind": "metricType", "id": "t", "unit": "parsecs"}}),
        json.dumps({"root": {"kind": "metric", "id": "m"}, "metricTypesIndex": {"t": "m;1"}}),
    ],
)
def test_parse_rejects_malformed_documents(text: str) -> None:
    """Malformed documents should fail as a whole."""
    with pytest.raises(DecodeError):
        parse_document(text)


def test_decompress_round_trips_text() -> None:
    """Compressed text should decompress to the same string."""
    assert decompress_payload(compress_payload("héllo")) == "héllo"


def test_decompress_empty_buffer_is_empty_text() -> None:
    """An empty buffer should decompress to an empty string."""
    assert decompress_payload(b"") == ""


def test_decompress_rejects_non_gzip() -> None:
    """Bytes that are not gzip should fail decoding."""
    with pytest.raises(DecodeError):
        decompress_payload(b"plain text")
