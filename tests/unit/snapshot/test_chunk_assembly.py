"""Unit tests for snapshot reconstruction from fragments."""

from __future__ import annotations

import base64
from dataclasses import replace

import pytest

from core.errors import ChunkOrderError, DecodeError, InvalidSnapshotError, MissingSnapshotError
from core.types import DataPoint
from snapshot.chunk_assembly import assemble_payload, rebuild_document
from snapshot.chunk_encoding import build_chunk_set, encode_document
from tests.snapshot_builders import metric_type_document, resource_document


def _fragmented_points(timestamp: int = 5000) -> list[DataPoint]:
    points = build_chunk_set(metric_type_document("db"), timestamp, max_chunk_bytes=16)
    assert len(points) >= 3
    return points


def _with_master_tags(points: list[DataPoint], **tags: str) -> list[DataPoint]:
    master = replace(points[0], tags={**points[0].tags, **tags})
    return [master, *points[1:]]


def test_rebuild_unfragmented_snapshot() -> None:
    """A single untagged point should decode as the whole payload."""
    document = resource_document("server-1", {"db": ["pool-size"]})
    points = build_chunk_set(document, 1000)

    rebuilt = rebuild_document(points)

    assert len(points) == 1 and rebuilt == document


def test_rebuild_fragmented_snapshot() -> None:
    """Fragments at contiguous timestamps should reassemble exactly."""
    document = metric_type_document("db")

    rebuilt = rebuild_document(_fragmented_points())

    assert rebuilt == document


def test_assembled_payload_has_declared_size() -> None:
    """The assembled buffer should hold exactly ``size`` bytes."""
    points = _fragmented_points()

    payload = assemble_payload(points)

    assert len(payload) == int(points[0].tags["size"]) and payload == encode_document(metric_type_document("db"))


def test_rebuild_ignores_older_points_beyond_chunk_count() -> None:
    """Points older than the last declared fragment should be ignored."""
    points = _fragmented_points()
    stale = DataPoint(timestamp=points[-1].timestamp - 500, value="bm90IGEgZnJhZ21lbnQ=")

    rebuilt = rebuild_document([*points, stale])

    assert rebuilt == metric_type_document("db")


def test_rebuild_accepts_single_declared_chunk() -> None:
    """A master declaring one chunk should need no fragments."""
    payload = encode_document(metric_type_document("db"))
    master = DataPoint(
        timestamp=100,
        value=base64.b64encode(payload).decode("ascii"),
        tags={"chunks": "1", "size": str(len(payload))},
    )

    assert rebuild_document([master]) == metric_type_document("db")


def test_rebuild_rejects_empty_chunk_set() -> None:
    """An empty series should be reported as missing."""
    with pytest.raises(MissingSnapshotError):
        rebuild_document([])


def test_rebuild_rejects_missing_fragments() -> None:
    """Fewer points than declared chunks should be invalid."""
    points = _fragmented_points()

    with pytest.raises(InvalidSnapshotError, match="chunks expected"):
        rebuild_document(points[:-1])


@pytest.mark.parametrize("shift", [-1, 1])
def test_rebuild_rejects_timestamp_off_by_one(shift: int) -> None:
    """A fragment one millisecond off its slot should fail with its position."""
    points = _fragmented_points(timestamp=5000)
    points[2] = replace(points[2], timestamp=4998 + shift)

    with pytest.raises(ChunkOrderError) as error_info:
        rebuild_document(points)

    assert (error_info.value.index, error_info.value.observed, error_info.value.expected) == (
        2,
        4998 + shift,
        4998,
    )


def test_rebuild_rejects_size_larger_than_payload() -> None:
    """A declared size bigger than the fragments should be invalid."""
    points = _fragmented_points()
    declared = int(points[0].tags["size"]) + 5

    with pytest.raises(InvalidSnapshotError, match="declared size"):
        rebuild_document(_with_master_tags(points, size=str(declared)))


def test_rebuild_rejects_size_smaller_than_payload() -> None:
    """Fragments overflowing the declared size should be invalid."""
    points = _fragmented_points()
    declared = int(points[0].tags["size"]) - 5

    with pytest.raises(InvalidSnapshotError, match="overflows"):
        rebuild_document(_with_master_tags(points, size=str(declared)))


def test_rebuild_rejects_chunks_without_size() -> None:
    """A master declaring chunks without size should be invalid."""
    points = _fragmented_points()
    master = replace(points[0], tags={"chunks": points[0].tags["chunks"]})

    with pytest.raises(InvalidSnapshotError):
        rebuild_document([master, *points[1:]])


def test_rebuild_rejects_non_numeric_chunks() -> None:
    """Non-numeric fragmentation tags should be invalid."""
    with pytest.raises(InvalidSnapshotError, match="non-numeric"):
        rebuild_document(_with_master_tags(_fragmented_points(), chunks="three"))


def test_rebuild_rejects_empty_master() -> None:
    """A fragmented master with no bytes should be invalid."""
    points = _fragmented_points()
    master = replace(points[0], value="")

    with pytest.raises(InvalidSnapshotError, match="empty"):
        rebuild_document([master, *points[1:]])


def test_rebuild_rejects_invalid_base64() -> None:
    """A fragment that is not base64 should fail decoding."""
    points = _fragmented_points()
    points[1] = replace(points[1], value="***not base64***")

    with pytest.raises(DecodeError, match="Chunk #1"):
        rebuild_document(points)


def test_rebuild_rejects_payload_that_is_not_gzip() -> None:
    """An uncompressed payload should fail decoding."""
    point = DataPoint(timestamp=1, value=base64.b64encode(b'{"root": {}}').decode("ascii"))

    with pytest.raises(DecodeError):
        rebuild_document([point])


def test_rebuild_rejects_absurd_declared_size() -> None:
    """A declared size the fragments cannot fill should fail before allocation."""
    points = _with_master_tags(_fragmented_points(), size=str(2**62))

    with pytest.raises(InvalidSnapshotError, match="declared size"):
        rebuild_document(points)
