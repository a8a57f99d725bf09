"""Snapshot publishing helpers.

This module produces chunk sets the way monitoring agents write them,
so fixtures and tooling can publish documents that ``rebuild_document``
reads back.
"""

from __future__ import annotations

import base64
from typing import Mapping

from core.constants import DEFAULT_CHUNK_BYTES, TAG_CHUNKS, TAG_SIZE
from core.types import AssembledDocument, DataPoint
from snapshot.document_codec import compress_payload, serialize_document


def encode_document(document: AssembledDocument) -> bytes:
    """Serialize and gzip a document."""
    return compress_payload(serialize_document(document))


def build_chunk_set(
    document: AssembledDocument,
    timestamp: int,
    max_chunk_bytes: int = DEFAULT_CHUNK_BYTES,
    tags: Mapping[str, str] | None = None,
) -> list[DataPoint]:
    """Encode a document into newest-first data points.

    Args:
        document: Document to publish.
        timestamp: Master timestamp in milliseconds.
        max_chunk_bytes: Maximum compressed bytes per data point.
        tags: Extra tags attached to the master point.

    Returns:
        One point when the payload fits, otherwise the master followed by
        fragments at ``timestamp - 1``, ``timestamp - 2``, ...

    Raises:
        ValueError: If ``max_chunk_bytes`` is not positive.
    """
    return split_payload(encode_document(document), timestamp, max_chunk_bytes, tags)


def split_payload(
    payload: bytes,
    timestamp: int,
    max_chunk_bytes: int = DEFAULT_CHUNK_BYTES,
    tags: Mapping[str, str] | None = None,
) -> list[DataPoint]:
    """Split a compressed payload into newest-first data points."""
    if max_chunk_bytes <= 0:
        raise ValueError(f"max_chunk_bytes must be positive, got {max_chunk_bytes}")
    master_tags = dict(tags or {})
    if len(payload) <= max_chunk_bytes:
        return [DataPoint(timestamp=timestamp, value=_encode(payload), tags=master_tags)]
    pieces = [payload[start:start + max_chunk_bytes] for start in range(0, len(payload), max_chunk_bytes)]
    master_tags[TAG_CHUNKS] = str(len(pieces))
    master_tags[TAG_SIZE] = str(len(payload))
    points = [DataPoint(timestamp=timestamp, value=_encode(pieces[0]), tags=master_tags)]
    for index, piece in enumerate(pieces[1:], start=1):
        points.append(DataPoint(timestamp=timestamp - index, value=_encode(piece)))
    return points


def _encode(piece: bytes) -> str:
    return base64.b64encode(piece).decode("ascii")
