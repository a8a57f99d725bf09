"""Snapshot reconstruction from stored fragments.

Agents publish one inventory snapshot per series write. Payloads larger
than a single record are split across several data points: the newest
point (the master) carries ``chunks`` and ``size`` tags and every following
fragment sits exactly one millisecond earlier than the previous one.
This module verifies those invariants, rebuilds the compressed payload
into a buffer of exactly the declared size, then decodes the document.
"""

from __future__ import annotations

import base64
import binascii

from core.constants import TAG_CHUNKS, TAG_SIZE
from core.errors import ChunkOrderError, DecodeError, InvalidSnapshotError, MissingSnapshotError
from core.logging_config import get_logger
from core.types import AssembledDocument, ChunkSet, DataPoint
from snapshot.document_codec import decompress_payload, parse_document

_LOGGER = get_logger(__name__)


def rebuild_document(chunks: ChunkSet) -> AssembledDocument:
    """Reconstruct an inventory document from a descending chunk set.

    Args:
        chunks: Data points of one series, newest first.

    Returns:
        The fully decoded document.

    Raises:
        MissingSnapshotError: If ``chunks`` is empty.
        InvalidSnapshotError: If fragment metadata or sizes are inconsistent.
        ChunkOrderError: If fragment timestamps are not contiguous.
        DecodeError: If base64, gzip, or JSON decoding fails.
    """
    payload = assemble_payload(chunks)
    document = parse_document(decompress_payload(payload))
    _LOGGER.debug(
        "snapshot_assembled",
        master_timestamp=chunks[0].timestamp,
        payload_bytes=len(payload),
        entity_count=len(document.structure),
    )
    return document


def assemble_payload(chunks: ChunkSet) -> bytes:
    """Concatenate the compressed payload carried by a chunk set.

    Args:
        chunks: Data points of one series, newest first.

    Returns:
        Compressed payload bytes.

    Raises:
        MissingSnapshotError: If ``chunks`` is empty.
        InvalidSnapshotError: If fragment metadata or sizes are inconsistent.
        ChunkOrderError: If fragment timestamps are not contiguous.
        DecodeError: If a fragment is not valid base64.
    """
    if not chunks:
        raise MissingSnapshotError("Missing inventory: no datapoint found. Did they expire?")
    master = chunks[0]
    if TAG_CHUNKS not in master.tags:
        return _decode_value(master, 0)
    chunk_count, total_size = _read_fragmentation_tags(master)
    master_bytes = _decode_value(master, 0)
    if not master_bytes:
        raise InvalidSnapshotError("Missing inventory: master datapoint exists but is empty")
    if chunk_count > len(chunks):
        raise InvalidSnapshotError(
            f"Inventory sanity check failure: {chunk_count} chunks expected, "
            f"only {len(chunks)} are available"
        )
    pieces = [master_bytes]
    assembled = _check_within_size(0, master_bytes, total_size, 0)
    for index in range(1, chunk_count):
        fragment = chunks[index]
        expected_timestamp = master.timestamp - index
        if fragment.timestamp != expected_timestamp:
            raise ChunkOrderError(index, fragment.timestamp, expected_timestamp)
        piece = _decode_value(fragment, index)
        assembled = _check_within_size(assembled, piece, total_size, index)
        pieces.append(piece)
    if assembled != total_size:
        raise InvalidSnapshotError(
            f"Inventory sanity check failure: assembled {assembled} bytes, "
            f"declared size is {total_size}"
        )
    # the declared size is only trusted once the fragments add up to it
    buffer = bytearray(total_size)
    position = 0
    for piece in pieces:
        buffer[position:position + len(piece)] = piece
        position += len(piece)
    return bytes(buffer)


def _read_fragmentation_tags(master: DataPoint) -> tuple[int, int]:
    """Read and validate ``chunks``/``size`` from the master tags."""
    chunks_value = master.tags.get(TAG_CHUNKS)
    size_value = master.tags.get(TAG_SIZE)
    if size_value is None:
        raise InvalidSnapshotError(
            f"Inventory sanity check failure: master declares '{TAG_CHUNKS}' without '{TAG_SIZE}'"
        )
    try:
        chunk_count = int(str(chunks_value))
        total_size = int(str(size_value))
    except ValueError as error:
        raise InvalidSnapshotError(
            "Inventory sanity check failure: non-numeric fragmentation tags "
            f"{TAG_CHUNKS}={chunks_value!r} {TAG_SIZE}={size_value!r}"
        ) from error
    if chunk_count < 1 or total_size < 1:
        raise InvalidSnapshotError(
            "Inventory sanity check failure: fragmentation tags must be positive, "
            f"got {TAG_CHUNKS}={chunk_count} {TAG_SIZE}={total_size}"
        )
    return chunk_count, total_size


def _check_within_size(assembled: int, data: bytes, total_size: int, index: int) -> int:
    """Return the byte count after appending ``data``.

    Raises:
        InvalidSnapshotError: If ``data`` would overflow the declared size.
    """
    end = assembled + len(data)
    if end > total_size:
        raise InvalidSnapshotError(
            f"Inventory sanity check failure: chunk #{index} overflows declared size "
            f"{total_size} (would reach {end} bytes)"
        )
    return end


def _decode_value(point: DataPoint, index: int) -> bytes:
    try:
        return base64.b64decode(point.value, validate=True)
    except (binascii.Error, ValueError) as error:
        raise DecodeError(f"Chunk #{index} is not valid base64: {error}") from error
