"""Inventory document wire codec.

This module converts between gzip-compressed JSON snapshot payloads and
typed ``AssembledDocument`` models. Parsing is all-or-nothing: any shape
problem raises ``DecodeError`` and no partial document is returned.
"""

from __future__ import annotations

import gzip
import json
import zlib
from typing import Any, Mapping

from core.constants import (
    KIND_METRIC,
    KIND_METRIC_TYPE,
    KIND_RESOURCE,
    KIND_RESOURCE_TYPE,
    ROOT_PATH,
)
from core.errors import DecodeError
from core.types import (
    AssembledDocument,
    EntityBlueprint,
    MetricBlueprint,
    MetricDataType,
    MetricTypeBlueprint,
    MetricUnit,
    OtherBlueprint,
    ResourceBlueprint,
    ResourceTypeBlueprint,
)


def decompress_payload(compressed: bytes) -> str:
    """Gunzip an assembled payload into UTF-8 text.

    Args:
        compressed: Gzip bytes; an empty buffer yields an empty string.

    Returns:
        Decompressed text.

    Raises:
        DecodeError: If the bytes are not valid gzip or not UTF-8 text.
    """
    if not compressed:
        return ""
    try:
        raw = gzip.decompress(compressed)
    except (OSError, EOFError, zlib.error) as error:
        raise DecodeError(f"Could not read assembled chunks: {error}") from error
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as error:
        raise DecodeError(f"Assembled chunks are not UTF-8 text: {error}") from error


def compress_payload(text: str) -> bytes:
    """Gzip UTF-8 text the way agents publish snapshots."""
    return gzip.compress(text.encode("utf-8"))


def parse_document(text: str) -> AssembledDocument:
    """Parse decompressed snapshot JSON into a typed document.

    Args:
        text: JSON text of the extended inventory structure.

    Returns:
        Parsed document.

    Raises:
        DecodeError: If the text is not valid JSON or has the wrong shape.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        raise DecodeError(f"Could not parse inventory document: {error.msg}") from error
    root_payload = _expect_object(payload, "document").get("root")
    structure_payload = _expect_object(payload.get("structure") or {}, "structure")
    if root_payload is None:
        root_payload = structure_payload.get(ROOT_PATH)
    if root_payload is None:
        raise DecodeError("Could not parse inventory document: missing 'root' entity")
    root = blueprint_from_dict(root_payload)
    structure: dict[str, EntityBlueprint] = {ROOT_PATH: root}
    for path, entity_payload in structure_payload.items():
        if path == ROOT_PATH:
            continue
        structure[path] = blueprint_from_dict(entity_payload)
    return AssembledDocument(
        root=root,
        structure=structure,
        resource_types_index=_parse_index(payload.get("resourceTypesIndex") or {}, "resourceTypesIndex"),
        metric_types_index=_parse_index(payload.get("metricTypesIndex") or {}, "metricTypesIndex"),
    )


def serialize_document(document: AssembledDocument) -> str:
    """Render a document as wire JSON text."""
    structure = {
        path: blueprint_to_dict(entity)
        for path, entity in document.structure.items()
        if path != ROOT_PATH
    }
    payload = {
        "root": blueprint_to_dict(document.root),
        "structure": structure,
        "resourceTypesIndex": {key: list(paths) for key, paths in document.resource_types_index.items()},
        "metricTypesIndex": {key: list(paths) for key, paths in document.metric_types_index.items()},
    }
    return json.dumps(payload, sort_keys=True)


def blueprint_from_dict(payload: object) -> EntityBlueprint:
    """Build a typed blueprint from its ``kind``-discriminated JSON object.

    Raises:
        DecodeError: If the object or one of its fields has the wrong type.
    """
    entity = _expect_object(payload, "entity")
    kind = entity.get("kind")
    entity_id = entity.get("id")
    if not isinstance(kind, str) or not isinstance(entity_id, str):
        raise DecodeError(
            "Could not parse inventory entity: 'kind' and 'id' must be strings, "
            f"got kind={kind!r} id={entity_id!r}"
        )
    name = _optional_str(entity, "name")
    properties = _expect_object(entity.get("properties") or {}, f"properties of {entity_id}")
    if kind == KIND_RESOURCE:
        return ResourceBlueprint(
            id=entity_id,
            name=name,
            resource_type_path=_optional_str(entity, "resourceTypePath"),
            properties=properties,
        )
    if kind == KIND_RESOURCE_TYPE:
        return ResourceTypeBlueprint(id=entity_id, name=name, properties=properties)
    if kind == KIND_METRIC:
        return MetricBlueprint(
            id=entity_id,
            name=name,
            metric_type_path=_optional_str(entity, "metricTypePath"),
            collection_interval=_optional_int(entity, "collectionInterval"),
            properties=properties,
        )
    if kind == KIND_METRIC_TYPE:
        return MetricTypeBlueprint(
            id=entity_id,
            name=name,
            unit=_parse_enum(MetricUnit, entity.get("unit", MetricUnit.NONE.value), "unit"),
            data_type=_parse_enum(
                MetricDataType,
                entity.get("metricDataType", MetricDataType.GAUGE.value),
                "metricDataType",
            ),
            collection_interval=_optional_int(entity, "collectionInterval"),
            properties=properties,
        )
    fields = {key: value for key, value in entity.items() if key not in ("kind", "id")}
    return OtherBlueprint(kind=kind, id=entity_id, fields=fields)


def blueprint_to_dict(entity: EntityBlueprint) -> dict[str, Any]:
    """Render one blueprint as its wire JSON object."""
    if isinstance(entity, OtherBlueprint):
        return {"kind": entity.kind, "id": entity.id, **entity.fields}
    payload: dict[str, Any] = {"id": entity.id, "name": entity.name, "properties": dict(entity.properties)}
    if isinstance(entity, ResourceBlueprint):
        payload["kind"] = KIND_RESOURCE
        payload["resourceTypePath"] = entity.resource_type_path
    elif isinstance(entity, ResourceTypeBlueprint):
        payload["kind"] = KIND_RESOURCE_TYPE
    elif isinstance(entity, MetricBlueprint):
        payload["kind"] = KIND_METRIC
        payload["metricTypePath"] = entity.metric_type_path
        payload["collectionInterval"] = entity.collection_interval
    else:
        payload["kind"] = KIND_METRIC_TYPE
        payload["unit"] = entity.unit.value
        payload["metricDataType"] = entity.data_type.value
        payload["collectionInterval"] = entity.collection_interval
    return payload


def _parse_index(value: object, context: str) -> dict[str, tuple[str, ...]]:
    index: dict[str, tuple[str, ...]] = {}
    for type_id, paths in _expect_object(value, context).items():
        if not isinstance(paths, list) or not all(isinstance(path, str) for path in paths):
            raise DecodeError(
                f"Could not parse inventory document: {context}[{type_id!r}] "
                "must be a list of relative path strings"
            )
        index[type_id] = tuple(paths)
    return index


def _expect_object(value: object, context: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(
            f"Could not parse inventory document: expected JSON object for {context}, "
            f"got {type(value).__name__}"
        )
    return value


def _optional_str(entity: Mapping[str, Any], key: str) -> str | None:
    value = entity.get(key)
    if value is None or isinstance(value, str):
        return value
    raise DecodeError(f"Could not parse inventory entity: '{key}' must be a string")


def _optional_int(entity: Mapping[str, Any], key: str) -> int | None:
    value = entity.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Could not parse inventory entity: '{key}' must be an integer")
    return value


def _parse_enum(enum_type: Any, value: object, key: str) -> Any:
    try:
        return enum_type(value)
    except ValueError as error:
        raise DecodeError(
            f"Could not parse inventory entity: unsupported {key} value {value!r}"
        ) from error
