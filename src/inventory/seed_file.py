"""YAML inventory seed files.

This module loads resources, metrics, and resource types from a YAML
document into an ``InventoryIndex`` and rebuilds it once, so read APIs
and the CLI can serve a fixed inventory without a live ingestion path.

Expected layout::

    resources:
      - {id: EAP-1, name: EAP-1, typeId: EAP, rootId: "", childIds: [child-1]}
    metrics:
      - {id: m-1, name: memory, type: Memory, unit: bytes, interval: 10}
    resourceTypes:
      - {id: EAP, operations: [{name: Reload}]}
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, cast

from core.errors import VantageDependencyError, VantageSeedFileError
from core.logging_config import get_logger
from core.types import Metric, MetricUnit, Operation, Resource, ResourceType
from inventory.inventory_index import InventoryIndex

_LOGGER = get_logger(__name__)
_ROOT_KEYS = ("resources", "metrics", "resourceTypes")


def load_seed_file(seed_path: str, index: InventoryIndex | None = None) -> InventoryIndex:
    """Load a YAML seed file into an index and rebuild it.

    Args:
        seed_path: Path to the YAML seed file.
        index: Optional index to extend; a new one is created when omitted.

    Returns:
        The rebuilt index.

    Raises:
        VantageDependencyError: If PyYAML is unavailable.
        VantageSeedFileError: If the file is missing or schema checks fail.
    """
    root = _expect_mapping(_load_yaml_payload(seed_path), "seed file root")
    unknown_keys = sorted(set(root) - set(_ROOT_KEYS))
    if unknown_keys:
        raise VantageSeedFileError(
            f"Unsupported seed file keys: {', '.join(unknown_keys)}. "
            f"Allowed keys: {', '.join(_ROOT_KEYS)}."
        )
    target = index if index is not None else InventoryIndex()
    resources = [_parse_resource(item, position) for position, item in _entries(root, "resources")]
    metrics = [_parse_metric(item, position) for position, item in _entries(root, "metrics")]
    resource_types = [
        _parse_resource_type(item, position) for position, item in _entries(root, "resourceTypes")
    ]
    for resource in resources:
        target.add_resource(resource)
    for metric in metrics:
        target.add_metric(metric)
    for resource_type in resource_types:
        target.add_resource_type(resource_type)
    target.rebuild_indices()
    _LOGGER.info(
        "seed_file_loaded",
        seed_path=seed_path,
        resource_count=len(resources),
        metric_count=len(metrics),
        resource_type_count=len(resource_types),
    )
    return target


def _load_yaml_payload(seed_path: str) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise VantageDependencyError(
            "YAML seed file support requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    seed_file = Path(seed_path).expanduser().resolve()
    if not seed_file.exists():
        raise VantageSeedFileError(
            f"Seed file does not exist at {seed_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(seed_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise VantageSeedFileError(
            f"Failed to read seed file at {seed_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise VantageSeedFileError(
            f"Failed to parse YAML seed file at {seed_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        return {}
    return payload


def _entries(root: Mapping[str, object], key: str) -> list[tuple[int, Mapping[str, object]]]:
    value = root.get(key) or []
    if not isinstance(value, list):
        raise VantageSeedFileError(f"Invalid seed file: '{key}' must be a list.")
    return [(position, _expect_mapping(item, f"{key}[{position}]")) for position, item in enumerate(value)]


def _parse_resource(item: Mapping[str, object], position: int) -> Resource:
    context = f"resources[{position}]"
    return Resource(
        id=_require_str(item, "id", context),
        name=_optional_str(item, "name", context) or _require_str(item, "id", context),
        type_id=_require_str(item, "typeId", context),
        root_id=_optional_str(item, "rootId", context) or "",
        child_ids=_str_tuple(item, "childIds", context),
        metric_ids=_str_tuple(item, "metricIds", context),
        properties=_properties(item, context),
    )


def _parse_metric(item: Mapping[str, object], position: int) -> Metric:
    context = f"metrics[{position}]"
    unit_value = _optional_str(item, "unit", context) or MetricUnit.NONE.value
    try:
        unit = MetricUnit(unit_value.lower())
    except ValueError as error:
        raise VantageSeedFileError(
            f"Invalid seed file entry {context}: unsupported unit '{unit_value}'."
        ) from error
    interval = item.get("interval", 0)
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 0:
        raise VantageSeedFileError(
            f"Invalid seed file entry {context}: 'interval' must be a non-negative integer."
        )
    return Metric(
        id=_require_str(item, "id", context),
        name=_optional_str(item, "name", context) or _require_str(item, "id", context),
        type=_optional_str(item, "type", context) or "",
        unit=unit,
        interval=interval,
        properties=_properties(item, context),
    )


def _parse_resource_type(item: Mapping[str, object], position: int) -> ResourceType:
    context = f"resourceTypes[{position}]"
    operations_value = item.get("operations") or []
    if not isinstance(operations_value, list):
        raise VantageSeedFileError(f"Invalid seed file entry {context}: 'operations' must be a list.")
    operations: list[Operation] = []
    for op_position, raw_operation in enumerate(operations_value):
        op_context = f"{context}.operations[{op_position}]"
        operation = _expect_mapping(raw_operation, op_context)
        parameters = operation.get("parameters") or {}
        if not isinstance(parameters, dict):
            raise VantageSeedFileError(
                f"Invalid seed file entry {op_context}: 'parameters' must be a mapping."
            )
        operations.append(Operation(name=_require_str(operation, "name", op_context), parameters=parameters))
    return ResourceType(
        id=_require_str(item, "id", context),
        operations=tuple(operations),
        properties=_properties(item, context),
    )


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized: dict[str, object] = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise VantageSeedFileError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized[key] = payload
        return normalized
    raise VantageSeedFileError(f"Invalid {context}: expected mapping, got {type(value).__name__}.")


def _require_str(item: Mapping[str, object], key: str, context: str) -> str:
    value = item.get(key)
    if not isinstance(value, str) or not value:
        raise VantageSeedFileError(
            f"Invalid seed file entry {context}: '{key}' is required and must be a non-empty string."
        )
    return value


def _optional_str(item: Mapping[str, object], key: str, context: str) -> str | None:
    value = item.get(key)
    if value is None or isinstance(value, str):
        return value
    raise VantageSeedFileError(f"Invalid seed file entry {context}: '{key}' must be a string.")


def _str_tuple(item: Mapping[str, object], key: str, context: str) -> tuple[str, ...]:
    value = item.get(key) or []
    if not isinstance(value, list) or not all(isinstance(entry, str) for entry in value):
        raise VantageSeedFileError(
            f"Invalid seed file entry {context}: '{key}' must be a list of strings."
        )
    return tuple(value)


def _properties(item: Mapping[str, object], context: str) -> dict[str, object]:
    value = item.get("properties") or {}
    if not isinstance(value, dict):
        raise VantageSeedFileError(f"Invalid seed file entry {context}: 'properties' must be a mapping.")
    return dict(value)
