"""JSON projection of inventory query results.

This module renders index entities as plain JSON-ready dictionaries for
read APIs and the CLI.
"""

from __future__ import annotations

from typing import Any

from core.types import Metric, Operation, Resource, ResourceType
from inventory.inventory_index import ResourceNode


def resource_to_dict(resource: Resource) -> dict[str, Any]:
    """Render a resource with camelCase wire keys."""
    return {
        "id": resource.id,
        "name": resource.name,
        "typeId": resource.type_id,
        "rootId": resource.root_id,
        "childIds": list(resource.child_ids),
        "metricIds": list(resource.metric_ids),
        "properties": dict(resource.properties),
    }


def metric_to_dict(metric: Metric) -> dict[str, Any]:
    """Render a metric, with its unit as the enum value."""
    return {
        "id": metric.id,
        "name": metric.name,
        "type": metric.type,
        "unit": metric.unit.value,
        "interval": metric.interval,
        "properties": dict(metric.properties),
    }


def resource_type_to_dict(resource_type: ResourceType) -> dict[str, Any]:
    """Render a resource type and its operations."""
    return {
        "id": resource_type.id,
        "operations": [_operation_to_dict(operation) for operation in resource_type.operations],
        "properties": dict(resource_type.properties),
    }


def node_to_dict(node: ResourceNode) -> dict[str, Any]:
    """Render a loaded subtree, nesting child nodes under ``children``."""
    payload = resource_to_dict(node.resource)
    payload["children"] = [node_to_dict(child) for child in node.children]
    return payload


def _operation_to_dict(operation: Operation) -> dict[str, Any]:
    return {"name": operation.name, "parameters": dict(operation.parameters)}
