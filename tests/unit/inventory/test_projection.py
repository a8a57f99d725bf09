"""Unit tests for inventory JSON projection."""

from __future__ import annotations

from core.types import Metric, MetricUnit, Operation, Resource, ResourceType
from inventory.inventory_index import ResourceNode
from inventory.projection import metric_to_dict, node_to_dict, resource_to_dict, resource_type_to_dict


def test_resource_to_dict_uses_wire_keys() -> None:
    """Resources should render with camelCase keys and lists."""
    resource = Resource("EAP-1", "EAP-1", "EAP", "", ("child-1",), ("m-1",), {"version": "7"})

    assert resource_to_dict(resource) == {
        "id": "EAP-1",
        "name": "EAP-1",
        "typeId": "EAP",
        "rootId": "",
        "childIds": ["child-1"],
        "metricIds": ["m-1"],
        "properties": {"version": "7"},
    }


def test_metric_to_dict_renders_unit_value() -> None:
    """Metric units should render as their string value."""
    payload = metric_to_dict(Metric("m-1", "memory", "Memory", MetricUnit.BYTES, 10))

    assert (payload["unit"], payload["interval"]) == ("bytes", 10)


def test_resource_type_to_dict_renders_operations() -> None:
    """Operations should render with their parameters."""
    resource_type = ResourceType("EAP", (Operation("Reload"), Operation("Shutdown", {"restart": "bool"})))

    assert resource_type_to_dict(resource_type)["operations"] == [
        {"name": "Reload", "parameters": {}},
        {"name": "Shutdown", "parameters": {"restart": "bool"}},
    ]


def test_node_to_dict_nests_children() -> None:
    """Loaded subtrees should nest under ``children``."""
    leaf = ResourceNode(Resource("child-1", "Child 1", "FOO", "EAP-1"))
    tree = ResourceNode(Resource("EAP-1", "EAP-1", "EAP", "", ("child-1",)), [leaf])

    payload = node_to_dict(tree)

    assert [child["id"] for child in payload["children"]] == ["child-1"]
    assert payload["children"][0]["children"] == []
