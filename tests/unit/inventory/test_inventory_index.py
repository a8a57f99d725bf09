"""Unit tests for the in-memory inventory index."""

from __future__ import annotations

import threading

import pytest

from core.errors import CycleDetectedError, IndexNotReadyError
from core.types import Metric, MetricUnit, Operation, Resource, ResourceType
from inventory.inventory_index import InventoryIndex, ResourceNode


def _resource(resource_id: str, type_id: str, root_id: str, children=(), metrics=()) -> Resource:
    return Resource(
        id=resource_id,
        name=resource_id,
        type_id=type_id,
        root_id=root_id,
        child_ids=tuple(children),
        metric_ids=tuple(metrics),
    )


def _eap_index() -> InventoryIndex:
    index = InventoryIndex()
    index.add_resource(_resource("EAP-1", "EAP", "", ["child-1", "child-2"], ["m-1", "m-2"]))
    index.add_resource(_resource("EAP-2", "EAP", "", ["child-3", "child-4"], ["m-3", "m-4"]))
    index.add_resource(_resource("child-1", "FOO", "EAP-1"))
    index.add_resource(_resource("child-2", "BAR", "EAP-1"))
    index.add_resource(_resource("child-3", "FOO", "EAP-2"))
    index.add_resource(_resource("child-4", "BAR", "EAP-2"))
    index.add_metric(Metric("m-1", "memory", "Memory", MetricUnit.BYTES, 10))
    index.add_metric(Metric("m-2", "gc", "GC", MetricUnit.NONE, 10))
    index.add_metric(Metric("m-3", "memory", "Memory", MetricUnit.BYTES, 10))
    index.add_metric(Metric("m-4", "gc", "GC", MetricUnit.NONE, 10))
    index.add_resource_type(ResourceType("EAP", (Operation("Reload"), Operation("Shutdown"))))
    index.rebuild_indices()
    return index


def _ids(resources) -> list[str]:
    return [resource.id for resource in resources]


def test_find_resource_by_id() -> None:
    """Known ids should resolve and unknown ids should be absent."""
    index = _eap_index()

    assert (index.find_resource_by_id("child-1").name, index.find_resource_by_id("nada")) == ("child-1", None)


def test_find_metric_by_id() -> None:
    """Metrics should resolve by id."""
    assert _eap_index().find_metric_by_id("m-3").unit is MetricUnit.BYTES


def test_top_resources_and_types() -> None:
    """Top-level resources and types should be listed in insertion order."""
    index = _eap_index()

    assert _ids(index.get_all_top_resources()) == ["EAP-1", "EAP-2"]
    assert [item.id for item in index.get_all_resource_types()] == ["EAP"]


def test_resources_by_type() -> None:
    """Resources should be grouped by type id."""
    index = _eap_index()

    assert (_ids(index.get_resources_by_type("EAP")), _ids(index.get_resources_by_type("FOO"))) == (
        ["EAP-1", "EAP-2"],
        ["child-1", "child-3"],
    )
    assert index.get_resources_by_type("NONE") == ()


def test_resource_type_operations() -> None:
    """Resource types should expose their operations."""
    resource_type = _eap_index().get_resource_type("EAP")

    assert [operation.name for operation in resource_type.operations] == ["Reload", "Shutdown"]


def test_child_resources() -> None:
    """Children should resolve in order, be empty for leaves, None when unknown."""
    index = _eap_index()

    assert _ids(index.get_child_resources("EAP-1")) == ["child-1", "child-2"]
    assert (index.get_child_resources("child-1"), index.get_child_resources("nada")) == ((), None)


def test_resource_metrics() -> None:
    """Metrics should resolve in order, be empty for leaves, None when unknown."""
    index = _eap_index()

    assert [metric.id for metric in index.get_resource_metrics("EAP-1")] == ["m-1", "m-2"]
    assert (index.get_resource_metrics("child-1"), index.get_resource_metrics("nada")) == ((), None)


def test_dangling_references_are_omitted() -> None:
    """Child and metric ids that do not resolve should be skipped."""
    index = InventoryIndex()
    index.add_resource(_resource("root", "T", "", ["ghost", "leaf"], ["m-ghost"]))
    index.add_resource(_resource("leaf", "T", "root"))
    index.rebuild_indices()

    assert (_ids(index.get_child_resources("root")), index.get_resource_metrics("root")) == (["leaf"], ())
    assert [child.resource.id for child in index.load_subtree(index.find_resource_by_id("root")).children] == [
        "leaf"
    ]


def test_load_subtree_builds_nested_nodes() -> None:
    """Subtrees should nest children in stored order."""
    index = _eap_index()

    tree = index.load_subtree(index.find_resource_by_id("EAP-2"))

    assert isinstance(tree, ResourceNode)
    assert [child.resource.id for child in tree.children] == ["child-3", "child-4"]
    assert all(child.children == [] for child in tree.children)


def test_load_subtree_detects_cycle() -> None:
    """A resource reachable from itself should raise a cycle error."""
    index = InventoryIndex()
    index.add_resource(_resource("a", "T", "", ["b"]))
    index.add_resource(_resource("b", "T", "a", ["c"]))
    index.add_resource(_resource("c", "T", "a", ["a"]))
    index.rebuild_indices()

    with pytest.raises(CycleDetectedError) as error_info:
        index.load_subtree(index.find_resource_by_id("a"))

    assert error_info.value.resource_id == "a"


def test_load_subtree_detects_self_reference() -> None:
    """A resource listing itself as a child should raise a cycle error."""
    index = InventoryIndex()
    index.add_resource(_resource("a", "T", "", ["a"]))
    index.rebuild_indices()

    with pytest.raises(CycleDetectedError):
        index.load_subtree(index.find_resource_by_id("a"))


def test_load_subtree_allows_shared_descendant() -> None:
    """A child reached through two branches is not a cycle."""
    index = InventoryIndex()
    index.add_resource(_resource("a", "T", "", ["b", "c"]))
    index.add_resource(_resource("b", "T", "a", ["shared"]))
    index.add_resource(_resource("c", "T", "a", ["shared"]))
    index.add_resource(_resource("shared", "T", "a"))
    index.rebuild_indices()

    tree = index.load_subtree(index.find_resource_by_id("a"))

    assert [child.children[0].resource.id for child in tree.children] == ["shared", "shared"]


def test_load_subtree_handles_deep_chains() -> None:
    """Very deep chains should load without recursion limits."""
    index = InventoryIndex()
    depth = 5000
    for level in range(depth):
        children = [f"n{level + 1}"] if level + 1 < depth else []
        index.add_resource(_resource(f"n{level}", "T", "" if level == 0 else "n0", children))
    index.rebuild_indices()

    node = index.load_subtree(index.find_resource_by_id("n0"))
    levels = 1
    while node.children:
        node = node.children[0]
        levels += 1

    assert levels == depth


def test_queries_before_rebuild_raise() -> None:
    """Queries should fail until the first rebuild."""
    index = InventoryIndex()
    index.add_resource(_resource("a", "T", ""))

    with pytest.raises(IndexNotReadyError):
        index.find_resource_by_id("a")

    assert index.is_ready is False


def test_staged_entities_are_invisible_until_rebuild() -> None:
    """Additions should only become visible after rebuilding."""
    index = _eap_index()
    index.add_resource(_resource("EAP-3", "EAP", ""))

    before = _ids(index.get_all_top_resources())
    index.rebuild_indices()

    assert (before, _ids(index.get_all_top_resources())) == (["EAP-1", "EAP-2"], ["EAP-1", "EAP-2", "EAP-3"])


def test_duplicate_ids_keep_latest_value() -> None:
    """A re-added id should replace the earlier entry after rebuild."""
    index = InventoryIndex()
    index.add_resource(_resource("a", "OLD", ""))
    index.add_resource(_resource("a", "NEW", ""))
    index.rebuild_indices()

    assert (index.find_resource_by_id("a").type_id, index.get_resources_by_type("OLD")) == ("NEW", ())
    assert len(index.get_all_top_resources()) == 1


def test_rebuild_increments_generation() -> None:
    """Each rebuild should publish a new generation."""
    index = InventoryIndex()

    first = index.rebuild_indices()
    second = index.rebuild_indices()

    assert (first.generation, second.generation) == (1, 2)


def test_readers_never_see_partial_rebuilds() -> None:
    """Concurrent readers should see whole generations only."""
    index = InventoryIndex()
    index.rebuild_indices()
    stop = threading.Event()
    observed: list[tuple[str, ...]] = []

    def read() -> None:
        while not stop.is_set():
            observed.append(tuple(resource.id for resource in index.get_all_top_resources()))

    reader = threading.Thread(target=read)
    reader.start()
    for number in range(200):
        index.add_resource(_resource(f"r{number}", "T", ""))
        index.rebuild_indices()
    stop.set()
    reader.join()

    assert all(ids == tuple(f"r{number}" for number in range(len(ids))) for ids in observed)
    assert len(index.get_all_top_resources()) == 200
