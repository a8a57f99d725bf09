"""In-memory inventory index.

This module holds the authoritative resource, metric, and resource type
collections and serves read queries from derived lookup structures.

Writers stage entities with ``add_*``; nothing becomes visible until
``rebuild_indices`` computes a new ``IndexSnapshot`` and publishes it with
a single reference assignment. Each query reads that reference once, so
a reader sees either the previous generation or the new one, never a mix.
Child and metric references are plain ids resolved at query time; they
may dangle or form cycles, which ``load_subtree`` detects.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from core.constants import TOP_LEVEL_ROOT_ID
from core.errors import CycleDetectedError, IndexNotReadyError
from core.logging_config import get_logger
from core.types import Metric, Resource, ResourceType
from inventory.index_snapshot import IndexSnapshot, build_index_snapshot

_LOGGER = get_logger(__name__)


@dataclass
class ResourceNode:
    """A resource with its loaded child subtree."""

    resource: Resource
    children: list["ResourceNode"] = field(default_factory=list)


class InventoryIndex:
    """Staged inventory collections with rebuildable lookup maps."""

    def __init__(self) -> None:
        self._staging_lock = threading.Lock()
        self._rebuild_lock = threading.Lock()
        self._resources: list[Resource] = []
        self._metrics: list[Metric] = []
        self._resource_types: list[ResourceType] = []
        self._snapshot: IndexSnapshot | None = None

    def add_resource(self, resource: Resource) -> None:
        """Stage a resource; visible after the next rebuild."""
        with self._staging_lock:
            self._resources.append(resource)

    def add_metric(self, metric: Metric) -> None:
        """Stage a metric; visible after the next rebuild."""
        with self._staging_lock:
            self._metrics.append(metric)

    def add_resource_type(self, resource_type: ResourceType) -> None:
        """Stage a resource type; visible after the next rebuild."""
        with self._staging_lock:
            self._resource_types.append(resource_type)

    @property
    def is_ready(self) -> bool:
        """Whether at least one rebuild has completed."""
        return self._snapshot is not None

    def rebuild_indices(self) -> IndexSnapshot:
        """Recompute every lookup structure and publish it atomically.

        Returns:
            The newly published snapshot.
        """
        with self._rebuild_lock:
            with self._staging_lock:
                resources = tuple(self._resources)
                metrics = tuple(self._metrics)
                resource_types = tuple(self._resource_types)
            previous = self._snapshot
            generation = previous.generation + 1 if previous is not None else 1
            snapshot = build_index_snapshot(resources, metrics, resource_types, generation)
            self._snapshot = snapshot
        _LOGGER.info(
            "index_rebuilt",
            generation=generation,
            resource_count=len(snapshot.resources_by_id),
            metric_count=len(snapshot.metrics_by_id),
            resource_type_count=len(snapshot.resource_types_by_id),
        )
        return snapshot

    def find_resource_by_id(self, resource_id: str) -> Resource | None:
        """Return the resource with ``resource_id``, or None if unknown."""
        return self._current().resources_by_id.get(resource_id)

    def find_metric_by_id(self, metric_id: str) -> Metric | None:
        """Return the metric with ``metric_id``, or None if unknown."""
        return self._current().metrics_by_id.get(metric_id)

    def get_all_top_resources(self) -> tuple[Resource, ...]:
        """Return resources whose root id is empty, in insertion order."""
        return self._current().resources_by_root.get(TOP_LEVEL_ROOT_ID, ())

    def get_all_resource_types(self) -> tuple[ResourceType, ...]:
        """Return every indexed resource type."""
        return tuple(self._current().resource_types_by_id.values())

    def get_resources_by_type(self, type_id: str) -> tuple[Resource, ...]:
        """Return resources of a type; empty when the type has none."""
        return self._current().resources_by_type.get(type_id, ())

    def get_resource_type(self, type_id: str) -> ResourceType | None:
        """Return the resource type with ``type_id``, or None if unknown."""
        return self._current().resource_types_by_id.get(type_id)

    def get_child_resources(self, resource_id: str) -> tuple[Resource, ...] | None:
        """Resolve a resource's child ids.

        Returns:
            Children that exist in the index, in stored order, or None when
            ``resource_id`` itself is unknown.
        """
        snapshot = self._current()
        parent = snapshot.resources_by_id.get(resource_id)
        if parent is None:
            return None
        return tuple(
            snapshot.resources_by_id[child_id]
            for child_id in parent.child_ids
            if child_id in snapshot.resources_by_id
        )

    def get_resource_metrics(self, resource_id: str) -> tuple[Metric, ...] | None:
        """Resolve a resource's metric ids.

        Returns:
            Metrics that exist in the index, in stored order, or None when
            ``resource_id`` itself is unknown.
        """
        snapshot = self._current()
        resource = snapshot.resources_by_id.get(resource_id)
        if resource is None:
            return None
        return tuple(
            snapshot.metrics_by_id[metric_id]
            for metric_id in resource.metric_ids
            if metric_id in snapshot.metrics_by_id
        )

    def load_subtree(self, root: Resource) -> ResourceNode:
        """Walk the subtree under ``root`` depth-first.

        The walk tracks the ids on the current root-to-node path. A shared
        descendant reached through two branches is fine; an id that
        reappears on its own path is a cycle.

        Args:
            root: Resource to start from.

        Returns:
            Loaded tree; dangling child ids are omitted.

        Raises:
            CycleDetectedError: If a resource is its own ancestor.
            IndexNotReadyError: If no rebuild has happened yet.
        """
        snapshot = self._current()
        root_node = ResourceNode(resource=root)
        path = {root.id}
        stack = [(root_node, iter(root.child_ids))]
        while stack:
            node, pending_ids = stack[-1]
            child_id = next(pending_ids, None)
            if child_id is None:
                stack.pop()
                path.discard(node.resource.id)
                continue
            child = snapshot.resources_by_id.get(child_id)
            if child is None:
                continue
            if child.id in path:
                raise CycleDetectedError(child.id)
            child_node = ResourceNode(resource=child)
            node.children.append(child_node)
            path.add(child.id)
            stack.append((child_node, iter(child.child_ids)))
        return root_node

    def _current(self) -> IndexSnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise IndexNotReadyError(
                "Inventory index has not been built yet. Call rebuild_indices() after staging data."
            )
        return snapshot
