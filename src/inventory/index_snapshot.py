"""Derived inventory lookup structures.

An ``IndexSnapshot`` is built in one pass from the authoritative
collections and never mutated afterwards, so it can be shared with any
number of concurrent readers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from core.types import Metric, Resource, ResourceType


@dataclass(frozen=True)
class IndexSnapshot:
    """Immutable generation of inventory lookup maps.

    Attributes:
        resources_by_id: Resource id to resource, last write wins.
        resources_by_root: Root id to resources, ``""`` for top-level ones.
        resources_by_type: Resource type id to resources.
        metrics_by_id: Metric id to metric, last write wins.
        resource_types_by_id: Resource type id to type, last write wins.
        generation: Rebuild counter, 1 for the first rebuild.
    """

    resources_by_id: Mapping[str, Resource] = field(default_factory=dict)
    resources_by_root: Mapping[str, tuple[Resource, ...]] = field(default_factory=dict)
    resources_by_type: Mapping[str, tuple[Resource, ...]] = field(default_factory=dict)
    metrics_by_id: Mapping[str, Metric] = field(default_factory=dict)
    resource_types_by_id: Mapping[str, ResourceType] = field(default_factory=dict)
    generation: int = 0


def build_index_snapshot(
    resources: Iterable[Resource],
    metrics: Iterable[Metric],
    resource_types: Iterable[ResourceType],
    generation: int,
) -> IndexSnapshot:
    """Compute every lookup structure from full collections.

    Args:
        resources: All staged resources in insertion order.
        metrics: All staged metrics in insertion order.
        resource_types: All staged resource types in insertion order.
        generation: Generation number to stamp on the snapshot.

    Returns:
        A new immutable snapshot. Groupings follow the insertion order of
        each id's first appearance, using the id's latest value.
    """
    resources_by_id = {resource.id: resource for resource in resources}
    by_root: dict[str, list[Resource]] = {}
    by_type: dict[str, list[Resource]] = {}
    for resource in resources_by_id.values():
        by_root.setdefault(resource.root_id, []).append(resource)
        by_type.setdefault(resource.type_id, []).append(resource)
    return IndexSnapshot(
        resources_by_id=resources_by_id,
        resources_by_root={key: tuple(items) for key, items in by_root.items()},
        resources_by_type={key: tuple(items) for key, items in by_type.items()},
        metrics_by_id={metric.id: metric for metric in metrics},
        resource_types_by_id={resource_type.id: resource_type for resource_type in resource_types},
        generation=generation,
    )
