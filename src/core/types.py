"""Shared typed models.

This module defines immutable data models used by the store, snapshot,
discovery, and inventory layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Sequence, Union


class MetricUnit(str, Enum):
    """Units a metric or metric type may be expressed in."""

    NONE = "none"
    PERCENTAGE = "percentage"
    BYTES = "bytes"
    KILOBYTES = "kilobytes"
    MEGABYTES = "megabytes"
    GIGABYTES = "gigabytes"
    NANOSECONDS = "nanoseconds"
    MICROSECONDS = "microseconds"
    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    PER_SECOND = "per_second"
    PER_MINUTE = "per_minute"


class MetricDataType(str, Enum):
    """Kinds of data a metric type produces."""

    GAUGE = "gauge"
    COUNTER = "counter"
    AVAILABILITY = "availability"
    STRING = "string"


@dataclass(frozen=True)
class DataPoint:
    """One stored value of a string series.

    Attributes:
        timestamp: Milliseconds since epoch.
        value: Base64 payload (whole snapshot or one fragment).
        tags: Per-point tags; the master fragment carries ``chunks``/``size``.
    """

    timestamp: int
    value: str
    tags: Mapping[str, str] = field(default_factory=dict)


ChunkSet = Sequence[DataPoint]


@dataclass(frozen=True)
class SeriesRef:
    """A series definition returned by a tag query.

    Attributes:
        series_id: Store-wide series identifier.
        tags: Series-level tags used for discovery.
    """

    series_id: str
    tags: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceBlueprint:
    """Pre-persistence description of a resource."""

    id: str
    name: str | None = None
    resource_type_path: str | None = None
    properties: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceTypeBlueprint:
    """Pre-persistence description of a resource type."""

    id: str
    name: str | None = None
    properties: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricBlueprint:
    """Pre-persistence description of a metric.

    Attributes:
        id: Metric id, unique within its feed.
        name: Display name.
        metric_type_path: Canonical path of the metric type it instantiates.
        collection_interval: Optional override of the type's interval (s).
        properties: Free-form properties.
    """

    id: str
    name: str | None = None
    metric_type_path: str | None = None
    collection_interval: int | None = None
    properties: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricTypeBlueprint:
    """Pre-persistence description of a metric type."""

    id: str
    name: str | None = None
    unit: MetricUnit = MetricUnit.NONE
    data_type: MetricDataType = MetricDataType.GAUGE
    collection_interval: int | None = None
    properties: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class OtherBlueprint:
    """Entity of a kind this codec does not model; kept but never matched."""

    kind: str
    id: str
    fields: Mapping[str, object] = field(default_factory=dict)


EntityBlueprint = Union[
    ResourceBlueprint,
    ResourceTypeBlueprint,
    MetricBlueprint,
    MetricTypeBlueprint,
    OtherBlueprint,
]


@dataclass(frozen=True)
class AssembledDocument:
    """A fully reconstructed inventory snapshot.

    Attributes:
        root: Root entity blueprint (also addressable at path ``""``).
        structure: Relative path to entity blueprint.
        resource_types_index: Resource type id to relative paths.
        metric_types_index: Metric type id to relative paths.
    """

    root: EntityBlueprint
    structure: Mapping[str, EntityBlueprint] = field(default_factory=dict)
    resource_types_index: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    metric_types_index: Mapping[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class Operation:
    """An operation a resource type exposes."""

    name: str
    parameters: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Resource:
    """Indexed inventory resource.

    Attributes:
        id: Resource id.
        name: Display name.
        type_id: Resource type id.
        root_id: Id of the top-level ancestor, ``""`` for top-level resources.
        child_ids: Ordered child resource ids (may dangle or cycle).
        metric_ids: Ordered metric ids.
        properties: Free-form properties.
    """

    id: str
    name: str
    type_id: str
    root_id: str
    child_ids: tuple[str, ...] = ()
    metric_ids: tuple[str, ...] = ()
    properties: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Metric:
    """Indexed inventory metric."""

    id: str
    name: str
    type: str
    unit: MetricUnit
    interval: int
    properties: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceType:
    """Indexed inventory resource type."""

    id: str
    operations: tuple[Operation, ...] = ()
    properties: Mapping[str, object] = field(default_factory=dict)
