"""In-process series store.

This module keeps tenant series in memory behind a lock. It backs unit
tests and local tooling that replays exported data points.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from core.errors import VantageStoreError
from core.types import DataPoint, SeriesRef
from store.series_store import TagFilters, sort_descending, tags_match


@dataclass
class _StoredSeries:
    tags: dict[str, str]
    points: list[DataPoint] = field(default_factory=list)


class InMemorySeriesStore:
    """Thread-safe ``SeriesStore`` implementation over plain dictionaries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tenants: dict[str, dict[str, _StoredSeries]] = {}

    def add_tenant(self, tenant: str) -> None:
        """Register a tenant with no series."""
        with self._lock:
            self._tenants.setdefault(tenant, {})

    def create_series(self, tenant: str, series_id: str, tags: Mapping[str, str] | None = None) -> None:
        """Create a series, or replace the tags of an existing one."""
        with self._lock:
            series_by_id = self._tenants.setdefault(tenant, {})
            existing = series_by_id.get(series_id)
            if existing is None:
                series_by_id[series_id] = _StoredSeries(tags=dict(tags or {}))
            else:
                existing.tags = dict(tags or {})

    def write_points(self, tenant: str, series_id: str, points: Iterable[DataPoint]) -> None:
        """Append points to an existing series.

        Raises:
            VantageStoreError: If the series does not exist.
        """
        with self._lock:
            series = self._tenants.get(tenant, {}).get(series_id)
            if series is None:
                raise VantageStoreError(
                    f"Series '{series_id}' does not exist for tenant '{tenant}'. "
                    "Create the series before writing points."
                )
            series.points.extend(points)

    def list_tenants(self) -> list[str]:
        """Return registered tenants in insertion order."""
        with self._lock:
            return list(self._tenants)

    def find_series(self, tenant: str, tag_filters: TagFilters) -> list[SeriesRef]:
        """Return series of a tenant whose tags fully match every filter."""
        with self._lock:
            series_by_id = dict(self._tenants.get(tenant, {}))
        return [
            SeriesRef(series_id=series_id, tags=dict(series.tags))
            for series_id, series in series_by_id.items()
            if tags_match(series.tags, tag_filters)
        ]

    def fetch_points(self, tenant: str, series_id: str, start: int, end: int) -> list[DataPoint]:
        """Return points with ``start <= timestamp < end``, newest first."""
        with self._lock:
            series = self._tenants.get(tenant, {}).get(series_id)
            points = list(series.points) if series is not None else []
        return sort_descending([point for point in points if start <= point.timestamp < end])
