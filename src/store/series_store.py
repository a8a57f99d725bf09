"""Backing time-series store contract.

This module defines the read-only query surface Vantage consumes.
Implementations live in ``store.memory_store`` and ``store.http_store``.
"""

from __future__ import annotations

import re
from typing import Mapping, Protocol, Sequence

from core.errors import VantageStoreError
from core.types import DataPoint, SeriesRef

TagFilters = Mapping[str, str]


class SeriesStore(Protocol):
    """Read-only view of a tenant-partitioned string series store."""

    def list_tenants(self) -> list[str]:
        """Return every known tenant id."""
        ...

    def find_series(self, tenant: str, tag_filters: TagFilters) -> list[SeriesRef]:
        """Return series whose tags fully match every filter regex."""
        ...

    def fetch_points(self, tenant: str, series_id: str, start: int, end: int) -> list[DataPoint]:
        """Return points with ``start <= timestamp < end``, newest first."""
        ...


def exact_value(value: str) -> str:
    """Return a filter pattern matching ``value`` literally."""
    return re.escape(value)


def tags_match(tags: Mapping[str, str], tag_filters: TagFilters) -> bool:
    """Check series tags against filter regexes.

    Args:
        tags: Series tags.
        tag_filters: Tag name to regex that must match the whole value.

    Returns:
        True when every filtered tag is present and fully matches.
    """
    for key, pattern in tag_filters.items():
        value = tags.get(key)
        if value is None or re.fullmatch(pattern, value) is None:
            return False
    return True


def render_tag_query(tag_filters: TagFilters) -> str:
    """Render filters in the ``key:regex,key:regex`` query syntax.

    Raises:
        VantageStoreError: If a filter contains the ``,`` separator, which
            the query syntax cannot carry.
    """
    for key, pattern in tag_filters.items():
        if "," in key or "," in pattern:
            raise VantageStoreError(
                f"Tag filter {key}:{pattern} contains ',' and cannot be sent as a tag query. "
                "Use feed and metric type ids without commas."
            )
    return ",".join(f"{key}:{pattern}" for key, pattern in tag_filters.items())


def sort_descending(points: Sequence[DataPoint]) -> list[DataPoint]:
    """Order points newest first."""
    return sorted(points, key=lambda point: point.timestamp, reverse=True)
