"""Vantage exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class VantageError(Exception):
    """Base exception for all Vantage failures."""


class VantageConfigError(VantageError):
    """Raised for invalid runtime configuration."""


class VantageStoreError(VantageError):
    """Raised for backing time-series store transport failures."""


class VantageDependencyError(VantageError):
    """Raised when an optional runtime dependency is missing."""


class VantageSeedFileError(VantageError):
    """Raised for invalid inventory seed files."""


class SnapshotError(VantageError):
    """Base error for inventory snapshot reconstruction failures.

    Snapshot errors carry an ordered context mapping (series id, metric
    type id) that callers attach before surfacing the error, so a failure
    deep in chunk assembly still names the series it came from.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, str] = {}

    def add_context(self, key: str, value: str) -> "SnapshotError":
        """Attach one identifying field and return self for chaining."""
        self.context[key] = value
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        rendered = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} [{rendered}]"


class MissingSnapshotError(SnapshotError):
    """Raised when a series holds no data point at all."""


class InvalidSnapshotError(SnapshotError):
    """Raised when fragment metadata, counts, or sizes are inconsistent."""


class ChunkOrderError(SnapshotError):
    """Raised when fragment timestamps are not contiguous."""

    def __init__(self, index: int, observed: int, expected: int) -> None:
        super().__init__(
            f"Inventory sanity check failure: chunk #{index} timestamp is {observed}, "
            f"expecting {expected}"
        )
        self.index = index
        self.observed = observed
        self.expected = expected


class DecodeError(SnapshotError):
    """Raised when base64, gzip, or document parsing fails."""


class InventoryError(VantageError):
    """Base error for inventory index failures."""


class CycleDetectedError(InventoryError):
    """Raised when a subtree walk revisits a resource on its own path."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(
            f"Cycle detected in the tree with id {resource_id}; aborting operation. "
            "The inventory is invalid."
        )
        self.resource_id = resource_id


class IndexNotReadyError(InventoryError):
    """Raised when the index is queried before its first rebuild."""
