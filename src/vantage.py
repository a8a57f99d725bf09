"""Public SDK surface for Vantage.

This module provides a stable import path for library users.
It re-exports snapshot assembly, discovery, and the inventory index.
"""

from __future__ import annotations

from core.config import VantageConfig
from core.types import (
    AssembledDocument,
    DataPoint,
    Metric,
    MetricBlueprint,
    MetricTypeBlueprint,
    MetricUnit,
    Operation,
    Resource,
    ResourceType,
)
from discovery.series_discovery import DiscoveryReport, SeriesDiscovery, SeriesOutcome
from inventory.inventory_index import InventoryIndex, ResourceNode
from inventory.seed_file import load_seed_file
from snapshot.chunk_assembly import rebuild_document
from snapshot.chunk_encoding import build_chunk_set
from snapshot.extraction import as_metric_type_blueprint, metrics_for_type
from store.http_store import MetricsHttpStore
from store.memory_store import InMemorySeriesStore

__all__ = [
    "AssembledDocument",
    "DataPoint",
    "DiscoveryReport",
    "InMemorySeriesStore",
    "InventoryIndex",
    "Metric",
    "MetricBlueprint",
    "MetricTypeBlueprint",
    "MetricUnit",
    "MetricsHttpStore",
    "Operation",
    "Resource",
    "ResourceNode",
    "ResourceType",
    "SeriesDiscovery",
    "SeriesOutcome",
    "VantageConfig",
    "as_metric_type_blueprint",
    "build_chunk_set",
    "load_seed_file",
    "metrics_for_type",
    "rebuild_document",
]
