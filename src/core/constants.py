"""Core constants used across Vantage modules.

This module centralizes tag vocabulary, wire keys, and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_METRICS_URL = "http://localhost:8080/hawkular/metrics"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "info"
DEFAULT_CHUNK_BYTES = 1536
DEFAULT_WORKERS_CAP = 32

TENANT_HEADER = "Hawkular-Tenant"

TAG_MODULE = "module"
TAG_FEED = "feed"
TAG_TYPE = "type"
TAG_METRIC_TYPES = "mtypes"
TAG_CHUNKS = "chunks"
TAG_SIZE = "size"
INVENTORY_MODULE = "inventory"
METRIC_TYPE_SERIES = "mt"
RESOURCE_SERIES = "r"
TYPE_ID_DELIMITER = "|"

ROOT_PATH = ""
TOP_LEVEL_ROOT_ID = ""

KIND_RESOURCE = "resource"
KIND_RESOURCE_TYPE = "resourceType"
KIND_METRIC = "metric"
KIND_METRIC_TYPE = "metricType"

CONTEXT_SERIES_ID = "series_id"
CONTEXT_METRIC_TYPE_ID = "metric_type_id"
