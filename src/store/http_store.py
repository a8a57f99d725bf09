"""Hawkular-Metrics REST client for inventory series.

This module implements the ``SeriesStore`` contract over the metrics
REST API using httpx. It only reads: tenants, string series definitions
filtered by tags, and raw string data points.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from core.config import VantageConfig
from core.constants import TENANT_HEADER
from core.errors import VantageStoreError
from core.logging_config import get_logger
from core.types import DataPoint, SeriesRef
from store.series_store import TagFilters, render_tag_query, sort_descending

_LOGGER = get_logger(__name__)


class MetricsHttpStore:
    """``SeriesStore`` backed by a Hawkular-Metrics compatible endpoint."""

    def __init__(
        self,
        config: VantageConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client from config.

        Args:
            config: Runtime configuration with URL, token, and timeout.
            transport: Optional httpx transport, used by tests.
        """
        headers = {"Accept": "application/json"}
        if config.metrics_token:
            headers["Authorization"] = f"Bearer {config.metrics_token}"
        self._client = httpx.Client(
            base_url=config.metrics_url,
            headers=headers,
            timeout=config.request_timeout_seconds,
            transport=transport,
        )

    def __enter__(self) -> "MetricsHttpStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def list_tenants(self) -> list[str]:
        """Return tenant ids from ``GET /tenants``.

        Raises:
            VantageStoreError: On transport failure or a malformed body.
        """
        payload = self._get_json("/tenants", tenant=None, params=None)
        return [str(_require(_expect_dict(item, "tenant"), "id", "tenant")) for item in payload]

    def find_series(self, tenant: str, tag_filters: TagFilters) -> list[SeriesRef]:
        """Return string series of a tenant matching the tag filters.

        Args:
            tenant: Tenant id sent in the tenant header.
            tag_filters: Tag name to full-match regex.

        Returns:
            Matching series definitions with their tags.

        Raises:
            VantageStoreError: On transport failure or a malformed body.
        """
        params = {"tags": render_tag_query(tag_filters)}
        payload = self._get_json("/strings", tenant=tenant, params=params)
        series: list[SeriesRef] = []
        for item in payload:
            definition = _expect_dict(item, "series definition")
            tags = _expect_dict(definition.get("tags") or {}, "series tags")
            series.append(
                SeriesRef(
                    series_id=str(_require(definition, "id", "series definition")),
                    tags={str(key): str(value) for key, value in tags.items()},
                )
            )
        return series

    def fetch_points(self, tenant: str, series_id: str, start: int, end: int) -> list[DataPoint]:
        """Return raw points with ``start <= timestamp < end``, newest first.

        Raises:
            VantageStoreError: On transport failure or a malformed body.
        """
        path = f"/strings/{quote(series_id, safe='')}/raw"
        params = {"start": str(start), "end": str(end), "order": "DESC"}
        payload = self._get_json(path, tenant=tenant, params=params)
        points: list[DataPoint] = []
        for item in payload:
            raw_point = _expect_dict(item, "data point")
            tags = _expect_dict(raw_point.get("tags") or {}, "data point tags")
            points.append(
                DataPoint(
                    timestamp=_parse_timestamp(raw_point),
                    value=str(_require(raw_point, "value", "data point")),
                    tags={str(key): str(value) for key, value in tags.items()},
                )
            )
        return sort_descending(points)

    def _get_json(
        self,
        path: str,
        tenant: str | None,
        params: dict[str, str] | None,
    ) -> list[Any]:
        """Issue a GET and return the JSON array body.

        Raises:
            VantageStoreError: On transport failure, error status, or bad body.
        """
        headers = {TENANT_HEADER: tenant} if tenant is not None else {}
        try:
            response = self._client.get(path, params=params, headers=headers)
        except httpx.HTTPError as error:
            raise VantageStoreError(
                f"Metrics store request GET {path} failed: {error}. "
                "Check VANTAGE_METRICS_URL and store availability."
            ) from error
        if response.status_code == httpx.codes.NO_CONTENT:
            return []
        if response.is_error:
            raise VantageStoreError(
                f"Metrics store request GET {path} returned HTTP {response.status_code} "
                f"for tenant '{tenant}': {response.text[:200]}"
            )
        try:
            payload = response.json()
        except ValueError as error:
            raise VantageStoreError(
                f"Metrics store response for GET {path} is not JSON: {error}"
            ) from error
        if not isinstance(payload, list):
            raise VantageStoreError(
                f"Metrics store response for GET {path}: expected JSON array, "
                f"got {type(payload).__name__}"
            )
        _LOGGER.debug("store_request_completed", path=path, tenant=tenant, item_count=len(payload))
        return payload


def _expect_dict(item: object, context: str) -> dict[str, Any]:
    if not isinstance(item, dict):
        raise VantageStoreError(
            f"Metrics store returned malformed {context}: expected JSON object, "
            f"got {type(item).__name__}"
        )
    return item


def _require(item: dict[str, Any], key: str, context: str) -> Any:
    if key not in item:
        raise VantageStoreError(f"Metrics store returned malformed {context}: missing '{key}'")
    return item[key]


def _parse_timestamp(raw_point: dict[str, Any]) -> int:
    value = _require(raw_point, "timestamp", "data point")
    if isinstance(value, bool) or not isinstance(value, int):
        raise VantageStoreError(
            f"Metrics store returned malformed data point: timestamp {value!r} is not an integer"
        )
    return value
