"""Inventory series discovery and per-series reconstruction.

This module finds inventory series by tag filter and, for each candidate,
fetches its history, rebuilds the snapshot, and extracts blueprints. Each
series is an independent unit of work on a bounded thread pool; a failing
series is reported with its context and never aborts its siblings.
"""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, TypeVar

from core.config import resolve_worker_count
from core.constants import (
    CONTEXT_METRIC_TYPE_ID,
    CONTEXT_SERIES_ID,
    INVENTORY_MODULE,
    METRIC_TYPE_SERIES,
    RESOURCE_SERIES,
    TAG_FEED,
    TAG_METRIC_TYPES,
    TAG_MODULE,
    TAG_TYPE,
)
from core.errors import SnapshotError, VantageError, VantageStoreError
from core.logging_config import get_logger
from core.types import AssembledDocument, MetricBlueprint, MetricTypeBlueprint, SeriesRef
from discovery.tag_matching import has_type_id, type_id_pattern
from snapshot.chunk_assembly import rebuild_document
from snapshot.extraction import as_metric_type_blueprint, metrics_for_type
from store.series_store import SeriesStore, TagFilters, exact_value

_LOGGER = get_logger(__name__)

BlueprintT = TypeVar("BlueprintT")


@dataclass(frozen=True)
class SeriesOutcome(Generic[BlueprintT]):
    """Result of processing one candidate series.

    Attributes:
        series_id: Series the outcome belongs to.
        blueprints: Extracted blueprints, empty on failure or no match.
        error: Failure captured for this series, if any.
    """

    series_id: str
    blueprints: tuple[BlueprintT, ...] = ()
    error: VantageError | None = None

    @property
    def ok(self) -> bool:
        """Whether the series was processed without error."""
        return self.error is None


@dataclass(frozen=True)
class DiscoveryReport(Generic[BlueprintT]):
    """All per-series outcomes of one discovery call, in discovery order."""

    outcomes: tuple[SeriesOutcome[BlueprintT], ...]

    @property
    def blueprints(self) -> list[BlueprintT]:
        """Blueprints of successful series, flattened in discovery order."""
        return [blueprint for outcome in self.outcomes for blueprint in outcome.blueprints]

    @property
    def failures(self) -> list[SeriesOutcome[BlueprintT]]:
        """Outcomes that captured an error, in discovery order."""
        return [outcome for outcome in self.outcomes if not outcome.ok]


class SeriesDiscovery:
    """Drives snapshot reconstruction over discovered inventory series."""

    def __init__(self, store: SeriesStore, max_workers: int = 0) -> None:
        """Initialize discovery over a store.

        Args:
            store: Backing series store.
            max_workers: Worker pool size; 0 selects an automatic size.
        """
        self._store = store
        self._max_workers = resolve_worker_count(max_workers)

    def tenants_with_feed(self, feed: str) -> list[str]:
        """Return tenants holding at least one inventory series for ``feed``.

        Raises:
            VantageStoreError: If the store cannot be queried.
        """
        tag_filters = _inventory_filters(feed)
        tenants = self._store.list_tenants()
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            has_feed = list(
                executor.map(lambda tenant: bool(self._store.find_series(tenant, tag_filters)), tenants)
            )
        return [tenant for tenant, present in zip(tenants, has_feed) if present]

    def metric_type_series(
        self,
        tenant: str,
        feed: str,
        as_of: int | None = None,
    ) -> DiscoveryReport[MetricTypeBlueprint]:
        """Rebuild every metric type snapshot published by a feed.

        Args:
            tenant: Tenant id.
            feed: Feed id.
            as_of: Exclusive upper bound in ms; defaults to now.

        Returns:
            Report with one outcome per metric type series.

        Raises:
            VantageStoreError: If the candidate series cannot be listed.
        """
        tag_filters = {**_inventory_filters(feed), TAG_TYPE: exact_value(METRIC_TYPE_SERIES)}
        candidates = iter(self._store.find_series(tenant, tag_filters))
        end = _resolve_as_of(as_of)

        def extract(document: AssembledDocument) -> tuple[MetricTypeBlueprint, ...]:
            blueprint = as_metric_type_blueprint(document)
            return (blueprint,) if blueprint is not None else ()

        return self._process(candidates, tenant, end, extract, context={})

    def resource_series_for_type(
        self,
        tenant: str,
        feed: str,
        metric_type_id: str,
        as_of: int | None = None,
    ) -> DiscoveryReport[MetricBlueprint]:
        """Collect metrics of one metric type across resource snapshots.

        Args:
            tenant: Tenant id.
            feed: Feed id.
            metric_type_id: Metric type id searched in ``mtypes`` tags.
            as_of: Exclusive upper bound in ms; defaults to now.

        Returns:
            Report with one outcome per matching resource series.

        Raises:
            VantageStoreError: If the candidate series cannot be listed.
        """
        tag_filters = {
            **_inventory_filters(feed),
            TAG_TYPE: exact_value(RESOURCE_SERIES),
            TAG_METRIC_TYPES: type_id_pattern(metric_type_id),
        }
        candidates = (
            series
            for series in self._store.find_series(tenant, tag_filters)
            if has_type_id(series.tags.get(TAG_METRIC_TYPES), metric_type_id)
        )
        end = _resolve_as_of(as_of)

        def extract(document: AssembledDocument) -> tuple[MetricBlueprint, ...]:
            return metrics_for_type(document, metric_type_id)

        return self._process(
            candidates,
            tenant,
            end,
            extract,
            context={CONTEXT_METRIC_TYPE_ID: metric_type_id},
        )

    def _process(
        self,
        candidates: Iterator[SeriesRef],
        tenant: str,
        end: int,
        extract: Callable[[AssembledDocument], tuple[BlueprintT, ...]],
        context: dict[str, str],
    ) -> DiscoveryReport[BlueprintT]:
        """Run fetch, assemble, extract for each candidate on the pool."""
        series_ids: list[str] = []
        outcomes: dict[str, SeriesOutcome[BlueprintT]] = {}
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures: dict[Future[tuple[BlueprintT, ...]], str] = {}
            for series in candidates:
                series_ids.append(series.series_id)
                future = executor.submit(self._process_one, tenant, series.series_id, end, extract)
                futures[future] = series.series_id
            for future in as_completed(futures):
                series_id = futures[future]
                outcomes[series_id] = _collect_outcome(future, series_id, context)
        ordered = tuple(outcomes[series_id] for series_id in series_ids)
        _LOGGER.info(
            "discovery_completed",
            tenant=tenant,
            series_count=len(ordered),
            failed_count=sum(1 for outcome in ordered if not outcome.ok),
            **context,
        )
        return DiscoveryReport(outcomes=ordered)

    def _process_one(
        self,
        tenant: str,
        series_id: str,
        end: int,
        extract: Callable[[AssembledDocument], tuple[BlueprintT, ...]],
    ) -> tuple[BlueprintT, ...]:
        points = self._store.fetch_points(tenant, series_id, 0, end)
        document = rebuild_document(points)
        return extract(document)


def _collect_outcome(
    future: "Future[tuple[BlueprintT, ...]]",
    series_id: str,
    context: dict[str, str],
) -> SeriesOutcome[BlueprintT]:
    """Turn a finished future into an outcome, capturing its failure."""
    try:
        blueprints = future.result()
    except SnapshotError as error:
        for key, value in context.items():
            error.add_context(key, value)
        error.add_context(CONTEXT_SERIES_ID, series_id)
        _LOGGER.warning("series_failed", series_id=series_id, error=str(error), **context)
        return SeriesOutcome(series_id=series_id, error=error)
    except VantageError as error:
        _LOGGER.warning("series_failed", series_id=series_id, error=str(error), **context)
        return SeriesOutcome(series_id=series_id, error=error)
    except Exception as error:
        wrapped = VantageStoreError(
            f"Processing series '{series_id}' failed unexpectedly: {type(error).__name__}: {error}"
        )
        wrapped.__cause__ = error
        _LOGGER.warning("series_failed", series_id=series_id, error=str(wrapped), **context)
        return SeriesOutcome(series_id=series_id, error=wrapped)
    return SeriesOutcome(series_id=series_id, blueprints=blueprints)


def _inventory_filters(feed: str) -> TagFilters:
    return {TAG_MODULE: exact_value(INVENTORY_MODULE), TAG_FEED: exact_value(feed)}


def _resolve_as_of(as_of: int | None) -> int:
    return as_of if as_of is not None else int(time.time() * 1000)
