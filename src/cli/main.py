"""Vantage CLI entry points.

This module exposes discovery, snapshot, and inventory commands.
It maps argparse commands onto store, discovery, and index calls.
"""

from __future__ import annotations

import argparse
import json
import sys
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterator, Sequence

from core.config import VantageConfig
from core.errors import VantageError
from core.logging_config import configure_logging
from core.types import DataPoint
from discovery.series_discovery import DiscoveryReport, SeriesDiscovery
from inventory.inventory_index import InventoryIndex
from inventory.projection import (
    metric_to_dict,
    node_to_dict,
    resource_to_dict,
    resource_type_to_dict,
)
from inventory.seed_file import load_seed_file
from snapshot.chunk_assembly import rebuild_document
from snapshot.document_codec import blueprint_to_dict, serialize_document
from store.http_store import MetricsHttpStore
from store.series_store import SeriesStore


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="vantage", description="Vantage inventory CLI")
    parser.add_argument("--metrics-url", help="Override VANTAGE_METRICS_URL for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_tenants_command(subparsers)
    _add_metric_types_command(subparsers)
    _add_metrics_command(subparsers)
    _add_assemble_command(subparsers)
    _add_inventory_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Vantage CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args.metrics_url)
        configure_logging(config.log_level)
        if args.command == "tenants":
            return _run_tenants_command(config, args)
        if args.command == "metric-types":
            return _run_metric_types_command(config, args)
        if args.command == "metrics":
            return _run_metrics_command(config, args)
        if args.command == "assemble":
            return _run_assemble_command(args)
        if args.command == "inventory":
            return _run_inventory_command(args)
    except VantageError as error:
        print(f"error={error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(metrics_url: str | None) -> VantageConfig:
    """Build config with optional metrics URL override."""
    config = VantageConfig.from_env()
    if metrics_url:
        config = replace(config, metrics_url=metrics_url.rstrip("/"))
    return config


@contextmanager
def _open_store(config: VantageConfig) -> Iterator[SeriesStore]:
    """Open the configured backing store for one command."""
    with MetricsHttpStore(config) as store:
        yield store


def _run_tenants_command(config: VantageConfig, args: argparse.Namespace) -> int:
    with _open_store(config) as store:
        tenants = SeriesDiscovery(store, config.discovery_workers).tenants_with_feed(args.feed)
    for tenant in tenants:
        print(tenant)
    return 0


def _run_metric_types_command(config: VantageConfig, args: argparse.Namespace) -> int:
    with _open_store(config) as store:
        discovery = SeriesDiscovery(store, config.discovery_workers)
        report = discovery.metric_type_series(args.tenant, args.feed, args.as_of)
    return _print_report(report)


def _run_metrics_command(config: VantageConfig, args: argparse.Namespace) -> int:
    with _open_store(config) as store:
        discovery = SeriesDiscovery(store, config.discovery_workers)
        report = discovery.resource_series_for_type(args.tenant, args.feed, args.metric_type, args.as_of)
    return _print_report(report)


def _print_report(report: DiscoveryReport[Any]) -> int:
    """Print blueprints as JSON lines and failures on stderr.

    Returns:
        0 when every series succeeded, 1 otherwise.
    """
    for blueprint in report.blueprints:
        print(json.dumps(blueprint_to_dict(blueprint), sort_keys=True))
    for failure in report.failures:
        print(f"series_failed\t{failure.series_id}\t{failure.error}", file=sys.stderr)
    return 0 if not report.failures else 1


def _run_assemble_command(args: argparse.Namespace) -> int:
    """Rebuild a document from an exported JSON array of data points."""
    points = _read_points_file(Path(args.points_file))
    document = rebuild_document(points)
    print(serialize_document(document))
    return 0


def _read_points_file(points_path: Path) -> list[DataPoint]:
    try:
        payload = json.loads(points_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise VantageError(f"Failed to read data points from {points_path}: {error}") from error
    if not isinstance(payload, list):
        raise VantageError(f"Data points file {points_path} must contain a JSON array.")
    points: list[DataPoint] = []
    for position, item in enumerate(payload):
        if not isinstance(item, dict) or "timestamp" not in item or "value" not in item:
            raise VantageError(
                f"Data points file {points_path}: entry {position} needs 'timestamp' and 'value'."
            )
        timestamp = item["timestamp"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise VantageError(
                f"Data points file {points_path}: entry {position} timestamp {timestamp!r} "
                "must be an integer of epoch milliseconds."
            )
        tags = item.get("tags") or {}
        if not isinstance(tags, dict):
            raise VantageError(
                f"Data points file {points_path}: entry {position} tags must be a JSON object."
            )
        points.append(
            DataPoint(
                timestamp=timestamp,
                value=str(item["value"]),
                tags={str(key): str(value) for key, value in tags.items()},
            )
        )
    return sorted(points, key=lambda point: point.timestamp, reverse=True)


def _run_inventory_command(args: argparse.Namespace) -> int:
    index = load_seed_file(args.seed_file)
    result = _query_inventory(index, args)
    if result is None:
        print("not_found", file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2, sort_keys=True))
    return 0


def _query_inventory(index: InventoryIndex, args: argparse.Namespace) -> Any:
    """Run one inventory query; None means the requested id is unknown."""
    if args.query == "top":
        return [resource_to_dict(resource) for resource in index.get_all_top_resources()]
    if args.query == "types":
        return [resource_type_to_dict(item) for item in index.get_all_resource_types()]
    if args.query == "type":
        resource_type = index.get_resource_type(args.type_id)
        return resource_type_to_dict(resource_type) if resource_type is not None else None
    if args.query == "by-type":
        resources = index.get_resources_by_type(args.type_id)
        if args.subtree:
            return [node_to_dict(index.load_subtree(resource)) for resource in resources]
        return [resource_to_dict(resource) for resource in resources]
    if args.query == "resource":
        resource = index.find_resource_by_id(args.resource_id)
        if resource is None:
            return None
        if args.subtree:
            return node_to_dict(index.load_subtree(resource))
        return resource_to_dict(resource)
    if args.query == "children":
        children = index.get_child_resources(args.resource_id)
        return [resource_to_dict(child) for child in children] if children is not None else None
    metrics = index.get_resource_metrics(args.resource_id)
    return [metric_to_dict(metric) for metric in metrics] if metrics is not None else None


def _add_tenants_command(subparsers: Any) -> None:
    """Register tenants subcommand."""
    parser = subparsers.add_parser("tenants", help="List tenants holding inventory for a feed")
    parser.add_argument("--feed", required=True, help="Feed id")


def _add_metric_types_command(subparsers: Any) -> None:
    """Register metric-types subcommand."""
    parser = subparsers.add_parser("metric-types", help="Rebuild metric type snapshots of a feed")
    parser.add_argument("--tenant", required=True, help="Tenant id")
    parser.add_argument("--feed", required=True, help="Feed id")
    parser.add_argument("--as-of", type=int, help="Exclusive upper bound in epoch milliseconds")


def _add_metrics_command(subparsers: Any) -> None:
    """Register metrics subcommand."""
    parser = subparsers.add_parser("metrics", help="List metrics of a metric type across resources")
    parser.add_argument("--tenant", required=True, help="Tenant id")
    parser.add_argument("--feed", required=True, help="Feed id")
    parser.add_argument("--metric-type", required=True, help="Metric type id")
    parser.add_argument("--as-of", type=int, help="Exclusive upper bound in epoch milliseconds")


def _add_assemble_command(subparsers: Any) -> None:
    """Register assemble subcommand."""
    parser = subparsers.add_parser("assemble", help="Rebuild a document from exported data points")
    parser.add_argument("points_file", help="JSON array of {timestamp, value, tags} objects")


def _add_inventory_command(subparsers: Any) -> None:
    """Register inventory subcommand and its queries."""
    parser = subparsers.add_parser("inventory", help="Query an inventory seed file")
    parser.add_argument("seed_file", help="YAML inventory seed file")
    queries = parser.add_subparsers(dest="query", required=True)
    queries.add_parser("top", help="List top-level resources")
    queries.add_parser("types", help="List resource types")
    type_parser = queries.add_parser("type", help="Show one resource type")
    type_parser.add_argument("type_id")
    by_type_parser = queries.add_parser("by-type", help="List resources of a type")
    by_type_parser.add_argument("type_id")
    by_type_parser.add_argument("--subtree", action="store_true", help="Load each resource subtree")
    resource_parser = queries.add_parser("resource", help="Show one resource")
    resource_parser.add_argument("resource_id")
    resource_parser.add_argument("--subtree", action="store_true", help="Load the resource subtree")
    children_parser = queries.add_parser("children", help="List child resources")
    children_parser.add_argument("resource_id")
    metrics_parser = queries.add_parser("metrics", help="List resource metrics")
    metrics_parser.add_argument("resource_id")
