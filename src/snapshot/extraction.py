"""Blueprint extraction from assembled documents.

Pure read-only queries over an ``AssembledDocument``. The embedded type
indices are hints: paths that do not resolve, or resolve to another kind
of entity, are skipped rather than reported.
"""

from __future__ import annotations

from core.types import AssembledDocument, MetricBlueprint, MetricTypeBlueprint


def as_metric_type_blueprint(document: AssembledDocument) -> MetricTypeBlueprint | None:
    """Return the document root if it is a metric type, else None."""
    if isinstance(document.root, MetricTypeBlueprint):
        return document.root
    return None


def metrics_for_type(document: AssembledDocument, metric_type_id: str) -> tuple[MetricBlueprint, ...]:
    """Collect metric blueprints listed under a metric type in the index.

    Args:
        document: Assembled resource snapshot.
        metric_type_id: Metric type id to look up in ``metric_types_index``.

    Returns:
        Metric blueprints in index order; empty if the id is not indexed.
    """
    paths = document.metric_types_index.get(metric_type_id, ())
    metrics: list[MetricBlueprint] = []
    for path in paths:
        entity = document.structure.get(path)
        if isinstance(entity, MetricBlueprint):
            metrics.append(entity)
    return tuple(metrics)
