"""Queue metrics: definitions and a registry factory."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .exporters import PrometheusExporter
from .registry import CounterMetric, DistributionMetric, MetricsRegistry


@dataclass(frozen=True)
class MetricDefinition:
    """Describe a metric that should exist in the registry."""

    name: str
    metric_type: str
    description: str
    label_names: Tuple[str, ...] = ()


TURNS_REGISTERED = "turns_registered_total"
TURNS_ATTENDED = "turns_attended_total"
TURNS_CANCELLED = "turns_cancelled_total"
TURNS_REJECTED = "turns_rejected_total"
TURNS_PRUNED = "turns_pruned_total"
TURN_WAIT_SECONDS = "turn_wait_seconds"

DEFAULT_METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    MetricDefinition(TURNS_REGISTERED, "counter", "Turns registered.", ("priority",)),
    MetricDefinition(TURNS_ATTENDED, "counter", "Turns attended.", ("priority",)),
    MetricDefinition(TURNS_CANCELLED, "counter", "Turns cancelled.", ("priority",)),
    MetricDefinition(TURNS_REJECTED, "counter", "Operations refused by the queue.", ("code",)),
    MetricDefinition(TURNS_PRUNED, "counter", "Terminal turns removed by retention pruning."),
    MetricDefinition(
        TURN_WAIT_SECONDS,
        "distribution",
        "Seconds between registration and attendance.",
        ("priority",),
    ),
)


def build_metrics_registry() -> MetricsRegistry:
    """Return a fresh registry with every default metric registered."""

    registry = MetricsRegistry()
    for definition in DEFAULT_METRIC_DEFINITIONS:
        if definition.metric_type == "counter":
            registry.counter(definition.name, description=definition.description, label_names=definition.label_names)
        elif definition.metric_type == "distribution":
            registry.distribution(
                definition.name, description=definition.description, label_names=definition.label_names
            )
        else:  # pragma: no cover - definitions are static
            raise ValueError(f"Unsupported metric type: {definition.metric_type}")
    return registry


__all__ = [
    "CounterMetric",
    "DistributionMetric",
    "MetricDefinition",
    "MetricsRegistry",
    "PrometheusExporter",
    "build_metrics_registry",
]
