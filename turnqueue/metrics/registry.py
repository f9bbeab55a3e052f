"""In-memory counters and distributions for queue activity."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Iterable, Mapping, MutableMapping, Tuple

LabelValues = Tuple[str, ...]


class Metric:
    """Shared label handling for concrete metric types."""

    kind = "untyped"

    def __init__(self, name: str, *, description: str = "", label_names: Iterable[str] | None = None) -> None:
        self.name = name
        self.description = description
        self.label_names: Tuple[str, ...] = tuple(label_names or ())
        self._lock = Lock()

    def _label_key(self, labels: Mapping[str, str] | None) -> LabelValues:
        labels = labels or {}
        unknown = set(labels) - set(self.label_names)
        if unknown:
            raise ValueError(f"Metric '{self.name}' does not accept labels {sorted(unknown)}")
        try:
            return tuple(str(labels[label]) for label in self.label_names)
        except KeyError as exc:
            raise ValueError(f"Missing label {exc.args[0]!r} for metric '{self.name}'") from exc

    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:  # pragma: no cover - interface
        raise NotImplementedError


class CounterMetric(Metric):
    kind = "counter"

    def __init__(self, name: str, *, description: str = "", label_names: Iterable[str] | None = None) -> None:
        super().__init__(name, description=description, label_names=label_names)
        self._values: MutableMapping[LabelValues, float] = defaultdict(float)

    def inc(self, amount: float = 1.0, *, labels: Mapping[str, str] | None = None) -> None:
        key = self._label_key(labels)
        with self._lock:
            self._values[key] += amount

    def value(self, *, labels: Mapping[str, str] | None = None) -> float:
        key = self._label_key(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:
        with self._lock:
            return {key: {"value": value} for key, value in self._values.items()}


@dataclass
class DistributionStats:
    count: int = 0
    total: float = 0.0
    min: float | None = None
    max: float | None = None

    def observe(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.min = value if self.min is None else min(self.min, value)
        self.max = value if self.max is None else max(self.max, value)

    def to_mapping(self) -> Mapping[str, float]:
        return {
            "count": float(self.count),
            "sum": self.total,
            "min": self.min if self.min is not None else 0.0,
            "max": self.max if self.max is not None else 0.0,
            "avg": self.total / self.count if self.count else 0.0,
        }


class DistributionMetric(Metric):
    kind = "summary"

    def __init__(self, name: str, *, description: str = "", label_names: Iterable[str] | None = None) -> None:
        super().__init__(name, description=description, label_names=label_names)
        self._values: Dict[LabelValues, DistributionStats] = defaultdict(DistributionStats)

    def observe(self, value: float, *, labels: Mapping[str, str] | None = None) -> None:
        key = self._label_key(labels)
        with self._lock:
            self._values[key].observe(value)

    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:
        with self._lock:
            return {key: stats.to_mapping() for key, stats in self._values.items()}


class MetricsRegistry:
    """Name-indexed collection of metrics; creating an existing name returns it."""

    def __init__(self) -> None:
        self._metrics: Dict[str, Metric] = {}
        self._lock = Lock()

    def _get_or_create(self, cls: type[Metric], name: str, description: str, label_names: Iterable[str] | None):
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = cls(name, description=description, label_names=label_names)
                self._metrics[name] = metric
        if not isinstance(metric, cls):
            raise TypeError(f"Metric '{name}' already exists with a different type")
        return metric

    def counter(self, name: str, *, description: str = "", label_names: Iterable[str] | None = None) -> CounterMetric:
        return self._get_or_create(CounterMetric, name, description, label_names)

    def distribution(
        self, name: str, *, description: str = "", label_names: Iterable[str] | None = None
    ) -> DistributionMetric:
        return self._get_or_create(DistributionMetric, name, description, label_names)

    def metrics(self) -> Tuple[Metric, ...]:
        with self._lock:
            return tuple(self._metrics.values())

    def snapshot(self) -> Dict[str, Mapping[LabelValues, Mapping[str, float]]]:
        return {metric.name: metric.snapshot() for metric in self.metrics()}
