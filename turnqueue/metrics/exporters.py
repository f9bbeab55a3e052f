from __future__ import annotations

import logging

from .registry import MetricsRegistry

logger = logging.getLogger(__name__)


class PrometheusExporter:
    """Render a registry in the Prometheus text exposition format."""

    def __init__(self, registry: MetricsRegistry) -> None:
        self.registry = registry

    def build_payload(self) -> str:
        lines: list[str] = []
        for metric in self.registry.metrics():
            lines.append(f"# HELP {metric.name} {metric.description}")
            lines.append(f"# TYPE {metric.name} {metric.kind}")
            for labels, values in sorted(metric.snapshot().items()):
                label_text = ""
                if labels:
                    pairs = [f'{name}="{value}"' for name, value in zip(metric.label_names, labels)]
                    label_text = "{" + ",".join(pairs) + "}"
                if "value" in values:
                    lines.append(f"{metric.name}{label_text} {values['value']}")
                else:
                    lines.append(f"{metric.name}_count{label_text} {values['count']}")
                    lines.append(f"{metric.name}_sum{label_text} {values['sum']}")
        payload = "\n".join(lines) + "\n"
        logger.debug("Generated metrics payload with %d lines", len(lines))
        return payload
