"""Prometheus text exposition exporter"""
from typing import Dict, List

from metrics.models import MetricValue


CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


class PrometheusExporter:
    """Render metrics in the Prometheus text exposition format"""

    def __init__(self, config=None):
        self.config = config

    def export_metrics(self, metrics: List[MetricValue]) -> str:
        """Convert metrics to Prometheus format"""
        if not metrics:
            return "# No metrics available\n"

        lines = []

        # Group metrics by name so HELP and TYPE appear once per family
        for metric_name, metric_list in self._group_metrics_by_name(metrics).items():
            lines.append(f"# HELP {metric_name} {self._escape_help(metric_list[0].help_text)}")
            lines.append(f"# TYPE {metric_name} {metric_list[0].metric_type.value}")

            for metric in metric_list:
                lines.append(metric.to_prometheus_line())

        lines.append("")  # Final newline
        return "\n".join(lines)

    def _group_metrics_by_name(self, metrics: List[MetricValue]) -> Dict[str, List[MetricValue]]:
        """Group metrics by name, preserving order"""
        grouped: Dict[str, List[MetricValue]] = {}
        for metric in metrics:
            grouped.setdefault(metric.name, []).append(metric)
        return grouped

    @staticmethod
    def _escape_help(text: str) -> str:
        return text.replace("\\", "\\\\").replace("\n", "\\n")
