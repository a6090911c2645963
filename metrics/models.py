"""Metric data models"""
from dataclasses import dataclass
from typing import Dict, Optional
from enum import Enum


class MetricType(Enum):
    """Prometheus metric types"""
    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricRecord:
    """One aggregated value for a process name, before exposition"""
    system: str
    subsystem: str
    process_name: str
    value: float

    @property
    def key(self) -> str:
        return f"{self.system}.{self.subsystem}"


def escape_label_value(value: str) -> str:
    """Escape a label value for the Prometheus text format.

    Undecodable bytes (surrogate escapes, as psutil returns for non UTF-8
    process names) become U+FFFD so the value can always be encoded.
    """
    value = value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


@dataclass
class MetricValue:
    """Represents a single metric value"""
    name: str
    value: float
    labels: Dict[str, str]
    help_text: str
    metric_type: MetricType = MetricType.GAUGE
    unit: str = "1"
    timestamp: Optional[float] = None

    def __post_init__(self):
        if self.labels is None:
            self.labels = {}

    def to_prometheus_line(self) -> str:
        """Convert to Prometheus exposition format"""
        labels_str = ""
        if self.labels:
            label_pairs = [f'{k}="{escape_label_value(str(v))}"' for k, v in self.labels.items()]
            labels_str = "{" + ",".join(label_pairs) + "}"

        line = f"{self.name}{labels_str} {self.value}"
        if self.timestamp is not None:
            line += f" {int(self.timestamp * 1000)}"
        return line

    def to_prometheus_with_type(self) -> str:
        """Convert to Prometheus format with TYPE comment"""
        lines = []
        lines.append(f"# TYPE {self.name} {self.metric_type.value}")
        lines.append(self.to_prometheus_line())
        return "\n".join(lines)
