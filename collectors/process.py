"""Per process name memory, virtual memory and CPU metrics collector"""
import time
from typing import Any, Dict, Iterable, List, Optional

from logging_config import get_logger
from metrics.models import MetricRecord, MetricType, MetricValue
from metrics.schema import expand
from .aggregation import AggregationResult, ProcessAggregator
from .base import BaseCollector
from .sources.base import ProcessSource
from .sources.linux import LinuxProcessSource


logger = get_logger(__name__)

PROCESS_HELP = "Labeled per process cpu and memory information."
READ_ERRORS_HELP = "Per process reads skipped during the last scrape, by read."


class ProcessCollector(BaseCollector):
    """Collect resource usage summed by process name"""

    def __init__(self, config=None, source: Optional[ProcessSource] = None):
        super().__init__(config, "process", "Per process name memory, virtual memory and CPU usage")
        if source is None:
            source = LinuxProcessSource(getattr(self.config, "procfs_path", "/proc"))
        self.source = source
        self.aggregator = ProcessAggregator(source)
        self.last_result: Optional[AggregationResult] = None

    def collect(self) -> List[MetricValue]:
        """Run one collection pass; EnumerationError propagates to the caller"""
        start_time = time.time()
        result = self.aggregator.collect()
        self.last_result = result

        metrics = self.records_to_metrics(expand(result.buckets))
        if getattr(self.config, "expose_read_errors", False):
            metrics.extend(self._read_error_metrics(result))

        logger.debug(
            "Process collection finished",
            processes=result.process_count,
            process_names=len(result.buckets),
            metrics_count=len(metrics),
            skipped_reads=result.error_count,
            collection_time_seconds=round(time.time() - start_time, 3),
            event_type="process_collection"
        )
        return metrics

    def records_to_metrics(self, records: Iterable[MetricRecord]) -> List[MetricValue]:
        """Map records to gauges named ``<namespace>_process_<system>``"""
        return [
            MetricValue(
                name=f"{self.namespace}_process_{record.system}",
                value=record.value,
                labels={"name": record.process_name, "type": record.subsystem},
                help_text=PROCESS_HELP,
                metric_type=MetricType.GAUGE,
            )
            for record in records
        ]

    def _read_error_metrics(self, result: AggregationResult) -> List[MetricValue]:
        return [
            MetricValue(
                name=f"{self.namespace}_process_read_errors",
                value=float(result.skipped.get(group, 0)),
                labels={"read": group},
                help_text=READ_ERRORS_HELP,
                metric_type=MetricType.GAUGE,
            )
            for group in ("name", "memory", "virtualmem", "stats", "times")
        ]

    def describe(self) -> Dict[str, Any]:
        status = {"source": self.source.describe()}
        if self.last_result is not None:
            status["last_pass"] = {
                "processes": self.last_result.process_count,
                "process_names": len(self.last_result.buckets),
                "skipped_reads": dict(self.last_result.skipped),
            }
        return status
