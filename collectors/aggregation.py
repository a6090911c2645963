"""Group per-process resource usage by process name"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict

from logging_config import get_logger
from .sources.base import ProcessSource, ReadResult


logger = get_logger(__name__)

AggregateBucket = Dict[str, float]


@dataclass
class AggregationResult:
    """Buckets of one collection pass plus the reads that were skipped"""
    buckets: Dict[str, AggregateBucket] = field(default_factory=dict)
    skipped: Counter = field(default_factory=Counter)
    process_count: int = 0

    @property
    def error_count(self) -> int:
        return sum(self.skipped.values())


class ProcessAggregator:
    """Sums resource usage of all processes sharing a name.

    Only a failed process listing aborts the pass (``EnumerationError``
    propagates). A process whose name cannot be read, or is empty, is
    dropped. Memory, virtual memory and CPU reads are independent of each
    other, except that CPU times are only read when the process stats read
    succeeded.
    """

    def __init__(self, source: ProcessSource):
        self.source = source

    def collect(self) -> AggregationResult:
        result = AggregationResult()
        pids = self.source.list_pids()
        result.process_count = len(pids)

        try:
            for pid in pids:
                self._fold(result, pid)
        finally:
            self.source.end_pass()

        logger.debug(
            "Aggregated process samples",
            processes=result.process_count,
            names=len(result.buckets),
            skipped=dict(result.skipped),
            event_type="process_aggregation"
        )
        return result

    def _fold(self, result: AggregationResult, pid: int) -> None:
        """Add the readable usage of one process to its name's bucket"""
        name = ReadResult.attempt(self.source.name, pid)
        if not self._check(result, "name", pid, name):
            return
        if not name.value:
            result.skipped["name"] += 1
            return

        bucket = result.buckets.setdefault(name.value, {})

        memory = ReadResult.attempt(self.source.memory_info, pid)
        if self._check(result, "memory", pid, memory):
            self._add(bucket, "memory.used", memory.value.resident)

        virtual = ReadResult.attempt(self.source.virtual_memory_info, pid)
        if self._check(result, "virtualmem", pid, virtual):
            for field_name, value in virtual.value.as_dict().items():
                self._add(bucket, f"virtualmem.{field_name}", value)

        stats = ReadResult.attempt(self.source.process_stats, pid)
        if not self._check(result, "stats", pid, stats):
            return

        times = ReadResult.attempt(self.source.cpu_times, pid)
        if self._check(result, "times", pid, times):
            self._add(bucket, "cpu.user", times.value.user)
            self._add(bucket, "cpu.system", times.value.system)
            self._add(bucket, "cpu.total", times.value.total)

    @staticmethod
    def _check(result: AggregationResult, group: str, pid: int, read: ReadResult) -> bool:
        if read.is_success:
            return True
        result.skipped[group] += 1
        logger.debug("Process read skipped", pid=pid, read=group, error=str(read.error))
        return False

    @staticmethod
    def _add(bucket: AggregateBucket, key: str, value: float) -> None:
        bucket[key] = bucket.get(key, 0.0) + float(value)
