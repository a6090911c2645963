"""Fixed per-process metric schema and its expansion into records"""
from enum import Enum
from typing import Dict, Iterator, List, Mapping

from .models import MetricRecord


class ProcessStat(Enum):
    """Every (system, subsystem) pair exported for a process name, in output order"""
    MEMORY_USED = ("memory", "used")
    CPU_TOTAL = ("cpu", "total")
    CPU_USER = ("cpu", "user")
    CPU_SYSTEM = ("cpu", "system")
    VIRTUALMEM_PEAK = ("virtualmem", "peak")
    VIRTUALMEM_SIZE = ("virtualmem", "size")
    VIRTUALMEM_LOCK = ("virtualmem", "lock")
    VIRTUALMEM_HWM = ("virtualmem", "hwm")
    VIRTUALMEM_RSS = ("virtualmem", "rss")
    VIRTUALMEM_SWAP = ("virtualmem", "swap")

    @property
    def system(self) -> str:
        return self.value[0]

    @property
    def subsystem(self) -> str:
        return self.value[1]

    @property
    def key(self) -> str:
        """Bucket key, e.g. ``cpu.total``"""
        return f"{self.system}.{self.subsystem}"


def systems() -> Dict[str, List[str]]:
    """Schema grouped as system -> ordered subsystems"""
    grouped: Dict[str, List[str]] = {}
    for stat in ProcessStat:
        grouped.setdefault(stat.system, []).append(stat.subsystem)
    return grouped


def expand(buckets: Mapping[str, Mapping[str, float]]) -> Iterator[MetricRecord]:
    """Yield one record per process name and schema pair.

    Names are walked in lexicographic order so output is stable between
    scrapes. Keys missing from a bucket are reported as 0.0; nothing is
    filtered, so every name always produces ``len(ProcessStat)`` records.
    """
    for process_name in sorted(buckets):
        bucket = buckets[process_name]
        for stat in ProcessStat:
            yield MetricRecord(
                system=stat.system,
                subsystem=stat.subsystem,
                process_name=process_name,
                value=float(bucket.get(stat.key, 0.0)),
            )
