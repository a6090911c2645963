"""Process source interface, sample types and read results"""
import abc
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar


T = TypeVar("T")


class ProcessSourceError(Exception):
    """Base class for process source failures"""


class EnumerationError(ProcessSourceError):
    """Listing the running processes failed"""


class NameResolutionError(ProcessSourceError):
    """The name of a process could not be read"""


class StatReadError(ProcessSourceError):
    """A resource read for a single process failed"""


@dataclass(frozen=True)
class MemoryInfo:
    """Resident memory of a process in bytes"""
    resident: float


@dataclass(frozen=True)
class VirtualMemoryInfo:
    """Virtual memory accounting of a process in bytes"""
    peak: float = 0.0
    size: float = 0.0
    lock: float = 0.0
    hwm: float = 0.0
    rss: float = 0.0
    swap: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "peak": self.peak,
            "size": self.size,
            "lock": self.lock,
            "hwm": self.hwm,
            "rss": self.rss,
            "swap": self.swap,
        }


@dataclass(frozen=True)
class ProcessStats:
    """Scheduler-level stats of a process; its presence gates CPU time reads"""
    status: str


@dataclass(frozen=True)
class CpuTimes:
    """CPU time consumed by a process in seconds"""
    user: float
    system: float

    @property
    def total(self) -> float:
        return self.user + self.system


@dataclass
class ReadResult(Generic[T]):
    """Outcome of a single per-process read"""
    value: Optional[T] = None
    error: Optional[ProcessSourceError] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def attempt(cls, read: Callable[[int], T], pid: int) -> "ReadResult[T]":
        """Run ``read(pid)``, capturing declared source failures"""
        try:
            return cls(value=read(pid))
        except (NameResolutionError, StatReadError) as e:
            return cls(error=e)


class ProcessSource(abc.ABC):
    """Abstract access to per-process OS resource usage.

    Every per-pid read fails independently. Only ``list_pids`` failing is
    fatal to a collection pass.
    """

    @abc.abstractmethod
    def list_pids(self) -> List[int]:
        """List current process identifiers; raises EnumerationError"""
        pass

    @abc.abstractmethod
    def name(self, pid: int) -> str:
        """Process name; raises NameResolutionError"""
        pass

    @abc.abstractmethod
    def memory_info(self, pid: int) -> MemoryInfo:
        """Resident memory; raises StatReadError"""
        pass

    @abc.abstractmethod
    def virtual_memory_info(self, pid: int) -> VirtualMemoryInfo:
        """Virtual memory fields; raises StatReadError"""
        pass

    @abc.abstractmethod
    def process_stats(self, pid: int) -> ProcessStats:
        """Process stats token; raises StatReadError"""
        pass

    @abc.abstractmethod
    def cpu_times(self, pid: int) -> CpuTimes:
        """CPU times; raises StatReadError"""
        pass

    def end_pass(self) -> None:
        """Release anything held for the pass that just finished"""
        pass

    def describe(self) -> Dict[str, Any]:
        """Status information about this source"""
        return {"class": self.__class__.__name__}
