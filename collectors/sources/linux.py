"""Linux process source backed by psutil and procfs"""
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import psutil

from logging_config import get_logger
from .base import (
    CpuTimes,
    EnumerationError,
    MemoryInfo,
    NameResolutionError,
    ProcessSource,
    ProcessStats,
    StatReadError,
    VirtualMemoryInfo,
)


logger = get_logger(__name__)

# /proc/<pid>/status keys, values in kB
VM_STATUS_FIELDS = {
    "VmPeak": "peak",
    "VmSize": "size",
    "VmLck": "lock",
    "VmHWM": "hwm",
    "VmRSS": "rss",
    "VmSwap": "swap",
}


class LinuxProcessSource(ProcessSource):
    """Reads process information through psutil, virtual memory from procfs"""

    def __init__(self, procfs_path: Union[str, Path] = "/proc"):
        self.procfs_path = Path(procfs_path)
        self._processes: Dict[int, psutil.Process] = {}

    def list_pids(self) -> List[int]:
        try:
            pids = psutil.pids()
        except (psutil.Error, OSError) as e:
            raise EnumerationError(f"Could not list processes: {e}") from e
        return pids

    def end_pass(self) -> None:
        # Process handles are only reused within a single pass
        self._processes = {}

    def _process(self, pid: int) -> psutil.Process:
        proc = self._processes.get(pid)
        if proc is None:
            proc = psutil.Process(pid)
            self._processes[pid] = proc
        return proc

    def name(self, pid: int) -> str:
        try:
            return self._process(pid).name()
        except (psutil.Error, OSError) as e:
            raise NameResolutionError(f"pid {pid}: {e}") from e

    def memory_info(self, pid: int) -> MemoryInfo:
        try:
            return MemoryInfo(resident=float(self._process(pid).memory_info().rss))
        except (psutil.Error, OSError) as e:
            raise StatReadError(f"pid {pid} memory: {e}") from e

    def virtual_memory_info(self, pid: int) -> VirtualMemoryInfo:
        content = self._safe_read_file(self.procfs_path / str(pid) / "status")
        if content is None:
            raise StatReadError(f"pid {pid} virtual memory: status not readable")

        values: Dict[str, float] = {}
        for line in content.split("\n"):
            if ":" not in line:
                continue
            key, raw = line.split(":", 1)
            field = VM_STATUS_FIELDS.get(key.strip())
            if field is None:
                continue
            try:
                values[field] = self._kb_to_bytes(int(raw.split()[0]))
            except (ValueError, IndexError) as e:
                raise StatReadError(f"pid {pid} virtual memory: bad {key} value {raw.strip()!r}") from e

        # Kernel threads carry no Vm* lines; they read as all zero
        return VirtualMemoryInfo(**values)

    def process_stats(self, pid: int) -> ProcessStats:
        try:
            return ProcessStats(status=self._process(pid).status())
        except (psutil.Error, OSError) as e:
            raise StatReadError(f"pid {pid} stats: {e}") from e

    def cpu_times(self, pid: int) -> CpuTimes:
        try:
            times = self._process(pid).cpu_times()
        except (psutil.Error, OSError) as e:
            raise StatReadError(f"pid {pid} cpu times: {e}") from e
        return CpuTimes(user=float(times.user), system=float(times.system))

    def describe(self) -> Dict[str, Any]:
        return {
            "class": self.__class__.__name__,
            "procfs_path": str(self.procfs_path),
            "psutil_version": psutil.__version__,
        }

    def _safe_read_file(self, file_path: Path) -> Optional[str]:
        """Safely read a file, returning None on error"""
        try:
            with open(file_path, "r") as f:
                return f.read().strip()
        except OSError:
            return None

    def _kb_to_bytes(self, kb_value: int) -> float:
        """Convert kilobytes to bytes"""
        return float(kb_value * 1024)
