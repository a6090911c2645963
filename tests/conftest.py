"""Shared test fixtures"""
import pytest

from collectors.sources.base import (
    CpuTimes,
    EnumerationError,
    MemoryInfo,
    NameResolutionError,
    ProcessSource,
    ProcessStats,
    StatReadError,
    VirtualMemoryInfo,
)


class FakeProcessSource(ProcessSource):
    """In-memory process source; a missing or None field makes that read fail"""

    def __init__(self, processes=None, fail_listing=False):
        self.processes = processes or {}
        self.fail_listing = fail_listing
        self.calls = []
        self.passes_ended = 0

    def list_pids(self):
        if self.fail_listing:
            raise EnumerationError("listing failed")
        return list(self.processes)

    def _read(self, pid, key, error_cls=StatReadError):
        self.calls.append((key, pid))
        value = self.processes[pid].get(key)
        if value is None:
            raise error_cls(f"pid {pid}: {key} unavailable")
        return value

    def name(self, pid):
        return self._read(pid, "name", NameResolutionError)

    def memory_info(self, pid):
        return self._read(pid, "memory")

    def virtual_memory_info(self, pid):
        return self._read(pid, "virtual")

    def process_stats(self, pid):
        return self._read(pid, "stats")

    def cpu_times(self, pid):
        return self._read(pid, "times")

    def end_pass(self):
        self.passes_ended += 1


def full_process(name, memory=0.0, user=0.0, system=0.0, virtual=None):
    """Process entry for which every read succeeds"""
    return {
        "name": name,
        "memory": MemoryInfo(resident=memory),
        "virtual": virtual or VirtualMemoryInfo(),
        "stats": ProcessStats(status="running"),
        "times": CpuTimes(user=user, system=system),
    }


@pytest.fixture
def fake_source():
    """Factory for FakeProcessSource instances"""
    return FakeProcessSource


@pytest.fixture
def process_entry():
    return full_process


@pytest.fixture
def nginx_source():
    """Two nginx processes: one partially readable, one with only memory"""
    return FakeProcessSource({
        1: {
            "name": "nginx",
            "memory": MemoryInfo(resident=100),
            "stats": ProcessStats(status="sleeping"),
            "times": CpuTimes(user=1, system=2),
        },
        2: {
            "name": "nginx",
            "memory": MemoryInfo(resident=50),
        },
    })
