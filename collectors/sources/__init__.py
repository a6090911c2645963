"""Process sources for the process collector"""
from .base import (
    CpuTimes,
    EnumerationError,
    MemoryInfo,
    NameResolutionError,
    ProcessSource,
    ProcessSourceError,
    ProcessStats,
    ReadResult,
    StatReadError,
    VirtualMemoryInfo,
)
from .linux import LinuxProcessSource

__all__ = [
    "CpuTimes",
    "EnumerationError",
    "LinuxProcessSource",
    "MemoryInfo",
    "NameResolutionError",
    "ProcessSource",
    "ProcessSourceError",
    "ProcessStats",
    "ReadResult",
    "StatReadError",
    "VirtualMemoryInfo",
]
