"""Data models for proctop."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Bound(Enum):
    """Coarse classification of what a process spends its time waiting on."""

    CPU = "CPU Bound"
    IO = "I/O Bound"


@dataclass(slots=True, frozen=True)
class CpuTicks:
    """Raw per-process scheduler counters, all in clock ticks."""

    utime: int
    stime: int
    cutime: int
    cstime: int
    starttime: int  # Ticks after boot at which the process started
    iowait: int  # Block I/O delay accounting

    @property
    def own(self) -> int:
        """User + system ticks of the process itself (children excluded)."""
        return self.utime + self.stime

    @property
    def total(self) -> int:
        """User + system ticks including waited-for children."""
        return self.utime + self.stime + self.cutime + self.cstime


ZERO_TICKS = CpuTicks(0, 0, 0, 0, 0, 0)


@dataclass(slots=True, frozen=True)
class ProcessDetail:
    """What a metrics source knows about one process at read time."""

    pid: int
    name: str
    user: str
    memory_rss: int  # Bytes
    ticks: CpuTicks
    read_bytes: int
    write_bytes: int


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable per-cycle metrics of a process."""

    pid: int
    name: str
    user: str
    memory_mb: float
    cpu_percent: float  # Lifetime average, 0.0 - 100.0 * core_count, never clamped
    read_bytes: int
    write_bytes: int
    cpu_time: str  # M:SS.ss
    bound: Bound


@dataclass(slots=True, frozen=True)
class SystemSample:
    """System-wide metrics for one cycle."""

    process_count: int
    memory_percent: float
    cpu_percent: float


@dataclass(slots=True, frozen=True)
class AlertEvent:
    """A process crossed the high CPU threshold."""

    timestamp: datetime
    cpu_percent: float
    name: str
    pid: int


@dataclass(slots=True, frozen=True)
class StatRecord:
    """Periodic system-wide summary."""

    timestamp: datetime
    cpu_percent: float
    process_count: int
    memory_percent: float
