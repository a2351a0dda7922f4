"""Metrics sources: where raw process and system counters come from."""

import os
import time
from abc import ABC, abstractmethod

import psutil

from proctop.models import ZERO_TICKS, CpuTicks, ProcessDetail

DEFAULT_HERTZ = 100


class TerminationError(Exception):
    """Sending a termination signal to a process failed."""

    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"cannot terminate PID {pid}: {reason}")
        self.pid = pid
        self.reason = reason


class MetricsSource(ABC):
    """
    Interface to the operating system's process and counter data.

    Per-process reads may fail because the process exited between enumeration
    and the read; those return None. Global reads raise OSError when the
    underlying counters are unavailable.
    """

    @abstractmethod
    def list_process_ids(self) -> list[int]:
        """Return the current pids in enumeration order, or [] if unreadable."""

    @abstractmethod
    def read_process_detail(self, pid: int) -> ProcessDetail | None:
        """Return the detail of a process, or None if it no longer exists."""

    @abstractmethod
    def read_global_cpu_ticks(self) -> list[int]:
        """Return the system-wide CPU tick counters; idle is at index 3."""

    @abstractmethod
    def read_memory_totals(self) -> tuple[int, int]:
        """Return (total_kb, free_kb) of physical memory."""

    @abstractmethod
    def read_uptime_seconds(self) -> int:
        """Return whole seconds since boot."""

    @abstractmethod
    def tick_rate(self) -> int:
        """Return clock ticks per second."""

    @abstractmethod
    def terminate(self, pid: int) -> None:
        """Ask a process to terminate. Raises TerminationError on failure."""


def _clock_ticks() -> int:
    try:
        hertz = os.sysconf("SC_CLK_TCK")
    except (AttributeError, ValueError, OSError):
        return DEFAULT_HERTZ
    return hertz if hertz > 0 else DEFAULT_HERTZ


class PsutilMetricsSource(MetricsSource):
    """
    MetricsSource backed by psutil.

    psutil reports CPU times in seconds; they are converted back to clock
    ticks so the accounting works on the same units the kernel exposes.
    Fields the caller may not read (AccessDenied) are zero-filled rather than
    dropping the whole process.
    """

    _ATTRS = ["name", "username", "memory_info", "cpu_times", "create_time", "io_counters"]

    def __init__(self) -> None:
        self._hertz = _clock_ticks()
        self._boot_time = psutil.boot_time()

    def tick_rate(self) -> int:
        return self._hertz

    def list_process_ids(self) -> list[int]:
        try:
            return psutil.pids()
        except OSError:
            return []

    def read_process_detail(self, pid: int) -> ProcessDetail | None:
        try:
            proc = psutil.Process(pid)
            with proc.oneshot():
                info = proc.as_dict(attrs=self._ATTRS, ad_value=None)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return None

        mem_info = info.get("memory_info")
        io = info.get("io_counters")
        return ProcessDetail(
            pid=pid,
            name=info.get("name") or "",
            user=info.get("username") or "",
            memory_rss=mem_info.rss if mem_info else 0,
            ticks=self._ticks(info.get("cpu_times"), info.get("create_time")),
            read_bytes=io.read_bytes if io else 0,
            write_bytes=io.write_bytes if io else 0,
        )

    def _ticks(self, cpu_times, create_time: float | None) -> CpuTicks:
        if cpu_times is None:
            return ZERO_TICKS
        hz = self._hertz
        started = max(0.0, (create_time or self._boot_time) - self._boot_time)
        return CpuTicks(
            utime=round(cpu_times.user * hz),
            stime=round(cpu_times.system * hz),
            cutime=round(cpu_times.children_user * hz),
            cstime=round(cpu_times.children_system * hz),
            starttime=round(started * hz),
            # Only Linux exposes delayacct_blkio_ticks (as 'iowait')
            iowait=round(getattr(cpu_times, "iowait", 0.0) * hz),
        )

    def read_global_cpu_ticks(self) -> list[int]:
        times = psutil.cpu_times()
        return [round(value * self._hertz) for value in times]

    def read_memory_totals(self) -> tuple[int, int]:
        mem = psutil.virtual_memory()
        return mem.total // 1024, mem.free // 1024

    def read_uptime_seconds(self) -> int:
        return int(time.time() - self._boot_time)

    def terminate(self, pid: int) -> None:
        try:
            psutil.Process(pid).terminate()
        except psutil.NoSuchProcess as e:
            raise TerminationError(pid, "no such process") from e
        except psutil.AccessDenied as e:
            raise TerminationError(pid, "permission denied") from e
