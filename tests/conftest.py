"""Shared test fixtures for proctop."""

from datetime import datetime

import pytest

from proctop.config import Config
from proctop.models import Bound, CpuTicks, ProcessDetail, ProcessSample
from proctop.source import MetricsSource, TerminationError


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def fixed_wall_clock() -> datetime:
    return datetime(2024, 5, 1, 12, 30, 0)


def make_detail(
    pid: int,
    name: str = "proc",
    user: str = "alice",
    memory_rss: int = 10 * 1024 * 1024,
    utime: int = 0,
    stime: int = 0,
    cutime: int = 0,
    cstime: int = 0,
    starttime: int = 0,
    iowait: int = 0,
    read_bytes: int = 0,
    write_bytes: int = 0,
) -> ProcessDetail:
    """Create a ProcessDetail for testing."""
    return ProcessDetail(
        pid=pid,
        name=name,
        user=user,
        memory_rss=memory_rss,
        ticks=CpuTicks(utime, stime, cutime, cstime, starttime, iowait),
        read_bytes=read_bytes,
        write_bytes=write_bytes,
    )


def make_sample(pid: int, name: str = "proc", cpu_percent: float = 0.0) -> ProcessSample:
    """Create a ProcessSample for testing."""
    return ProcessSample(
        pid=pid,
        name=name,
        user="alice",
        memory_mb=1.0,
        cpu_percent=cpu_percent,
        read_bytes=0,
        write_bytes=0,
        cpu_time="0:00.00",
        bound=Bound.CPU,
    )


class FakeSource(MetricsSource):
    """
    Scripted MetricsSource.

    pids listed in `vanished` are enumerated but their detail read returns
    None, like a process exiting mid-cycle. Global tick vectors are served
    from `global_ticks` in order, repeating the last one.
    """

    def __init__(
        self,
        details: list[ProcessDetail] | None = None,
        vanished: set[int] | None = None,
        global_ticks: list[list[int]] | None = None,
        memory: tuple[int, int] = (8_000_000, 2_000_000),
        uptime: int = 1000,
        hertz: int = 100,
    ) -> None:
        self.details = {d.pid: d for d in details or []}
        self.vanished = vanished or set()
        self.global_ticks = global_ticks or [[100, 50, 30, 200], [110, 60, 40, 220]]
        self.memory = memory
        self.uptime = uptime
        self.hertz = hertz
        self.terminated: list[int] = []
        self.deny_terminate: set[int] = set()
        self.fail_globals = False
        self._tick_reads = 0

    def set_details(self, details: list[ProcessDetail]) -> None:
        self.details = {d.pid: d for d in details}

    def list_process_ids(self) -> list[int]:
        return sorted(set(self.details) | self.vanished)

    def read_process_detail(self, pid: int) -> ProcessDetail | None:
        if pid in self.vanished:
            return None
        return self.details.get(pid)

    def read_global_cpu_ticks(self) -> list[int]:
        if self.fail_globals:
            raise OSError("counters unavailable")
        index = min(self._tick_reads, len(self.global_ticks) - 1)
        self._tick_reads += 1
        return self.global_ticks[index]

    def read_memory_totals(self) -> tuple[int, int]:
        if self.fail_globals:
            raise OSError("meminfo unavailable")
        return self.memory

    def read_uptime_seconds(self) -> int:
        return self.uptime

    def tick_rate(self) -> int:
        return self.hertz

    def terminate(self, pid: int) -> None:
        if pid in self.deny_terminate:
            raise TerminationError(pid, "permission denied")
        if pid not in self.details:
            raise TerminationError(pid, "no such process")
        self.terminated.append(pid)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config(tmp_path) -> Config:
    """Defaults with every file redirected into tmp_path."""
    cfg = Config()
    cfg.paths.record_log = str(tmp_path / "log.txt")
    cfg.paths.diagnostics_log = str(tmp_path / "proctop.log")
    return cfg
