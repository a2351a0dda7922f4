"""Sampling engine for proctop."""

import math
from dataclasses import dataclass

import structlog

from proctop.accounting import (
    classify,
    format_cpu_time,
    memory_used_percent,
    process_cpu_percent,
    system_cpu_percent,
)
from proctop.models import ProcessDetail, ProcessSample, SystemSample
from proctop.source import MetricsSource

log = structlog.get_logger(__name__)


@dataclass(slots=True, frozen=True)
class Cycle:
    """Everything measured in one poll cycle."""

    processes: tuple[ProcessSample, ...]
    system: SystemSample


class SampleCollector:
    """
    Runs one poll cycle against a MetricsSource.

    The process set is rebuilt from scratch every cycle. Processes that exit
    between enumeration and their detail read are skipped for that cycle.
    Global counter failures degrade to the previous system CPU value (or 0.0)
    instead of aborting the poll.
    """

    def __init__(self, source: MetricsSource) -> None:
        """
        Initialize the SampleCollector.

        Args:
            source: Where process and system counters are read from.
        """
        self._source = source
        self._last_cpu_percent = 0.0

    @property
    def source(self) -> MetricsSource:
        return self._source

    def collect(self) -> Cycle:
        """Measure every process and the system once."""
        ticks_before = self._global_ticks()

        pids = self._source.list_process_ids()
        hertz = self._source.tick_rate()
        uptime = self._uptime()

        processes: list[ProcessSample] = []
        for pid in pids:
            if pid <= 0:
                continue
            detail = self._source.read_process_detail(pid)
            if detail is None:
                continue
            processes.append(build_sample(detail, uptime, hertz))

        ticks_after = self._global_ticks()

        skipped = len(pids) - len(processes)
        if skipped:
            log.debug("processes_skipped", count=skipped)

        return Cycle(
            processes=tuple(processes),
            system=SystemSample(
                process_count=len(pids),
                memory_percent=self._memory_percent(),
                cpu_percent=self._cpu_percent(ticks_before, ticks_after),
            ),
        )

    def _global_ticks(self) -> list[int] | None:
        try:
            return self._source.read_global_cpu_ticks()
        except OSError as e:
            log.warning("global_cpu_ticks_unavailable", error=str(e))
            return None

    def _uptime(self) -> int:
        try:
            return self._source.read_uptime_seconds()
        except OSError as e:
            log.warning("uptime_unavailable", error=str(e))
            return 0

    def _memory_percent(self) -> float:
        try:
            total_kb, free_kb = self._source.read_memory_totals()
        except OSError as e:
            log.warning("memory_totals_unavailable", error=str(e))
            return 0.0
        return memory_used_percent(total_kb, free_kb)

    def _cpu_percent(self, before: list[int] | None, after: list[int] | None) -> float:
        if before is None or after is None:
            return self._last_cpu_percent
        percent = system_cpu_percent(before, after)
        if math.isnan(percent):
            # No ticks elapsed inside the cycle; keep showing the last value
            return self._last_cpu_percent
        self._last_cpu_percent = percent
        return percent


def build_sample(detail: ProcessDetail, uptime: float, hertz: int) -> ProcessSample:
    """Derive the displayed metrics of one process from its raw detail."""
    return ProcessSample(
        pid=detail.pid,
        name=detail.name,
        user=detail.user,
        memory_mb=detail.memory_rss / (1024 * 1024),
        cpu_percent=process_cpu_percent(detail.ticks, uptime, hertz),
        read_bytes=detail.read_bytes,
        write_bytes=detail.write_bytes,
        cpu_time=format_cpu_time(detail.ticks.own, hertz),
        bound=classify(detail.ticks),
    )
