"""High CPU alert de-duplication and periodic stats cadence.

Both trackers compare monotonic clock readings so wall-clock adjustments
cannot stretch or collapse a window. Wall-clock time is only used to stamp
the emitted records.
"""

import time
from collections.abc import Callable
from datetime import datetime

from proctop.models import AlertEvent, ProcessSample, StatRecord, SystemSample


class AlertLedger:
    """
    Remembers which pids have already alerted in the current window.

    The whole set is forgotten once the window has elapsed, whether or not
    anything alerted in it, so a process still above the threshold alerts
    again in the next window.
    """

    def __init__(
        self,
        threshold: float = 50.0,
        window: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.threshold = threshold
        self.window = window
        self._clock = clock
        self._wall_clock = wall_clock
        self._alerted: set[int] = set()
        self._window_start = clock()

    @property
    def alerted(self) -> frozenset[int]:
        return frozenset(self._alerted)

    def expire(self) -> bool:
        """Clear the ledger if the window has elapsed. Returns True if cleared."""
        now = self._clock()
        if now - self._window_start >= self.window:
            self._alerted.clear()
            self._window_start = now
            return True
        return False

    def record_if_new(self, pid: int, cpu_percent: float, name: str = "") -> AlertEvent | None:
        """Return an alert if the process is over the threshold and has not alerted yet."""
        if cpu_percent <= self.threshold or pid in self._alerted:
            return None
        self._alerted.add(pid)
        return AlertEvent(
            timestamp=self._wall_clock(),
            cpu_percent=cpu_percent,
            name=name,
            pid=pid,
        )

    def process_cycle(self, processes: tuple[ProcessSample, ...]) -> list[AlertEvent]:
        """Expire the window if due, then collect this cycle's new alerts."""
        self.expire()
        events = []
        for proc in processes:
            event = self.record_if_new(proc.pid, proc.cpu_percent, proc.name)
            if event is not None:
                events.append(event)
        return events


class StatsLogger:
    """Decides when the next system summary is due."""

    def __init__(
        self,
        interval: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self._wall_clock = wall_clock
        self._last_emit: float | None = None

    def maybe_emit(self, system: SystemSample) -> StatRecord | None:
        """Return a summary if none was emitted yet or the interval has elapsed."""
        now = self._clock()
        if self._last_emit is not None and now - self._last_emit < self.interval:
            return None
        self._last_emit = now
        return StatRecord(
            timestamp=self._wall_clock(),
            cpu_percent=system.cpu_percent,
            process_count=system.process_count,
            memory_percent=system.memory_percent,
        )
