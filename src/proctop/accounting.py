"""CPU and memory accounting from raw kernel counters.

Everything here is a pure function of its arguments so the numbers can be
checked without a live system.

Per-process CPU usage is a lifetime average: total ticks consumed divided by
the wall time since the process started. A long-lived process that has only
just started spinning therefore under-reports. Values above 100 are possible
on multi-core machines and are not clamped.
"""

import math
from collections.abc import Sequence

from proctop.models import Bound, CpuTicks

# Index of the idle counter in the global CPU tick vector
IDLE_INDEX = 3


def process_cpu_percent(ticks: CpuTicks, uptime_seconds: float, hertz: int) -> float:
    """
    Average CPU usage of a process over its lifetime.

    Args:
        ticks: The process's tick counters.
        uptime_seconds: Seconds since boot.
        hertz: Clock ticks per second.

    Returns:
        Percentage of one core, or 0.0 when the process has no measurable age.
    """
    if hertz <= 0:
        return 0.0
    elapsed = uptime_seconds - ticks.starttime / hertz
    if elapsed <= 0:
        return 0.0
    return 100.0 * (ticks.total / hertz) / elapsed


def system_cpu_percent(prev: Sequence[int], curr: Sequence[int]) -> float:
    """
    System-wide busy percentage between two global tick snapshots.

    Returns NaN when no ticks elapsed between the snapshots; callers decide
    what to show instead.
    """
    if len(prev) <= IDLE_INDEX or len(curr) <= IDLE_INDEX:
        return math.nan
    idle_delta = curr[IDLE_INDEX] - prev[IDLE_INDEX]
    total_delta = sum(curr) - sum(prev)
    if total_delta == 0:
        return math.nan
    return 100.0 * (1.0 - idle_delta / total_delta)


def classify(ticks: CpuTicks) -> Bound:
    """Label a process I/O bound when its block I/O delay exceeds its CPU time."""
    if ticks.iowait > ticks.own:
        return Bound.IO
    return Bound.CPU


def format_cpu_time(total_ticks: int, hertz: int) -> str:
    """Format a tick count as minutes:seconds.hundredths, e.g. ``1:05.25``."""
    if hertz <= 0:
        return "0:00.00"
    minutes, seconds = divmod(total_ticks // hertz, 60)
    display = seconds + (total_ticks % hertz) / hertz
    return f"{minutes}:{display:05.2f}"


def memory_used_percent(total_kb: int, free_kb: int) -> float:
    """Share of physical memory not reported free."""
    if total_kb <= 0:
        return 0.0
    return (total_kb - free_kb) / total_kb * 100.0
