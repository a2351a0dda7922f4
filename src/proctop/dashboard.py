"""The poll cycle driver behind the interactive table."""

import structlog

from proctop.alerts import AlertLedger, StatsLogger
from proctop.config import Config
from proctop.models import AlertEvent, ProcessSample, StatRecord, SystemSample
from proctop.monitor import Cycle, SampleCollector
from proctop.records import RecordLog
from proctop.session import SessionState
from proctop.source import MetricsSource, TerminationError

log = structlog.get_logger(__name__)

EMPTY_CYCLE = Cycle(processes=(), system=SystemSample(0, 0.0, 0.0))


class Dashboard:
    """
    Composes sampling, alerting, stats and cursor handling.

    poll() runs one cycle: collect, re-clamp the session, record alerts and
    stats. Key actions apply to the most recent cycle until the next poll
    replaces it. Nothing here touches the terminal.
    """

    def __init__(
        self,
        source: MetricsSource,
        ledger: AlertLedger,
        stats: StatsLogger,
        records: RecordLog,
        session: SessionState | None = None,
    ) -> None:
        self._collector = SampleCollector(source)
        self._source = source
        self.ledger = ledger
        self.stats = stats
        self.records = records
        self.session = session or SessionState()
        self.cycle = EMPTY_CYCLE
        self.visible_rows = 1

    @classmethod
    def from_config(cls, source: MetricsSource, config: Config) -> "Dashboard":
        return cls(
            source,
            ledger=AlertLedger(
                threshold=config.alerts.cpu_threshold,
                window=config.alerts.window_seconds,
            ),
            stats=StatsLogger(interval=config.stats.interval_seconds),
            records=RecordLog(config.paths.record_log_path),
        )

    @property
    def processes(self) -> tuple[ProcessSample, ...]:
        return self.cycle.processes

    def poll(self) -> tuple[list[AlertEvent], StatRecord | None]:
        """Run one cycle and return the alerts and summary it produced."""
        self.cycle = self._collector.collect()
        self.session = self.session.reconcile(len(self.cycle.processes), self.visible_rows)

        alerts = self.ledger.process_cycle(self.cycle.processes)
        for event in alerts:
            self.records.warning(event)
            log.info("cpu_alert", pid=event.pid, name=event.name, cpu=round(event.cpu_percent, 2))

        stat = self.stats.maybe_emit(self.cycle.system)
        if stat is not None:
            self.records.stat(stat)

        return alerts, stat

    def resize(self, visible_rows: int) -> None:
        """Adapt to a new window height."""
        self.visible_rows = max(1, visible_rows)
        self.session = self.session.reconcile(len(self.processes), self.visible_rows)

    def move_up(self) -> None:
        self.session = self.session.move_up()

    def move_down(self) -> None:
        self.session = self.session.move_down(len(self.processes), self.visible_rows)

    def confirm(self) -> None:
        self.session = self.session.confirm()

    def terminate_selected(self) -> tuple[bool, str]:
        """
        Send a termination request to the selected process.

        Returns:
            Whether the signal was sent, and a message for the operator.
        """
        proc = self.session.selected(self.processes)
        if proc is None:
            return False, "No process selected"
        try:
            self._source.terminate(proc.pid)
        except TerminationError as e:
            log.warning("terminate_failed", pid=e.pid, reason=e.reason)
            return False, f"Error killing process {proc.pid}: {e.reason}"
        log.info("terminate_sent", pid=proc.pid, name=proc.name)
        return True, f"Sent SIGTERM to {proc.name} ({proc.pid})"

    def info_line(self) -> str:
        """The selection summary shown at the bottom of the screen."""
        proc = self.session.selected(self.processes)
        if proc is None:
            return (
                "Selected Process Info: [K] KILL - No process selected"
                "        [ENTER] Select    [Q] Quit"
            )
        return (
            f"Selected Process Info: PID:{proc.pid:<10} Name:{proc.name:<30} "
            f"User:{proc.user:<20}       [K] KILL       [ENTER] Select    [Q] Quit"
        )
