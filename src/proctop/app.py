"""proctop - Main Textual application."""

import sys

import structlog
from rich.text import Text
from textual.app import App, ComposeResult
from textual.widgets import Static

from proctop import logs
from proctop.config import Config
from proctop.dashboard import Dashboard
from proctop.models import ProcessSample, SystemSample
from proctop.records import RecordLog
from proctop.session import SessionState
from proctop.source import MetricsSource, PsutilMetricsSource

log = structlog.get_logger(__name__)

COLUMNS = [
    ("PID", 8),
    ("Name", 24),
    ("User", 14),
    ("Memory(RAM)", 14),
    ("CPU Usage", 11),
    ("Read Bytes", 16),
    ("Write Bytes", 16),
    ("CPU Time", 11),
    ("Bound", 10),
]


def format_row(proc: ProcessSample) -> str:
    """Format one process as a fixed-width table row."""
    cells = [
        str(proc.pid),
        proc.name,
        proc.user,
        f"{proc.memory_mb:.2f} MB",
        f"{proc.cpu_percent:.2f}%",
        str(proc.read_bytes),
        str(proc.write_bytes),
        proc.cpu_time,
        proc.bound.value,
    ]
    parts = []
    for cell, (_, width) in zip(cells, COLUMNS):
        # Keep a separating space even when a value fills its column
        parts.append(cell[: width - 1].ljust(width))
    return " ".join(parts).rstrip()


def format_header() -> str:
    """Column titles aligned with format_row()."""
    return " ".join(title.ljust(width) for title, width in COLUMNS).rstrip()


def format_summary(system: SystemSample) -> str:
    """System totals shown above the table."""
    return (
        f"Total number of processes: {system.process_count}\n"
        f"Memory usage: {system.memory_percent:.2f}%    CPU usage: {system.cpu_percent:.2f}%"
    )


class HeaderStats(Static):
    """Header widget showing system-wide totals."""

    DEFAULT_CSS = """
    HeaderStats {
        height: 2;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__("Loading...", *args, **kwargs)

    def update_stats(self, system: SystemSample) -> None:
        """Update the statistics from a system sample."""
        self.update(format_summary(system))


class ProcessGrid(Static):
    """The visible slice of the process table, with the cursor row reversed."""

    DEFAULT_CSS = """
    ProcessGrid {
        height: 1fr;
    }
    """

    @property
    def visible_rows(self) -> int:
        return max(1, self.size.height)

    def show(self, processes: tuple[ProcessSample, ...], session: SessionState) -> None:
        """Draw the rows the session scroll window covers."""
        lines = []
        for index in session.visible(processes, self.visible_rows):
            style = "reverse" if index == session.highlight_index else ""
            lines.append(Text(format_row(processes[index]), style=style))
        self.update(Text("\n", no_wrap=True, overflow="crop").join(lines))


class ProctopApp(App):
    """Main proctop application."""

    TITLE = "proctop"
    SUB_TITLE = "Process Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #table-header {
        height: 1;
        text-style: bold;
        background: $primary;
    }

    #info-line {
        dock: bottom;
        height: 1;
        text-style: reverse bold;
    }
    """

    BINDINGS = [
        ("up", "move_up", "Up"),
        ("down", "move_down", "Down"),
        ("enter", "confirm", "Select"),
        ("k", "terminate", "Kill"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, config: Config | None = None, source: MetricsSource | None = None) -> None:
        """Initialize the ProctopApp."""
        super().__init__()
        self._config = config or Config()
        self._dashboard = Dashboard.from_config(source or PsutilMetricsSource(), self._config)

    @property
    def dashboard(self) -> Dashboard:
        return self._dashboard

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield Static(format_header(), id="table-header")
        yield ProcessGrid(id="process-grid")
        yield Static(Text(self._dashboard.info_line()), id="info-line")

    def on_mount(self) -> None:
        """Run the first cycle and start the poll timer."""
        log.info("session_started", poll_interval=self._config.monitor.poll_interval)
        self.call_after_refresh(self._run_cycle)
        self.set_interval(self._config.monitor.poll_interval, self._run_cycle)

    def on_resize(self) -> None:
        self.call_after_refresh(self._sync_rows)

    def _sync_rows(self) -> None:
        grid = self.query_one("#process-grid", ProcessGrid)
        self._dashboard.resize(grid.visible_rows)
        self._render()

    def _run_cycle(self) -> None:
        """Collect a new cycle and redraw."""
        grid = self.query_one("#process-grid", ProcessGrid)
        self._dashboard.visible_rows = grid.visible_rows
        try:
            self._dashboard.poll()
        except Exception:
            # Keep the refresh cadence; the previous cycle stays on screen
            log.exception("cycle_failed")
        self._render()

    def _render(self) -> None:
        dashboard = self._dashboard
        self.query_one("#header-stats", HeaderStats).update_stats(dashboard.cycle.system)
        self.query_one("#process-grid", ProcessGrid).show(dashboard.processes, dashboard.session)
        self.query_one("#info-line", Static).update(Text(dashboard.info_line()))

    def action_move_up(self) -> None:
        self._dashboard.move_up()
        self._render()

    def action_move_down(self) -> None:
        self._dashboard.move_down()
        self._render()

    def action_confirm(self) -> None:
        self._dashboard.confirm()
        self._render()

    def action_terminate(self) -> None:
        """Handle kill action on the selected process."""
        ok, message = self._dashboard.terminate_selected()
        self.notify(message, severity="information" if ok else "error")

    def action_quit(self) -> None:
        """Handle quit action."""
        log.info("session_stopped")
        self.exit()


def report_record_log_failure(records: RecordLog) -> None:
    """Tell the operator on stderr if the record log could not be written."""
    if records.first_error is not None:
        print(
            f"proctop: could not write {records.path}: {records.first_error}",
            file=sys.stderr,
        )


def main() -> None:
    """Entry point for proctop application."""
    try:
        config = Config.load()
    except ValueError as e:
        print(f"proctop: {e}", file=sys.stderr)
        sys.exit(2)
    logs.configure(config)
    app = ProctopApp(config)
    app.run()
    report_record_log_failure(app.dashboard.records)
    sys.exit(app.return_code or 0)


if __name__ == "__main__":
    main()
