"""Append-only operator log of high CPU warnings and periodic stats."""

from pathlib import Path

import structlog

from proctop.models import AlertEvent, StatRecord

log = structlog.get_logger(__name__)

RULE = "-" * 95
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_warning(event: AlertEvent) -> str:
    """Render an alert as a Warning block."""
    ts = event.timestamp.strftime(TIMESTAMP_FORMAT)
    return (
        f"Warning!\n{RULE}\n"
        f"{ts} -> CPU Usage TOO HIGH ({event.cpu_percent:.2f}%) "
        f"| process: {event.name} | PID:{event.pid}\n"
        f"{RULE}\n\n"
    )


def format_stat(record: StatRecord) -> str:
    """Render a summary as a Stat block."""
    ts = record.timestamp.strftime(TIMESTAMP_FORMAT)
    return (
        f"Stat\n{RULE}\n"
        f"{ts} -> Total CPU Usage: {record.cpu_percent:.2f}%, "
        f"Total Processes: {record.process_count}, "
        f"Total Memory Usage: {record.memory_percent:.2f}%\n"
        f"{RULE}\n\n"
    )


class RecordLog:
    """
    Best-effort writer for the operator log file.

    The file is opened for every record so it can be rotated or removed
    externally. Write failures are reported once to the diagnostic log and
    otherwise ignored; the dashboard keeps running. The first error is kept
    in `first_error` so it can be shown once the terminal is released.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.first_error: str | None = None
        self._failed = False

    @property
    def failed(self) -> bool:
        """Whether a write has failed since the last successful one."""
        return self._failed

    def append(self, text: str) -> bool:
        """Append one record block. Returns False if it could not be written."""
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            if not self._failed:
                log.error("record_log_write_failed", path=str(self.path), error=str(e))
            if self.first_error is None:
                self.first_error = str(e)
            self._failed = True
            return False
        self._failed = False
        return True

    def warning(self, event: AlertEvent) -> bool:
        return self.append(format_warning(event))

    def stat(self, record: StatRecord) -> bool:
        return self.append(format_stat(record))
