"""Diagnostic logging.

The terminal belongs to the dashboard, so diagnostics go to a rotating
JSON-lines file through structlog and stdlib logging. The operator-facing
Warning/Stat log is separate, see proctop.records.
"""

import logging
import logging.handlers

import structlog

from proctop.config import Config

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
    structlog.processors.add_log_level,
    structlog.processors.format_exc_info,
]


def configure(config: Config) -> None:
    """Route structlog events to the diagnostics file named in config."""
    path = config.paths.diagnostics_log_path
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.handlers.clear()

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=config.paths.log_max_bytes,
            backupCount=config.paths.log_backup_count,
            encoding="utf-8",
        )
    except OSError:
        # Nowhere to write diagnostics; drop them rather than scribble on the TUI
        handler = logging.NullHandler()

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(),
            ],
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    root.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

