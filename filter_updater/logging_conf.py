"""Logging configuration built around structlog JSON logging.

Besides ``updater.log`` and ``error.log``, every event bound to a
``filter_id`` is also appended to ``filters/<id>.log`` so the refresh
history of one list can be read on its own.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

import structlog

from .config import ConfigLocator

_CONFIGURED_DIR: Path | None = None


class FilterLogHandler(logging.Handler):
    """Append records carrying a ``filter_id`` to that filter's own log file."""

    def __init__(self, directory: str, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.directory = Path(directory)

    def emit(self, record: logging.LogRecord) -> None:
        event = record.msg if isinstance(record.msg, dict) else {}
        filter_id = event.get("filter_id")
        if filter_id is None:
            return
        try:
            line = self.format(record)
            self.directory.mkdir(parents=True, exist_ok=True)
            with (self.directory / f"{filter_id}.log").open("a", encoding="utf-8") as stream:
                stream.write(line + "\n")
        except Exception:  # noqa: BLE001
            self.handleError(record)


def configure_logging(
    verbose: bool = False,
    log_dir: Path | None = None,
    console: bool = True,
) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger.

    Handlers are rebuilt only when ``log_dir`` differs from the last call.
    """

    global _CONFIGURED_DIR
    log_dir = Path(log_dir) if log_dir is not None else ConfigLocator().logs_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path(log_dir, "error").touch(exist_ok=True)
    log_path(log_dir, "updater").touch(exist_ok=True)

    if _CONFIGURED_DIR != log_dir:
        level = "DEBUG" if verbose else "INFO"
        handlers = {
            "updater_file": {
                "class": "logging.FileHandler",
                "level": "INFO",
                "filename": str(log_path(log_dir, "updater")),
                "formatter": "plain",
            },
            "error_file": {
                "class": "logging.FileHandler",
                "level": "ERROR",
                "filename": str(log_path(log_dir, "error")),
                "formatter": "plain",
            },
            "filter_file": {
                "class": "filter_updater.logging_conf.FilterLogHandler",
                "level": "INFO",
                "directory": str(log_dir / "filters"),
                "formatter": "plain",
            },
        }
        if console:
            handlers["console"] = {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "plain",
            }
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": handlers,
                "loggers": {
                    "filter_updater": {
                        "handlers": sorted(handlers),
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        # Forward structlog events to stdlib; JSON rendering happens at handler level
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _CONFIGURED_DIR = log_dir
    return structlog.get_logger("filter_updater")


def log_path(log_dir: Path, kind: str = "updater") -> Path:
    """Return the path of the ``updater`` or ``error`` log file."""

    return log_dir / f"{kind}.log"


def filter_log_path(log_dir: Path, filter_id: int) -> Path:
    return log_dir / "filters" / f"{filter_id}.log"


def available_filter_logs(log_dir: Path) -> list[int]:
    """Ids of filters that have a log file, in ascending order."""

    directory = log_dir / "filters"
    if not directory.exists():
        return []
    return sorted(int(path.stem) for path in directory.glob("*.log") if path.stem.isdigit())


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


__all__ = [
    "FilterLogHandler",
    "available_filter_logs",
    "configure_logging",
    "filter_log_path",
    "log_path",
    "tail_log",
]
