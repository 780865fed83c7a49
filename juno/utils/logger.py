"""
Logging configuration and utilities for Juno Outreach.

Console output is colored and compact; optional log files hold one JSON
object per line. Components log through a JunoLogger, which attaches the
current campaign and lead ids to every record.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from functools import partialmethod
from pathlib import Path
from typing import Any, Dict, Optional

NOISY_LOGGERS = ("aiohttp", "asyncio")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with context fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class ColoredConsoleFormatter(logging.Formatter):
    """Short colored lines for the terminal; the lead id is shown when set."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        fields = getattr(record, "extra_fields", None) or {}
        lead = f" [lead {fields['lead_id']}]" if "lead_id" in fields else ""

        line = f"{color}{clock} {record.levelname[0]} {record.name.rsplit('.', 1)[-1]}{lead}: {record.getMessage()}{self.RESET}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class JunoLogger:
    """Wraps a stdlib logger and adds persistent context fields to each record."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.context: Dict[str, Any] = {}

    def set_context(self, **fields) -> None:
        self.context.update(fields)

    def log(self, level: int, message: str, **fields) -> None:
        merged = {**self.context, **fields}
        self.logger.log(level, message, extra={"extra_fields": merged} if merged else None)

    debug = partialmethod(log, logging.DEBUG)
    info = partialmethod(log, logging.INFO)
    warning = partialmethod(log, logging.WARNING)
    error = partialmethod(log, logging.ERROR)
    critical = partialmethod(log, logging.CRITICAL)

    def lead_started(self, lead_id: str, email: str) -> None:
        self.set_context(lead_id=lead_id)
        self.debug(f"Analyzing lead {email or '(no email)'}")

    def lead_completed(self, lead_id: str, status: str) -> None:
        self.debug(f"Lead {lead_id} -> {status}")
        self.context.pop("lead_id", None)

    def batch_started(self, batch_id: str, lead_count: int) -> None:
        self.set_context(batch_id=batch_id)
        self.info(f"Campaign started: {lead_count} leads to analyze")

    def batch_completed(self, batch_id: str, processed: int, errors: int) -> None:
        self.info(f"Campaign finished: {processed} analyzed, {errors} failed")
        self.context.pop("batch_id", None)


class ProgressLogger:
    """Logs each quarter of a long operation once, then a final summary."""

    MILESTONES = (25, 50, 75, 100)

    def __init__(self, logger: JunoLogger, total: int, operation: str):
        self.logger = logger
        self.total = total
        self.operation = operation
        self.done = 0
        self.started = datetime.now()
        self._next = 0

    def _elapsed(self) -> float:
        return (datetime.now() - self.started).total_seconds()

    def update(self, increment: int = 1, message: Optional[str] = None) -> None:
        self.done += increment
        if self.total <= 0 or self._next >= len(self.MILESTONES):
            return

        percent = self.done * 100 / self.total
        milestone = self.MILESTONES[self._next]
        if percent < milestone:
            return
        # Skip milestones passed in the same step
        while self._next < len(self.MILESTONES) and percent >= self.MILESTONES[self._next]:
            milestone = self.MILESTONES[self._next]
            self._next += 1

        suffix = f" - {message}" if message else ""
        self.logger.info(
            f"{self.operation}: {milestone}% ({self.done}/{self.total}){suffix}",
            progress_percentage=milestone,
            items_processed=self.done,
            total_items=self.total,
            elapsed_seconds=round(self._elapsed(), 2),
        )

    def complete(self, message: Optional[str] = None) -> None:
        suffix = f" - {message}" if message else ""
        self.logger.info(
            f"{self.operation} done: {self.done}/{self.total}{suffix}",
            total_processed=self.done,
            total_time_seconds=round(self._elapsed(), 2),
        )


def _json_file_handler(path: Path, max_mb: int, backups: int, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_mb * 1024 * 1024, backupCount=backups, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter())
    return handler


def setup_logging(config: Optional[Any] = None) -> None:
    """
    Configure the root logger from the application config.

    Replaces existing root handlers with a colored stdout handler and, when
    ``log_to_file`` is set, rotating ``app.log`` and ``errors.log`` files
    under ``{data_dir}/logs``.
    """
    if config is None:
        from ..config import get_config
        config = get_config()

    level = logging.getLevelName(str(config.log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(ColoredConsoleFormatter())
    root.addHandler(console)

    if config.log_to_file:
        log_dir = Path(config.data_dir) / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        root.addHandler(_json_file_handler(log_dir / "app.log", 10, 5, level))
        root.addHandler(_json_file_handler(log_dir / "errors.log", 5, 3, logging.ERROR))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured (level=%s, files=%s)", config.log_level, config.log_to_file)


def get_logger(name: str) -> JunoLogger:
    return JunoLogger(name)


def get_progress_logger(logger: JunoLogger, total: int, operation: str) -> ProgressLogger:
    """Progress logger for a campaign of ``total`` leads."""
    return ProgressLogger(logger, total, operation)
