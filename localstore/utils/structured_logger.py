"""
Structured event logging for storage mutations.
Provides JSON-formatted logs with context and metadata alongside the standard logger.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("localstore", log_dir=Path("logs"))
        logger.debug("file_written", path="docs/a.txt", size=5, kind="text")
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output through the standard logger
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            json_log_path = log_dir / f"localstore_{timestamp}.jsonl"
            self._json_file = open(json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        for key, value in context.items():
            if key not in ("level", "timestamp"):
                parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        """Write structured log entry to JSON file."""
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, TypeError) as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _emit(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(level, self._format_message(event, **context))
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        """Log debug event."""
        self._emit(logging.DEBUG, event, **context)

    def warning(self, event: str, **context) -> None:
        """Log warning event."""
        self._emit(logging.WARNING, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()


class StorageEventLogger:
    """Specialized logger for storage mutation events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def file_written(self, path: str, kind: str, size: int):
        """Log a completed file write. ``size`` counts characters for text."""
        self.logger.debug("file_written", path=path, kind=kind, size=size)

    def file_deleted(self, path: str):
        self.logger.debug("file_deleted", path=path)

    def folder_created(self, path: str, replaced: bool):
        self.logger.debug("folder_created", path=path, replaced=replaced)

    def folder_deleted(self, path: str):
        self.logger.debug("folder_deleted", path=path)

    def folder_missing(self, path: str, missing_segment: str):
        """Log a path resolution that stopped at an absent folder."""
        self.logger.debug(
            "folder_missing", path=path, missing_segment=missing_segment
        )

    def create_failed(self, path: str, error: str):
        """Log a create/replace call whose backend failure was reported as None."""
        self.logger.warning("create_failed", path=path, error=error)


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, StorageEventLogger]:
    """
    Create the structured loggers.

    Returns:
        Tuple of (base_logger, storage_event_logger)
    """
    base = StructuredLogger("localstore", log_dir=log_dir, enable_json=enable_json)
    return base, StorageEventLogger(base)
