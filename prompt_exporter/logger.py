#!/usr/bin/env python3
"""
Prompt Exporter - Logger

Appends category-tagged lines to:
- Session log (<home>/logs/sessions/<date>-<session>.log)
- Daily rolling log (<home>/logs/<date>.log)

<home> is PROMPT_EXPORTER_HOME (default ~/.prompt-exporter).
DEBUG lines are written only when debug mode is on.
"""

import traceback
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from .config import get_home_dir


class ExporterLogger:
    """Logger for capture and export events."""

    def __init__(self, session_id: str = "unknown", debug: bool = False):
        """
        Initialize logger for one exporter session.

        Args:
            session_id: Session identifier used in log file names and daily log lines
            debug: Write DEBUG lines (record descriptions, tracebacks) when True
        """
        self.log_dir = get_home_dir() / "logs"
        self.session_log_dir = self.log_dir / "sessions"
        self.session_id = session_id
        self.debug = debug

        try:
            self.session_log_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass

    def _get_timestamp(self) -> str:
        """Get timestamp for log entries."""
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def _get_log_date(self) -> str:
        """Get date for log file naming."""
        return datetime.now().strftime("%Y-%m-%d")

    def _sanitize_message(self, message: str) -> str:
        """Sanitize message by replacing newlines."""
        return message.replace("\n", "\\n")

    @property
    def session_log(self) -> Path:
        return self.session_log_dir / f"{self._get_log_date()}-{self.session_id}.log"

    def log_event(self, category: str, message: str) -> None:
        """
        Log an event to the session log and the daily log.

        Args:
            category: Event category (CAPTURE, EXPORT, WARN, ERROR, DEBUG)
            message: Event message
        """
        timestamp = self._get_timestamp()
        log_date = self._get_log_date()
        safe_message = self._sanitize_message(message)

        log_line = f"[{timestamp}] [{category}] {safe_message}"

        session_log = self.session_log
        try:
            with open(session_log, "a", encoding="utf-8", errors="backslashreplace") as f:
                f.write(log_line + "\n")
        except OSError:
            pass

        daily_log = self.log_dir / f"{log_date}.log"
        try:
            with open(daily_log, "a", encoding="utf-8", errors="backslashreplace") as f:
                f.write(f"[{self.session_id}] {log_line}\n")
        except OSError:
            pass

        # Point current.log at the active session
        current_log = self.log_dir / "current.log"
        try:
            if current_log.is_symlink() or current_log.exists():
                current_log.unlink()
            current_log.symlink_to(session_log)
        except OSError:
            pass

    def log_capture(self, message: str) -> None:
        self.log_event("CAPTURE", message)

    def log_export(self, result: str, details: str = "") -> None:
        msg = result
        if details:
            msg = f"{result} - {details}"
        self.log_event("EXPORT", msg)

    def log_warning(self, message: str) -> None:
        self.log_event("WARN", message)

    def log_error(self, message: str, error: Optional[BaseException] = None) -> None:
        """Log an error; the traceback is kept only in debug mode."""
        if error is None:
            self.log_event("ERROR", message)
            return
        self.log_event("ERROR", f"{message}: {type(error).__name__}: {error}")
        if self.debug:
            trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            self.log_event("DEBUG", trace)

    def log_debug(self, message: str) -> None:
        if self.debug:
            self.log_event("DEBUG", message)

    def log_debug_lines(self, lines: Iterable[str]) -> None:
        if self.debug:
            for line in lines:
                self.log_event("DEBUG", line)
