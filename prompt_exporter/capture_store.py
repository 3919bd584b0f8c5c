#!/usr/bin/env python3
"""Single-slot holder for the most recent capture, plus the export counter."""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass(frozen=True)
class Capture:
    """A stored prompt record with when and where it came from."""
    record: Any
    captured_at: datetime
    source: str = "event"


class CaptureStore:
    """Holds at most one capture. Last write wins. Thread-safe."""

    def __init__(self) -> None:
        self._capture: Optional[Capture] = None
        self._export_count = 0
        self._lock = threading.Lock()

    def put(
        self,
        record: Any,
        captured_at: Optional[datetime] = None,
        source: str = "event"
    ) -> Capture:
        """Replace the current capture unconditionally."""
        if captured_at is None:
            captured_at = datetime.now(timezone.utc)
        capture = Capture(record=record, captured_at=captured_at, source=source)
        with self._lock:
            self._capture = capture
        return capture

    def get(self) -> Optional[Any]:
        """Current record, or None before the first capture."""
        with self._lock:
            return self._capture.record if self._capture else None

    def get_capture(self) -> Optional[Capture]:
        with self._lock:
            return self._capture

    def next_export_sequence(self) -> int:
        """Return the next export number (0, 1, 2, ...). Never reused."""
        with self._lock:
            sequence = self._export_count
            self._export_count += 1
            return sequence
