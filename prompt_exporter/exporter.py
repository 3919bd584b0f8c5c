#!/usr/bin/env python3
"""
Prompt Exporter - Exporter

Serializes the current capture to a JSON artifact and hands it to a sink.

Artifact names look like:
    prompt_struct_0_2026-01-09T10-30-00-123Z.json
where the number is the process-wide export sequence and the timestamp is
the capture time (UTC) with ':' and '.' replaced by '-'.

Every failure comes back as an ExportResult; export() does not raise.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from .capture_store import CaptureStore
from .safe_copy import encode_node
from .sinks import ArtifactSink


class ExportState(Enum):
    IDLE = "idle"
    EXPORTING = "exporting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ExportErrorKind(Enum):
    NO_CAPTURE_AVAILABLE = "no_capture_available"
    SERIALIZATION_ERROR = "serialization_error"
    SINK_ERROR = "sink_error"


@dataclass(frozen=True)
class ExportArtifact:
    """An exported snapshot. Immutable once produced."""
    name: str
    created_at: datetime
    payload: bytes
    location: str


@dataclass(frozen=True)
class ExportResult:
    ok: bool
    artifact: Optional[ExportArtifact] = None
    error: Optional[ExportErrorKind] = None
    message: str = ""

    @property
    def name(self) -> Optional[str]:
        return self.artifact.name if self.artifact else None


def format_capture_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, made safe for file names."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def artifact_name(sequence: int, captured_at: datetime) -> str:
    return f"prompt_struct_{sequence}_{format_capture_timestamp(captured_at)}.json"


def serialize_record(record: Any, pretty_print: bool = True) -> bytes:
    """
    JSON-encode a safe_copy() snapshot as UTF-8 bytes.

    Non-ASCII text is written as-is. Strings holding lone surrogates cannot
    be UTF-8 encoded, so such records are written with \\uXXXX escapes
    instead. NaN and infinities are rejected with ValueError.
    """
    try:
        return _dump(record, pretty_print, ensure_ascii=False).encode("utf-8")
    except UnicodeEncodeError:
        return _dump(record, pretty_print, ensure_ascii=True).encode("utf-8")


def _dump(record: Any, pretty_print: bool, ensure_ascii: bool) -> str:
    if pretty_print:
        return json.dumps(
            record, indent=2, ensure_ascii=ensure_ascii,
            allow_nan=False, default=encode_node
        )
    return json.dumps(
        record, separators=(",", ":"), ensure_ascii=ensure_ascii,
        allow_nan=False, default=encode_node
    )


class Exporter:
    """Exports the current capture of a CaptureStore to a sink."""

    def __init__(
        self,
        store: CaptureStore,
        sink: ArtifactSink,
        pretty_print: bool = True
    ) -> None:
        """
        Initialize exporter for a capture store.

        Args:
            store: Store holding the capture to export and the sequence counter
            sink: Destination for serialized artifacts
            pretty_print: 2-space indented JSON when True, compact otherwise
        """
        self._store = store
        self._sink = sink
        self._pretty_print = pretty_print
        self._state = ExportState.IDLE

    @property
    def state(self) -> ExportState:
        return self._state

    def export(self) -> ExportResult:
        """Export the stored capture. Terminal in one step; no retry."""
        self._state = ExportState.EXPORTING

        capture = self._store.get_capture()
        if capture is None:
            return self._fail(
                ExportErrorKind.NO_CAPTURE_AVAILABLE,
                "No prompt structure captured yet, send a message first"
            )

        name = artifact_name(self._store.next_export_sequence(), capture.captured_at)

        try:
            payload = serialize_record(capture.record, self._pretty_print)
        except (TypeError, ValueError, RecursionError) as e:
            return self._fail(ExportErrorKind.SERIALIZATION_ERROR, f"Export failed: {e}")

        try:
            location = self._sink.deliver(name, payload)
        except Exception as e:
            return self._fail(ExportErrorKind.SINK_ERROR, f"Export failed: {e}")

        self._state = ExportState.SUCCEEDED
        artifact = ExportArtifact(
            name=name,
            created_at=datetime.now(timezone.utc),
            payload=payload,
            location=location,
        )
        return ExportResult(ok=True, artifact=artifact, message=f"Prompt structure exported: {name}")

    def _fail(self, kind: ExportErrorKind, message: str) -> ExportResult:
        self._state = ExportState.FAILED
        return ExportResult(ok=False, error=kind, message=message)
