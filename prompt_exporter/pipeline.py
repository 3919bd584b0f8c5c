#!/usr/bin/env python3
"""
Prompt Exporter - Capture Pipeline

Inbound "prompt ready" records go through:

    safe_copy -> validate -> (repair) -> _rawChat projection -> store.put()

and, with auto export on, straight into the exporter. export_now() is the
manual trigger. Neither entry point raises into the host.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, List, Optional

from .capture_store import CaptureStore
from .config import ExporterConfig
from .display import ExporterDisplay
from .exporter import Exporter, ExportErrorKind, ExportResult
from .inspector import describe_record
from .logger import ExporterLogger
from .ports import InterceptionPort, PromptReadyPort
from .repairer import repair
from .safe_copy import safe_copy
from .sinks import ArtifactSink, DirectorySink
from .validator import validate

RAW_CHAT_FIELD = "_rawChat"

SOURCE_EVENT = "event"
SOURCE_INTERCEPT = "intercept"


class CaptureStatus(Enum):
    CAPTURED = "captured"
    DISABLED = "disabled"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class CaptureResult:
    status: CaptureStatus
    repaired: bool = False
    missing: List[str] = field(default_factory=list)
    export: Optional[ExportResult] = None

    @property
    def ok(self) -> bool:
        return self.status == CaptureStatus.CAPTURED


def raw_chat_view(chat_log: Any) -> List[dict]:
    """{role, content} projection of a chat log; non-list yields []."""
    if not isinstance(chat_log, list):
        return []
    view = []
    for entry in chat_log:
        if isinstance(entry, dict):
            view.append({"role": entry.get("role"), "content": entry.get("content")})
        else:
            view.append({"role": None, "content": None})
    return view


class CapturePipeline:
    """Captures prompt records from a host and exports them on request."""

    def __init__(
        self,
        config: Optional[ExporterConfig] = None,
        store: Optional[CaptureStore] = None,
        sink: Optional[ArtifactSink] = None,
        logger: Optional[ExporterLogger] = None,
        display: Optional[ExporterDisplay] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize the pipeline. Every collaborator is optional.

        Args:
            config: Exporter options; defaults when omitted
            store: Holder for the latest capture
            sink: Artifact destination; a DirectorySink on config.export_dir by default
            logger: File logger; debug lines follow config.debug_mode
            display: Terminal notices shown to the user
            clock: Returns the capture time stamped on each stored record
        """
        self.config = config or ExporterConfig()
        self.store = store or CaptureStore()
        self.logger = logger or ExporterLogger(debug=self.config.debug_mode)
        self.display = display or ExporterDisplay()
        self.exporter = Exporter(
            self.store,
            sink or DirectorySink(self.config.export_dir),
            pretty_print=self.config.pretty_print,
        )
        self._clock = clock
        self.logger.log_debug(f"Config: {self.config.to_dict()}")

    # --- Host wiring ---

    def attach(
        self,
        event_port: Optional[PromptReadyPort] = None,
        interception_port: Optional[InterceptionPort] = None
    ) -> None:
        """Subscribe to the given host ports. Both may be active at once."""
        if event_port is not None:
            event_port.subscribe(self._on_event)
            self.logger.log_debug(
                f"Subscribed to prompt-ready events ({event_port.listener_count} listeners)"
            )
        if interception_port is not None:
            interception_port.subscribe(self._on_intercept)
            self.logger.log_debug(
                f"Subscribed to prompt-builder interception ({interception_port.listener_count} listeners)"
            )

    def detach(
        self,
        event_port: Optional[PromptReadyPort] = None,
        interception_port: Optional[InterceptionPort] = None
    ) -> None:
        if event_port is not None:
            event_port.unsubscribe(self._on_event)
        if interception_port is not None:
            interception_port.unsubscribe(self._on_intercept)

    def _on_event(self, record: Any) -> None:
        self.handle_prompt_ready(record, source=SOURCE_EVENT)

    def _on_intercept(self, record: Any) -> None:
        self.handle_prompt_ready(record, source=SOURCE_INTERCEPT)

    # --- Capture ---

    def handle_prompt_ready(self, payload: Any, source: str = SOURCE_EVENT) -> CaptureResult:
        """Capture one inbound record. Never raises."""
        try:
            return self._capture(payload, source)
        except Exception as e:
            self.logger.log_error("Processing prompt structure failed", e)
            self.display.error(f"Processing prompt failed: {e}")
            return CaptureResult(status=CaptureStatus.FAILED)

    def _capture(self, payload: Any, source: str) -> CaptureResult:
        if not self.config.enabled:
            self.logger.log_debug("Exporter disabled, prompt not processed")
            return CaptureResult(status=CaptureStatus.DISABLED)

        if payload is None:
            self.logger.log_warning(f"Received empty prompt structure ({source})")
            return CaptureResult(status=CaptureStatus.REJECTED)

        self.logger.log_capture(f"Prompt structure received ({source})")

        record = safe_copy(payload)
        if not isinstance(record, dict):
            self.logger.log_warning(
                f"Prompt structure is not an object ({type(record).__name__}), ignored"
            )
            return CaptureResult(status=CaptureStatus.REJECTED)

        self.logger.log_debug_lines(describe_record(record))

        result = CaptureResult(status=CaptureStatus.CAPTURED)
        validation = validate(record)
        for detail in validation.details:
            self.logger.log_warning(detail)
        if not validation.ok:
            self.logger.log_warning("Prompt structure validation failed, repairing")
            repair(record)
            result.repaired = True
            result.missing = list(validation.missing)

        if self.config.include_raw_data:
            record[RAW_CHAT_FIELD] = raw_chat_view(record.get("chatLog"))

        self.store.put(record, captured_at=self._clock(), source=source)
        self.logger.log_capture("Saved latest prompt structure")

        if self.config.auto_export:
            self.logger.log_debug("Auto export enabled, exporting prompt structure")
            result.export = self.export_now()

        return result

    # --- Export ---

    def export_now(self) -> ExportResult:
        """Manual "export now" trigger. Reports the outcome to the user."""
        self.logger.log_debug("Export requested")
        result = self.exporter.export()

        if result.ok:
            self.logger.log_export("SUCCESS", f"{result.name} -> {result.artifact.location}")
            self.display.success(result.message)
            self.display.mark_exported()
        elif result.error == ExportErrorKind.NO_CAPTURE_AVAILABLE:
            self.logger.log_warning("No prompt structure available to export")
            self.display.warning(result.message)
        else:
            self.logger.log_export("FAILED", f"{result.error.value}: {result.message}")
            self.display.error(result.message)

        return result
