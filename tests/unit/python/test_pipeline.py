#!/usr/bin/env python3
"""
Unit tests for prompt_exporter/pipeline.py - CapturePipeline

Tests for:
- Capture flow: copy, validate, repair, _rawChat projection, store
- Config gates: enabled, autoExport, includeRawData, prettyPrint
- Manual export and user-facing notices
- Host ports: event and interception sources
- End-to-end artifacts
"""

import json
import os
import sys
import pytest
from datetime import datetime, timezone

sys.path.insert(0, '.')
from prompt_exporter.capture_store import CaptureStore
from prompt_exporter.config import ExporterConfig
from prompt_exporter.exporter import ExportErrorKind
from prompt_exporter.pipeline import (
    RAW_CHAT_FIELD,
    CapturePipeline,
    CaptureStatus,
    raw_chat_view,
)
from prompt_exporter.ports import InterceptionPort, PromptReadyPort
from prompt_exporter.safe_copy import CircularRef
from prompt_exporter.sinks import MemorySink
from prompt_exporter.validator import empty_section, validate

CAPTURED_AT = datetime(2026, 1, 9, 10, 30, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("PROMPT_EXPORTER_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("NO_COLOR", raising=False)


def make_pipeline(**config_values):
    sink = MemorySink()
    pipeline = CapturePipeline(
        config=ExporterConfig(**config_values),
        sink=sink,
        clock=lambda: CAPTURED_AT,
    )
    return pipeline, sink


def well_formed_record():
    return {
        "charSection": {"text": [], "additionalChatLog": [], "extension": {}},
        "userSection": {"text": ["hi"], "additionalChatLog": [], "extension": {}},
        "worldSection": {"text": [], "additionalChatLog": [], "extension": {}},
        "chatLog": [{"role": "user", "content": "hi"}],
    }


def only_artifact(sink):
    assert len(sink.artifacts) == 1
    return json.loads(next(iter(sink.artifacts.values())))


class TestRawChatView:

    def test_projects_role_and_content(self):
        chat_log = [{"role": "user", "content": "hi", "extra": 1}]
        assert raw_chat_view(chat_log) == [{"role": "user", "content": "hi"}]

    def test_missing_chat_log_is_empty(self):
        assert raw_chat_view(None) == []
        assert raw_chat_view("nope") == []

    def test_non_mapping_turn(self):
        assert raw_chat_view(["x"]) == [{"role": None, "content": None}]


class TestCapture:

    def test_well_formed_record_captured_without_repair(self):
        pipeline, _ = make_pipeline()
        result = pipeline.handle_prompt_ready(well_formed_record())
        assert result.status == CaptureStatus.CAPTURED
        assert result.ok is True
        assert result.repaired is False
        assert validate(pipeline.store.get()).ok is True

    def test_capture_is_a_copy(self):
        pipeline, _ = make_pipeline()
        source = well_formed_record()
        pipeline.handle_prompt_ready(source)
        stored = pipeline.store.get()
        assert stored is not source
        assert RAW_CHAT_FIELD not in source

    def test_malformed_record_repaired(self):
        pipeline, _ = make_pipeline()
        result = pipeline.handle_prompt_ready({"chatLog": [], "userSection": "bad"})
        assert result.ok is True
        assert result.repaired is True
        assert "userSection" in result.missing
        stored = pipeline.store.get()
        assert stored["userSection"] == empty_section()
        assert validate(stored).ok is True

    def test_cyclic_payload_captured(self):
        pipeline, _ = make_pipeline()
        record = well_formed_record()
        record["userSection"]["extension"]["self"] = record
        assert pipeline.handle_prompt_ready(record).ok is True
        assert pipeline.store.get()["userSection"]["extension"]["self"] == CircularRef()

    def test_disabled_skips_capture(self):
        pipeline, _ = make_pipeline(enabled=False)
        result = pipeline.handle_prompt_ready(well_formed_record())
        assert result.status == CaptureStatus.DISABLED
        assert pipeline.store.get() is None

    def test_none_payload_rejected(self):
        pipeline, _ = make_pipeline()
        assert pipeline.handle_prompt_ready(None).status == CaptureStatus.REJECTED
        assert pipeline.store.get() is None

    def test_non_object_payload_rejected(self):
        pipeline, _ = make_pipeline()
        assert pipeline.handle_prompt_ready(["a"]).status == CaptureStatus.REJECTED

    def test_raw_chat_added_by_default(self):
        pipeline, _ = make_pipeline()
        pipeline.handle_prompt_ready(well_formed_record())
        assert pipeline.store.get()[RAW_CHAT_FIELD] == [{"role": "user", "content": "hi"}]

    def test_raw_chat_omitted_when_disabled(self):
        pipeline, _ = make_pipeline(include_raw_data=False)
        pipeline.handle_prompt_ready(well_formed_record())
        assert RAW_CHAT_FIELD not in pipeline.store.get()

    def test_last_capture_wins(self):
        pipeline, _ = make_pipeline()
        pipeline.handle_prompt_ready({"chatLog": [], "marker": 1})
        pipeline.handle_prompt_ready({"chatLog": [], "marker": 2})
        assert pipeline.store.get()["marker"] == 2

    def test_unexpected_error_reported_not_raised(self, capsys):
        pipeline, _ = make_pipeline()

        def explode(*args, **kwargs):
            raise RuntimeError("store unavailable")

        pipeline.store.put = explode
        result = pipeline.handle_prompt_ready(well_formed_record())
        assert result.status == CaptureStatus.FAILED
        assert "store unavailable" in capsys.readouterr().err

    def test_debug_mode_logs_record_description(self):
        pipeline, _ = make_pipeline(debug_mode=True)
        pipeline.handle_prompt_ready(well_formed_record())
        content = pipeline.logger.session_log.read_text()
        assert "[DEBUG] userSection.text is a list, length 1" in content

    def test_validation_warnings_logged(self):
        pipeline, _ = make_pipeline()
        pipeline.handle_prompt_ready({"chatLog": []})
        content = pipeline.logger.session_log.read_text()
        assert "[WARN] Missing required field: charSection" in content
        assert "[DEBUG]" not in content


class TestExportNow:

    def test_no_capture_warns(self, capsys):
        pipeline, sink = make_pipeline()
        result = pipeline.export_now()
        assert result.error == ExportErrorKind.NO_CAPTURE_AVAILABLE
        assert "Warning:" in capsys.readouterr().out
        assert sink.artifacts == {}

    def test_manual_export(self, capsys):
        pipeline, sink = make_pipeline()
        pipeline.handle_prompt_ready(well_formed_record())
        assert sink.artifacts == {}

        result = pipeline.export_now()
        assert result.ok is True
        assert result.name == "prompt_struct_0_2026-01-09T10-30-00-000Z.json"
        assert result.name in capsys.readouterr().out
        assert pipeline.display.last_export_at is not None

    def test_sink_failure_shown_as_error(self, capsys):
        class BrokenSink:
            def deliver(self, name, payload):
                raise OSError("read-only")

        pipeline = CapturePipeline(sink=BrokenSink(), clock=lambda: CAPTURED_AT)
        pipeline.handle_prompt_ready(well_formed_record())
        result = pipeline.export_now()
        assert result.error == ExportErrorKind.SINK_ERROR
        assert "read-only" in capsys.readouterr().err

    def test_auto_export_after_each_capture(self):
        pipeline, sink = make_pipeline(auto_export=True)
        first = pipeline.handle_prompt_ready(well_formed_record())
        second = pipeline.handle_prompt_ready(well_formed_record())
        assert first.export.ok and second.export.ok
        assert sorted(sink.artifacts) == [
            "prompt_struct_0_2026-01-09T10-30-00-000Z.json",
            "prompt_struct_1_2026-01-09T10-30-00-000Z.json",
        ]

    def test_compact_output(self):
        pipeline, sink = make_pipeline(auto_export=True, pretty_print=False)
        pipeline.handle_prompt_ready({"chatLog": []})
        payload = next(iter(sink.artifacts.values()))
        assert b"\n" not in payload

    def test_default_sink_writes_to_export_dir(self, tmp_path):
        out_dir = tmp_path / "exports"
        pipeline = CapturePipeline(
            config=ExporterConfig(export_dir=str(out_dir), auto_export=True),
            clock=lambda: CAPTURED_AT,
        )
        result = pipeline.handle_prompt_ready(well_formed_record())
        assert (out_dir / result.export.name).exists()


class TestPorts:

    def test_event_port_feeds_pipeline(self):
        pipeline, _ = make_pipeline()
        port = PromptReadyPort()
        pipeline.attach(event_port=port)
        port.publish(well_formed_record())
        assert pipeline.store.get_capture().source == "event"

    def test_interception_port_feeds_pipeline(self):
        pipeline, _ = make_pipeline()
        port = InterceptionPort()
        pipeline.attach(interception_port=port)

        build_prompt = port.wrap(lambda: well_formed_record())
        built = build_prompt()
        assert RAW_CHAT_FIELD not in built
        assert pipeline.store.get_capture().source == "intercept"

    def test_both_ports_last_write_wins(self):
        pipeline, _ = make_pipeline()
        events, intercepts = PromptReadyPort(), InterceptionPort()
        pipeline.attach(event_port=events, interception_port=intercepts)
        intercepts.publish({"chatLog": [], "from": "intercept"})
        events.publish({"chatLog": [], "from": "event"})
        assert pipeline.store.get()["from"] == "event"

    def test_debug_mode_logs_config_and_subscriptions(self):
        pipeline, _ = make_pipeline(debug_mode=True, auto_export=True)
        pipeline.attach(event_port=PromptReadyPort(), interception_port=InterceptionPort())
        content = pipeline.logger.session_log.read_text()
        assert "'autoExport': True" in content
        assert "Subscribed to prompt-ready events (1 listeners)" in content
        assert "Subscribed to prompt-builder interception (1 listeners)" in content

    def test_detach(self):
        pipeline, _ = make_pipeline()
        port = PromptReadyPort()
        pipeline.attach(event_port=port)
        pipeline.detach(event_port=port)
        port.publish(well_formed_record())
        assert pipeline.store.get() is None

    def test_listener_never_raises_into_host(self):
        pipeline, _ = make_pipeline()
        port = PromptReadyPort()
        pipeline.attach(event_port=port)
        port.publish(None)
        port.publish(42)


class TestEndToEnd:

    def test_well_formed_record_exported(self):
        pipeline, sink = make_pipeline()
        capture = pipeline.handle_prompt_ready(well_formed_record())
        assert capture.ok is True
        assert validate(pipeline.store.get()).ok is True

        result = pipeline.export_now()
        assert result.ok is True
        assert only_artifact(sink)["userSection"]["text"] == ["hi"]

    def test_record_missing_all_sections_exported(self):
        pipeline, sink = make_pipeline()
        assert pipeline.handle_prompt_ready({"chatLog": []}).ok is True
        assert pipeline.export_now().ok is True

        artifact = only_artifact(sink)
        assert artifact["charSection"] == {"text": [], "additionalChatLog": [], "extension": {}}

    def test_raw_chat_in_artifact(self):
        pipeline, sink = make_pipeline(include_raw_data=True)
        record = well_formed_record()
        record["chatLog"] = [{"role": "assistant", "content": "hello"}]
        pipeline.handle_prompt_ready(record)
        pipeline.export_now()
        assert only_artifact(sink)["_rawChat"] == [{"role": "assistant", "content": "hello"}]

    def test_special_values_exported(self):
        pipeline, sink = make_pipeline()
        record = well_formed_record()
        record["worldSection"]["extension"] = {"tags": {"a"}, "when": CAPTURED_AT}
        pipeline.handle_prompt_ready(record)
        pipeline.export_now()
        extension = only_artifact(sink)["worldSection"]["extension"]
        assert extension["tags"] == {"__type": "Set", "data": ["a"]}
        assert extension["when"] == {"__type": "Date", "iso": "2026-01-09T10:30:00.000Z"}

    def test_lone_surrogate_in_chat_exported(self):
        pipeline, sink = make_pipeline()
        record = json.loads('{"chatLog": [{"role": "user", "content": "cut emoji \\ud83d"}]}')
        pipeline.handle_prompt_ready(record)

        result = pipeline.export_now()
        assert result.ok is True
        artifact = only_artifact(sink)
        assert artifact["chatLog"][0]["content"] == "cut emoji \ud83d"
        assert artifact["_rawChat"] == [{"role": "user", "content": "cut emoji \ud83d"}]

    def test_non_finite_numbers_exported_as_null(self):
        pipeline, sink = make_pipeline()
        record = well_formed_record()
        record["userSection"]["extension"] = {"score": float("nan"), "limit": float("inf")}
        pipeline.handle_prompt_ready(record)
        assert pipeline.export_now().ok is True

        def reject_constant(name):
            raise ValueError(f"non-standard JSON constant {name}")

        payload = next(iter(sink.artifacts.values()))
        artifact = json.loads(payload, parse_constant=reject_constant)
        assert artifact["userSection"]["extension"] == {"score": None, "limit": None}


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
