#!/usr/bin/env python3
"""
Unit tests for prompt_exporter/display.py - ExporterDisplay

Under pytest stdout is not a TTY, so the plain-text path is exercised.
"""

import os
import sys
import pytest
from datetime import datetime
from unittest.mock import patch

sys.path.insert(0, '.')
from prompt_exporter.display import ExporterDisplay


class TestExporterDisplayInit:

    def test_no_color_env_disables_rich(self):
        with patch.dict(os.environ, {"NO_COLOR": "1"}):
            assert ExporterDisplay()._use_rich is False

    def test_non_tty_disables_rich(self):
        with patch('sys.stdout') as mock_stdout:
            mock_stdout.isatty.return_value = False
            assert ExporterDisplay()._use_rich is False

    def test_tty_enables_rich(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("NO_COLOR", None)
            with patch('sys.stdout') as mock_stdout, \
                    patch('prompt_exporter.display.Console') as mock_console:
                mock_stdout.isatty.return_value = True
                display = ExporterDisplay()
                assert display._use_rich is True
                assert display._console is mock_console.return_value


class TestNotices:

    def test_success(self, capsys):
        ExporterDisplay().success("Exported a.json")
        assert "Exported a.json" in capsys.readouterr().out

    def test_warning(self, capsys):
        ExporterDisplay().warning("Nothing captured")
        assert "Warning: Nothing captured" in capsys.readouterr().out

    def test_error_goes_to_stderr(self, capsys):
        ExporterDisplay().error("Export failed")
        captured = capsys.readouterr()
        assert "Error: Export failed" in captured.err
        assert captured.out == ""


class TestStatus:

    def test_never_exported(self):
        assert ExporterDisplay().status_line() == "Last export: never"

    def test_after_export(self):
        display = ExporterDisplay()
        display.mark_exported(datetime(2026, 1, 9, 10, 30, 5))
        assert display.status_line() == "Last export: 2026-01-09 10:30:05"

    def test_record_summary_plain(self, capsys):
        ExporterDisplay().record_summary(
            {"userSection": {"text": 2, "additionalChatLog": 0, "extension": 1}},
            chat_turns=3,
        )
        out = capsys.readouterr().out
        assert "userSection: text=2 additionalChatLog=0 extension=1" in out
        assert "chatLog: 3 turns" in out


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
