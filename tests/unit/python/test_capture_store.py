#!/usr/bin/env python3
"""Unit tests for prompt_exporter/capture_store.py"""

import sys
import threading
import pytest
from datetime import datetime, timezone

sys.path.insert(0, '.')
from prompt_exporter.capture_store import Capture, CaptureStore


class TestCaptureStore:

    def test_empty_store_returns_none(self):
        store = CaptureStore()
        assert store.get() is None
        assert store.get_capture() is None

    def test_put_then_get(self):
        store = CaptureStore()
        record = {"chatLog": []}
        store.put(record)
        assert store.get() is record

    def test_last_write_wins(self):
        store = CaptureStore()
        store.put({"n": 1})
        store.put({"n": 2})
        assert store.get() == {"n": 2}

    def test_capture_keeps_time_and_source(self):
        store = CaptureStore()
        when = datetime(2026, 1, 9, 10, 30, tzinfo=timezone.utc)
        capture = store.put({"n": 1}, captured_at=when, source="intercept")
        assert capture == Capture(record={"n": 1}, captured_at=when, source="intercept")
        assert store.get_capture() is capture

    def test_default_capture_time_is_utc(self):
        store = CaptureStore()
        capture = store.put({})
        assert capture.captured_at.tzinfo == timezone.utc


class TestExportSequence:

    def test_starts_at_zero_and_increases(self):
        store = CaptureStore()
        assert [store.next_export_sequence() for _ in range(5)] == [0, 1, 2, 3, 4]

    def test_not_reset_by_new_capture(self):
        store = CaptureStore()
        store.next_export_sequence()
        store.put({"n": 1})
        assert store.next_export_sequence() == 1

    def test_unique_across_threads(self):
        store = CaptureStore()
        results = []
        lock = threading.Lock()

        def worker():
            for _ in range(200):
                value = store.next_export_sequence()
                with lock:
                    results.append(value)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results) == list(range(800))


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
