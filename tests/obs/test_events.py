"""Test that EventEmitter writes NDJSON events to <log_dir>/<run_id>/events.ndjson."""

import json

import pytest

from chunkflow.obs.events import EventEmitter

pytestmark = pytest.mark.unit


def read_events(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestEventEmitter:
    def test_events_land_in_run_directory(self, tmp_path):
        emitter = EventEmitter(run_id="run-123", phase="chunk", component="coordinator", log_dir=str(tmp_path))

        with emitter:
            emitter.start(counts={"items": 2})
            emitter.tick("item-1", "created", strategy="FallbackSentenceStrategy")
            emitter.tick("item-2", "skipped")
            emitter.complete({"created": 1, "skipped": 1})

        assert emitter.events_path == tmp_path / "run-123" / "events.ndjson"
        events = read_events(emitter.events_path)
        assert [e["op"] for e in events] == [
            "coordinator.start",
            "coordinator.tick",
            "coordinator.tick",
            "coordinator.complete",
        ]
        assert [e["status"] for e in events] == ["START", "OK", "OK", "END"]

    def test_event_schema(self, tmp_path):
        with EventEmitter("run-schema", "chunk", "coordinator", log_dir=str(tmp_path)) as emitter:
            emitter.tick("item-1", "created", strategy="ShortPostClaimStrategy")

        (event,) = read_events(emitter.events_path)
        assert event["level"] == "INFO"
        assert event["stage"] == "chunk"
        assert event["rid"] == "run-schema"
        assert event["item_id"] == "item-1"
        assert event["result"] == "created"
        assert event["strategy"] == "ShortPostClaimStrategy"
        assert isinstance(event["pid"], int)
        assert event["ts"].endswith("Z")
        # None-valued fields are omitted
        assert "reason" not in event
        assert "counts" not in event

    def test_complete_carries_duration_and_counts(self, tmp_path):
        with EventEmitter("run-done", "chunk", "coordinator", log_dir=str(tmp_path)) as emitter:
            emitter.complete({"created": 3, "errors": 0})

        (event,) = read_events(emitter.events_path)
        assert event["counts"] == {"created": 3, "errors": 0}
        assert event["duration_ms"] >= 0

    def test_error_and_warning_levels(self, tmp_path):
        with EventEmitter("run-err", "chunk", "coordinator", log_dir=str(tmp_path)) as emitter:
            emitter.warning("slow item", item_id="item-7")
            emitter.error("database is locked", item_id="item-8")

        warning, error = read_events(emitter.events_path)
        assert warning["level"] == "WARNING"
        assert warning["reason"] == "slow item"
        assert error["level"] == "ERROR"
        assert error["status"] == "FAIL"
        assert error["item_id"] == "item-8"

    def test_events_outside_context_are_dropped(self, tmp_path):
        emitter = EventEmitter("run-closed", "chunk", "coordinator", log_dir=str(tmp_path))
        emitter.start()

        assert not emitter.events_path.exists()

    def test_reopening_appends(self, tmp_path):
        for _ in range(2):
            with EventEmitter("run-append", "chunk", "coordinator", log_dir=str(tmp_path)) as emitter:
                emitter.start()

        assert len(read_events(emitter.events_path)) == 2

    def test_default_log_dir_follows_workdir(self, tmp_path, monkeypatch):
        from chunkflow.core import config as config_module

        monkeypatch.setattr(config_module.SETTINGS, "CHUNKFLOW_WORKDIR", str(tmp_path / "work"))

        emitter = EventEmitter("run-default", "chunk", "coordinator")

        assert emitter.events_path == tmp_path / "work" / "logs" / "run-default" / "events.ndjson"
