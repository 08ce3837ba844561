import csv
import io
import json

import pytest

from quadratic_visualizer import config, logger


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DATA_DIR", tmp_path)
    monkeypatch.setattr(config, "SESSION_LOG_ENABLED", True)
    return tmp_path


def test_normalize_param_value_clamps_and_quantizes():
    assert logger.normalize_param_value("a", 1.26) == 1.3
    assert logger.normalize_param_value("a", 99) == 5.0
    assert logger.normalize_param_value("c", -1000) == -50.0
    assert logger.normalize_param_value("b", "oops") == 0.0
    assert logger.normalize_param_value("a", float("nan")) == 1.0
    assert logger.normalize_param_value("b", -0.01) == 0.0


def test_normalize_params_fills_defaults():
    assert logger.normalize_params({"b": 2.04}) == {"a": 1.0, "b": 2.0, "c": 0.0}
    assert logger.normalize_params(None) == {"a": 1.0, "b": 0.0, "c": 0.0}


def test_safe_session_id():
    assert logger.safe_session_id("abc123") == "abc123"
    assert logger.safe_session_id("../etc/passwd") == "unknown"
    assert logger.safe_session_id(None) == "unknown"


def test_build_record_includes_viewport_and_sequence():
    viewport = {"x_min": -11, "x_max": 9, "y_min": -10, "y_max": 10, "grid_enabled": False}
    first = logger.build_record("seqtest", event="pan", params={"a": 1, "b": 0, "c": -4}, viewport=viewport, source="user")
    second = logger.build_record("seqtest", event="zoom")
    assert first["event"] == "pan"
    assert first["source"] == "user"
    assert (first["a"], first["c"]) == (1, -4)
    assert first["viewport_xrange_min"] == -11
    assert first["grid_enabled"] is False
    assert second["seq"] == first["seq"] + 1
    assert second["elapsed_time_ms"] >= 0
    assert "viewport_xrange_min" not in second


def test_write_and_read_records(log_dir):
    record = logger.build_record("rw1", event="session_start")
    logger.write_record(record)
    logger.write_record(logger.build_record("rw1", event="reset_view"))
    path = logger.session_log_path("rw1")
    assert path.parent == log_dir
    with path.open("a", encoding="utf-8") as fh:
        fh.write("{not json\n")
    records = logger.read_records("rw1")
    assert [r["event"] for r in records] == ["session_start", "reset_view"]
    assert json.loads(path.read_text(encoding="utf-8").splitlines()[0])["session_id"] == "rw1"


def test_disabled_session_log_writes_nothing(log_dir, monkeypatch):
    monkeypatch.setattr(config, "SESSION_LOG_ENABLED", False)
    logger.write_record(logger.build_record("off1", event="session_start"))
    assert logger.read_records("off1") == []


def test_throttled_writes_keep_first_and_defer_rest(log_dir, monkeypatch):
    monkeypatch.setattr(config, "LOG_RATE_LIMIT_SECONDS", 60)
    assert logger.write_throttled(logger.build_record("thr1", event="pan")) is True
    assert logger.write_throttled(logger.build_record("thr1", event="zoom")) is False
    assert logger.write_throttled(logger.build_record("thr1", event="pan")) is False
    try:
        assert [r["event"] for r in logger.read_records("thr1")] == ["pan"]
        throttle = logger._THROTTLES["thr1"]
        assert throttle.pending["event"] == "pan"
        assert throttle.timer is not None
    finally:
        logger._THROTTLES["thr1"].timer.cancel()
    logger._flush_pending("thr1")
    assert [r["event"] for r in logger.read_records("thr1")] == ["pan", "pan"]


def test_csv_export_uses_schema_columns():
    records = [
        logger.build_record("csv1", event="param_change", params={"a": 2, "b": 0, "c": 1}, extras={"ignored": 1}),
    ]
    content = logger.build_csv_content(records)
    rows = list(csv.DictReader(io.StringIO(content)))
    assert list(rows[0].keys()) == list(config.SCHEMA_COLUMNS)
    assert rows[0]["event"] == "param_change"
    assert rows[0]["a"] == "2"
    assert logger.build_csv_content([]) is None


def test_preview_lines():
    change = {"seq": 3, "event": "param_change", "param_name": "a", "old_value": 1, "new_value": 2}
    assert logger.preview_line(change) == "#3 a: 1 → 2"
    pan = {"seq": 4, "event": "pan", "viewport_xrange_min": -11.0, "viewport_xrange_max": 9.0}
    assert logger.preview_line(pan) == "#4 pan: x=[-11, 9] y=[?, ?]"
    assert logger.preview_line({"seq": 5, "event": "quiz_check"}) == "#5 quiz_check"


def test_append_preview_keeps_latest_entries():
    entries = None
    for i in range(8):
        entries = logger.append_preview(entries, str(i))
    assert entries == ["3", "4", "5", "6", "7"]
