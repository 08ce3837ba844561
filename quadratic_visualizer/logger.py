"""Per-session interaction log (JSONL on disk, CSV for download)."""

from __future__ import annotations

import csv
import dataclasses
import io
import json
import logging
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config

log = logging.getLogger(__name__)

_FALLBACK_BOUNDS = {"min": -10.0, "max": 10.0, "step": 0.1}
_VIEWPORT_COLUMNS = {
    "x_min": "viewport_xrange_min",
    "x_max": "viewport_xrange_max",
    "y_min": "viewport_yrange_min",
    "y_max": "viewport_yrange_max",
    "grid_enabled": "grid_enabled",
}


@dataclasses.dataclass
class _SessionClock:
    seq: int = 0
    last_ms: Optional[int] = None

    def tick(self) -> Dict[str, Any]:
        now_ms = int(time.time() * 1000)
        elapsed = 0 if self.last_ms is None else max(now_ms - self.last_ms, 0)
        self.seq += 1
        self.last_ms = now_ms
        return {"seq": self.seq, "elapsed_time_ms": elapsed}


@dataclasses.dataclass
class _Throttle:
    last_write: float = float("-inf")
    pending: Optional[Dict[str, Any]] = None
    timer: Optional[threading.Timer] = None


_CLOCKS: Dict[str, _SessionClock] = {}
_THROTTLES: Dict[str, _Throttle] = {}
_LOCK = threading.Lock()


def normalize_param_value(param: str, value: Any) -> float:
    """Clamp to the slider bounds and snap to the slider step; junk becomes the default."""
    bounds = config.PARAM_BOUNDS.get(param, _FALLBACK_BOUNDS)
    default = float(config.DEFAULT_PARAMS.get(param, 0.0))
    try:
        num = float(value)
    except (TypeError, ValueError):
        num = default
    if num != num:
        num = default
    clamped = min(max(num, bounds["min"]), bounds["max"])
    step = bounds.get("step") or 0.1
    snapped = round(clamped / step) * step
    # Trim float noise such as 1.3000000000000003 and fold -0.0 into 0.0.
    return float(f"{snapped:.12g}") + 0.0


def normalize_params(raw: Optional[Dict[str, Any]]) -> Dict[str, float]:
    raw = raw or {}
    return {name: normalize_param_value(name, raw.get(name, default)) for name, default in config.DEFAULT_PARAMS.items()}


def safe_session_id(session_id: Optional[str]) -> str:
    if isinstance(session_id, str) and session_id.isalnum():
        return session_id
    return "unknown"


def next_seq_and_elapsed(session_id: str) -> Dict[str, Any]:
    with _LOCK:
        stamp = _CLOCKS.setdefault(session_id, _SessionClock()).tick()
    stamp["t_server_iso"] = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return stamp


def build_record(
    session_id: str,
    *,
    event: str,
    params: Optional[Dict[str, float]] = None,
    viewport: Optional[Dict[str, Any]] = None,
    source: str = "system",
    extras: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    safe_id = safe_session_id(session_id)
    record: Dict[str, Any] = dict(
        schema_version=config.SCHEMA_VERSION,
        session_id=safe_id,
        event=event,
        function_type=config.FUNCTION_TYPE,
        source=source,
        mode=config.APP_MODE,
    )
    record.update(next_seq_and_elapsed(safe_id))
    if params:
        for name in ("a", "b", "c"):
            record[name] = params.get(name)
    if viewport:
        for key, column in _VIEWPORT_COLUMNS.items():
            record[column] = viewport.get(key)
    record.update(extras or {})
    return record


def session_log_path(session_id: str) -> Path:
    return config.DATA_DIR / f"session_{safe_session_id(session_id)}.jsonl"


def append_jsonl(path: Path, record: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    line = json.dumps(record, ensure_ascii=False)
    with open(path, "a", encoding="utf-8") as out:
        out.write(line + "\n")


def write_record(record: Dict[str, Any]) -> None:
    if not config.SESSION_LOG_ENABLED:
        return
    try:
        append_jsonl(session_log_path(record.get("session_id")), record)
    except OSError as exc:
        log.warning("Could not write session log record %s: %s", record.get("event"), exc)


def _flush_pending(session_id: str) -> None:
    with _LOCK:
        throttle = _THROTTLES.get(session_id)
        if throttle is None:
            return
        pending, throttle.pending, throttle.timer = throttle.pending, None, None
        throttle.last_write = time.monotonic()
    if pending:
        write_record(pending)


def write_throttled(record: Dict[str, Any]) -> bool:
    """Write at most one record per rate-limit window; the latest record wins.

    Returns True when the record was written now, False when it was deferred.
    """
    session_id = record.get("session_id", "unknown")
    window = config.LOG_RATE_LIMIT_SECONDS
    with _LOCK:
        throttle = _THROTTLES.setdefault(session_id, _Throttle())
        now = time.monotonic()
        waited = now - throttle.last_write
        write_now = waited >= window
        if write_now:
            throttle.last_write = now
            throttle.pending = None
            if throttle.timer is not None:
                throttle.timer.cancel()
                throttle.timer = None
        else:
            throttle.pending = record
            if throttle.timer is None:
                throttle.timer = threading.Timer(max(window - waited, 0.01), _flush_pending, args=(session_id,))
                throttle.timer.daemon = True
                throttle.timer.start()
    if write_now:
        write_record(record)
    return write_now


def read_records(session_id: str) -> List[Dict[str, Any]]:
    path = session_log_path(session_id)
    if not path.exists():
        return []
    records = []
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not line.strip():
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError:
            log.warning("Skipping malformed line %d in %s", lineno, path.name)
    return records


def flatten_record_for_csv(record: Dict[str, Any]) -> Dict[str, Any]:
    return {column: record.get(column) for column in config.SCHEMA_COLUMNS}


def build_csv_content(records: List[Dict[str, Any]]) -> Optional[str]:
    if not records:
        return None
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=config.SCHEMA_COLUMNS)
    writer.writeheader()
    writer.writerows(flatten_record_for_csv(r) for r in records)
    return out.getvalue()


def _short_number(value: Any) -> str:
    if isinstance(value, (int, float)):
        return f"{value:.3g}"
    return "?"


def preview_line(record: Dict[str, Any]) -> str:
    head = f"#{record.get('seq')} {record.get('event', 'event')}"
    if record.get("event") == "param_change":
        return f"#{record.get('seq')} {record.get('param_name')}: {record.get('old_value')} → {record.get('new_value')}"
    if record.get("event") in {"pan", "zoom", "reset_view", "toggle_grid"}:
        xs = (_short_number(record.get("viewport_xrange_min")), _short_number(record.get("viewport_xrange_max")))
        ys = (_short_number(record.get("viewport_yrange_min")), _short_number(record.get("viewport_yrange_max")))
        return f"{head}: x=[{xs[0]}, {xs[1]}] y=[{ys[0]}, {ys[1]}]"
    return head


def append_preview(entries: Any, line: str) -> List[str]:
    items = list(entries) if isinstance(entries, list) else []
    items.append(line)
    return items[-config.PREVIEW_LOG_CAPACITY :]
