from __future__ import annotations

import json
import logging
import os
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional

# ------------------------------
# Run state shared by the CLI, the engine and the /progress endpoint
# ------------------------------

PROGRESS_LOCK = threading.Lock()

_HERE = Path(__file__).resolve().parent


def _state_file_path() -> Path:
    override = os.environ.get("PROGRESS_STATE_FILE", "").strip()
    return Path(override) if override else _HERE / "logs" / "progress_state.json"


STATE_FILE = _state_file_path()
STATE_FILE_TMP = STATE_FILE.parent / f"{STATE_FILE.name}.tmp"
_LAST_STATE_MTIME: float = 0.0


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("solver.attempt_log")
    if logger.handlers:
        return logger
    target = _HERE / "logs" / "engine_runs.log"
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target, encoding="utf-8")
    except OSError:
        # without a log file the attempt log is silently off
        return logger
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


ATTEMPT_LOGGER = _init_logger()


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    try:
        return None if seconds is None else f"{float(seconds):.2f}s"
    except (TypeError, ValueError):
        return None


def _emit_log(event: str, **fields: Any) -> None:
    if not ATTEMPT_LOGGER.handlers:
        return
    tail = " ".join(f"{k}={v}" for k, v in fields.items() if v not in (None, ""))
    try:
        if tail:
            ATTEMPT_LOGGER.info("%s | %s", event, tail)
        else:
            ATTEMPT_LOGGER.info("%s", event)
    except Exception:
        # a broken log handler never reaches the search
        pass


def log_attempt_detail(event: str, **fields: Any) -> None:
    """Append a free-form ``event | key=value`` line to the attempt log."""
    _emit_log(event, **fields)


def _fresh_state(run_id: int = 0) -> Dict[str, Any]:
    return {
        "status": "Idle",          # Idle | Solving | Solved | Partial | No block | Error
        "block": "",               # index of the block being searched
        "threshold": "",           # current min_path_len
        "round": 0,                # search round inside the current block
        "blocks_found": 0,
        "pieces_used": 0,          # real slices consumed by completed blocks
        "piece_count": 0,          # slices in the inventory at the start
        "coverage_pct": 0.0,       # pieces_used / piece_count
        "added_count": 0,          # hypothesised slices across completed blocks
        "elapsed_start": None,
        "elapsed": 0.0,
        "message": "",
        "done": False,
        "ok": None,
        "result_url": "",
        "run_id": run_id,
    }


PROGRESS: Dict[str, Any] = _fresh_state()

# timing bookkeeping for the attempt log only; never persisted
LOG_STATE: Dict[str, Any] = {"run_start": None, "block": "", "block_start": None, "threshold": ""}


def _now() -> float:
    return time.time()


# ------------------------------
# Persistence (lets a web worker read a run driven elsewhere)
# ------------------------------

def _persist_locked() -> None:
    global _LAST_STATE_MTIME
    try:
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        STATE_FILE_TMP.write_text(json.dumps(PROGRESS, ensure_ascii=False, separators=(",", ":")), encoding="utf-8")
        os.replace(STATE_FILE_TMP, STATE_FILE)
        _LAST_STATE_MTIME = STATE_FILE.stat().st_mtime
    except OSError:
        _LAST_STATE_MTIME = _now()
    except (TypeError, ValueError):
        # unserialisable value slipped in; keep the in-memory state
        pass


def _load_persisted_locked(force: bool = False) -> None:
    global _LAST_STATE_MTIME
    try:
        mtime = STATE_FILE.stat().st_mtime
    except OSError:
        return
    if mtime <= _LAST_STATE_MTIME and not force:
        return
    try:
        data = json.loads(STATE_FILE.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return
    if isinstance(data, dict):
        PROGRESS.update({k: data[k] for k in PROGRESS if k in data})
        _LAST_STATE_MTIME = mtime


def _update(**fields: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS.update(fields)
        _persist_locked()


# ------------------------------
# Attempt-log transitions
# ------------------------------

def _log_block_transition_locked(new_block: str) -> None:
    previous = LOG_STATE["block"] or ""
    if new_block == previous:
        return
    now = _now()
    started = LOG_STATE["block_start"]
    if previous and started:
        _emit_log("Block search finished", block=previous, duration=_fmt_seconds(max(0.0, now - float(started))))
    LOG_STATE.update(block=new_block, block_start=now, threshold="")
    if new_block:
        _emit_log("Block search started", block=new_block)


def _log_threshold_transition_locked(new_threshold: str) -> None:
    previous = LOG_STATE["threshold"] or ""
    if not new_threshold or new_threshold == previous:
        LOG_STATE["threshold"] = new_threshold
        return
    LOG_STATE["threshold"] = new_threshold
    block = LOG_STATE["block"] or ""
    if previous:
        _emit_log("Threshold lowered", block=block, previous=previous, threshold=new_threshold)
    else:
        _emit_log("Threshold set", block=block, threshold=new_threshold)


# ------------------------------
# Helpers
# ------------------------------

def _fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m" if hours else f"{minutes}m {secs}s"


def _as_int(n: Any) -> int:
    try:
        return max(0, int(n))
    except (TypeError, ValueError):
        return 0


def _as_float(x: Any) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return 0.0


def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)


def reset() -> None:
    with PROGRESS_LOCK:
        run_id = _as_int(PROGRESS.get("run_id"))
        PROGRESS.clear()
        PROGRESS.update(_fresh_state(run_id + 1))
        LOG_STATE.update(run_start=None, block="", block_start=None, threshold="")
        _emit_log("Progress reset", run=run_id + 1)
        _persist_locked()


def start_timer() -> None:
    with PROGRESS_LOCK:
        now = _now()
        PROGRESS.update(elapsed_start=now, elapsed=0.0)
        LOG_STATE["run_start"] = now
        _emit_log("Run timer started")
        _persist_locked()


# ------------------------------
# Setters (tolerant)
# ------------------------------

def set_status(v: Any) -> None:
    _update(status=str(v))


def set_block(v: Any) -> None:
    block = "" if v is None else str(v)
    with PROGRESS_LOCK:
        PROGRESS.update(block=block, round=0)
        _log_block_transition_locked(block)
        _persist_locked()


def set_threshold(v: Any) -> None:
    threshold = "" if v is None else str(v)
    with PROGRESS_LOCK:
        PROGRESS["threshold"] = threshold
        _log_threshold_transition_locked(threshold)
        _persist_locked()


def set_round(n: Any) -> None:
    # in memory only; the next persisted setter carries it to the state file
    with PROGRESS_LOCK:
        PROGRESS["round"] = _as_int(n)
        _touch_elapsed_locked()


def set_blocks_found(n: Any) -> None:
    _update(blocks_found=_as_int(n))


def set_pieces_used(n: Any) -> None:
    _update(pieces_used=_as_int(n))


def set_piece_count(n: Any) -> None:
    _update(piece_count=_as_int(n))


def set_added_count(n: Any) -> None:
    _update(added_count=_as_int(n))


def set_coverage_pct(pct: Any) -> None:
    _update(coverage_pct=max(0.0, min(100.0, _as_float(pct))))


def set_elapsed(seconds: Any) -> None:
    _update(elapsed=max(0.0, _as_float(seconds)))


def set_message(msg: Any) -> None:
    _update(message="" if msg is None else str(msg))


def set_result_url(url: Any) -> None:
    _update(result_url="" if url is None else str(url))


def set_done(ok: Any = None, *, reason: Any = None, message: Any = None) -> None:
    """Mark the run complete.

    ``ok`` picks the final status (``Solved``/``Error``); without it a run
    still marked ``Idle`` or ``Solving`` is reported as solved and any other
    status (``Partial``, ``No block``) is kept, with ``ok`` true only for
    ``Solved``.  ``message`` wins over ``reason`` for the note.
    """
    note = message if message is not None else reason

    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        if ok is not None:
            PROGRESS["status"] = "Solved" if ok else "Error"
        elif PROGRESS.get("status") in ("", "Idle", "Solving", None):
            PROGRESS["status"] = "Solved"
        PROGRESS["ok"] = bool(ok) if ok is not None else PROGRESS["status"] == "Solved"
        if note is not None:
            PROGRESS["message"] = str(note)
        PROGRESS["done"] = True

        _log_block_transition_locked("")
        run_start = LOG_STATE["run_start"]
        LOG_STATE["run_start"] = None
        total = max(0.0, _now() - float(run_start)) if isinstance(run_start, (int, float)) else None
        _emit_log(
            "Run finished",
            status=PROGRESS["status"],
            ok=PROGRESS["ok"],
            duration=_fmt_seconds(total),
            blocks=PROGRESS["blocks_found"],
            used=PROGRESS["pieces_used"],
            coverage=f"{_as_float(PROGRESS['coverage_pct']):.2f}%",
            message=PROGRESS["message"],
        )
        _persist_locked()


# ------------------------------
# Snapshots for the UI
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _load_persisted_locked()
        if not PROGRESS["done"]:
            _touch_elapsed_locked()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
        snap["elapsed_str"] = _fmt_elapsed(PROGRESS["elapsed"])
        return snap


def as_json() -> Dict[str, Any]:
    # Alias used by /progress
    return snapshot()


with PROGRESS_LOCK:
    _load_persisted_locked(force=True)
