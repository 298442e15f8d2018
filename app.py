# app.py: web front end for the block search; progress no-cache
from __future__ import annotations
import os
import time
from typing import Any, Dict, List, Optional

from flask import Flask, request, render_template, send_from_directory, jsonify, url_for, abort

from config import CFG
from piece_parser import parse_pieces, fmt_decoded_items
from pieces_io import write_solutions
from render import render_result
from sampling import eat_pieces, make_rng, shuffle_pieces
from solver.inventory import Inventory
from solver.orchestrator import BuildOutcome, construct_blocks

from progress import (
    reset as progress_reset,
    as_json as progress_json,
    start_timer as progress_start,
    set_status, set_piece_count, set_done, set_result_url, set_elapsed,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
OUTPUT_DIR = os.path.abspath(os.getenv("BR_OUTPUT_DIR", BASE_DIR))

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "status": "Idle",
    "reason": "",
    "piece_count": 0,
    "used": 0,
    "n_eaten": 0,
    "find_missing": False,
    "elapsed_str": "0s",
    "blocks": [],
    "input_items": [],
}
SOLUTION_FILES: List[str] = []

app = Flask(__name__, template_folder="templates")


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


@app.route("/")
def index():
    return render_template("index.html", max_pieces=CFG.MAX_PIECES)


@app.route("/result/latest")
def result_latest():
    return render_template("result.html", **LAST_RESULT)


def _fmt_elapsed(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    m, s = divmod(int(seconds), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    if h == 0:
        return f"{m}m {s}s"
    return f"{h}h {m}m {s}s"


def _merge_like_mapping() -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)
    for k, v in request.form.to_dict(flat=False).items():
        merged.setdefault(k, v)
    upload = request.files.get("piece_file")
    if upload and upload.filename:
        merged.setdefault("pieces", [upload.read().decode("utf-8", errors="replace")])
    return merged


def _first(like: Dict[str, Any], key: str) -> Any:
    val = like.get(key)
    if isinstance(val, list):
        return val[0] if val else None
    return val


def _flag(like: Dict[str, Any], key: str, default: bool = False) -> bool:
    val = _first(like, key)
    if val is None:
        return default
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("1", "true", "on", "yes")


def _opt_number(like: Dict[str, Any], key: str, kind):
    val = _first(like, key)
    if val is None or str(val).strip() == "":
        return None
    return kind(val)


def _block_views(outcome: BuildOutcome) -> List[Dict[str, Any]]:
    views = []
    for i, result in enumerate(outcome.blocks):
        svg, legend = render_result(result)
        slices = result.slices
        views.append({
            "index": i,
            "size": " × ".join(str(s) for s in result.size),
            "n_slices": len(slices),
            "n_added": result.n_added,
            "first": slices[0].label() if slices else "",
            "last": slices[-1].label() if slices else "",
            "svg": svg,
            "legend": legend,
            "download_url": url_for("download_solution", idx=i),
        })
    return views


def _fail(reason: str, t0: float, decoded) -> str:
    set_status("Error")
    set_done(False, reason=reason)
    LAST_RESULT.update({
        "ok": False,
        "status": "Error",
        "reason": reason,
        "piece_count": 0,
        "used": 0,
        "n_eaten": 0,
        "elapsed_str": _fmt_elapsed(time.time() - t0),
        "blocks": [],
        "input_items": fmt_decoded_items(decoded),
    })
    SOLUTION_FILES.clear()
    set_result_url(url_for("result_latest"))
    return render_template("result.html", **LAST_RESULT)


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    progress_start()
    set_status("Solving")
    t0 = time.time()

    like = _merge_like_mapping()
    pieces, decoded, err = parse_pieces(like)
    if err or not pieces:
        seen_keys = ", ".join(list(like.keys())[:8]) or "none"
        return _fail(f"Bad piece list: {err or 'nothing parsed from request'} (saw keys: {seen_keys})", t0, decoded)
    if len(pieces) > CFG.MAX_PIECES:
        return _fail(f"Too many pieces: {len(pieces)} > {CFG.MAX_PIECES}", t0, decoded)

    try:
        eat_prob: Optional[float] = _opt_number(like, "eat_prob", float)
        seed: Optional[int] = _opt_number(like, "seed", int)
        find_missing = _flag(like, "find_missing", CFG.FIND_MISSING) or eat_prob is not None
        n_eaten = 0
        if _flag(like, "shuffle") or eat_prob is not None:
            rng = make_rng(seed)
            pieces = shuffle_pieces(pieces, rng)
            if eat_prob is not None:
                pieces, n_eaten = eat_pieces(pieces, eat_prob, rng)
    except ValueError as e:
        return _fail(f"Bad options: {e}", t0, decoded)

    set_piece_count(len(pieces))
    try:
        outcome = construct_blocks(Inventory.from_pieces(pieces), len(pieces), find_missing)
    except Exception as e:
        return _fail(f"engine exception: {type(e).__name__}: {e}", t0, decoded)

    SOLUTION_FILES[:] = write_solutions(outcome.blocks, OUTPUT_DIR)
    set_elapsed(time.time() - t0)
    set_done()

    if outcome.complete:
        reason = f"{len(outcome.blocks)} block(s), every slice used"
    elif outcome.partial:
        reason = f"{outcome.left_over} of {outcome.total} slices left over"
    else:
        reason = "No block found"

    LAST_RESULT.update({
        "ok": outcome.complete,
        "status": "Solved" if outcome.complete else ("Partial" if outcome.partial else "No block"),
        "reason": reason,
        "piece_count": outcome.total,
        "used": outcome.used,
        "n_eaten": n_eaten,
        "find_missing": find_missing,
        "elapsed_str": _fmt_elapsed(time.time() - t0),
        "blocks": _block_views(outcome),
        "input_items": fmt_decoded_items(decoded),
    })
    set_result_url(url_for("result_latest"))
    if request.is_json:
        return jsonify(dict(outcome.to_dict(), reason=reason))
    return render_template("result.html", **LAST_RESULT)


@app.route("/download/solution/<int:idx>")
def download_solution(idx: int):
    if idx < 0 or idx >= len(SOLUTION_FILES):
        abort(404)
    path = SOLUTION_FILES[idx]
    return send_from_directory(os.path.dirname(path), os.path.basename(path), as_attachment=True)


@app.route("/progress")
def progress():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
