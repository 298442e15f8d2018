# piece_parser.py: lenient piece-list parser for the web form
from __future__ import annotations
import re
from typing import Any, List, Tuple, Optional

from models import Piece

Decoded = Tuple[str, int]  # ("3x2", count)

_NUM = r"\d+"
# Accept "3 2", "3x2", "3 × 2", "3,2" with an optional trailing "*count"
_PAIR_RE = re.compile(rf"^\s*(?P<a>{_NUM})\s*(?:[xX×,]|\s)\s*(?P<b>{_NUM})\s*(?:\*\s*(?P<n>{_NUM}))?\s*$")
_COUNT_RE = re.compile(rf"^\s*(?P<n>{_NUM})\s*$")


def _to_int(x: Any) -> Optional[int]:
    # whole numbers only: bools, floats and "4.9" are rejected
    if isinstance(x, bool):
        return None
    if isinstance(x, int):
        return x
    if isinstance(x, str) and x.strip().isdigit():
        return int(x.strip())
    return None


def _as_listish(val: Any) -> List[Any]:
    if val is None:
        return []
    if isinstance(val, (list, tuple)):
        return list(val)
    return [val]


def _append(pieces: List[Piece], a: int, b: int, n: int = 1) -> None:
    pieces.extend([Piece(a, b)] * n)


def decode(pieces: List[Piece]) -> List[Decoded]:
    """Counts per piece label, sorted by size."""
    counts = {}
    for p in pieces:
        counts[p] = counts.get(p, 0) + 1
    return [(p.label(), n) for p, n in sorted(counts.items())]


def _parse_text(text: str) -> Tuple[List[Piece], Optional[str]]:
    pieces: List[Piece] = []
    lines = [ln for ln in str(text).splitlines() if ln.strip()]
    declared: Optional[int] = None
    if lines:
        m = _COUNT_RE.match(lines[0])
        if m:
            declared = int(m.group("n"))
            lines = lines[1:]
    for lineno, line in enumerate(lines, start=1):
        m = _PAIR_RE.match(line)
        if not m:
            return [], f"line {lineno}: couldn't parse {line.strip()!r}"
        a, b = int(m.group("a")), int(m.group("b"))
        n = int(m.group("n")) if m.group("n") else 1
        if a <= 0 or b <= 0 or n <= 0:
            return [], f"line {lineno}: dimensions and counts must be positive"
        _append(pieces, a, b, n)
    if declared is not None and declared != len(pieces):
        return [], f"header declares {declared} pieces, found {len(pieces)}"
    return pieces, None


def parse_pieces(form_like: Any) -> Tuple[List[Piece], List[Decoded], Optional[str]]:
    """
    Return (pieces, decoded_items, error_message_or_None).
    Accepts a JSON ``pieces`` list, a ``pieces`` text blob or a bare string.
    """
    if not form_like:
        return [], [], "nothing parsed from request"

    if isinstance(form_like, str):
        pieces, err = _parse_text(form_like)
        if not err and not pieces:
            err = "nothing parsed from request"
        return pieces, decode(pieces), err

    raw = form_like.get("pieces") if isinstance(form_like, dict) else None

    # --- Shape 1: JSON list of [a, b] pairs or {"major", "minor", "count"} items
    items = _as_listish(raw)
    if items and all(isinstance(t, (list, tuple, dict)) for t in items):
        pieces: List[Piece] = []
        for t in items:
            if isinstance(t, dict):
                a, b = _to_int(t.get("major")), _to_int(t.get("minor"))
                n = _to_int(t.get("count", 1))
            elif len(t) == 2:
                a, b, n = _to_int(t[0]), _to_int(t[1]), 1
            else:
                a = b = n = None
            if not all(v is not None and v > 0 for v in (a, b, n)):
                return [], [], f"bad piece entry: {t!r}"
            _append(pieces, a, b, n)
        if pieces:
            return pieces, decode(pieces), None

    # --- Shape 2: text blob (form textarea or JSON string); form values arrive as lists
    texts = [str(v) for v in items if isinstance(v, str) and v.strip()]
    if texts:
        pieces, err = _parse_text("\n".join(texts) if len(texts) > 1 else texts[0])
        if err:
            return [], [], err
        if pieces:
            return pieces, decode(pieces), None

    return [], [], "nothing parsed from request"


def fmt_decoded_items(decoded: List[Decoded]) -> List[Decoded]:
    return sorted(decoded, key=lambda t: tuple(int(x) for x in t[0].split("x")))
