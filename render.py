import random
from typing import Dict, List, Tuple

from models import Piece

_MAX_ROW_PX = 720


def _color(name: str) -> str:
    rng = random.Random(name)
    r = rng.randint(60, 210)
    g = rng.randint(60, 210)
    b = rng.randint(60, 210)
    return f"rgb({r},{g},{b})"


def _scale(entries: List[Tuple[Piece, bool]]) -> int:
    biggest = max((p.major for p, _ in entries), default=1)
    return max(2, min(24, 160 // max(1, biggest)))


def render_result(result) -> Tuple[str, str]:
    """Draw a block's slices left to right, wrapping rows.

    Real slices are filled, added (hypothesised) slices are dashed outlines.
    Returns (svg, legend_html).
    """
    entries = result.history.entries()
    palette: Dict[str, str] = {}
    for p, _ in entries:
        palette.setdefault(p.label(), _color(p.label()))

    scale = _scale(entries)
    gap = 4
    x = y = gap
    row_h = 0
    width = gap
    rects = []
    for i, (p, added) in enumerate(entries):
        w = p.major * scale
        h = max(2, p.minor * scale)
        if x + w + gap > _MAX_ROW_PX and x > gap:
            x = gap
            y += row_h + gap
            row_h = 0
        if added:
            style = f'fill="none" stroke="{palette[p.label()]}" stroke-width="2" stroke-dasharray="4 3"'
        else:
            style = f'fill="{palette[p.label()]}" stroke="black" stroke-width="1"'
        rects.append(
            f'<rect x="{x}" y="{y}" width="{w}" height="{h}" {style}>'
            f'<title>#{i} {p.label()}{" (added)" if added else ""}</title></rect>'
        )
        x += w + gap
        width = max(width, x)
        row_h = max(row_h, h)

    svg_w = width + gap
    svg_h = y + row_h + 2 * gap
    svg = (
        f'<svg class="slices-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{"".join(rects)}</svg>'
    )

    legend = "".join(f"<li><span class='swatch' style='background:{c}'></span>{n}</li>" for n, c in palette.items())
    return svg, legend
