"""SVG output for interpreted L-systems."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field

from lindenmayer.errors import _require
from lindenmayer.geometry import Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SvgStyle:
    stroke: str = "#000"
    stroke_width: float = 1.0
    fill: str = "none"
    stroke_linecap: str = "round"
    stroke_linejoin: str = "round"


@dataclass(frozen=True)
class SvgOptions:
    margin: float = 10.0
    precision: int = 3
    flip_y: bool = True
    width: float | None = None
    height: float | None = None
    background: str | None = None
    style: SvgStyle = field(default_factory=SvgStyle)


def compute_bounds(polylines: list[list[Point]]) -> tuple[float, float, float, float]:
    _require(len(polylines) > 0, "No drawable geometry produced.")
    xs = [x for pl in polylines for x, _ in pl]
    ys = [y for pl in polylines for _, y in pl]
    return (min(xs), min(ys), max(xs), max(ys))


def _fmt(x: float, precision: int) -> str:
    # Normalise -0.0 so it never produces "-0" in SVG output.
    if not x:
        x = 0.0
    s = f"{x:.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s in ("", "-0"):
        return "0"
    return s


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def render_svg(
    polylines: list[list[Point]],
    options: SvgOptions | None = None,
    title: str | None = None,
) -> str:
    """Return an SVG document drawing ``polylines``, sized to their bounds."""
    opts = options or SvgOptions()
    p = opts.precision

    minx, miny, maxx, maxy = compute_bounds(polylines)
    # Margin is applied before the degenerate check so that collinear geometry
    # can still be rendered.
    minx -= opts.margin
    miny -= opts.margin
    maxx += opts.margin
    maxy += opts.margin
    w = maxx - minx
    h = maxy - miny
    _require(
        w > 0 and h > 0 and math.isfinite(w) and math.isfinite(h),
        "Degenerate bounds after margin (width or height is zero). "
        "Set svg.margin > 0 to render collinear or single-point geometry.",
    )

    size = ""
    if opts.width:
        size += f' width="{_fmt(float(opts.width), p)}"'
    if opts.height:
        size += f' height="{_fmt(float(opts.height), p)}"'
    view_box = f"{_fmt(minx, p)} {_fmt(miny, p)} {_fmt(w, p)} {_fmt(h, p)}"

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
        f'viewBox="{view_box}"{size}>',
    ]
    if title:
        lines.append(f"  <title>{_escape(title)}</title>")
    if opts.background and opts.background.lower() != "none":
        lines.append(
            f'  <rect x="{_fmt(minx, p)}" y="{_fmt(miny, p)}" '
            f'width="{_fmt(w, p)}" height="{_fmt(h, p)}" '
            f'fill="{opts.background}" />'
        )

    st = opts.style
    style_attr = (
        f'stroke="{st.stroke}" stroke-width="{_fmt(st.stroke_width, p)}" '
        f'fill="{st.fill}" stroke-linecap="{st.stroke_linecap}" '
        f'stroke-linejoin="{st.stroke_linejoin}"'
    )

    indent = "  "
    if opts.flip_y:
        # Mirror about the horizontal centre line of the viewBox so turtle
        # coordinates keep +Y pointing up.
        lines.append(
            f'  <g transform="translate(0,{_fmt(miny + maxy, p)}) scale(1,-1)">'
        )
        indent = "    "

    for pl in polylines:
        pts = " ".join(f"{_fmt(x, p)},{_fmt(y, p)}" for x, y in pl)
        lines.append(f'{indent}<polyline points="{pts}" {style_attr} />')

    if opts.flip_y:
        lines.append("  </g>")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def write_svg(
    polylines: list[list[Point]],
    out_path: str,
    options: SvgOptions | None = None,
    title: str | None = None,
) -> None:
    content = render_svg(polylines, options, title)
    os.makedirs(os.path.dirname(os.path.abspath(out_path)) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(content)
    logger.info("Wrote %d polylines to %s", len(polylines), out_path)
