# donut.py
# Donut chart (SVG) for the "Sales By Category" / "Sales By Segment" cards.
# Wedges come from chart_geometry.donut_segments; this module only lays out
# paths, the outside name / percentage labels, the centre total and a legend.
# Requires: pip install svgwrite

import logging
import math
from pathlib import Path
from typing import List, Sequence, Tuple

import svgwrite

from chart_geometry import (
    DataPoint,
    Dataset,
    Radii,
    Segment,
    donut_segments,
    format_tick,
    round_half_up,
)
from config import DONUT_RADII, FONT_MED_NAME, PALETTE, START_DEG

logger = logging.getLogger(__name__)

LEGEND_SWATCH = 16
LEGEND_GAP = 24
LEGEND_ROW_H = 26


# =======================
# Text helpers
# =======================
def _stacked_label(dwg, lines: Sequence[Tuple[str, float]], x: float, y: float, fill: str, font_family: str, gap: float = 4):
    """
    Text node of ``(text, font_size)`` lines sharing one x, the whole block
    vertically centred on ``y``.
    """
    block_h = sum(size for _, size in lines) + gap * (len(lines) - 1)
    node = dwg.text("", insert=(x, 0), text_anchor="middle", fill=fill, font_family=font_family)
    baseline = y - block_h / 2
    for text, size in lines:
        baseline += size
        node.add(dwg.tspan(text, x=[x], y=[baseline], font_size=size))
        baseline += gap
    return node


def _estimate_text_width(text: str, font_size: float) -> float:
    """Rough width in px (sans-serif heuristic)."""
    char_px = 0.55
    return max(1.0, len(str(text)) * font_size * char_px)


def percent_text(value: float, total: float) -> str:
    if total == 0:
        return "0%"
    return f"{round_half_up(value / total * 100)}%"


def total_text(total: float) -> str:
    return f"${format_tick(total)}"


def outside_label_xy(seg: Segment, radii: Radii, label_offset: float, name_font_size: float) -> Tuple[float, float]:
    """
    Centre of a segment's label block, just beyond the outer rim at the
    wedge's mid-angle. Labels on the left/right get pushed out by part of
    the name width so they don't hug the ring.
    """
    mid = math.radians((seg.start_angle_deg + seg.end_angle_deg) / 2.0)
    name_w = _estimate_text_width(seg.label, name_font_size)
    r = radii.outer_radius + label_offset + 0.30 * name_w * abs(math.cos(mid)) + 2
    return radii.center_x + r * math.cos(mid), radii.center_y + r * math.sin(mid)


# =======================
# Legend
# =======================
def legend_rows(labels: Sequence[str], width: float, font_size: float, margin: float = 8.0) -> List[List[int]]:
    """
    Greedy wrap of legend entries (swatch + label) into rows that fit ``width``.
    Returns the dataset indices per row; an entry wider than the canvas gets a row of its own.
    """
    rows: List[List[int]] = []
    current: List[int] = []
    used = margin
    for i, label in enumerate(labels):
        w = LEGEND_SWATCH + 6 + _estimate_text_width(label, font_size)
        if current and used + w > width - margin:
            rows.append(current)
            current, used = [], margin
        current.append(i)
        used += w + LEGEND_GAP
    if current:
        rows.append(current)
    return rows


def _add_legend(dwg, group, segments: Sequence[Segment], top: float, width: float, text_color: str, font_family: str, font_size: float):
    labels = [s.label for s in segments]
    for r, row in enumerate(legend_rows(labels, width, font_size)):
        row_w = sum(LEGEND_SWATCH + 6 + _estimate_text_width(labels[i], font_size) for i in row)
        row_w += LEGEND_GAP * (len(row) - 1)
        x = (width - row_w) / 2
        y = top + r * LEGEND_ROW_H
        for i in row:
            seg = segments[i]
            group.add(dwg.rect(insert=(x, y), size=(LEGEND_SWATCH, LEGEND_SWATCH), rx=2, fill=seg.color))
            group.add(dwg.text(
                seg.label,
                insert=(x + LEGEND_SWATCH + 6, y + LEGEND_SWATCH - 3),
                fill=text_color,
                font_family=font_family,
                font_size=font_size,
            ))
            x += LEGEND_SWATCH + 6 + _estimate_text_width(seg.label, font_size) + LEGEND_GAP


# =======================
# Renderers
# =======================
def donut_drawing(
    dataset: Dataset,
    radii: Radii = DONUT_RADII,
    palette: Sequence[str] = PALETTE,
    start_deg: float = START_DEG,
    svg_path: str = "donut.svg",
    text_color: str = "#1f2937",
    font_family: str = FONT_MED_NAME,
    name_font_size: int = 12,
    pct_font_size: int = 11,
    label_offset: float = 18,        # base radial gap between rim and label block
    label_pad: float = 60,           # canvas margin around the ring for the labels
    outside_labels: bool = True,
    legend_font_size: int = 14,
    show_total: bool = True,
    legend: bool = True,
):
    """
    Ring of wedges with a two-line label (name above, share below) outside
    every non-empty wedge. The ring keeps the coordinates given by ``radii``;
    with labels on, the canvas grows by ``label_pad`` on each side.
    """
    segments = donut_segments(dataset, radii, palette, start_deg)
    total = sum(s.value for s in segments)
    pad = label_pad if outside_labels else 0

    # ring coordinates; the whole chart is shifted by pad on the canvas
    inner_w = 2 * radii.center_x
    legend_top = 2 * radii.center_y + 12
    n_rows = len(legend_rows([s.label for s in segments], inner_w, legend_font_size)) if legend else 0
    body_h = legend_top + n_rows * LEGEND_ROW_H if n_rows else 2 * radii.center_y
    width, height = inner_w + 2 * pad, body_h + 2 * pad

    dwg = svgwrite.Drawing(svg_path, size=(width, height), profile="full")
    dwg.attribs["viewBox"] = f"0 0 {width} {height}"
    chart = dwg.g(transform=f"translate({pad},{pad})") if pad else dwg
    if pad:
        dwg.add(chart)

    # slices
    for seg in segments:
        chart.add(dwg.path(d=seg.path, fill=seg.color, stroke="none"))

    if outside_labels:
        for seg in segments:
            if seg.sweep_deg == 0:
                continue
            x, y = outside_label_xy(seg, radii, label_offset, name_font_size)
            chart.add(_stacked_label(
                dwg,
                [(seg.label, name_font_size), (percent_text(seg.value, total), pct_font_size)],
                x, y, text_color, font_family,
            ))

    if show_total and segments:
        chart.add(_stacked_label(
            dwg,
            [("Total", 12), (total_text(total), 18)],
            radii.center_x, radii.center_y, text_color, font_family,
        ))

    if n_rows:
        _add_legend(dwg, chart, segments, legend_top, inner_w, text_color, font_family, legend_font_size)

    return dwg


def donut_svg_string(dataset: Dataset, **kwargs) -> str:
    return donut_drawing(dataset, **kwargs).tostring()


def donut_svg(svg_path: str, dataset: Dataset, **kwargs) -> str:
    Path(svg_path).parent.mkdir(parents=True, exist_ok=True)
    dwg = donut_drawing(dataset, svg_path=svg_path, **kwargs)
    dwg.save()
    logger.info("wrote donut chart %s (%d segments)", svg_path, len(dataset))
    return svg_path


if __name__ == "__main__":
    demo = [DataPoint("Furniture", 30), DataPoint("Office Supplies", 45), DataPoint("Technology", 25)]
    out = donut_svg("charts/donut_demo.svg", demo)
    print(f"[OK] {out}")
