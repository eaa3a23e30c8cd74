# bars.py
# Horizontal bar chart (SVG) for "Sales by City": label | track with a
# proportional fill | rounded value, plus a $-prefixed tick axis underneath.
# Requires: pip install svgwrite

import logging
from pathlib import Path
from typing import Sequence

import svgwrite

from chart_geometry import DataPoint, Dataset, bar_fills, reference_max, round_half_up, tick_scale
from config import BAR_COLOR, FONT_MED_NAME, TICK_COUNT, TRACK_COLOR

logger = logging.getLogger(__name__)


def money_text(value: float) -> str:
    return f"${round_half_up(value)}"


def bar_chart_drawing(
    dataset: Dataset,
    svg_path: str = "bars.svg",
    width: float = 520,
    row_height: float = 24,
    row_gap: float = 16,
    label_w: float = 90,
    value_w: float = 64,
    tick_count: int = TICK_COUNT,
    maximum: float | None = None,
    track_color: str = TRACK_COLOR,
    fill_color: str = BAR_COLOR,
    text_color: str = "#1f2937",
    muted_color: str = "#6b7280",
    font_family: str = FONT_MED_NAME,
    font_size: int = 12,
):
    """
    Build the drawing. ``maximum`` defaults to the largest value in the dataset;
    the axis always spans 0..maximum (or the 0..100 placeholder when there is none).
    """
    ref = reference_max(dataset) if maximum is None else maximum
    track_x = label_w + 12
    track_w = max(1.0, width - track_x - value_w - 12)

    n_rows = max(len(dataset), 1)
    body_h = n_rows * row_height + (n_rows - 1) * row_gap
    axis_y = body_h + 24
    height = axis_y + font_size + 8

    dwg = svgwrite.Drawing(svg_path, size=(width, height), profile="full")
    dwg.attribs["viewBox"] = f"0 0 {width} {height}"

    if not dataset:
        dwg.add(dwg.text(
            "No data available",
            insert=(width / 2, body_h / 2 + font_size / 3),
            text_anchor="middle",
            fill=muted_color,
            font_family=font_family,
            font_size=font_size + 2,
        ))

    for i, (point, frac) in enumerate(bar_fills(dataset, ref)):
        y = i * (row_height + row_gap)
        baseline = y + row_height / 2 + font_size / 3
        dwg.add(dwg.text(
            point.label,
            insert=(label_w, baseline),
            text_anchor="end",
            fill=text_color,
            font_family=font_family,
            font_size=font_size,
        ))
        dwg.add(dwg.rect(insert=(track_x, y), size=(track_w, row_height), fill=track_color))
        # negative values and values above the reference max stay inside the track
        fill_w = track_w * min(max(frac, 0.0), 1.0)
        if fill_w > 0:
            dwg.add(dwg.rect(insert=(track_x, y), size=(fill_w, row_height), fill=fill_color))
        dwg.add(dwg.text(
            money_text(point.value),
            insert=(track_x + track_w + 8, baseline),
            fill=muted_color,
            font_family=font_family,
            font_size=font_size,
        ))

    # axis: first tick left-aligned, last right-aligned, the rest spread evenly (justify-between)
    ticks = tick_scale(ref, tick_count)
    last = len(ticks) - 1
    for i, tick in enumerate(ticks):
        x = track_x + track_w * i / last
        anchor = "start" if i == 0 else "end" if i == last else "middle"
        dwg.add(dwg.text(
            f"${tick.display_text}",
            insert=(x, axis_y),
            text_anchor=anchor,
            fill=muted_color,
            font_family=font_family,
            font_size=font_size - 1,
        ))

    return dwg


def bar_chart_svg_string(dataset: Dataset, **kwargs) -> str:
    return bar_chart_drawing(dataset, **kwargs).tostring()


def bar_chart_svg(svg_path: str, dataset: Dataset, **kwargs) -> str:
    Path(svg_path).parent.mkdir(parents=True, exist_ok=True)
    dwg = bar_chart_drawing(dataset, svg_path=svg_path, **kwargs)
    dwg.save()
    logger.info("wrote bar chart %s (%d rows)", svg_path, len(dataset))
    return svg_path


def thousands_text(value: float) -> str:
    """1234.5 -> "1,234.5", 100.0 -> "100" (at most two decimals)."""
    s = f"{float(value):,.2f}"
    return s.rstrip("0").rstrip(".")


def table_rows(dataset: Sequence[DataPoint]) -> list:
    """(label, "$1,234.5") pairs for the product / sub-category tables."""
    return [(p.label, f"${thousands_text(p.value)}") for p in dataset]


if __name__ == "__main__":
    demo = [DataPoint("Austin", 1200), DataPoint("Dallas", 3400), DataPoint("Houston", 5000)]
    out = bar_chart_svg("charts/bars_demo.svg", demo)
    print(f"[OK] {out}")
