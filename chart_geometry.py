# chart_geometry.py
# Pure geometry for the dashboard charts: donut wedge angles + SVG paths,
# bar-fill fractions and the evenly spaced axis ticks under the bar charts.
# No drawing happens here; donut.py, bars.py and build_report.py turn the
# numbers into SVG / PDF.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence, Tuple

DEFAULT_PALETTE: Tuple[str, ...] = ("#d16e64", "#ffbf65", "#227cb4")
DEFAULT_TICK_COUNT = 6
FALLBACK_TICKS: Tuple[int, ...] = (0, 20, 40, 60, 80, 100)

FULL_TURN = 360.0
_EPS = 1e-9


# =======================
# Data model
# =======================
@dataclass(frozen=True)
class DataPoint:
    label: str
    value: float


Dataset = Sequence[DataPoint]


@dataclass(frozen=True)
class Radii:
    center_x: float
    center_y: float
    outer_radius: float
    inner_radius: float

    def __post_init__(self):
        if not (0 <= self.inner_radius < self.outer_radius):
            raise ValueError(
                f"Radii need 0 <= inner < outer, got inner={self.inner_radius}, outer={self.outer_radius}"
            )


@dataclass(frozen=True)
class Segment:
    label: str
    value: float
    start_angle_deg: float
    end_angle_deg: float
    path: str
    color: str

    @property
    def sweep_deg(self) -> float:
        return self.end_angle_deg - self.start_angle_deg


@dataclass(frozen=True)
class ScalePoint:
    value: float
    display_text: str


def dataset_from_records(
    records: Iterable[Mapping] | None,
    label_key: str,
    value_key: str,
) -> List[DataPoint]:
    """
    Turn API rows like {"city": "Austin", "sales": 120.5} into DataPoints.
    Missing values count as 0; order is preserved.
    """
    points: List[DataPoint] = []
    for row in records or []:
        raw = row.get(value_key)
        points.append(DataPoint(str(row.get(label_key, "")), float(raw) if raw is not None else 0.0))
    return points


def reference_max(dataset: Dataset) -> float:
    """Largest value in the dataset, 0 when it is empty."""
    if not dataset:
        return 0.0
    return max(float(p.value) for p in dataset)


def palette_color(index: int, palette: Sequence[str] = DEFAULT_PALETTE) -> str:
    # positional, not keyed by label: reordering the dataset recolors it
    return palette[index % len(palette)]


# =======================
# Angles
# =======================
def allocate_angles(dataset: Dataset, start_deg: float = 0.0) -> List[Tuple[float, float]]:
    """
    Split a full turn between the points, proportional to their values.

    Spans are contiguous and follow dataset order, beginning at ``start_deg``.
    A zero total (all-zero dataset) gives every point an empty span anchored
    at ``start_deg``. Negative values are not rejected: they produce negative
    widths that walk the running angle backwards.
    """
    values = [float(p.value) for p in dataset]
    total = sum(values)
    if total == 0:
        return [(float(start_deg), float(start_deg)) for _ in values]

    spans: List[Tuple[float, float]] = []
    angle = float(start_deg)
    for v in values:
        end = angle + FULL_TURN * v / total
        spans.append((angle, end))
        angle = end
    return spans


# =======================
# Paths
# =======================
def _point(cx: float, cy: float, r: float, angle_deg: float) -> Tuple[float, float]:
    a = math.radians(angle_deg)
    return cx + r * math.cos(a), cy + r * math.sin(a)


def large_arc_flag(start_deg: float, end_deg: float) -> int:
    return 1 if (end_deg - start_deg) > 180 else 0


def wedge_path(start_deg: float, end_deg: float, radii: Radii) -> str:
    """
    Closed annular wedge: outer arc (sweep 1), line in, inner arc back
    (sweep 0), close. A span of a full turn or more is drawn as a complete
    ring; a zero span gives a valid zero-area sliver.
    """
    if abs(end_deg - start_deg) >= FULL_TURN - _EPS:
        return full_ring_path(radii, start_deg)

    cx, cy = radii.center_x, radii.center_y
    r_out, r_in = radii.outer_radius, radii.inner_radius
    large = large_arc_flag(start_deg, end_deg)

    x0, y0 = _point(cx, cy, r_out, start_deg)
    x1, y1 = _point(cx, cy, r_out, end_deg)
    xi1, yi1 = _point(cx, cy, r_in, end_deg)
    xi0, yi0 = _point(cx, cy, r_in, start_deg)

    return " ".join([
        f"M {x0:.3f},{y0:.3f}",
        f"A {r_out:.3f},{r_out:.3f} 0 {large} 1 {x1:.3f},{y1:.3f}",
        f"L {xi1:.3f},{yi1:.3f}",
        f"A {r_in:.3f},{r_in:.3f} 0 {large} 0 {xi0:.3f},{yi0:.3f}",
        "Z",
    ])


def full_ring_path(radii: Radii, start_deg: float = 0.0) -> str:
    """
    Full 360° ring made of two 180° arcs per rim. A single SVG arc whose
    endpoints coincide is not drawn at all, so the turn has to be split.
    """
    cx, cy = radii.center_x, radii.center_y
    r_out, r_in = radii.outer_radius, radii.inner_radius

    x0, y0 = _point(cx, cy, r_out, start_deg)
    x180, y180 = _point(cx, cy, r_out, start_deg + 180.0)
    xi0, yi0 = _point(cx, cy, r_in, start_deg)
    xi180, yi180 = _point(cx, cy, r_in, start_deg + 180.0)

    return " ".join([
        f"M {x0:.3f},{y0:.3f}",
        f"A {r_out:.3f},{r_out:.3f} 0 0 1 {x180:.3f},{y180:.3f}",
        f"A {r_out:.3f},{r_out:.3f} 0 0 1 {x0:.3f},{y0:.3f}",
        f"L {xi0:.3f},{yi0:.3f}",
        # inner rim runs the other way so nonzero fill leaves the hole open
        f"A {r_in:.3f},{r_in:.3f} 0 0 0 {xi180:.3f},{yi180:.3f}",
        f"A {r_in:.3f},{r_in:.3f} 0 0 0 {xi0:.3f},{yi0:.3f}",
        "Z",
    ])


def donut_segments(
    dataset: Dataset,
    radii: Radii,
    palette: Sequence[str] = DEFAULT_PALETTE,
    start_deg: float = 0.0,
) -> List[Segment]:
    """One Segment per data point, same order as the input."""
    spans = allocate_angles(dataset, start_deg)
    return [
        Segment(
            label=p.label,
            value=float(p.value),
            start_angle_deg=a0,
            end_angle_deg=a1,
            path=wedge_path(a0, a1, radii),
            color=palette_color(i, palette),
        )
        for i, (p, (a0, a1)) in enumerate(zip(dataset, spans))
    ]


# =======================
# Bars + ticks
# =======================
def proportion(value: float, maximum: float) -> float:
    # a non-positive maximum would divide by zero; every bar is empty instead
    if maximum <= 0:
        return 0.0
    return float(value) / float(maximum)


def bar_fills(dataset: Dataset, maximum: float | None = None) -> List[Tuple[DataPoint, float]]:
    """Pair every point with its fill fraction against ``maximum`` (dataset max by default)."""
    ref = reference_max(dataset) if maximum is None else maximum
    return [(p, proportion(p.value, ref)) for p in dataset]


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def format_tick(value: float) -> str:
    if value >= 1000:
        return f"{round_half_up(value / 1000)}k"
    return str(round_half_up(value))


def tick_scale(maximum: float, count: int = DEFAULT_TICK_COUNT) -> List[ScalePoint]:
    """
    ``count`` evenly spaced axis points from 0 to ``maximum`` inclusive.

    Without a usable maximum (empty dataset or maximum <= 0) the fixed
    0..100 placeholder scale is returned unchanged, whatever ``count`` is.
    """
    if count < 2:
        raise ValueError(f"tick count must be at least 2, got {count}")
    if maximum <= 0:
        return [ScalePoint(float(v), str(v)) for v in FALLBACK_TICKS]

    step = maximum / (count - 1)
    points = []
    for i in range(count):
        v = step * i
        points.append(ScalePoint(v, format_tick(v)))
    return points
