import pytest

from chart_geometry import (
    DEFAULT_PALETTE,
    DataPoint,
    Radii,
    ScalePoint,
    allocate_angles,
    bar_fills,
    dataset_from_records,
    donut_segments,
    format_tick,
    full_ring_path,
    large_arc_flag,
    palette_color,
    proportion,
    reference_max,
    tick_scale,
    wedge_path,
)

RADII = Radii(center_x=150, center_y=150, outer_radius=100, inner_radius=60)


def _points(*values):
    return [DataPoint(chr(ord("A") + i), v) for i, v in enumerate(values)]


def _arc_flags(path):
    """(large-arc, sweep) for every A command in a path string."""
    tokens = path.split()
    return [(int(tokens[i + 3]), int(tokens[i + 4])) for i, t in enumerate(tokens) if t == "A"]


@pytest.mark.parametrize("values", [(1,), (30, 70), (1, 2, 3, 4, 5), (0.1, 0.2, 0.3), (5, 0, 5), (1e6, 3, 7.25)])
def test_spans_cover_full_turn(values):
    spans = allocate_angles(_points(*values))
    widths = [end - start for start, end in spans]
    assert sum(widths) == pytest.approx(360.0, abs=1e-9)
    assert spans[0][0] == 0
    assert spans[-1][1] == pytest.approx(360.0, abs=1e-9)
    # contiguous
    for (_, end), (start, _) in zip(spans, spans[1:]):
        assert start == end


def test_spans_follow_input_order():
    spans = allocate_angles(_points(30, 70))
    assert spans == [pytest.approx((0, 108)), pytest.approx((108, 360))]


def test_empty_dataset_gives_no_spans():
    assert allocate_angles([]) == []


def test_zero_total_gives_empty_spans_at_zero():
    assert allocate_angles(_points(0, 0, 0)) == [(0.0, 0.0)] * 3


def test_start_offset_shifts_all_spans():
    spans = allocate_angles(_points(1, 1), start_deg=-90)
    assert spans == [pytest.approx((-90, 90)), pytest.approx((90, 270))]


def test_negative_values_walk_backwards():
    spans = allocate_angles(_points(10, -5, 5))
    assert spans == [pytest.approx((0, 360)), pytest.approx((360, 180)), pytest.approx((180, 360))]


@pytest.mark.parametrize(
    "start, end, flag",
    [(0, 108, 0), (0, 180, 0), (0, 180.5, 1), (108, 360, 1), (90, 100, 0), (10, 5, 0)],
)
def test_large_arc_flag(start, end, flag):
    assert large_arc_flag(start, end) == flag
    outer, inner = _arc_flags(wedge_path(start, end, RADII))
    assert outer == (flag, 1)
    assert inner == (flag, 0)


def test_wedge_path_corners():
    path = wedge_path(0, 90, RADII)
    assert path.startswith("M 250.000,150.000")
    assert "A 100.000,100.000 0 0 1 150.000,250.000" in path
    assert "L 150.000,210.000" in path
    assert path.endswith("A 60.000,60.000 0 0 0 210.000,150.000 Z")


def test_zero_span_is_a_sliver_path():
    path = wedge_path(45, 45, RADII)
    assert path.startswith("M ") and path.endswith("Z")
    assert _arc_flags(path) == [(0, 1), (0, 0)]


def test_full_turn_becomes_a_ring():
    path = wedge_path(0, 360, RADII)
    assert path == full_ring_path(RADII, 0)
    assert _arc_flags(path) == [(0, 1), (0, 1), (0, 0), (0, 0)]


def test_single_point_donut_is_a_full_ring():
    [seg] = donut_segments(_points(42), RADII)
    assert seg.start_angle_deg == 0 and seg.end_angle_deg == pytest.approx(360)
    assert len(_arc_flags(seg.path)) == 4


def test_radii_must_be_ordered():
    with pytest.raises(ValueError):
        Radii(0, 0, outer_radius=50, inner_radius=50)
    with pytest.raises(ValueError):
        Radii(0, 0, outer_radius=50, inner_radius=-1)
    assert Radii(0, 0, outer_radius=50, inner_radius=0).inner_radius == 0


def test_example_end_to_end():
    segments = donut_segments(_points(30, 70), RADII)
    assert [s.label for s in segments] == ["A", "B"]
    assert (segments[0].start_angle_deg, segments[0].end_angle_deg) == pytest.approx((0, 108))
    assert _arc_flags(segments[0].path)[0][0] == 0
    assert _arc_flags(segments[1].path)[0][0] == 1


def test_segment_count_matches_input():
    for n in range(0, 8):
        data = _points(*range(n))
        assert len(donut_segments(data, RADII)) == n


def test_colors_are_positional():
    data = _points(1, 1, 1, 1, 1)
    colors = [s.color for s in donut_segments(data, RADII)]
    assert colors == [DEFAULT_PALETTE[i % 3] for i in range(5)]
    swapped = [DataPoint("B", 1), DataPoint("A", 1)]
    assert donut_segments(swapped, RADII)[0].color == DEFAULT_PALETTE[0]
    assert palette_color(4, ["x", "y"]) == "x"


def test_repeated_calls_are_equal():
    data = _points(3, 1, 4, 1, 5)
    assert donut_segments(data, RADII) == donut_segments(list(data), RADII)
    assert tick_scale(1234) == tick_scale(1234)


def test_proportion():
    assert proportion(50, 200) == 0.25
    assert proportion(200, 200) == 1.0
    assert proportion(5, 0) == 0.0
    assert proportion(5, -3) == 0.0
    assert proportion(0, 0) == 0.0


def test_bar_fills_default_to_dataset_max():
    fills = bar_fills(_points(25, 100, 50))
    assert [f for _, f in fills] == [0.25, 1.0, 0.5]
    assert [f for _, f in bar_fills(_points(0, 0))] == [0.0, 0.0]
    assert bar_fills([]) == []


def test_ticks_for_round_maximum():
    ticks = tick_scale(100)
    assert [t.value for t in ticks] == pytest.approx([0, 20, 40, 60, 80, 100])
    assert [t.display_text for t in ticks] == ["0", "20", "40", "60", "80", "100"]


def test_ticks_thousands_suffix():
    assert [t.display_text for t in tick_scale(5000)] == ["0", "1k", "2k", "3k", "4k", "5k"]


@pytest.mark.parametrize("maximum", [0, -10])
def test_ticks_fallback_without_maximum(maximum):
    ticks = tick_scale(maximum)
    assert ticks == [ScalePoint(float(v), str(v)) for v in (0, 20, 40, 60, 80, 100)]
    assert not any(t.display_text.endswith("k") for t in ticks)


def test_ticks_fallback_for_empty_dataset_ignores_count():
    assert [t.display_text for t in tick_scale(reference_max([]), count=3)] == ["0", "20", "40", "60", "80", "100"]


def test_ticks_count_and_order():
    ticks = tick_scale(7.5, count=4)
    assert len(ticks) == 4
    assert ticks[0].value == 0
    assert all(a.value < b.value for a, b in zip(ticks, ticks[1:]))
    assert [t.display_text for t in ticks] == ["0", "3", "5", "8"]


def test_tick_count_below_two_is_rejected():
    with pytest.raises(ValueError):
        tick_scale(100, count=1)


@pytest.mark.parametrize(
    "value, text",
    [(0, "0"), (12.4, "12"), (12.5, "13"), (999, "999"), (1000, "1k"), (1499, "1k"), (2500, "3k"), (12345, "12k")],
)
def test_format_tick_rounds_half_up(value, text):
    assert format_tick(value) == text


def test_dataset_from_records():
    rows = [{"city": "Austin", "sales": 120.5}, {"city": "Dallas", "sales": None}, {"city": "Waco"}]
    assert dataset_from_records(rows, "city", "sales") == [
        DataPoint("Austin", 120.5),
        DataPoint("Dallas", 0.0),
        DataPoint("Waco", 0.0),
    ]
    assert dataset_from_records(None, "city", "sales") == []


def test_reference_max():
    assert reference_max([]) == 0.0
    assert reference_max(_points(3, 9, 4)) == 9
