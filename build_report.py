# build_report.py
# One-page PDF snapshot of the sales dashboard for the selected filters:
# KPI cards, Sales by City bars + tick axis, category / segment donuts and the
# product / sub-category tables. Drawn with reportlab, then stamped onto the
# branded template page (if present) with pypdf.

import argparse
import functools
import io
import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from pypdf import PdfReader, PdfWriter
from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import letter
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from bars import money_text, thousands_text
from chart_geometry import (
    DataPoint,
    Radii,
    Segment,
    bar_fills,
    donut_segments,
    reference_max,
    tick_scale,
)
from config import (
    ACCENT,
    BAR_COLOR,
    FONT_BOLD_NAME,
    FONT_BOLD_PATH,
    FONT_MED_NAME,
    FONT_MED_PATH,
    PALETTE,
    REPORT_DIR,
    REPORT_TEMPLATE_PDF,
    START_DEG,
    TICK_COUNT,
    TRACK_COLOR,
)
from dashboard_api import DashboardData, DashboardSession
from donut import percent_text

logger = logging.getLogger(__name__)

# ========= LAYOUT (tweak here) =========
PAGE_MARGIN: float = 40.0
CARD_H: float = 56.0
CARD_GAP: float = 12.0
BAR_ROW_H: float = 14.0
BAR_ROW_GAP: float = 6.0
BAR_LABEL_W: float = 80.0
MAX_BAR_ROWS: int = 10
DONUT_OUTER: float = 62.0
DONUT_INNER: float = 37.0        # same ring ratio as the web chart (60/100)
MAX_TABLE_ROWS: int = 12
TEXT_DARK = HexColor("#1f2937")
TEXT_MUTED = HexColor("#6b7280")


# ========= FONTS =========
@functools.lru_cache(maxsize=None)
def register_fonts() -> Tuple[str, str]:
    """
    Register the brand fonts once per process; fall back to Helvetica for
    whichever is missing. Later calls return the cached font names.
    """
    bold, medium = "Helvetica-Bold", "Helvetica"
    try:
        pdfmetrics.registerFont(TTFont(FONT_BOLD_NAME, FONT_BOLD_PATH))
        bold = FONT_BOLD_NAME
    except Exception as e:
        logger.warning("bold font not registered (%s), using %s", e, bold)
    try:
        pdfmetrics.registerFont(TTFont(FONT_MED_NAME, FONT_MED_PATH))
        medium = FONT_MED_NAME
    except Exception as e:
        logger.warning("medium font not registered (%s), using %s", e, medium)
    return bold, medium


# ========= TEXT UTILITIES =========
def _fit_text(text: str, font_name: str, font_size: float, max_width: float) -> str:
    """Trim ``text`` with an ellipsis until it fits ``max_width``."""
    if pdfmetrics.stringWidth(text, font_name, font_size) <= max_width:
        return text
    while text and pdfmetrics.stringWidth(text + "…", font_name, font_size) > max_width:
        text = text[:-1]
    return text + "…"


def kpi_items(data: DashboardData) -> List[Tuple[str, str]]:
    cards = data.cards
    return [
        ("Total Sales", f"${thousands_text(cards.total_sales)}"),
        ("Quantity Sold", thousands_text(cards.quantity_sold)),
        ("Discount%", f"{thousands_text(cards.discount_percentage)}%"),
        ("Profit", f"${thousands_text(cards.profit)}"),
    ]


# ========= SECTIONS =========
def _draw_cards(c: canvas.Canvas, data: DashboardData, top: float, width: float, fonts: Tuple[str, str]) -> float:
    bold, medium = fonts
    items = kpi_items(data)
    card_w = (width - 2 * PAGE_MARGIN - CARD_GAP * (len(items) - 1)) / len(items)
    y = top - CARD_H
    for i, (title, value) in enumerate(items):
        x = PAGE_MARGIN + i * (card_w + CARD_GAP)
        c.setFillColor(HexColor("#f3f4f6"))
        c.roundRect(x, y, card_w, CARD_H, 6, stroke=0, fill=1)
        c.setFillColor(TEXT_MUTED)
        c.setFont(medium, 9)
        c.drawString(x + 10, y + CARD_H - 18, title)
        c.setFillColor(TEXT_DARK)
        c.setFont(bold, 16)
        c.drawString(x + 10, y + 14, _fit_text(value, bold, 16, card_w - 20))
    return y


def _draw_bars(c: canvas.Canvas, dataset: Sequence[DataPoint], left: float, top: float, width: float, fonts: Tuple[str, str]) -> float:
    bold, medium = fonts
    c.setFillColor(TEXT_DARK)
    c.setFont(bold, 12)
    c.drawString(left, top, "Sales by City")

    rows = list(dataset)[:MAX_BAR_ROWS]
    ref = reference_max(rows)
    track_x = left + BAR_LABEL_W + 6
    track_w = width - BAR_LABEL_W - 6 - 50
    y = top - 14

    if not rows:
        c.setFillColor(TEXT_MUTED)
        c.setFont(medium, 9)
        c.drawCentredString(track_x + track_w / 2, y - BAR_ROW_H, "No data available")
        y -= 2 * BAR_ROW_H + BAR_ROW_GAP

    c.setFont(medium, 8)
    for point, frac in bar_fills(rows, ref):
        y -= BAR_ROW_H
        c.setFillColor(TEXT_DARK)
        c.drawRightString(left + BAR_LABEL_W, y + 4, _fit_text(point.label, medium, 8, BAR_LABEL_W))
        c.setFillColor(HexColor(TRACK_COLOR))
        c.rect(track_x, y, track_w, BAR_ROW_H, stroke=0, fill=1)
        fill_w = track_w * min(max(frac, 0.0), 1.0)
        if fill_w > 0:
            c.setFillColor(HexColor(BAR_COLOR))
            c.rect(track_x, y, fill_w, BAR_ROW_H, stroke=0, fill=1)
        c.setFillColor(TEXT_MUTED)
        c.drawString(track_x + track_w + 6, y + 4, money_text(point.value))
        y -= BAR_ROW_GAP

    # tick axis, same spacing as the web chart
    y -= 10
    ticks = tick_scale(ref, TICK_COUNT)
    last = len(ticks) - 1
    c.setFillColor(TEXT_MUTED)
    c.setFont(medium, 7)
    for i, tick in enumerate(ticks):
        x = track_x + track_w * i / last
        text = f"${tick.display_text}"
        if i == 0:
            c.drawString(x, y, text)
        elif i == last:
            c.drawRightString(x, y, text)
        else:
            c.drawCentredString(x, y, text)
    return y


def _wedge(c: canvas.Canvas, seg: Segment, cx: float, cy: float, r_out: float, r_in: float) -> None:
    """
    Fill one annular wedge. Engine angles are clockwise on screen (y down);
    PDF is y up, so the angles are mirrored.
    """
    start = -seg.start_angle_deg
    extent = -seg.sweep_deg
    p = c.beginPath()
    p.arc(cx - r_out, cy - r_out, cx + r_out, cy + r_out, startAng=start, extent=extent)
    p.arcTo(cx - r_in, cy - r_in, cx + r_in, cy + r_in, startAng=start + extent, extent=-extent)
    p.close()
    c.setFillColor(HexColor(seg.color))
    c.drawPath(p, stroke=0, fill=1)


def _draw_donut(c: canvas.Canvas, title: str, dataset: Sequence[DataPoint], cx: float, top: float, fonts: Tuple[str, str]) -> float:
    bold, medium = fonts
    c.setFillColor(TEXT_DARK)
    c.setFont(bold, 12)
    c.drawCentredString(cx, top, title)

    cy = top - 16 - DONUT_OUTER
    radii = Radii(cx, cy, DONUT_OUTER, DONUT_INNER)
    segments = donut_segments(dataset, radii, PALETTE, START_DEG)
    total = sum(s.value for s in segments)

    if not segments:
        c.setFillColor(TEXT_MUTED)
        c.setFont(medium, 9)
        c.drawCentredString(cx, cy, "No data available")
    for seg in segments:
        if seg.sweep_deg == 0:
            continue
        _wedge(c, seg, cx, cy, DONUT_OUTER, DONUT_INNER)

    # legend: swatch, label, share
    y = cy - DONUT_OUTER - 16
    c.setFont(medium, 8)
    for seg in segments:
        c.setFillColor(HexColor(seg.color))
        c.rect(cx - 60, y, 8, 8, stroke=0, fill=1)
        c.setFillColor(TEXT_DARK)
        c.drawString(cx - 48, y + 1, _fit_text(seg.label, medium, 8, 80))
        c.drawRightString(cx + 60, y + 1, percent_text(seg.value, total))
        y -= 12
    return y


def _draw_table(c: canvas.Canvas, title: str, header: str, dataset: Sequence[DataPoint], left: float, top: float, width: float, fonts: Tuple[str, str]) -> float:
    bold, medium = fonts
    c.setFillColor(TEXT_DARK)
    c.setFont(bold, 12)
    c.drawString(left, top, title)
    y = top - 16
    c.setFont(bold, 8)
    c.drawString(left, y, header)
    c.drawRightString(left + width, y, "Sales in $")

    c.setFont(medium, 8)
    if not dataset:
        y -= 14
        c.setFillColor(TEXT_MUTED)
        c.drawString(left, y, "No data available")
    for point in list(dataset)[:MAX_TABLE_ROWS]:
        y -= 14
        c.setFillColor(HexColor(TRACK_COLOR))
        c.rect(left, y - 3, width, 12, stroke=0, fill=1)
        c.setFillColor(TEXT_DARK)
        c.drawString(left + 4, y, _fit_text(point.label, medium, 8, width - 80))
        c.drawRightString(left + width - 4, y, f"${thousands_text(point.value)}")
    return y


# ========= PAGE =========
def paint_report(data: DashboardData, state: str, from_date: str, to_date: str) -> bytes:
    fonts = register_fonts()
    bold, medium = fonts
    width, height = letter
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setTitle(f"Sales Overview - {state}")

    c.setFillColor(TEXT_DARK)
    c.setFont(bold, 22)
    c.drawString(PAGE_MARGIN, height - 60, "Sales Overview")
    c.setFillColor(HexColor(ACCENT))
    c.setFont(medium, 11)
    c.drawRightString(width - PAGE_MARGIN, height - 58, f"{state}  |  {from_date} to {to_date}")

    y = _draw_cards(c, data, height - 80, width, fonts)

    col_w = (width - 2 * PAGE_MARGIN - 20) / 2
    bars_bottom = _draw_bars(c, data.sales_by_city, PAGE_MARGIN, y - 30, col_w, fonts)
    _draw_table(c, "Sales by Products", "Product Name", data.sales_by_products,
                PAGE_MARGIN + col_w + 20, y - 30, col_w, fonts)

    top = min(bars_bottom, y - 230) - 30
    third = (width - 2 * PAGE_MARGIN) / 3
    _draw_donut(c, "Sales By Category", data.sales_by_category, PAGE_MARGIN + third / 2, top, fonts)
    _draw_table(c, "Sales By Sub Category", "Sub Category", data.sales_by_sub_category,
                PAGE_MARGIN + third + 8, top, third - 16, fonts)
    _draw_donut(c, "Sales By Segment", data.sales_by_segment, PAGE_MARGIN + 2.5 * third, top, fonts)

    c.setFillColor(colors.grey)
    c.setFont(medium, 7)
    c.drawString(PAGE_MARGIN, 24, "Generated from the sales dashboard API")

    c.showPage()
    c.save()
    buf.seek(0)
    return buf.read()


def stamp_template(template_pdf: str, report_bytes: bytes, out_path: Path) -> None:
    """
    Draw the painted report over the template's first page. Any further
    template pages (terms, appendix) are kept after it as they are.
    """
    writer = PdfWriter(clone_from=template_pdf)
    report_page = PdfReader(io.BytesIO(report_bytes)).pages[0]
    writer.pages[0].merge_page(report_page, over=True)
    writer.write(out_path)


def report_filename(state: str, from_date: str, to_date: str) -> str:
    safe = "".join(ch for ch in state if ch.isalnum() or ch in (" ", "_", "-")).strip().replace(" ", "_")
    return f"{safe or 'report'}_{from_date}_{to_date}.pdf"


def build_report(
    data: DashboardData,
    state: str,
    from_date: str,
    to_date: str,
    out_path: Path | None = None,
    template_pdf: str | None = REPORT_TEMPLATE_PDF,
) -> Path:
    out_path = Path(out_path or Path(REPORT_DIR) / report_filename(state, from_date, to_date))
    out_path.parent.mkdir(parents=True, exist_ok=True)
    report_bytes = paint_report(data, state, from_date, to_date)
    if template_pdf and Path(template_pdf).exists():
        stamp_template(template_pdf, report_bytes, out_path)
    else:
        with open(out_path, "wb") as f:
            f.write(report_bytes)
    logger.info("wrote report %s", out_path)
    return out_path


# ========= MAIN =========
def main(argv=None):
    parser = argparse.ArgumentParser(description="Export the sales dashboard as a PDF page.")
    parser.add_argument("--state", help="state to report on (default: first one the API lists)")
    parser.add_argument("--from-date", dest="from_date", help="YYYY-MM-DD (default: earliest available)")
    parser.add_argument("--to-date", dest="to_date", help="YYYY-MM-DD (default: latest available)")
    parser.add_argument("--out", help="output PDF path")
    args = parser.parse_args(argv)

    session = DashboardSession()
    session.load_states()
    if args.state:
        session.select_state(args.state)
    if args.from_date or args.to_date:
        session.set_dates(args.from_date or session.from_date, args.to_date or session.to_date)

    if session.data is None:
        print(f"[warn] no dashboard data: {session.error or 'nothing selected'}")
        return 1

    out = build_report(session.data, session.selected_state, session.from_date, session.to_date, args.out)
    print(f"[OK] {session.selected_state} -> {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
