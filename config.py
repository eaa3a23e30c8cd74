# config.py
# Reads Configs/config.toml once and exposes module-level settings with sane
# fallbacks, so every module works even when the file is missing.

import os
from pathlib import Path

import tomllib  # stdlib (3.11+)

from chart_geometry import DEFAULT_PALETTE, DEFAULT_TICK_COUNT, Radii

# --- anchor everything to this file's folder ---
HERE = Path(__file__).parent


def load_cfg(path: Path | None = None) -> dict:
    cfg_path = path or HERE / "Configs" / "config.toml"
    if cfg_path.exists():
        with open(cfg_path, "rb") as f:
            return tomllib.load(f)
    return {}


_CFG = load_cfg()
_api = _CFG.get("api", {})
_chart = _CFG.get("chart", {})
_paths = _CFG.get("paths", {})
_fonts = _CFG.get("fonts", {})
_brand = _CFG.get("brand", {})

# SALES_API_BASE wins over the config file (handy for a local backend)
API_BASE = os.getenv("SALES_API_BASE") or _api.get(
    "base_url", "https://salesdashboard-backend-ctvm.onrender.com/api"
)
API_TIMEOUT_S = float(_api.get("timeout_s", 15))

PALETTE = tuple(_chart.get("palette") or DEFAULT_PALETTE)
TICK_COUNT = int(_chart.get("tick_count", DEFAULT_TICK_COUNT))
START_DEG = float(_chart.get("start_deg", 0.0))
DONUT_RADII = Radii(
    center_x=float(_chart.get("center_x", 150)),
    center_y=float(_chart.get("center_y", 150)),
    outer_radius=float(_chart.get("outer_radius", 100)),
    inner_radius=float(_chart.get("inner_radius", 60)),
)

REPORT_DIR = str(HERE / _paths.get("report_dir", "reports"))
REPORT_TEMPLATE_PDF = str(HERE / _paths.get("report_template_pdf", "Configs/ReportTemplate.pdf"))

FONT_BOLD_NAME = _fonts.get("bold_name", "HKGrotesk-Bold")
FONT_MED_NAME = _fonts.get("medium_name", "HKGrotesk-Medium")
FONT_BOLD_PATH = str(HERE / _fonts.get("bold_path", "Configs/hk-grotesk.bold.ttf"))
FONT_MED_PATH = str(HERE / _fonts.get("medium_path", "Configs/hk-grotesk.medium.ttf"))

ACCENT = _brand.get("accent", "#227cb4")
TRACK_COLOR = _brand.get("track", "#d6eff3")
BAR_COLOR = _brand.get("bar", "#8bd0e0")
