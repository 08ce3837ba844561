from __future__ import annotations

import logging
import os
from pathlib import Path

# Paths and filenames
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("QV_DATA_DIR", PROJECT_ROOT / "quadratic_visualizer" / "data"))

# Default viewport (restored on "Reset View")
DEFAULT_VIEWPORT = {"x_min": -10.0, "x_max": 10.0, "y_min": -10.0, "y_max": 10.0, "grid_enabled": True}

# Parameter defaults and bounds
DEFAULT_PARAMS = {"a": 1.0, "b": 0.0, "c": 0.0}
PARAM_BOUNDS = {
    "a": {"min": -5.0, "max": 5.0, "step": 0.1},
    "b": {"min": -20.0, "max": 20.0, "step": 0.1},
    "c": {"min": -50.0, "max": 50.0, "step": 0.1},
}

# Precision / guard rails
EPS_ZERO = 1e-9
MIN_SPAN = 1e-9
MAX_SPAN = 1e12

# Curve sampling
SAMPLE_STRIDE_PX = 2
CLIP_FACTOR = 100.0

# Pan / zoom
ZOOM_OUT_FACTOR = 1.1
ZOOM_IN_FACTOR = 1 / 1.1

# Ticks and labels
TARGET_TICKS = 10
TICK_LENGTH_PX = 5
LABEL_OFFSET_PX = 8
ORIGIN_LABEL_OFFSET_PX = 6
EXPONENTIAL_THRESHOLD = 10000
LABEL_SIGNIFICANT_DIGITS = 10
# Smaller non-zero magnitudes switch to exponent labels.
FIXED_LABEL_MIN = 1e-6

# Canvas
DEFAULT_CANVAS = {"width": 800, "height": 560, "dpr": 1.0}
PLOT_HEIGHT_PX = 560

# Themes (light uses the Okabe-Ito palette)
DEFAULT_THEME = "dark"
THEME_COLORS = {
    "dark": {
        "background": "#1f2937",
        "grid": "rgba(255, 255, 255, 0.08)",
        "axis": "#9ca3af",
        "label": "#d1d5db",
        "curve": "#38bdf8",
        "symmetry": "rgba(255, 255, 255, 0.3)",
        "vertex": "#facc15",
        "y_intercept": "#a78bfa",
        "root": "#4ade80",
        "outline": "#1f2937",
    },
    "light": {
        "background": "#ffffff",
        "grid": "rgba(0, 0, 0, 0.08)",
        "axis": "#777777",
        "label": "#333333",
        "curve": "#0072B2",
        "symmetry": "rgba(0, 0, 0, 0.35)",
        "vertex": "#D55E00",
        "y_intercept": "#CC79A7",
        "root": "#009E73",
        "outline": "#ffffff",
    },
}
CURVE_WIDTH = 3.0
GRID_WIDTH = 1.0
AXIS_WIDTH = 1.5
SYMMETRY_DASH = (5, 5)
VERTEX_RADIUS = 6.0
ROOT_RADIUS = 5.0
POINT_RADIUS = 4.0
LABEL_FONT_SIZE = 11
LABEL_FONT_FAMILY = "Inter, sans-serif"

# Quiz
QUIZ_TARGET_RANGE = 6
QUIZ_TOLERANCE = 0.5

# Randomize
RANDOM_RANGES = {"a": (-5.0, 5.0), "b": (-10.0, 10.0), "c": (-20.0, 20.0)}

# AI narration
FEEDBACK_MODEL = os.environ.get("QV_FEEDBACK_MODEL", "gpt-4o-mini")
TTS_MODEL = os.environ.get("QV_TTS_MODEL", "gpt-4o-mini-tts")
TTS_VOICE = os.environ.get("QV_TTS_VOICE", "alloy")
FEEDBACK_MAX_TOKENS = 200
NARRATION_TIMEOUT_SECONDS = 30.0

# Logging and tracing
LOG_LEVEL = getattr(logging, os.environ.get("QV_LOG_LEVEL", "INFO").upper(), logging.INFO)
LOG_FILE = os.environ.get("QV_LOG_FILE")
SESSION_LOG_ENABLED = os.environ.get("QV_SESSION_LOG", "1") not in {"0", "false", "no"}
LOG_RATE_LIMIT_SECONDS = 0.1
PREVIEW_LOG_CAPACITY = 5
SCHEMA_VERSION = 1
FUNCTION_TYPE = "quadratic"
APP_MODE = "dash"

# CSV column order
SCHEMA_COLUMNS = [
    "schema_version",
    "session_id",
    "t_server_iso",
    "seq",
    "event",
    "function_type",
    "param_name",
    "old_value",
    "new_value",
    "source",
    "a",
    "b",
    "c",
    "elapsed_time_ms",
    "mode",
    "viewport_xrange_min",
    "viewport_xrange_max",
    "viewport_yrange_min",
    "viewport_yrange_max",
    "grid_enabled",
    "quiz_kind",
    "quiz_result",
    "narration_kind",
    "narration_status",
]
