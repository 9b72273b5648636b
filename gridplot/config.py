from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


RGBA = tuple[float, float, float, float]
MarkerShape = Literal["circle", "cross", "square", "triangle"]
LineStyle = Literal["solid", "dashed", "dotted"]

DEFAULT_PLOT_WIDTH = 800
DEFAULT_PLOT_HEIGHT = 600
DEFAULT_ASPECT_RATIO = DEFAULT_PLOT_WIDTH / DEFAULT_PLOT_HEIGHT
DEFAULT_GRID_WIDTH = 1200
DEFAULT_GRID_HEIGHT = 900
DEFAULT_SUBPLOT_SPACING = 0.05

BOUNDS_PADDING_FRACTION = 0.05
HISTOGRAM_X_PADDING_FRACTION = 0.02
DEGENERATE_MIN_HALF_SPAN = 0.5
DEFAULT_RANGE = (0.0, 1.0)

DEFAULT_TICK_TARGET = 5
MAX_TICK_DECIMALS = 2
MAX_SCIENTIFIC_DIGITS = 15
MIN_RELATIVE_TICK_SPAN = 1e-9

MIN_AUTO_BINS = 5
MAX_AUTO_BINS = 50

DEFAULT_POINT_SIZE = 3.0
DEFAULT_LINE_WIDTH = 2.0
DEFAULT_SERIES_ALPHA = 0.8
DEFAULT_MARKER: MarkerShape = "circle"
DEFAULT_LINE_STYLE: LineStyle = "solid"
REFERENCE_LINE_WIDTH = 1.5

DASH_PATTERNS: dict[str, tuple[float, ...] | None] = {
    "solid": None,
    "dashed": (10.0, 5.0),
    "dotted": (2.0, 3.0),
}
REFERENCE_LINE_DASH = (4.0, 4.0)

MIN_PLOT_EXTENT_PX = 1.0
EMPTY_PLOT_TEXT = "Empty plot"
HISTOGRAM_Y_LABEL = "Frequency"


@dataclass(frozen=True)
class Margins:
    """Pixel gutters between the render box and the plot area."""

    left: float = 80.0
    right: float = 40.0
    top: float = 60.0
    bottom: float = 80.0

    def __post_init__(self) -> None:
        if min(self.left, self.right, self.top, self.bottom) < 0:
            raise ValueError("margins must be >= 0")


@dataclass(frozen=True)
class PlotTheme:
    background: RGBA = (1.0, 1.0, 1.0, 1.0)
    axis_color: RGBA = (0.0, 0.0, 0.0, 1.0)
    grid_color: RGBA = (0.85, 0.85, 0.85, 1.0)
    text_color: RGBA = (0.0, 0.0, 0.0, 1.0)
    placeholder_color: RGBA = (0.5, 0.5, 0.5, 1.0)
    legend_background: RGBA = (1.0, 1.0, 1.0, 0.9)
    legend_border: RGBA = (0.0, 0.0, 0.0, 0.3)
    font_family: str = "DejaVu Sans"
    tick_font_px: float = 11.0
    label_font_px: float = 13.0
    title_font_px: float = 16.0
    legend_font_px: float = 11.0
    placeholder_font_px: float = 18.0
    grid_title_font_px: float = 20.0
    axis_line_width: float = 1.5
    grid_line_width: float = 1.0
    tick_length: float = 5.0
