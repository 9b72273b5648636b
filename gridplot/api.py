from __future__ import annotations

from typing import Literal

from gridplot.config import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_GRID_HEIGHT,
    DEFAULT_GRID_WIDTH,
    DEFAULT_PLOT_HEIGHT,
    DEFAULT_PLOT_WIDTH,
    DEFAULT_SUBPLOT_SPACING,
)
from gridplot.errors import PlotDataError
from gridplot.plot import HistogramPlot, LinePlot, Plot, ScatterPlot
from gridplot.subplots import SubplotGrid


PLOT_KINDS: dict[str, type[Plot]] = {
    "scatter": ScatterPlot,
    "line": LinePlot,
    "histogram": HistogramPlot,
}


def figure(
    kind: Literal["scatter", "line", "histogram"] = "scatter",
    width: int | None = None,
    height: int | None = None,
    *,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> Plot:
    plot_cls = PLOT_KINDS.get(kind)
    if plot_cls is None:
        raise PlotDataError(f"unknown plot kind {kind!r}; expected one of {tuple(PLOT_KINDS)}")
    w, h = _resolve_size(width, height, aspect_ratio, default=(DEFAULT_PLOT_WIDTH, DEFAULT_PLOT_HEIGHT))
    return plot_cls(w, h)


def subplots(
    rows: int,
    cols: int,
    width: int | None = None,
    height: int | None = None,
    *,
    spacing: float = DEFAULT_SUBPLOT_SPACING,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> SubplotGrid:
    w, h = _resolve_size(width, height, aspect_ratio, default=(DEFAULT_GRID_WIDTH, DEFAULT_GRID_HEIGHT))
    return SubplotGrid(rows, cols, w, h, spacing)


def _resolve_size(
    width: int | None,
    height: int | None,
    aspect_ratio: float,
    *,
    default: tuple[int, int],
) -> tuple[int, int]:
    if aspect_ratio <= 0:
        raise PlotDataError("aspect_ratio must be > 0")
    if width is None and height is None:
        return default
    if width is None and height is not None:
        if height <= 0:
            raise PlotDataError("height must be > 0")
        width = max(1, int(round(height * aspect_ratio)))
    elif width is not None and height is None:
        if width <= 0:
            raise PlotDataError("width must be > 0")
        height = max(1, int(round(width / aspect_ratio)))
    assert width is not None and height is not None
    return width, height
