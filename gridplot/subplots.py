from __future__ import annotations

from collections.abc import Iterator
import logging
from typing import TypeVar

import numpy as np

from gridplot.config import DEFAULT_GRID_HEIGHT, DEFAULT_GRID_WIDTH, DEFAULT_SUBPLOT_SPACING, PlotTheme
from gridplot.errors import PlotDataError, SubplotIndexError
from gridplot.plot import Plot, ScatterPlot
from gridplot.raster.draw_text import text_size
from gridplot.raster.surface import RasterSurface
from gridplot.render import RenderReport
from gridplot.surface import DrawingSurface, PathLike
from gridplot.svg import SvgSurface
from gridplot.transform import CellPlacement, CellRect


LOGGER = logging.getLogger(__name__)

P = TypeVar("P", bound=Plot)

TITLE_BAND_PAD = 10.0


class SubplotGrid:
    """Fixed rows x cols grid of independently owned plots rendered onto one canvas.

    Every cell is created up front as a ``ScatterPlot`` sized to its share of
    the canvas. ``get_subplot(row, col, LinePlot)`` swaps an untouched cell for
    the requested kind.
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        width: int = DEFAULT_GRID_WIDTH,
        height: int = DEFAULT_GRID_HEIGHT,
        spacing: float = DEFAULT_SUBPLOT_SPACING,
        *,
        theme: PlotTheme | None = None,
    ) -> None:
        if rows <= 0 or cols <= 0:
            raise PlotDataError(f"subplot grid needs rows > 0 and cols > 0, got {rows}x{cols}")
        if width <= 0 or height <= 0:
            raise PlotDataError(f"subplot grid width and height must be > 0, got {width}x{height}")
        if not 0.0 <= spacing < 0.5:
            raise PlotDataError(f"spacing must be within [0, 0.5), got {spacing!r}")
        self._rows = int(rows)
        self._cols = int(cols)
        self._width = int(width)
        self._height = int(height)
        self.spacing = float(spacing)
        self.theme = theme or PlotTheme()
        self.main_title = ""
        cell_w, cell_h = self._cell_plot_size()
        self._cells: list[list[Plot]] = [
            [ScatterPlot(cell_w, cell_h, theme=self.theme) for _ in range(self._cols)] for _ in range(self._rows)
        ]

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def get_rows(self) -> int:
        return self._rows

    def get_cols(self) -> int:
        return self._cols

    def get_subplot(self, row: int, col: int, kind: type[P] = ScatterPlot) -> P:  # type: ignore[assignment]
        if not (0 <= row < self._rows and 0 <= col < self._cols):
            raise SubplotIndexError(f"subplot ({row}, {col}) outside {self._rows}x{self._cols} grid")
        cell = self._cells[row][col]
        if type(cell) is kind:
            return cell  # type: ignore[return-value]
        if not cell.is_pristine:
            raise PlotDataError(
                f"subplot ({row}, {col}) already holds a {type(cell).__name__}; cannot use it as {kind.__name__}"
            )
        replacement = kind(cell.width, cell.height, theme=self.theme)
        self._cells[row][col] = replacement
        return replacement

    def set_main_title(self, title: str) -> None:
        self.main_title = title

    def cell_rects(self) -> list[list[CellRect]]:
        """Cell rectangles in canvas pixels, centered as a block below the title band."""
        hs, vs = self._gaps()
        band = self._title_band()
        cell_w, cell_h = self._cell_extent(band)
        grid_w = self._cols * cell_w + (self._cols - 1) * hs
        grid_h = self._rows * cell_h + (self._rows - 1) * vs
        x0 = (self._width - grid_w) / 2.0
        y0 = (self._height - band - grid_h) / 2.0 + band
        return [
            [CellRect(x0 + c * (cell_w + hs), y0 + r * (cell_h + vs), cell_w, cell_h) for c in range(self._cols)]
            for r in range(self._rows)
        ]

    def render(self, surface: DrawingSurface) -> list[RenderReport]:
        if self.main_title:
            self._draw_main_title(surface)
        reports = []
        rects = self.cell_rects()
        for r in range(self._rows):
            for c in range(self._cols):
                plot = self._cells[r][c]
                placement = CellPlacement.fit(rects[r][c], plot.width, plot.height)
                reports.append(plot.render(surface, placement))
        return reports

    def to_rgba(self) -> np.ndarray:
        surface = self._raster_surface()
        self.render(surface)
        return surface.pixels

    def save_png(self, path: PathLike) -> bool:
        surface = self._raster_surface()
        self.render(surface)
        return surface.write_png(path)

    def save_svg(self, path: PathLike) -> bool:
        surface = SvgSurface(self._width, self._height, background=self.theme.background, font_family=self.theme.font_family)
        self.render(surface)
        return surface.write_svg(path)

    def _raster_surface(self) -> RasterSurface:
        return RasterSurface(self._width, self._height, background=self.theme.background, font_family=self.theme.font_family)

    def _gaps(self) -> tuple[float, float]:
        return self.spacing * self._width, self.spacing * self._height

    def _title_band(self) -> float:
        if not self.main_title:
            return 0.0
        _, h = text_size(
            self.main_title,
            font_family=self.theme.font_family,
            font_size_px=self.theme.grid_title_font_px,
            bold=True,
        )
        _, vs = self._gaps()
        return h + TITLE_BAND_PAD + vs * 0.5

    def _cell_extent(self, band: float) -> tuple[float, float]:
        hs, vs = self._gaps()
        cell_w = (self._width - hs * (self._cols + 1)) / self._cols
        cell_h = (self._height - band - vs * (self._rows + 1)) / self._rows
        return max(1.0, cell_w), max(1.0, cell_h)

    def _cell_plot_size(self) -> tuple[int, int]:
        cell_w, cell_h = self._cell_extent(self._title_band())
        return max(1, int(round(cell_w))), max(1, int(round(cell_h)))

    def _draw_main_title(self, surface: DrawingSurface) -> None:
        font_px = self.theme.grid_title_font_px
        w, _ = surface.measure_text(self.main_title, font_px, bold=True)
        _, vs = self._gaps()
        top = self.cell_rects()[0][0].y - self._title_band()
        surface.set_color(self.theme.text_color)
        surface.draw_text(self.main_title, ((self._width - w) / 2.0, top + vs * 0.25), font_px, bold=True)
        LOGGER.debug("drew grid title %r at y=%.1f", self.main_title, top)

    def __iter__(self) -> Iterator[Plot]:
        for row in self._cells:
            yield from row
