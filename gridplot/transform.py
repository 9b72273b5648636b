from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from gridplot.config import MIN_PLOT_EXTENT_PX, Margins
from gridplot.scales import DataLimits, widen_degenerate
from gridplot.series import Point


@dataclass(frozen=True)
class CellRect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class CellPlacement:
    """Where a plot's render box lands on the parent surface, and at what scale."""

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    def __post_init__(self) -> None:
        if not self.scale > 0:
            raise ValueError("placement scale must be > 0")

    @classmethod
    def fit(cls, rect: CellRect, plot_width: float, plot_height: float) -> CellPlacement:
        """Uniformly scale a ``plot_width x plot_height`` box into ``rect`` and center it."""
        scale = min(rect.width / plot_width, rect.height / plot_height)
        scale = max(scale, 1e-6)
        x = rect.x + (rect.width - plot_width * scale) / 2.0
        y = rect.y + (rect.height - plot_height * scale) / 2.0
        return cls(x=x, y=y, scale=scale)


@dataclass(frozen=True)
class CoordinateTransform:
    limits: DataLimits
    plot_left: float
    plot_top: float
    plot_width: float
    plot_height: float

    @classmethod
    def build(
        cls,
        limits: DataLimits,
        width: float,
        height: float,
        margins: Margins,
        placement: CellPlacement | None = None,
    ) -> CoordinateTransform:
        placement = placement or CellPlacement()
        s = placement.scale
        inner_w = (width - margins.left - margins.right) * s
        inner_h = (height - margins.top - margins.bottom) * s
        xmin, xmax = widen_degenerate(limits.xmin, limits.xmax)
        ymin, ymax = widen_degenerate(limits.ymin, limits.ymax)
        return cls(
            limits=DataLimits(xmin=xmin, xmax=xmax, ymin=ymin, ymax=ymax),
            plot_left=placement.x + margins.left * s,
            plot_top=placement.y + margins.top * s,
            plot_width=max(MIN_PLOT_EXTENT_PX, inner_w),
            plot_height=max(MIN_PLOT_EXTENT_PX, inner_h),
        )

    @property
    def plot_right(self) -> float:
        return self.plot_left + self.plot_width

    @property
    def plot_bottom(self) -> float:
        return self.plot_top + self.plot_height

    @property
    def plot_rect(self) -> CellRect:
        return CellRect(self.plot_left, self.plot_top, self.plot_width, self.plot_height)

    def x_to_screen(self, x: float) -> float:
        return self.plot_left + (x - self.limits.xmin) / self.limits.x_span * self.plot_width

    def y_to_screen(self, y: float) -> float:
        return self.plot_bottom - (y - self.limits.ymin) / self.limits.y_span * self.plot_height

    def to_screen(self, point: Point | tuple[float, float]) -> tuple[float, float]:
        x, y = (point.x, point.y) if isinstance(point, Point) else point
        return self.x_to_screen(x), self.y_to_screen(y)

    def to_data(self, screen: tuple[float, float]) -> Point:
        sx, sy = screen
        x = self.limits.xmin + (sx - self.plot_left) / self.plot_width * self.limits.x_span
        y = self.limits.ymin + (self.plot_bottom - sy) / self.plot_height * self.limits.y_span
        return Point(x, y)

    def to_screen_arrays(self, xs: np.ndarray, ys: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        sx = self.plot_left + (np.asarray(xs, dtype=np.float64) - self.limits.xmin) / self.limits.x_span * self.plot_width
        sy = self.plot_bottom - (np.asarray(ys, dtype=np.float64) - self.limits.ymin) / self.limits.y_span * self.plot_height
        return sx, sy
