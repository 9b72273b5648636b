from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, Union

import numpy as np

from gridplot.colors import cluster_color
from gridplot.config import DEFAULT_LINE_WIDTH, DEFAULT_POINT_SIZE, DEFAULT_SERIES_ALPHA, REFERENCE_LINE_WIDTH, RGBA
from gridplot.errors import PlotDataError


Orientation = Literal["vertical", "horizontal"]
OUTLIER_LABEL = -1


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Style:
    color: RGBA = (0.0, 0.0, 1.0, DEFAULT_SERIES_ALPHA)
    point_size: float = DEFAULT_POINT_SIZE
    line_width: float = DEFAULT_LINE_WIDTH
    label: str = ""

    def __post_init__(self) -> None:
        if self.point_size <= 0:
            raise PlotDataError("point_size must be > 0")
        if self.line_width <= 0:
            raise PlotDataError("line_width must be > 0")


@dataclass(frozen=True)
class PlainSeries:
    name: str
    x: np.ndarray
    y: np.ndarray
    style: Style

    def __post_init__(self) -> None:
        x = _readonly(self.x, np.float64)
        y = _readonly(self.y, np.float64)
        if x.shape != y.shape or x.ndim != 1:
            raise PlotDataError(f"x and y length mismatch: {x.size} != {y.size}")
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def __len__(self) -> int:
        return int(self.x.size)

    @property
    def points(self) -> tuple[Point, ...]:
        return tuple(Point(float(x), float(y)) for x, y in zip(self.x, self.y, strict=True))


@dataclass(frozen=True)
class ClusterSeries:
    """Points tagged with cluster labels; ``-1`` marks outliers.

    Per-label colors are fixed here, at construction, so nothing downstream
    (legend visibility included) can shift them.
    """

    name: str
    x: np.ndarray
    y: np.ndarray
    labels: np.ndarray
    point_size: float = DEFAULT_POINT_SIZE
    alpha: float = DEFAULT_SERIES_ALPHA
    label_names: Mapping[int, str] = field(default_factory=dict)
    label_colors: Mapping[int, RGBA] = field(default_factory=dict)
    cluster_ids: tuple[int, ...] = field(init=False)

    def __post_init__(self) -> None:
        x = _readonly(self.x, np.float64)
        y = _readonly(self.y, np.float64)
        labels = _readonly(self.labels, np.int64)
        if not (x.shape == y.shape == labels.shape) or x.ndim != 1:
            raise PlotDataError(
                f"points and labels length mismatch: x={x.size}, y={y.size}, labels={labels.size}"
            )
        if labels.size and int(labels.min()) < OUTLIER_LABEL:
            raise PlotDataError(f"cluster labels must be >= {OUTLIER_LABEL}, got {int(labels.min())}")
        if self.point_size <= 0:
            raise PlotDataError("point_size must be > 0")
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "labels", labels)
        object.__setattr__(self, "label_names", MappingProxyType(dict(self.label_names)))
        object.__setattr__(self, "label_colors", MappingProxyType(dict(self.label_colors)))
        object.__setattr__(self, "cluster_ids", tuple(int(v) for v in np.unique(labels)))

    def __len__(self) -> int:
        return int(self.x.size)

    def display_name(self, label: int) -> str:
        custom = self.label_names.get(label)
        if custom:
            return custom
        if label == OUTLIER_LABEL:
            return "Outliers"
        return f"Cluster {label}"

    def color_for(self, label: int) -> RGBA:
        color = self.label_colors.get(label)
        if color is None:
            color = cluster_color(label)
        return (color[0], color[1], color[2], color[3] * self.alpha)

    def members(self, label: int) -> tuple[np.ndarray, np.ndarray]:
        mask = self.labels == label
        return self.x[mask], self.y[mask]


@dataclass(frozen=True)
class ContinuousHistogram:
    name: str
    values: np.ndarray
    edges: np.ndarray
    counts: np.ndarray
    style: Style

    def __post_init__(self) -> None:
        edges = _readonly(self.edges, np.float64)
        counts = _readonly(self.counts, np.int64)
        if edges.size != counts.size + 1:
            raise PlotDataError(f"histogram needs len(edges) == len(counts) + 1, got {edges.size} and {counts.size}")
        object.__setattr__(self, "values", _readonly(self.values, np.float64))
        object.__setattr__(self, "edges", edges)
        object.__setattr__(self, "counts", counts)

    @property
    def bin_count(self) -> int:
        return int(self.counts.size)


@dataclass(frozen=True)
class DiscreteHistogram:
    name: str
    categories: tuple[str, ...]
    counts: np.ndarray
    style: Style
    category_colors: tuple[RGBA, ...] | None = None

    def __post_init__(self) -> None:
        counts = _readonly(self.counts, np.int64)
        if len(self.categories) != counts.size:
            raise PlotDataError(f"categories/counts length mismatch: {len(self.categories)} != {counts.size}")
        if self.category_colors is not None and len(self.category_colors) != counts.size:
            raise PlotDataError(
                f"category colors/counts length mismatch: {len(self.category_colors)} != {counts.size}"
            )
        object.__setattr__(self, "categories", tuple(self.categories))
        object.__setattr__(self, "counts", counts)

    def color_for(self, index: int) -> RGBA:
        if self.category_colors is None:
            return self.style.color
        return self.category_colors[index]


@dataclass(frozen=True)
class ReferenceLine:
    orientation: Orientation
    value: float
    label: str
    color: RGBA
    line_width: float = REFERENCE_LINE_WIDTH

    def __post_init__(self) -> None:
        if self.orientation not in ("vertical", "horizontal"):
            raise PlotDataError(f"orientation must be 'vertical' or 'horizontal', got {self.orientation!r}")
        if not np.isfinite(self.value):
            raise PlotDataError(f"reference line value must be finite, got {self.value!r}")

    @property
    def is_vertical(self) -> bool:
        return self.orientation == "vertical"


HistogramSeries = Union[ContinuousHistogram, DiscreteHistogram]
Series = Union[PlainSeries, ClusterSeries, ContinuousHistogram, DiscreteHistogram]


def _readonly(values: np.ndarray, dtype: type) -> np.ndarray:
    arr = np.array(values, dtype=dtype, copy=True)
    arr.setflags(write=False)
    return arr
