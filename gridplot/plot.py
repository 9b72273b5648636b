from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
import math
from typing import Any, ClassVar

import numpy as np

from gridplot.adapters.normalize import normalize_counts, normalize_labels, normalize_points, normalize_values, normalize_xy
from gridplot.colors import ColorAssigner, ColorSpec, resolve_color
from gridplot.config import (
    DASH_PATTERNS,
    DEFAULT_LINE_STYLE,
    DEFAULT_LINE_WIDTH,
    DEFAULT_MARKER,
    DEFAULT_PLOT_HEIGHT,
    DEFAULT_PLOT_WIDTH,
    DEFAULT_POINT_SIZE,
    DEFAULT_SERIES_ALPHA,
    DEFAULT_TICK_TARGET,
    HISTOGRAM_Y_LABEL,
    MAX_AUTO_BINS,
    REFERENCE_LINE_WIDTH,
    LineStyle,
    Margins,
    MarkerShape,
    PlotTheme,
)
from gridplot.errors import PlotDataError
from gridplot.histogram import (
    HistogramMode,
    check_discrete_allowed,
    check_histogram_mode,
    check_vertical_line_allowed,
    compute_bins,
    default_categories,
    histogram_mode,
)
from gridplot.raster.surface import RasterSurface
from gridplot.render import PlotKind, PlotSnapshot, RenderPipeline, RenderReport, SeriesPresentation
from gridplot.scales import DataLimits, widen_degenerate
from gridplot.series import (
    ClusterSeries,
    ContinuousHistogram,
    DiscreteHistogram,
    Orientation,
    PlainSeries,
    ReferenceLine,
    Series,
    Style,
)
from gridplot.surface import DrawingSurface, PathLike
from gridplot.svg import SvgSurface
from gridplot.transform import CellPlacement


LOGGER = logging.getLogger(__name__)

MARKER_SHAPES: tuple[MarkerShape, ...] = ("circle", "cross", "square", "triangle")


class Plot:
    """A single chart: series, reference lines, labels, bounds and legend state.

    Concrete chart kinds add their own ``add_*`` methods. Rendering works on a
    frozen snapshot, so a plot can be saved repeatedly with identical output
    and keeps accepting data afterwards.
    """

    kind: ClassVar[PlotKind] = "scatter"
    default_y_label: ClassVar[str] = ""

    def __init__(
        self,
        width: int = DEFAULT_PLOT_WIDTH,
        height: int = DEFAULT_PLOT_HEIGHT,
        *,
        margins: Margins | None = None,
        theme: PlotTheme | None = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise PlotDataError(f"plot width and height must be > 0, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self.margins = margins or Margins()
        self.theme = theme or PlotTheme()
        self.point_size = DEFAULT_POINT_SIZE
        self.alpha = DEFAULT_SERIES_ALPHA
        self.tick_target = DEFAULT_TICK_TARGET
        self._colors = ColorAssigner()
        self._series: list[Series] = []
        self._reference_lines: list[ReferenceLine] = []
        self._hidden_legend_items: set[str] = set()
        self._bounds_override: DataLimits | None = None
        self.legend_enabled = True
        self.title = ""
        self.x_label = ""
        self.y_label = self.default_y_label
        self._auto_reference_count = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def series(self) -> tuple[Series, ...]:
        return tuple(self._series)

    @property
    def reference_lines(self) -> tuple[ReferenceLine, ...]:
        return tuple(self._reference_lines)

    @property
    def bounds_override(self) -> DataLimits | None:
        return self._bounds_override

    @property
    def hidden_legend_items(self) -> frozenset[str]:
        return frozenset(self._hidden_legend_items)

    @property
    def is_pristine(self) -> bool:
        return (
            not self._series
            and not self._reference_lines
            and not self.title
            and not self.x_label
            and self.y_label == self.default_y_label
            and self._bounds_override is None
        )

    def series_count(self) -> int:
        return len(self._series)

    def reference_line_count(self) -> int:
        return len(self._reference_lines)

    # -- labels -----------------------------------------------------------

    def set_title(self, title: str) -> None:
        self.title = title

    def set_xlabel(self, label: str) -> None:
        self.x_label = label

    def set_ylabel(self, label: str) -> None:
        self.y_label = label

    def set_labels(self, title: str, x_label: str, y_label: str) -> None:
        self.title = title
        self.x_label = x_label
        self.y_label = y_label

    # -- bounds -----------------------------------------------------------

    def set_bounds(self, min_x: float, max_x: float, min_y: float, max_y: float) -> None:
        values = (min_x, max_x, min_y, max_y)
        if not all(math.isfinite(v) for v in values):
            raise PlotDataError(f"bounds must be finite, got {values!r}")
        if min_x > max_x or min_y > max_y:
            raise PlotDataError(f"bounds must satisfy min <= max, got x=({min_x}, {max_x}) y=({min_y}, {max_y})")
        xmin, xmax = widen_degenerate(float(min_x), float(max_x))
        ymin, ymax = widen_degenerate(float(min_y), float(max_y))
        self._bounds_override = DataLimits(xmin=xmin, xmax=xmax, ymin=ymin, ymax=ymax)

    def auto_bounds(self) -> None:
        self._bounds_override = None

    # -- legend -----------------------------------------------------------

    def set_legend_enabled(self, enabled: bool) -> None:
        self.legend_enabled = bool(enabled)

    def hide_legend_item(self, label: str) -> None:
        self._hidden_legend_items.add(label)

    def show_legend_item(self, label: str) -> None:
        self._hidden_legend_items.discard(label)

    def show_all_legend_items(self) -> None:
        self._hidden_legend_items.clear()

    # -- reference lines --------------------------------------------------

    def add_vertical_line(self, x: float, label: str | None = None, color: ColorSpec | None = None) -> ReferenceLine:
        return self.add_reference_line("vertical", x, label=label, color=color)

    def add_horizontal_line(self, y: float, label: str | None = None, color: ColorSpec | None = None) -> ReferenceLine:
        return self.add_reference_line("horizontal", y, label=label, color=color)

    def add_reference_line(
        self,
        orientation: Orientation,
        value: float,
        *,
        label: str | None = None,
        color: ColorSpec | None = None,
        line_width: float = REFERENCE_LINE_WIDTH,
    ) -> ReferenceLine:
        if orientation == "vertical":
            check_vertical_line_allowed(self._series)
        if label is None:
            self._auto_reference_count += 1
            label = f"Ref Line {self._auto_reference_count}"
        if color is None:
            color = self._colors.next_auto_color("reference_line")
        line = ReferenceLine(
            orientation=orientation,
            value=float(value),
            label=label,
            color=resolve_color(color),
            line_width=line_width,
        )
        self._reference_lines.append(line)
        return line

    def clear_reference_lines(self) -> None:
        self._reference_lines.clear()
        self._auto_reference_count = 0

    # -- lifecycle --------------------------------------------------------

    def clear(self) -> None:
        """Drop all data, labels, bounds and legend state; size, margins and theme stay."""
        self._series.clear()
        self._reference_lines.clear()
        self._hidden_legend_items.clear()
        self._bounds_override = None
        self._colors.reset()
        self._auto_reference_count = 0
        self.legend_enabled = True
        self.title = ""
        self.x_label = ""
        self.y_label = self.default_y_label

    def snapshot(self) -> PlotSnapshot:
        return PlotSnapshot(
            width=self._width,
            height=self._height,
            series=tuple(self._series),
            reference_lines=tuple(self._reference_lines),
            title=self.title,
            x_label=self.x_label,
            y_label=self.y_label,
            bounds_override=self._bounds_override,
            legend_enabled=self.legend_enabled,
            hidden_legend_items=frozenset(self._hidden_legend_items),
            margins=self.margins,
            theme=self.theme,
            presentation=self._presentation(),
            tick_target=self.tick_target,
        )

    def render(self, surface: DrawingSurface, placement: CellPlacement | None = None) -> RenderReport:
        return RenderPipeline(self.snapshot(), surface, placement).run()

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

    # -- internals --------------------------------------------------------

    def _presentation(self) -> SeriesPresentation:
        return SeriesPresentation(kind=self.kind)

    def _raster_surface(self) -> RasterSurface:
        return RasterSurface(self._width, self._height, background=self.theme.background, font_family=self.theme.font_family)

    def _series_style(self, color: ColorSpec | None, label: str, *, line_width: float = DEFAULT_LINE_WIDTH) -> Style:
        if color is None:
            color = self._colors.next_auto_color("series")
        rgba = resolve_color(color, alpha=self.alpha)
        self._colors.note_series_color(rgba)
        return Style(color=rgba, point_size=self.point_size, line_width=line_width, label=label)

    def _auto_name(self, prefix: str, series_type: type) -> str:
        count = sum(1 for item in self._series if isinstance(item, series_type))
        return f"{prefix} {count + 1}"


class _PointPlot(Plot):
    """Shared data entry for plots drawn from (x, y) points."""

    def add_series(self, x: Any, y: Any, name: str | None = None, color: ColorSpec | None = None) -> PlainSeries | None:
        data = normalize_xy(x, y)
        if data.size == 0:
            LOGGER.warning("ignoring empty series %r", name)
            return None
        label = name or self._auto_name("Series", PlainSeries)
        series = PlainSeries(
            name=label,
            x=data.x,
            y=data.y,
            style=self._series_style(color, label, line_width=self._line_width()),
        )
        self._series.append(series)
        return series

    def add_point(self, x: float, y: float, name: str | None = None, color: ColorSpec | None = None) -> PlainSeries | None:
        """Append one point to the plain series called ``name`` (the most recent one if omitted)."""
        for i in range(len(self._series) - 1, -1, -1):
            item = self._series[i]
            if isinstance(item, PlainSeries) and (name is None or item.name == name):
                data = normalize_xy([x], [y])
                if data.size == 0:
                    LOGGER.warning("ignoring non-finite point (%r, %r)", x, y)
                    return item
                updated = PlainSeries(
                    name=item.name,
                    x=np.concatenate([item.x, data.x]),
                    y=np.concatenate([item.y, data.y]),
                    style=item.style,
                )
                self._series[i] = updated
                return updated
        return self.add_series([x], [y], name=name, color=color)

    def add_clusters(
        self,
        points: Any,
        labels: Any,
        names: Mapping[int, str] | Sequence[str] | None = None,
        colors: Mapping[int, ColorSpec] | Sequence[ColorSpec] | None = None,
        *,
        name: str = "Clusters",
    ) -> ClusterSeries | None:
        """Add clustered points; label ``-1`` marks outliers, ``k >= 0`` cluster ``k``.

        ``names``/``colors`` override the per-label legend text and color. A
        sequence is indexed by cluster id; a mapping is keyed by label and may
        include ``-1``.
        """
        data = normalize_points(points)
        raw_labels = normalize_labels(labels, expected=data.mask.size)
        if data.size == 0:
            LOGGER.warning("ignoring empty cluster series %r", name)
            return None
        label_colors = {label: resolve_color(c, alpha=1.0) for label, c in _by_label(colors).items()}
        series = ClusterSeries(
            name=name,
            x=data.x,
            y=data.y,
            labels=raw_labels[data.mask],
            point_size=self.point_size,
            alpha=self.alpha,
            label_names=_by_label(names),
            label_colors=label_colors,
        )
        self._series.append(series)
        return series

    def add_cluster_point(self, x: float, y: float, label: int, name: str | None = None) -> ClusterSeries | None:
        """Append one labeled point to the cluster series called ``name`` (the most recent one if omitted)."""
        for i in range(len(self._series) - 1, -1, -1):
            item = self._series[i]
            if isinstance(item, ClusterSeries) and (name is None or item.name == name):
                data = normalize_xy([x], [y])
                new_label = normalize_labels([label], expected=1)
                if data.size == 0:
                    LOGGER.warning("ignoring non-finite cluster point (%r, %r)", x, y)
                    return item
                updated = ClusterSeries(
                    name=item.name,
                    x=np.concatenate([item.x, data.x]),
                    y=np.concatenate([item.y, data.y]),
                    labels=np.concatenate([item.labels, new_label]),
                    point_size=item.point_size,
                    alpha=item.alpha,
                    label_names=item.label_names,
                    label_colors=item.label_colors,
                )
                self._series[i] = updated
                return updated
        return self.add_clusters([(x, y)], [label], name=name or "Clusters")

    def set_default_marker_type(self, marker: MarkerShape) -> None:
        if marker not in MARKER_SHAPES:
            raise PlotDataError(f"unknown marker type {marker!r}; expected one of {MARKER_SHAPES}")
        self.marker = marker

    def cluster_series_count(self) -> int:
        return sum(1 for item in self._series if isinstance(item, ClusterSeries))

    def _line_width(self) -> float:
        return DEFAULT_LINE_WIDTH


class ScatterPlot(_PointPlot):
    kind: ClassVar[PlotKind] = "scatter"

    def __init__(self, width: int = DEFAULT_PLOT_WIDTH, height: int = DEFAULT_PLOT_HEIGHT, **kwargs: Any) -> None:
        super().__init__(width, height, **kwargs)
        self.marker: MarkerShape = DEFAULT_MARKER

    def _presentation(self) -> SeriesPresentation:
        return SeriesPresentation(kind="scatter", marker=self.marker)


class LinePlot(_PointPlot):
    kind: ClassVar[PlotKind] = "line"

    def __init__(self, width: int = DEFAULT_PLOT_WIDTH, height: int = DEFAULT_PLOT_HEIGHT, **kwargs: Any) -> None:
        super().__init__(width, height, **kwargs)
        self.marker: MarkerShape = DEFAULT_MARKER
        self.line_style: LineStyle = DEFAULT_LINE_STYLE
        self.line_width = DEFAULT_LINE_WIDTH
        self.show_markers = False

    def add_line(self, x: Any, y: Any, name: str | None = None, color: ColorSpec | None = None) -> PlainSeries | None:
        return self.add_series(x, y, name=name, color=color)

    def set_default_line_style(self, style: LineStyle) -> None:
        if style not in DASH_PATTERNS:
            raise PlotDataError(f"unknown line style {style!r}; expected one of {tuple(DASH_PATTERNS)}")
        self.line_style = style

    def set_default_line_width(self, width: float) -> None:
        if not width > 0:
            raise PlotDataError(f"line width must be > 0, got {width!r}")
        self.line_width = float(width)

    def set_show_markers(self, show: bool) -> None:
        self.show_markers = bool(show)

    def _line_width(self) -> float:
        return self.line_width

    def _presentation(self) -> SeriesPresentation:
        return SeriesPresentation(
            kind="line",
            marker=self.marker,
            line_style=self.line_style,
            line_width=self.line_width,
            show_markers=self.show_markers,
        )


class HistogramPlot(Plot):
    kind: ClassVar[PlotKind] = "histogram"
    default_y_label: ClassVar[str] = HISTOGRAM_Y_LABEL

    def __init__(self, width: int = DEFAULT_PLOT_WIDTH, height: int = DEFAULT_PLOT_HEIGHT, **kwargs: Any) -> None:
        super().__init__(width, height, **kwargs)
        self.max_auto_bins = MAX_AUTO_BINS

    @property
    def histogram_mode(self) -> HistogramMode | None:
        return histogram_mode(self._series)

    def add_histogram(
        self,
        values: Any,
        name: str | None = None,
        color: ColorSpec | None = None,
        bin_count: int = 0,
    ) -> ContinuousHistogram | None:
        check_histogram_mode(self._series, "continuous")
        if bin_count < 0:
            raise PlotDataError(f"bin_count must be >= 0, got {bin_count}")
        arr = normalize_values(values)
        if arr.size == 0:
            LOGGER.warning("ignoring empty histogram %r", name)
            return None
        bins = compute_bins(arr, bin_count, max_auto_bins=self.max_auto_bins)
        label = name or self._auto_name("Histogram", ContinuousHistogram)
        series = ContinuousHistogram(
            name=label,
            values=arr,
            edges=bins.edges,
            counts=bins.counts,
            style=self._series_style(color, label),
        )
        self._series.append(series)
        return series

    def add_discrete_histogram(
        self,
        counts: Any,
        categories: Sequence[str] | None = None,
        colors: Sequence[ColorSpec] | None = None,
        name: str | None = None,
    ) -> DiscreteHistogram | None:
        check_histogram_mode(self._series, "discrete")
        check_discrete_allowed(self._reference_lines)
        arr = normalize_counts(counts)
        if arr.size == 0:
            LOGGER.warning("ignoring empty discrete histogram %r", name)
            return None
        if categories is None:
            categories = default_categories(arr.size)
        elif len(categories) != arr.size:
            raise PlotDataError(f"categories/counts length mismatch: {len(categories)} != {arr.size}")
        category_colors = None
        if colors is not None:
            if len(colors) != arr.size:
                raise PlotDataError(f"colors/counts length mismatch: {len(colors)} != {arr.size}")
            category_colors = tuple(resolve_color(c, alpha=self.alpha) for c in colors)
            for rgba in category_colors:
                self._colors.note_series_color(rgba)
        label = name or self._auto_name("Histogram", DiscreteHistogram)
        series = DiscreteHistogram(
            name=label,
            categories=tuple(str(c) for c in categories),
            counts=arr,
            style=self._series_style(None if category_colors is None else category_colors[0], label),
            category_colors=category_colors,
        )
        self._series.append(series)
        return series


def _by_label(values: Mapping[int, Any] | Sequence[Any] | None) -> dict[int, Any]:
    if values is None:
        return {}
    if isinstance(values, Mapping):
        return {int(k): v for k, v in values.items()}
    if isinstance(values, str):
        raise PlotDataError("per-cluster overrides must be a mapping or a sequence, not a string")
    return {i: v for i, v in enumerate(values)}
