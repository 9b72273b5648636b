from __future__ import annotations

from dataclasses import dataclass
import enum
import logging
from typing import Literal

import numpy as np

from gridplot.bounds import BoundsResult, compute_plot_bounds
from gridplot.colors import darken
from gridplot.config import (
    DASH_PATTERNS,
    DEFAULT_LINE_STYLE,
    DEFAULT_LINE_WIDTH,
    DEFAULT_MARKER,
    DEFAULT_TICK_TARGET,
    EMPTY_PLOT_TEXT,
    REFERENCE_LINE_DASH,
    RGBA,
    LineStyle,
    Margins,
    MarkerShape,
    PlotTheme,
)
from gridplot.legend import LegendEntry, LegendSwatch, build_legend_entries, layout_legend
from gridplot.scales import DataLimits, format_ticks_for_axis, generate_nice_ticks
from gridplot.series import (
    OUTLIER_LABEL,
    ClusterSeries,
    ContinuousHistogram,
    DiscreteHistogram,
    PlainSeries,
    ReferenceLine,
    Series,
)
from gridplot.surface import DrawingSurface
from gridplot.transform import CellPlacement, CellRect, CoordinateTransform


LOGGER = logging.getLogger(__name__)

PlotKind = Literal["scatter", "line", "histogram"]

# Cubic Bezier handle length for a quarter circle.
_KAPPA = 0.5522847498
_BAR_GROUP_WIDTH = 0.8


class RenderStage(enum.Enum):
    COMPUTE_BOUNDS = "compute_bounds"
    COMPUTE_TICKS = "compute_ticks"
    BUILD_TRANSFORM = "build_transform"
    DRAW_GRID = "draw_grid"
    DRAW_AXES = "draw_axes"
    DRAW_SERIES = "draw_series"
    DRAW_REFERENCE_LINES = "draw_reference_lines"
    DRAW_LEGEND = "draw_legend"
    DRAW_TITLE = "draw_title"
    FINALIZE = "finalize"


RENDER_ORDER: tuple[RenderStage, ...] = tuple(RenderStage)


@dataclass(frozen=True)
class SeriesPresentation:
    kind: PlotKind = "scatter"
    marker: MarkerShape = DEFAULT_MARKER
    line_style: LineStyle = DEFAULT_LINE_STYLE
    line_width: float = DEFAULT_LINE_WIDTH
    show_markers: bool = True


@dataclass(frozen=True)
class PlotSnapshot:
    """Everything a render pass reads from a plot, frozen at the start of the pass."""

    width: int
    height: int
    series: tuple[Series, ...]
    reference_lines: tuple[ReferenceLine, ...]
    title: str
    x_label: str
    y_label: str
    bounds_override: DataLimits | None
    legend_enabled: bool
    hidden_legend_items: frozenset[str]
    margins: Margins
    theme: PlotTheme
    presentation: SeriesPresentation = SeriesPresentation()
    tick_target: int = DEFAULT_TICK_TARGET


@dataclass(frozen=True)
class AxisTicks:
    values: tuple[float, ...]
    labels: tuple[str, ...]


@dataclass(frozen=True)
class RenderReport:
    limits: DataLimits
    transform: CoordinateTransform
    x_ticks: AxisTicks
    y_ticks: AxisTicks
    legend: tuple[LegendEntry, ...]
    is_empty: bool
    stages: tuple[RenderStage, ...]


class RenderPipeline:
    """One render pass of a plot snapshot onto a surface.

    Stages run in ``RENDER_ORDER``; each consumes only what earlier stages
    produced, so bounds, ticks and the transform are computed exactly once.
    """

    def __init__(self, snapshot: PlotSnapshot, surface: DrawingSurface, placement: CellPlacement | None = None) -> None:
        self.snapshot = snapshot
        self.surface = surface
        self.placement = placement or CellPlacement()
        self.stage: RenderStage | None = None
        self._bounds: BoundsResult | None = None
        self._x_ticks = AxisTicks((), ())
        self._y_ticks = AxisTicks((), ())
        self._transform: CoordinateTransform | None = None
        self._legend: tuple[LegendEntry, ...] = ()
        self._visited: list[RenderStage] = []
        self._handlers = {
            RenderStage.COMPUTE_BOUNDS: self._compute_bounds,
            RenderStage.COMPUTE_TICKS: self._compute_ticks,
            RenderStage.BUILD_TRANSFORM: self._build_transform,
            RenderStage.DRAW_GRID: self._draw_grid,
            RenderStage.DRAW_AXES: self._draw_axes,
            RenderStage.DRAW_SERIES: self._draw_series,
            RenderStage.DRAW_REFERENCE_LINES: self._draw_reference_lines,
            RenderStage.DRAW_LEGEND: self._draw_legend,
            RenderStage.DRAW_TITLE: self._draw_title,
            RenderStage.FINALIZE: self._finalize,
        }

    @property
    def scale(self) -> float:
        return self.placement.scale

    def run(self) -> RenderReport:
        if self._visited:
            raise RuntimeError("render pipeline already ran")
        for stage in RENDER_ORDER:
            self.stage = stage
            LOGGER.debug("render stage %s", stage.value)
            self._handlers[stage]()
            self._visited.append(stage)
        assert self._bounds is not None and self._transform is not None
        return RenderReport(
            limits=self._bounds.limits,
            transform=self._transform,
            x_ticks=self._x_ticks,
            y_ticks=self._y_ticks,
            legend=self._legend,
            is_empty=self._bounds.is_empty,
            stages=tuple(self._visited),
        )

    # -- stages -----------------------------------------------------------

    def _compute_bounds(self) -> None:
        snap = self.snapshot
        self._bounds = compute_plot_bounds(snap.series, snap.reference_lines, override=snap.bounds_override)

    def _compute_ticks(self) -> None:
        assert self._bounds is not None
        limits = self._bounds.limits
        target = self.snapshot.tick_target
        categories = self._categories()
        if categories:
            visible = [(float(i), name) for i, name in enumerate(categories) if limits.xmin <= i <= limits.xmax]
            self._x_ticks = AxisTicks(tuple(v for v, _ in visible), tuple(name for _, name in visible))
        else:
            self._x_ticks = _axis_ticks(limits.xmin, limits.xmax, target)
        self._y_ticks = _axis_ticks(limits.ymin, limits.ymax, target)

    def _build_transform(self) -> None:
        assert self._bounds is not None
        snap = self.snapshot
        self._transform = CoordinateTransform.build(
            self._bounds.limits, snap.width, snap.height, snap.margins, self.placement
        )

    def _draw_grid(self) -> None:
        t = self._require_transform()
        theme = self.snapshot.theme
        surface = self.surface
        surface.set_color(theme.grid_color)
        surface.set_line_width(theme.grid_line_width * self.scale)
        surface.set_dash(None)
        if not self._categories():
            for x in self._x_ticks.values:
                sx = t.x_to_screen(x)
                surface.move_to(sx, t.plot_top)
                surface.line_to(sx, t.plot_bottom)
        for y in self._y_ticks.values:
            sy = t.y_to_screen(y)
            surface.move_to(t.plot_left, sy)
            surface.line_to(t.plot_right, sy)
        surface.stroke()

    def _draw_axes(self) -> None:
        t = self._require_transform()
        snap = self.snapshot
        theme = snap.theme
        s = self.scale
        surface = self.surface
        tick_len = theme.tick_length * s
        label_gap = 4.0 * s

        surface.set_color(theme.axis_color)
        surface.set_line_width(theme.axis_line_width * s)
        surface.set_dash(None)
        surface.move_to(t.plot_left, t.plot_top)
        surface.line_to(t.plot_left, t.plot_bottom)
        surface.line_to(t.plot_right, t.plot_bottom)
        for x in self._x_ticks.values:
            sx = t.x_to_screen(x)
            surface.move_to(sx, t.plot_bottom)
            surface.line_to(sx, t.plot_bottom + tick_len)
        for y in self._y_ticks.values:
            sy = t.y_to_screen(y)
            surface.move_to(t.plot_left, sy)
            surface.line_to(t.plot_left - tick_len, sy)
        surface.stroke()

        surface.set_color(theme.text_color)
        tick_px = theme.tick_font_px * s
        tick_label_h = 0
        for x, label in zip(self._x_ticks.values, self._x_ticks.labels, strict=True):
            w, h = surface.measure_text(label, tick_px)
            tick_label_h = max(tick_label_h, h)
            surface.draw_text(label, (t.x_to_screen(x) - w / 2.0, t.plot_bottom + tick_len + label_gap), tick_px)
        for y, label in zip(self._y_ticks.values, self._y_ticks.labels, strict=True):
            w, h = surface.measure_text(label, tick_px)
            surface.draw_text(label, (t.plot_left - tick_len - label_gap - w, t.y_to_screen(y) - h / 2.0), tick_px)

        label_px = theme.label_font_px * s
        if snap.x_label:
            w, _ = surface.measure_text(snap.x_label, label_px)
            top = t.plot_bottom + tick_len + label_gap + tick_label_h + 8.0 * s
            surface.draw_text(snap.x_label, (t.plot_left + (t.plot_width - w) / 2.0, top), label_px)
        if snap.y_label:
            w, h = surface.measure_text(snap.y_label, label_px, rotate_deg=90)
            left = self.placement.x + 12.0 * s
            surface.draw_text(snap.y_label, (left, t.plot_top + (t.plot_height - h) / 2.0), label_px, rotate_deg=90)

    def _draw_series(self) -> None:
        t = self._require_transform()
        assert self._bounds is not None
        if self._bounds.is_empty:
            self._draw_placeholder(t)
            return
        surface = self.surface
        surface.set_clip((t.plot_left, t.plot_top, t.plot_width, t.plot_height))
        slots = sum(1 for item in self.snapshot.series if isinstance(item, DiscreteHistogram))
        slot = 0
        for item in self.snapshot.series:
            match item:
                case PlainSeries():
                    self._draw_plain(t, item)
                case ClusterSeries():
                    self._draw_clusters(t, item)
                case ContinuousHistogram():
                    self._draw_continuous_histogram(t, item)
                case DiscreteHistogram():
                    self._draw_discrete_histogram(t, item, slot=slot, slots=slots)
                    slot += 1
        surface.set_clip(None)

    def _draw_reference_lines(self) -> None:
        t = self._require_transform()
        limits = t.limits
        surface = self.surface
        surface.set_dash(tuple(v * self.scale for v in REFERENCE_LINE_DASH))
        for line in self.snapshot.reference_lines:
            surface.set_color(line.color)
            surface.set_line_width(line.line_width * self.scale)
            if line.is_vertical:
                if not limits.xmin <= line.value <= limits.xmax:
                    continue
                sx = t.x_to_screen(line.value)
                surface.move_to(sx, t.plot_top)
                surface.line_to(sx, t.plot_bottom)
            else:
                if not limits.ymin <= line.value <= limits.ymax:
                    continue
                sy = t.y_to_screen(line.value)
                surface.move_to(t.plot_left, sy)
                surface.line_to(t.plot_right, sy)
            surface.stroke()
        surface.set_dash(None)

    def _draw_legend(self) -> None:
        t = self._require_transform()
        snap = self.snapshot
        if not snap.legend_enabled:
            return
        s = self.scale
        plain_swatch, plain_dash = self._plain_swatch()
        self._legend = build_legend_entries(
            snap.series,
            snap.reference_lines,
            hidden=snap.hidden_legend_items,
            plain_swatch=plain_swatch,
            plain_dash=plain_dash,
            reference_dash=REFERENCE_LINE_DASH,
        )
        layout = layout_legend(
            self._legend,
            t.plot_rect,
            lambda text, px: self.surface.measure_text(text, px),
            font_px=snap.theme.legend_font_px * s,
            scale=s,
        )
        if layout is None:
            return
        surface = self.surface
        box = layout.box
        surface.set_dash(None)
        surface.set_color(snap.theme.legend_background)
        _rect_path(surface, box)
        surface.fill()
        surface.set_color(snap.theme.legend_border)
        surface.set_line_width(max(1.0, s))
        _rect_path(surface, box)
        surface.stroke()
        for entry, swatch, text_pos in layout.rows:
            self._draw_swatch(entry, swatch)
            surface.set_color(snap.theme.text_color)
            surface.draw_text(entry.label, text_pos, layout.font_px)

    def _draw_title(self) -> None:
        snap = self.snapshot
        if not snap.title:
            return
        s = self.scale
        font_px = snap.theme.title_font_px * s
        w, h = self.surface.measure_text(snap.title, font_px, bold=True)
        x = self.placement.x + (snap.width * s - w) / 2.0
        y = self.placement.y + (snap.margins.top * s - h) / 2.0
        self.surface.set_color(snap.theme.text_color)
        self.surface.draw_text(snap.title, (x, y), font_px, bold=True)

    def _finalize(self) -> None:
        self.surface.set_clip(None)
        self.surface.set_dash(None)

    # -- series -----------------------------------------------------------

    def _draw_plain(self, t: CoordinateTransform, item: PlainSeries) -> None:
        sx, sy = t.to_screen_arrays(item.x, item.y)
        pres = self.snapshot.presentation
        style = item.style
        if pres.kind == "line":
            self._polyline(sx, sy, style.color, style.line_width, DASH_PATTERNS[pres.line_style])
            if pres.show_markers:
                self._markers(sx, sy, pres.marker, style.point_size, style.color)
            return
        self._markers(sx, sy, pres.marker, style.point_size, style.color)

    def _draw_clusters(self, t: CoordinateTransform, item: ClusterSeries) -> None:
        pres = self.snapshot.presentation
        # cluster_ids is sorted, so outliers (-1) always come first.
        for label in item.cluster_ids:
            xs, ys = item.members(label)
            color = item.color_for(label)
            if pres.kind == "line":
                order = np.argsort(xs, kind="stable")
                sx, sy = t.to_screen_arrays(xs[order], ys[order])
                dash = DASH_PATTERNS["dashed"] if label == OUTLIER_LABEL else DASH_PATTERNS[pres.line_style]
                self._polyline(sx, sy, color, pres.line_width, dash)
                if pres.show_markers:
                    self._markers(sx, sy, pres.marker, item.point_size, color)
                continue
            sx, sy = t.to_screen_arrays(xs, ys)
            marker: MarkerShape = "cross" if label == OUTLIER_LABEL else pres.marker
            self._markers(sx, sy, marker, item.point_size, color)

    def _draw_continuous_histogram(self, t: CoordinateTransform, item: ContinuousHistogram) -> None:
        rects = []
        for i, count in enumerate(item.counts.tolist()):
            if count <= 0:
                continue
            rects.append(_data_rect(t, float(item.edges[i]), float(item.edges[i + 1]), 0.0, float(count)))
        self._bars(rects, [item.style.color] * len(rects))

    def _draw_discrete_histogram(self, t: CoordinateTransform, item: DiscreteHistogram, *, slot: int, slots: int) -> None:
        bar_w = _BAR_GROUP_WIDTH / slots
        rects = []
        colors = []
        for i, count in enumerate(item.counts.tolist()):
            if count <= 0:
                continue
            left = i - _BAR_GROUP_WIDTH / 2.0 + slot * bar_w
            rects.append(_data_rect(t, left, left + bar_w, 0.0, float(count)))
            colors.append(item.color_for(i))
        self._bars(rects, colors)

    # -- primitives -------------------------------------------------------

    def _polyline(
        self,
        sx: np.ndarray,
        sy: np.ndarray,
        color: RGBA,
        line_width: float,
        dash: tuple[float, ...] | None,
    ) -> None:
        if sx.size < 2:
            return
        surface = self.surface
        surface.set_color(color)
        surface.set_line_width(line_width * self.scale)
        surface.set_dash(None if dash is None else tuple(v * self.scale for v in dash))
        surface.move_to(float(sx[0]), float(sy[0]))
        for x, y in zip(sx[1:].tolist(), sy[1:].tolist(), strict=True):
            surface.line_to(x, y)
        surface.stroke()
        surface.set_dash(None)

    def _markers(self, sx: np.ndarray, sy: np.ndarray, shape: MarkerShape, size: float, color: RGBA) -> None:
        if sx.size == 0:
            return
        surface = self.surface
        radius = size * self.scale
        surface.set_color(color)
        surface.set_dash(None)
        if shape == "cross":
            surface.set_line_width(max(1.0, radius * 0.6))
            for x, y in zip(sx.tolist(), sy.tolist(), strict=True):
                _cross_path(surface, x, y, radius)
            surface.stroke()
            return
        for x, y in zip(sx.tolist(), sy.tolist(), strict=True):
            _marker_path(surface, shape, x, y, radius)
        surface.fill()

    def _bars(self, rects: list[CellRect], colors: list[RGBA]) -> None:
        surface = self.surface
        surface.set_dash(None)
        surface.set_line_width(max(1.0, self.scale))
        for rect, color in zip(rects, colors, strict=True):
            surface.set_color(color)
            _rect_path(surface, rect)
            surface.fill()
            surface.set_color(darken(color))
            _rect_path(surface, rect)
            surface.stroke()

    def _draw_swatch(self, entry: LegendEntry, rect: CellRect) -> None:
        surface = self.surface
        cx = rect.x + rect.width / 2.0
        cy = rect.y + rect.height / 2.0
        radius = min(rect.height / 2.0, 4.0 * self.scale)
        surface.set_color(entry.color)
        if entry.swatch in ("line", "dashed-line"):
            surface.set_line_width(2.0 * self.scale)
            dash = entry.dash
            surface.set_dash(None if dash is None else tuple(v * self.scale for v in dash))
            surface.move_to(rect.x, cy)
            surface.line_to(rect.x + rect.width, cy)
            surface.stroke()
            surface.set_dash(None)
        elif entry.swatch == "bar":
            side = rect.height * 0.7
            _rect_path(surface, CellRect(cx - side / 2.0, cy - side / 2.0, side, side))
            surface.fill()
        elif entry.swatch == "cross":
            surface.set_line_width(max(1.0, radius * 0.6))
            _cross_path(surface, cx, cy, radius)
            surface.stroke()
        else:
            _marker_path(surface, entry.swatch, cx, cy, radius)  # type: ignore[arg-type]
            surface.fill()

    def _draw_placeholder(self, t: CoordinateTransform) -> None:
        theme = self.snapshot.theme
        font_px = theme.placeholder_font_px * self.scale
        w, h = self.surface.measure_text(EMPTY_PLOT_TEXT, font_px)
        self.surface.set_color(theme.placeholder_color)
        self.surface.draw_text(
            EMPTY_PLOT_TEXT,
            (t.plot_left + (t.plot_width - w) / 2.0, t.plot_top + (t.plot_height - h) / 2.0),
            font_px,
        )

    # -- helpers ----------------------------------------------------------

    def _require_transform(self) -> CoordinateTransform:
        if self._transform is None:
            raise RuntimeError(f"stage {self.stage} needs a transform")
        return self._transform

    def _categories(self) -> tuple[str, ...]:
        best: tuple[str, ...] = ()
        for item in self.snapshot.series:
            if isinstance(item, DiscreteHistogram) and len(item.categories) > len(best):
                best = item.categories
        return best

    def _plain_swatch(self) -> tuple[LegendSwatch, tuple[float, ...] | None]:
        pres = self.snapshot.presentation
        if pres.kind == "line":
            return "line", DASH_PATTERNS[pres.line_style]
        if pres.kind == "histogram":
            return "bar", None
        return pres.marker, None


def _axis_ticks(lo: float, hi: float, target: int) -> AxisTicks:
    ticks = generate_nice_ticks(lo, hi, target)
    labels = format_ticks_for_axis(ticks)
    eps = (hi - lo) * 1e-9
    visible = [(float(v), label) for v, label in zip(ticks.tolist(), labels, strict=True) if lo - eps <= v <= hi + eps]
    return AxisTicks(tuple(v for v, _ in visible), tuple(label for _, label in visible))


def _data_rect(t: CoordinateTransform, x0: float, x1: float, y0: float, y1: float) -> CellRect:
    sx0, sy0 = t.to_screen((x0, y1))
    sx1, sy1 = t.to_screen((x1, y0))
    return CellRect(sx0, sy0, sx1 - sx0, sy1 - sy0)


def _rect_path(surface: DrawingSurface, rect: CellRect) -> None:
    surface.move_to(rect.x, rect.y)
    surface.line_to(rect.x + rect.width, rect.y)
    surface.line_to(rect.x + rect.width, rect.y + rect.height)
    surface.line_to(rect.x, rect.y + rect.height)
    surface.close_path()


def _cross_path(surface: DrawingSurface, x: float, y: float, r: float) -> None:
    surface.move_to(x - r, y - r)
    surface.line_to(x + r, y + r)
    surface.move_to(x - r, y + r)
    surface.line_to(x + r, y - r)


def _marker_path(surface: DrawingSurface, shape: MarkerShape, x: float, y: float, r: float) -> None:
    if shape == "square":
        _rect_path(surface, CellRect(x - r, y - r, 2 * r, 2 * r))
        return
    if shape == "triangle":
        surface.move_to(x, y - r)
        surface.line_to(x + r, y + r)
        surface.line_to(x - r, y + r)
        surface.close_path()
        return
    k = r * _KAPPA
    surface.move_to(x + r, y)
    surface.curve_to(x + r, y + k, x + k, y + r, x, y + r)
    surface.curve_to(x - k, y + r, x - r, y + k, x - r, y)
    surface.curve_to(x - r, y - k, x - k, y - r, x, y - r)
    surface.curve_to(x + k, y - r, x + r, y - k, x + r, y)
    surface.close_path()
