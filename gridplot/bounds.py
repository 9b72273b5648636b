from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from gridplot.config import BOUNDS_PADDING_FRACTION, DEFAULT_RANGE, HISTOGRAM_X_PADDING_FRACTION
from gridplot.scales import DataLimits, pad_range
from gridplot.series import ClusterSeries, ContinuousHistogram, DiscreteHistogram, PlainSeries, ReferenceLine, Series


BoundsSource = Literal["manual", "data", "default"]


@dataclass(frozen=True)
class BoundsResult:
    limits: DataLimits
    is_empty: bool
    source: BoundsSource


class _Extent:
    __slots__ = ("lo", "hi")

    def __init__(self) -> None:
        self.lo: float | None = None
        self.hi: float | None = None

    def include(self, lo: float, hi: float) -> None:
        self.lo = lo if self.lo is None else min(self.lo, lo)
        self.hi = hi if self.hi is None else max(self.hi, hi)

    @property
    def empty(self) -> bool:
        return self.lo is None


def compute_plot_bounds(
    series: Sequence[Series],
    reference_lines: Sequence[ReferenceLine] = (),
    *,
    override: DataLimits | None = None,
    padding: float = BOUNDS_PADDING_FRACTION,
    histogram_padding: float = HISTOGRAM_X_PADDING_FRACTION,
) -> BoundsResult:
    """Resolve the data box a plot is drawn in.

    Point data and reference lines are padded by ``padding`` of their span on
    each side. Continuous histograms contribute their bin edges padded by
    ``histogram_padding``; discrete histograms span exactly their category
    slots ``-0.5 .. n - 0.5``. Bar heights are anchored at zero with headroom
    above the tallest bar. The union is taken per axis. A manual override wins
    unpadded and an axis with nothing on it falls back to ``0..1``.
    """
    is_empty = not series and not reference_lines
    if override is not None:
        return BoundsResult(limits=override, is_empty=is_empty, source="manual")

    point_x, point_y = _Extent(), _Extent()
    bar_x, bar_y = _Extent(), _Extent()
    slot_x = _Extent()
    for item in series:
        match item:
            case PlainSeries(x=x, y=y) | ClusterSeries(x=x, y=y):
                if x.size:
                    point_x.include(float(x.min()), float(x.max()))
                    point_y.include(float(y.min()), float(y.max()))
            case ContinuousHistogram(edges=edges, counts=counts):
                bar_x.include(float(edges[0]), float(edges[-1]))
                bar_y.include(0.0, float(counts.max()) if counts.size else 0.0)
            case DiscreteHistogram(counts=counts):
                if counts.size:
                    slot_x.include(-0.5, counts.size - 0.5)
                    bar_y.include(0.0, float(counts.max()))
    for line in reference_lines:
        if line.is_vertical:
            point_x.include(line.value, line.value)
        else:
            point_y.include(line.value, line.value)

    has_data = not (point_x.empty and point_y.empty and bar_x.empty and bar_y.empty and slot_x.empty)
    xmin, xmax = _resolve_axis(point_x, bar_x, padding=padding, bar_padding=histogram_padding, slots=slot_x)
    ymin, ymax = _resolve_axis(point_y, bar_y, padding=padding, bar_padding=None)
    return BoundsResult(
        limits=DataLimits(xmin=xmin, xmax=xmax, ymin=ymin, ymax=ymax),
        is_empty=is_empty,
        source="data" if has_data else "default",
    )


def _resolve_axis(
    points: _Extent,
    bars: _Extent,
    *,
    padding: float,
    bar_padding: float | None,
    slots: _Extent | None = None,
) -> tuple[float, float]:
    out = _Extent()
    if slots is not None and not slots.empty:
        out.include(slots.lo, slots.hi)  # type: ignore[arg-type]
    if not points.empty:
        out.include(*pad_range(points.lo, points.hi, padding))  # type: ignore[arg-type]
    if not bars.empty:
        if bar_padding is not None:
            out.include(*pad_range(bars.lo, bars.hi, bar_padding))  # type: ignore[arg-type]
        else:
            # Count axis: the baseline stays at exactly zero.
            top = bars.hi if bars.hi and bars.hi > 0 else DEFAULT_RANGE[1]
            out.include(bars.lo, top * (1.0 + padding))  # type: ignore[arg-type]
    if out.empty:
        return DEFAULT_RANGE
    return out.lo, out.hi  # type: ignore[return-value]
