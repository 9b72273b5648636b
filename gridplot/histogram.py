from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math
from typing import Literal

import numpy as np

from gridplot.config import DEFAULT_RANGE, MAX_AUTO_BINS, MIN_AUTO_BINS
from gridplot.errors import PlotDataError
from gridplot.scales import widen_degenerate
from gridplot.series import ContinuousHistogram, DiscreteHistogram, ReferenceLine, Series


HistogramMode = Literal["continuous", "discrete"]


@dataclass(frozen=True)
class HistogramBins:
    edges: np.ndarray
    counts: np.ndarray

    @property
    def bin_count(self) -> int:
        return int(self.counts.size)


def auto_bin_count(n: int, *, min_bins: int = MIN_AUTO_BINS, max_bins: int = MAX_AUTO_BINS) -> int:
    """Sturges' rule, clamped."""
    if n <= 0:
        return min_bins
    sturges = int(math.ceil(math.log2(n) + 1.0))
    return max(min_bins, min(max_bins, sturges))


def compute_bins(
    values: np.ndarray,
    requested_bin_count: int = 0,
    *,
    max_auto_bins: int = MAX_AUTO_BINS,
) -> HistogramBins:
    """Equal-width bins over ``[min, max]``.

    ``requested_bin_count == 0`` picks a count automatically. Bins are
    half-open except the last, which also holds the maximum, so every finite
    value lands in exactly one bin.
    """
    if requested_bin_count < 0:
        raise PlotDataError(f"bin_count must be >= 0, got {requested_bin_count}")
    arr = np.asarray(values, dtype=np.float64)
    arr = arr[np.isfinite(arr)]
    bin_count = requested_bin_count or auto_bin_count(arr.size, max_bins=max(MIN_AUTO_BINS, max_auto_bins))
    if arr.size == 0:
        edges = np.linspace(DEFAULT_RANGE[0], DEFAULT_RANGE[1], bin_count + 1)
        return HistogramBins(edges=edges, counts=np.zeros(bin_count, dtype=np.int64))
    lo, hi = widen_degenerate(float(arr.min()), float(arr.max()))
    edges = np.linspace(lo, hi, bin_count + 1)
    return HistogramBins(edges=edges, counts=count_values(arr, edges))


def count_values(values: np.ndarray, edges: np.ndarray) -> np.ndarray:
    counts, _ = np.histogram(values, bins=edges)
    return counts.astype(np.int64)


def histogram_mode(series: Sequence[Series]) -> HistogramMode | None:
    for item in series:
        if isinstance(item, ContinuousHistogram):
            return "continuous"
        if isinstance(item, DiscreteHistogram):
            return "discrete"
    return None


def check_histogram_mode(series: Sequence[Series], new_mode: HistogramMode) -> None:
    current = histogram_mode(series)
    if current is not None and current != new_mode:
        raise PlotDataError(f"cannot add a {new_mode} histogram to a plot that already holds {current} histograms")


def check_vertical_line_allowed(series: Sequence[Series]) -> None:
    if histogram_mode(series) == "discrete":
        raise PlotDataError("vertical reference lines are not supported on discrete histograms")


def check_discrete_allowed(reference_lines: Sequence[ReferenceLine]) -> None:
    if any(line.is_vertical for line in reference_lines):
        raise PlotDataError("discrete histograms cannot share a plot with vertical reference lines")


def default_categories(count: int) -> tuple[str, ...]:
    return tuple(f"Category {i + 1}" for i in range(count))
