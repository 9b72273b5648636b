from __future__ import annotations

from collections.abc import Callable, Sequence, Set
from dataclasses import dataclass
from typing import Literal

from gridplot.config import RGBA
from gridplot.series import (
    OUTLIER_LABEL,
    ClusterSeries,
    ContinuousHistogram,
    DiscreteHistogram,
    PlainSeries,
    ReferenceLine,
    Series,
)
from gridplot.transform import CellRect


LegendSwatch = Literal["circle", "cross", "square", "triangle", "line", "dashed-line", "bar"]
TextMeasure = Callable[[str, float], tuple[int, int]]

LEGEND_PAD = 8.0
LEGEND_ROW_GAP = 4.0
LEGEND_SWATCH_WIDTH = 20.0
LEGEND_SWATCH_GAP = 6.0
LEGEND_INSET = 10.0


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: RGBA
    swatch: LegendSwatch
    dash: tuple[float, ...] | None = None


@dataclass(frozen=True)
class LegendLayout:
    box: CellRect
    rows: tuple[tuple[LegendEntry, CellRect, tuple[float, float]], ...]
    font_px: float


def build_legend_entries(
    series: Sequence[Series],
    reference_lines: Sequence[ReferenceLine],
    *,
    hidden: Set[str] = frozenset(),
    plain_swatch: LegendSwatch = "circle",
    plain_dash: tuple[float, ...] | None = None,
    reference_dash: tuple[float, ...] | None = None,
) -> tuple[LegendEntry, ...]:
    """Ordered legend entries: data series in insertion order, then reference lines.

    Cluster series expand to one entry per distinct label, outliers first.
    Entries whose label is hidden are skipped and duplicates of an earlier
    ``(label, color, swatch)`` entry collapse.
    """
    candidates: list[LegendEntry] = []
    for item in series:
        match item:
            case PlainSeries(style=style):
                candidates.append(LegendEntry(style.label, style.color, plain_swatch, plain_dash))
            case ClusterSeries():
                for label in item.cluster_ids:
                    swatch: LegendSwatch = "cross" if label == OUTLIER_LABEL else plain_swatch
                    candidates.append(LegendEntry(item.display_name(label), item.color_for(label), swatch))
            case ContinuousHistogram(style=style):
                candidates.append(LegendEntry(style.label, style.color, "bar"))
            case DiscreteHistogram(style=style):
                if item.category_colors is None:
                    candidates.append(LegendEntry(style.label, style.color, "bar"))
                else:
                    for i, category in enumerate(item.categories):
                        candidates.append(LegendEntry(category, item.color_for(i), "bar"))
    for line in reference_lines:
        candidates.append(LegendEntry(line.label, line.color, "dashed-line", reference_dash))

    entries: list[LegendEntry] = []
    seen: set[tuple[str, RGBA, str]] = set()
    for entry in candidates:
        if not entry.label or entry.label in hidden:
            continue
        key = (entry.label, entry.color, entry.swatch)
        if key in seen:
            continue
        seen.add(key)
        entries.append(entry)
    return tuple(entries)


def layout_legend(
    entries: Sequence[LegendEntry],
    plot_rect: CellRect,
    measure: TextMeasure,
    *,
    font_px: float,
    scale: float = 1.0,
) -> LegendLayout | None:
    """Place the legend in the top-right corner of the plot area, sized to its longest label."""
    if not entries:
        return None
    sizes = [measure(entry.label, font_px) for entry in entries]
    pad = LEGEND_PAD * scale
    gap = LEGEND_ROW_GAP * scale
    swatch_w = LEGEND_SWATCH_WIDTH * scale
    swatch_gap = LEGEND_SWATCH_GAP * scale
    row_h = max(h for _, h in sizes)
    text_w = max(w for w, _ in sizes)
    width = pad * 2 + swatch_w + swatch_gap + text_w
    height = pad * 2 + row_h * len(entries) + gap * (len(entries) - 1)
    x = plot_rect.x + plot_rect.width - width - LEGEND_INSET * scale
    y = plot_rect.y + LEGEND_INSET * scale
    rows = []
    for i, entry in enumerate(entries):
        row_y = y + pad + i * (row_h + gap)
        swatch = CellRect(x + pad, row_y, swatch_w, row_h)
        rows.append((entry, swatch, (x + pad + swatch_w + swatch_gap, row_y)))
    return LegendLayout(box=CellRect(x, y, width, height), rows=tuple(rows), font_px=font_px)
