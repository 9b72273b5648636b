from __future__ import annotations

from collections.abc import Sequence
from typing import Literal, Union

from gridplot.config import RGBA
from gridplot.errors import PlotDataError


ColorSpec = Union[str, Sequence[float]]
ColorContext = Literal["series", "reference_line"]

NAMED_COLORS: dict[str, tuple[float, float, float]] = {
    "blue": (0.0, 0.0, 1.0),
    "red": (1.0, 0.0, 0.0),
    "green": (0.0, 0.7, 0.0),
    "orange": (1.0, 0.5, 0.0),
    "purple": (0.6, 0.2, 0.8),
    "cyan": (0.0, 0.8, 0.8),
    "magenta": (0.8, 0.0, 0.8),
    "yellow": (0.8, 0.8, 0.0),
    "black": (0.0, 0.0, 0.0),
    "gray": (0.5, 0.5, 0.5),
    "grey": (0.5, 0.5, 0.5),
    "darkred": (0.55, 0.0, 0.0),
    "darkblue": (0.0, 0.0, 0.55),
    "darkgreen": (0.0, 0.39, 0.0),
    "brown": (0.5, 0.3, 0.1),
    "teal": (0.0, 0.5, 0.5),
    "white": (1.0, 1.0, 1.0),
}

AUTO_PALETTE: tuple[str, ...] = (
    "blue",
    "red",
    "green",
    "orange",
    "purple",
    "cyan",
    "magenta",
    "yellow",
    "black",
    "gray",
)

OUTLIER_COLOR: RGBA = (1.0, 0.0, 0.0, 1.0)

# No red in the cluster palette; red is reserved for outliers.
CLUSTER_PALETTE: tuple[tuple[float, float, float], ...] = (
    (0.0, 0.4, 0.8),
    (0.0, 0.7, 0.3),
    (0.6, 0.2, 0.8),
    (1.0, 0.5, 0.0),
    (0.8, 0.8, 0.0),
    (0.0, 0.8, 0.8),
    (0.8, 0.0, 0.8),
    (0.5, 0.3, 0.1),
    (0.7, 0.7, 0.7),
    (0.0, 0.5, 0.5),
    (0.5, 0.0, 0.5),
    (0.0, 0.3, 0.6),
    (0.3, 0.5, 0.0),
    (0.6, 0.3, 0.0),
    (0.4, 0.0, 0.4),
)


def resolve_color(color: ColorSpec, *, alpha: float = 1.0) -> RGBA:
    """Turn a color name, hex string or 3/4-component float tuple into RGBA floats.

    ``alpha`` applies to names, ``#rrggbb`` strings and RGB tuples; explicit
    alpha channels (``#rrggbbaa`` or RGBA tuples) win.
    """
    if not 0.0 <= alpha <= 1.0:
        raise PlotDataError(f"alpha must be within [0, 1], got {alpha!r}")
    if isinstance(color, str):
        return _parse_color_string(color, alpha=alpha)
    try:
        parts = tuple(float(c) for c in color)
    except (TypeError, ValueError) as exc:
        raise PlotDataError(f"unsupported color value: {color!r}") from exc
    if len(parts) == 3:
        parts = parts + (alpha,)
    if len(parts) != 4:
        raise PlotDataError(f"color tuples need 3 or 4 components, got {len(parts)}")
    if any(not 0.0 <= c <= 1.0 for c in parts):
        raise PlotDataError(f"color components must be within [0, 1]: {color!r}")
    return (parts[0], parts[1], parts[2], parts[3])


def cluster_color(label: int) -> RGBA:
    if label == -1:
        return OUTLIER_COLOR
    if label < -1:
        raise PlotDataError(f"cluster labels must be >= -1, got {label}")
    r, g, b = CLUSTER_PALETTE[label % len(CLUSTER_PALETTE)]
    return (r, g, b, 1.0)


def darken(color: RGBA, factor: float = 0.7) -> RGBA:
    return (color[0] * factor, color[1] * factor, color[2] * factor, color[3])


def with_alpha(color: RGBA, alpha: float) -> RGBA:
    return (color[0], color[1], color[2], alpha)


def to_rgba8(color: RGBA) -> tuple[int, int, int, int]:
    return tuple(int(round(min(1.0, max(0.0, c)) * 255.0)) for c in color)  # type: ignore[return-value]


def to_hex(color: RGBA) -> str:
    r, g, b, _ = to_rgba8(color)
    return f"#{r:02x}{g:02x}{b:02x}"


class ColorAssigner:
    """Per-plot automatic color rotation.

    Data series take palette colors in straight rotation. Reference lines share
    the same cursor but skip colors already used by the plot's data series, so a
    threshold line never blends into the data it annotates. Once every palette
    color is in use they fall back to straight rotation.
    """

    def __init__(self, palette: Sequence[str] = AUTO_PALETTE) -> None:
        if not palette:
            raise ValueError("palette must not be empty")
        self._palette = tuple(palette)
        for name in self._palette:
            resolve_color(name)
        self._cursor = 0
        self._series_colors: set[tuple[float, float, float]] = set()

    @property
    def palette(self) -> tuple[str, ...]:
        return self._palette

    @property
    def used_series_colors(self) -> frozenset[tuple[float, float, float]]:
        return frozenset(self._series_colors)

    def next_auto_color(self, context: ColorContext = "series") -> str:
        if context == "reference_line":
            return self._next_reference_color()
        if context != "series":
            raise ValueError(f"unknown color context: {context!r}")
        name = self._palette[self._cursor % len(self._palette)]
        self._cursor += 1
        self.note_series_color(resolve_color(name))
        return name

    def note_series_color(self, color: RGBA) -> None:
        self._series_colors.add((color[0], color[1], color[2]))

    def reset(self) -> None:
        self._cursor = 0
        self._series_colors.clear()

    def _next_reference_color(self) -> str:
        n = len(self._palette)
        for offset in range(n):
            name = self._palette[(self._cursor + offset) % n]
            r, g, b, _ = resolve_color(name)
            if (r, g, b) not in self._series_colors:
                self._cursor += offset + 1
                return name
        name = self._palette[self._cursor % n]
        self._cursor += 1
        return name


def _parse_color_string(value: str, *, alpha: float) -> RGBA:
    text = value.strip().lower()
    if text.startswith("#"):
        hex_value = text[1:]
        if len(hex_value) in (3, 4):
            pairs = [ch * 2 for ch in hex_value]
        elif len(hex_value) in (6, 8):
            pairs = [hex_value[i : i + 2] for i in range(0, len(hex_value), 2)]
        else:
            raise PlotDataError(f"unsupported hex color: {value!r}")
        try:
            channels = [int(pair, 16) / 255.0 for pair in pairs]
        except ValueError as exc:
            raise PlotDataError(f"unsupported hex color: {value!r}") from exc
        if len(channels) == 3:
            channels.append(alpha)
        return (channels[0], channels[1], channels[2], channels[3])
    rgb = NAMED_COLORS.get(text)
    if rgb is None:
        raise PlotDataError(f"unknown color name: {value!r}")
    return (rgb[0], rgb[1], rgb[2], alpha)
