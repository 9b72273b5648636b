from __future__ import annotations

import os
from typing import Protocol, Union, runtime_checkable

import numpy as np

from gridplot.config import RGBA


PathLike = Union[str, "os.PathLike[str]"]
ClipRect = tuple[float, float, float, float]
# ("M", (x, y)) | ("L", (x, y)) | ("C", (x1, y1, x2, y2, x3, y3)) | ("Z", ())
PathCommand = tuple[str, tuple[float, ...]]


@runtime_checkable
class DrawingSurface(Protocol):
    width: int
    height: int

    def set_color(self, rgba: RGBA) -> None: ...

    def set_line_width(self, width: float) -> None: ...

    def set_dash(self, pattern: tuple[float, ...] | None) -> None: ...

    def set_clip(self, rect: ClipRect | None) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def line_to(self, x: float, y: float) -> None: ...

    def curve_to(self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float) -> None: ...

    def close_path(self) -> None: ...

    def stroke(self) -> None: ...

    def fill(self) -> None: ...

    def draw_text(
        self,
        text: str,
        position: tuple[float, float],
        font_size: float,
        *,
        rotate_deg: int = 0,
        bold: bool = False,
    ) -> None: ...

    def measure_text(self, text: str, font_size: float, *, rotate_deg: int = 0, bold: bool = False) -> tuple[int, int]: ...

    def write_png(self, path: PathLike) -> bool: ...

    def write_svg(self, path: PathLike) -> bool: ...


class PathSurface:
    """Paint and current-path state shared by the concrete surfaces.

    ``stroke()`` and ``fill()`` consume the current path; subclasses get it
    back as recorded commands from ``_take_path()``. ``draw_text`` positions
    are the top-left corner of the (possibly rotated) text box.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("surface width and height must be > 0")
        self.width = int(width)
        self.height = int(height)
        self._color: RGBA = (0.0, 0.0, 0.0, 1.0)
        self._line_width = 1.0
        self._dash: tuple[float, ...] | None = None
        self._clip: ClipRect | None = None
        self._subpaths: list[list[PathCommand]] = []

    def set_color(self, rgba: RGBA) -> None:
        if len(rgba) != 4:
            raise ValueError("color must have 4 components")
        r, g, b, a = (min(1.0, max(0.0, float(c))) for c in rgba)
        self._color = (r, g, b, a)

    def set_line_width(self, width: float) -> None:
        if width <= 0:
            raise ValueError("line width must be > 0")
        self._line_width = float(width)

    def set_dash(self, pattern: tuple[float, ...] | None) -> None:
        if pattern is not None:
            pattern = tuple(float(v) for v in pattern)
            if not pattern or any(v < 0 for v in pattern) or sum(pattern) <= 0:
                raise ValueError("dash pattern needs non-negative lengths with a positive total")
        self._dash = pattern or None

    def set_clip(self, rect: ClipRect | None) -> None:
        self._clip = None if rect is None else tuple(float(v) for v in rect)  # type: ignore[assignment]

    def move_to(self, x: float, y: float) -> None:
        self._subpaths.append([("M", (float(x), float(y)))])

    def line_to(self, x: float, y: float) -> None:
        if not self._subpaths:
            self.move_to(x, y)
            return
        self._subpaths[-1].append(("L", (float(x), float(y))))

    def curve_to(self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float) -> None:
        if not self._subpaths:
            self.move_to(x1, y1)
        self._subpaths[-1].append(("C", (float(x1), float(y1), float(x2), float(y2), float(x3), float(y3))))

    def close_path(self) -> None:
        if self._subpaths:
            self._subpaths[-1].append(("Z", ()))

    def _take_path(self) -> list[list[PathCommand]]:
        subpaths = self._subpaths
        self._subpaths = []
        return subpaths


def flatten_subpaths(subpaths: list[list[PathCommand]]) -> list[tuple[np.ndarray, bool]]:
    """Turn recorded commands into ``(points (N, 2), closed)`` polylines, curves sampled."""
    out: list[tuple[np.ndarray, bool]] = []
    for commands in subpaths:
        pts: list[tuple[float, float]] = []
        closed = False
        for op, args in commands:
            if op in ("M", "L"):
                pts.append((args[0], args[1]))
            elif op == "C":
                start = pts[-1]
                pts.extend(_sample_cubic(start, args))
            elif op == "Z":
                closed = True
        if pts:
            out.append((np.asarray(pts, dtype=np.float64), closed))
    return out


def _sample_cubic(start: tuple[float, float], args: tuple[float, ...]) -> list[tuple[float, float]]:
    x0, y0 = start
    x1, y1, x2, y2, x3, y3 = args
    hull = np.hypot(x1 - x0, y1 - y0) + np.hypot(x2 - x1, y2 - y1) + np.hypot(x3 - x2, y3 - y2)
    steps = int(min(64, max(4, np.ceil(hull / 2.0))))
    t = np.linspace(0.0, 1.0, steps + 1)[1:]
    mt = 1.0 - t
    xs = mt**3 * x0 + 3 * mt**2 * t * x1 + 3 * mt * t**2 * x2 + t**3 * x3
    ys = mt**3 * y0 + 3 * mt**2 * t * y1 + 3 * mt * t**2 * y2 + t**3 * y3
    return list(zip(xs.tolist(), ys.tolist(), strict=True))
