from __future__ import annotations

import math

import numpy as np


def stroke_polyline(mask: np.ndarray, points: np.ndarray, width: int, *, origin: tuple[int, int] = (0, 0)) -> None:
    """Rasterize a polyline into ``mask`` with a ``width``-pixel square brush.

    ``points`` are device coordinates; ``mask`` covers the device pixels
    starting at ``origin``.
    """
    if points.shape[0] < 2:
        if points.shape[0] == 1:
            px, py = _to_pixel(points[0, 0], points[0, 1], origin)
            _stamp(mask, px, py, width)
        return
    h, w = mask.shape
    pad = width + 1
    box = (origin[0] - pad, origin[1] - pad, origin[0] + w + pad, origin[1] + h + pad)
    for i in range(points.shape[0] - 1):
        clipped = _clip_segment(points[i, 0], points[i, 1], points[i + 1, 0], points[i + 1, 1], box)
        if clipped is None:
            continue
        x0, y0 = _to_pixel(clipped[0], clipped[1], origin)
        x1, y1 = _to_pixel(clipped[2], clipped[3], origin)
        _draw_line_segment(mask, x0, y0, x1, y1, width)


def dash_polyline(points: np.ndarray, pattern: tuple[float, ...]) -> list[np.ndarray]:
    """Split a polyline into its "on" pieces for an on/off dash ``pattern``."""
    pieces: list[np.ndarray] = []
    index = 0
    remaining = pattern[0]
    on = True
    current: list[np.ndarray] = [points[0]]
    for a, b in zip(points[:-1], points[1:], strict=True):
        seg_len = float(math.hypot(b[0] - a[0], b[1] - a[1]))
        if seg_len == 0.0:
            continue
        pos = 0.0
        while seg_len - pos > remaining:
            pos += remaining
            p = a + (b - a) * (pos / seg_len)
            if on:
                current.append(p)
                pieces.append(np.asarray(current))
                current = []
            else:
                current = [p]
            on = not on
            index = (index + 1) % len(pattern)
            remaining = pattern[index]
        remaining -= seg_len - pos
        if on:
            current.append(b)
    if on and len(current) >= 2:
        pieces.append(np.asarray(current))
    return pieces


def _to_pixel(x: float, y: float, origin: tuple[int, int]) -> tuple[int, int]:
    return int(math.floor(x)) - origin[0], int(math.floor(y)) - origin[1]


def _clip_segment(
    x0: float, y0: float, x1: float, y1: float, box: tuple[float, float, float, float]
) -> tuple[float, float, float, float] | None:
    # Liang-Barsky against the (expanded) mask box.
    dx = x1 - x0
    dy = y1 - y0
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x0 - box[0]), (dx, box[2] - x0), (-dy, y0 - box[1]), (dy, box[3] - y0)):
        if p == 0:
            if q < 0:
                return None
            continue
        r = q / p
        if p < 0:
            t0 = max(t0, r)
        else:
            t1 = min(t1, r)
        if t0 > t1:
            return None
    return (x0 + t0 * dx, y0 + t0 * dy, x0 + t1 * dx, y0 + t1 * dy)


def _draw_line_segment(mask: np.ndarray, x0: int, y0: int, x1: int, y1: int, width: int) -> None:
    if x0 == x1 or y0 == y1:
        lo = (width - 1) // 2
        hi = width // 2
        _fill_box(mask, min(x0, x1) - lo, min(y0, y1) - lo, max(x0, x1) + hi + 1, max(y0, y1) + hi + 1)
        return

    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        _stamp(mask, x0, y0, width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _stamp(mask: np.ndarray, x: int, y: int, width: int) -> None:
    lo = (width - 1) // 2
    hi = width // 2
    _fill_box(mask, x - lo, y - lo, x + hi + 1, y + hi + 1)


def _fill_box(mask: np.ndarray, x0: int, y0: int, x1: int, y1: int) -> None:
    h, w = mask.shape
    x0 = max(0, x0)
    y0 = max(0, y0)
    x1 = min(w, x1)
    y1 = min(h, y1)
    if x1 > x0 and y1 > y0:
        mask[y0:y1, x0:x1] = True
