from __future__ import annotations

import math

import numpy as np


def fill_polygons(mask: np.ndarray, polygons: list[np.ndarray], *, origin: tuple[int, int] = (0, 0)) -> None:
    """Scanline fill with the nonzero winding rule, sampled at pixel centers.

    All polygons are filled together, so overlapping shapes wound the same way
    merge and reversed inner rings cut holes.
    """
    edges = [np.column_stack([pts, np.roll(pts, -1, axis=0)]) for pts in polygons if pts.shape[0] >= 3]
    if not edges:
        return
    e = np.concatenate(edges)
    e = e[e[:, 1] != e[:, 3]]
    if e.shape[0] == 0:
        return
    x0, y0, x1, y1 = e[:, 0], e[:, 1], e[:, 2], e[:, 3]
    direction = np.where(y1 > y0, 1, -1)
    ylo = np.minimum(y0, y1)
    yhi = np.maximum(y0, y1)
    slope = (x1 - x0) / (y1 - y0)

    h, w = mask.shape
    ox, oy = origin
    row_start = max(0, int(math.floor(float(ylo.min()) - oy)))
    row_end = min(h, int(math.ceil(float(yhi.max()) - oy)))
    for row in range(row_start, row_end):
        yc = oy + row + 0.5
        active = (ylo <= yc) & (yc < yhi)
        if not np.any(active):
            continue
        xs = x0[active] + (yc - y0[active]) * slope[active]
        order = np.argsort(xs, kind="stable")
        xs = xs[order]
        winding = np.cumsum(direction[active][order])
        for i in range(xs.size - 1):
            if winding[i] == 0:
                continue
            c0 = max(0, int(math.ceil(xs[i] - 0.5)) - ox)
            c1 = min(w, int(math.ceil(xs[i + 1] - 0.5)) - ox)
            if c1 > c0:
                mask[row, c0:c1] = True
