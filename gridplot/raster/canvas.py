from __future__ import annotations

import numpy as np


RGBA8 = tuple[int, int, int, int]
PixelBox = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA8 = (255, 255, 255, 255)) -> np.ndarray:
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :, 0] = color[0]
    canvas[:, :, 1] = color[1]
    canvas[:, :, 2] = color[2]
    canvas[:, :, 3] = color[3]
    return canvas


def intersect_box(a: PixelBox, b: PixelBox) -> PixelBox | None:
    """Intersect two half-open ``(x0, y0, x1, y1)`` pixel boxes."""
    x0 = max(a[0], b[0])
    y0 = max(a[1], b[1])
    x1 = min(a[2], b[2])
    y1 = min(a[3], b[3])
    if x1 <= x0 or y1 <= y0:
        return None
    return (x0, y0, x1, y1)


def clip_to_box(clip: tuple[float, float, float, float]) -> PixelBox:
    x, y, w, h = clip
    return (int(np.floor(x)), int(np.floor(y)), int(np.ceil(x + w)), int(np.ceil(y + h)))


def blend_mask(dst: np.ndarray, x: int, y: int, mask: np.ndarray, color: RGBA8) -> None:
    """Composite ``color`` over ``dst`` through ``mask`` placed at ``(x, y)``.

    ``mask`` is either boolean coverage or uint8 (0-255) coverage.
    """
    h, w = mask.shape
    if h <= 0 or w <= 0:
        return

    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return

    sub = mask[y0 - y : y1 - y, x0 - x : x1 - x]
    if sub.dtype == np.bool_:
        cov = sub.astype(np.float32)
    else:
        cov = sub.astype(np.float32) / 255.0
    src_alpha = (color[3] / 255.0) * cov
    if not np.any(src_alpha > 0):
        return

    patch = dst[y0:y1, x0:x1]
    dst_rgb = patch[:, :, :3].astype(np.float32)
    dst_alpha = patch[:, :, 3].astype(np.float32) / 255.0
    src_rgb = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
    out_rgb_num = src_rgb * src_alpha[:, :, None] + dst_rgb * dst_alpha[:, :, None] * (1.0 - src_alpha[:, :, None])
    safe_alpha = np.where(out_alpha > 1e-6, out_alpha, 1.0)
    out_rgb = out_rgb_num / safe_alpha[:, :, None]

    touched = src_alpha > 0
    patch[:, :, :3] = np.where(touched[:, :, None], np.clip(np.rint(out_rgb), 0, 255), patch[:, :, :3]).astype(np.uint8)
    patch[:, :, 3] = np.where(touched, np.clip(np.rint(out_alpha * 255.0), 0, 255), patch[:, :, 3]).astype(np.uint8)
