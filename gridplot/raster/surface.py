from __future__ import annotations

import logging
import math

import numpy as np
from PIL import Image

from gridplot.colors import to_rgba8
from gridplot.config import RGBA
from gridplot.raster.canvas import PixelBox, blend_mask, clip_to_box, intersect_box, new_canvas
from gridplot.raster.draw_lines import dash_polyline, stroke_polyline
from gridplot.raster.draw_polygons import fill_polygons
from gridplot.raster.draw_text import DEFAULT_FONT_FAMILY, text_mask, text_size
from gridplot.surface import PathLike, PathSurface, flatten_subpaths


LOGGER = logging.getLogger(__name__)


class RasterSurface(PathSurface):
    """Drawing surface backed by an (H, W, 4) uint8 numpy canvas, encoded to PNG with Pillow."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: RGBA = (1.0, 1.0, 1.0, 1.0),
        font_family: str = DEFAULT_FONT_FAMILY,
    ) -> None:
        super().__init__(width, height)
        self.font_family = font_family
        self._canvas = new_canvas(self.width, self.height, to_rgba8(background))

    @property
    def pixels(self) -> np.ndarray:
        return self._canvas.copy()

    def stroke(self) -> None:
        polylines = flatten_subpaths(self._take_path())
        if not polylines:
            return
        width_px = max(1, int(round(self._line_width)))
        pieces: list[np.ndarray] = []
        for points, closed in polylines:
            if closed:
                points = np.vstack([points, points[:1]])
            pieces.extend(dash_polyline(points, self._dash) if self._dash else [points])
        if not pieces:
            return
        box = self._paint_box(np.vstack(pieces), pad=width_px)
        if box is None:
            return
        mask = np.zeros((box[3] - box[1], box[2] - box[0]), dtype=np.bool_)
        for piece in pieces:
            stroke_polyline(mask, piece, width_px, origin=(box[0], box[1]))
        blend_mask(self._canvas, box[0], box[1], mask, to_rgba8(self._color))

    def fill(self) -> None:
        polygons = [points for points, _ in flatten_subpaths(self._take_path()) if points.shape[0] >= 3]
        if not polygons:
            return
        box = self._paint_box(np.vstack(polygons), pad=1)
        if box is None:
            return
        mask = np.zeros((box[3] - box[1], box[2] - box[0]), dtype=np.bool_)
        fill_polygons(mask, polygons, origin=(box[0], box[1]))
        blend_mask(self._canvas, box[0], box[1], mask, to_rgba8(self._color))

    def draw_text(
        self,
        text: str,
        position: tuple[float, float],
        font_size: float,
        *,
        rotate_deg: int = 0,
        bold: bool = False,
    ) -> None:
        if not text:
            return
        mask = text_mask(text, font_family=self.font_family, font_size_px=font_size, rotate_deg=rotate_deg, bold=bold)
        x = int(round(position[0]))
        y = int(round(position[1]))
        if self._clip is not None:
            box = intersect_box((x, y, x + mask.shape[1], y + mask.shape[0]), clip_to_box(self._clip))
            if box is None:
                return
            mask = mask[box[1] - y : box[3] - y, box[0] - x : box[2] - x]
            x, y = box[0], box[1]
        blend_mask(self._canvas, x, y, mask, to_rgba8(self._color))

    def measure_text(self, text: str, font_size: float, *, rotate_deg: int = 0, bold: bool = False) -> tuple[int, int]:
        return text_size(text, font_family=self.font_family, font_size_px=font_size, rotate_deg=rotate_deg, bold=bold)

    def write_png(self, path: PathLike) -> bool:
        try:
            Image.fromarray(self._canvas).save(path, format="PNG")
        except (OSError, ValueError) as exc:
            LOGGER.warning("failed to write PNG %s: %s", path, exc)
            return False
        return True

    def write_svg(self, path: PathLike) -> bool:
        LOGGER.warning("raster surface cannot encode SVG; nothing written to %s", path)
        return False

    def _paint_box(self, points: np.ndarray, *, pad: int) -> PixelBox | None:
        finite = points[np.all(np.isfinite(points), axis=1)]
        if finite.shape[0] == 0:
            return None
        box = (
            int(math.floor(float(finite[:, 0].min()))) - pad,
            int(math.floor(float(finite[:, 1].min()))) - pad,
            int(math.ceil(float(finite[:, 0].max()))) + pad + 1,
            int(math.ceil(float(finite[:, 1].max()))) + pad + 1,
        )
        box = intersect_box(box, (0, 0, self.width, self.height))
        if box is not None and self._clip is not None:
            box = intersect_box(box, clip_to_box(self._clip))
        return box
