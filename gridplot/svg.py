from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from gridplot.colors import to_hex
from gridplot.config import RGBA
from gridplot.raster.draw_text import DEFAULT_FONT_FAMILY, font_ascent, text_size
from gridplot.surface import ClipRect, PathCommand, PathLike, PathSurface


LOGGER = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"


class SvgSurface(PathSurface):
    """Drawing surface that records an SVG document with ElementTree.

    Text is measured with the same font metrics as the raster surface so both
    backends lay a plot out identically.
    """

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
        self._root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": str(self.width),
                "height": str(self.height),
                "viewBox": f"0 0 {self.width} {self.height}",
            },
        )
        self._defs = ET.SubElement(self._root, "defs")
        ET.SubElement(
            self._root,
            "rect",
            {"x": "0", "y": "0", "width": str(self.width), "height": str(self.height), **_paint("fill", background)},
        )
        self._target = self._root
        self._clip_count = 0

    @property
    def root(self) -> ET.Element:
        return self._root

    def set_clip(self, rect: ClipRect | None) -> None:
        super().set_clip(rect)
        if self._clip is None:
            self._target = self._root
            return
        self._clip_count += 1
        clip_id = f"clip{self._clip_count}"
        clip_path = ET.SubElement(self._defs, "clipPath", {"id": clip_id})
        x, y, w, h = self._clip
        ET.SubElement(clip_path, "rect", {"x": _fmt(x), "y": _fmt(y), "width": _fmt(w), "height": _fmt(h)})
        self._target = ET.SubElement(self._root, "g", {"clip-path": f"url(#{clip_id})"})

    def stroke(self) -> None:
        data = _path_data(self._take_path())
        if not data:
            return
        attrs = {"d": data, "fill": "none", **_paint("stroke", self._color), "stroke-width": _fmt(self._line_width)}
        if self._dash:
            attrs["stroke-dasharray"] = " ".join(_fmt(v) for v in self._dash)
        ET.SubElement(self._target, "path", attrs)

    def fill(self) -> None:
        data = _path_data(self._take_path())
        if not data:
            return
        ET.SubElement(self._target, "path", {"d": data, **_paint("fill", self._color), "fill-rule": "nonzero"})

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
        w, h = text_size(text, font_family=self.font_family, font_size_px=font_size, bold=bold)
        ascent = font_ascent(font_family=self.font_family, font_size_px=font_size)
        x, y = position
        turns = (rotate_deg // 90) % 4
        if rotate_deg % 90 != 0:
            raise ValueError("rotate_deg must be a multiple of 90")
        # Anchor the baseline so the rotated box's top-left lands on ``position``.
        if turns == 0:
            transform = f"translate({_fmt(x)} {_fmt(y + ascent)})"
        elif turns == 1:
            transform = f"translate({_fmt(x + ascent)} {_fmt(y + w)}) rotate(-90)"
        elif turns == 2:
            transform = f"translate({_fmt(x + w)} {_fmt(y + h - ascent)}) rotate(180)"
        else:
            transform = f"translate({_fmt(x + h - ascent)} {_fmt(y)}) rotate(90)"
        attrs = {
            "x": "0",
            "y": "0",
            "transform": transform,
            "font-family": self.font_family,
            "font-size": _fmt(font_size),
            **_paint("fill", self._color),
        }
        if bold:
            attrs["font-weight"] = "bold"
        node = ET.SubElement(self._target, "text", attrs)
        node.text = text

    def measure_text(self, text: str, font_size: float, *, rotate_deg: int = 0, bold: bool = False) -> tuple[int, int]:
        return text_size(text, font_family=self.font_family, font_size_px=font_size, rotate_deg=rotate_deg, bold=bold)

    def to_string(self) -> str:
        return ET.tostring(self._root, encoding="unicode")

    def write_svg(self, path: PathLike) -> bool:
        try:
            ET.ElementTree(self._root).write(path, encoding="utf-8", xml_declaration=True)
        except OSError as exc:
            LOGGER.warning("failed to write SVG %s: %s", path, exc)
            return False
        return True

    def write_png(self, path: PathLike) -> bool:
        LOGGER.warning("SVG surface cannot encode PNG; nothing written to %s", path)
        return False


def _path_data(subpaths: list[list[PathCommand]]) -> str:
    parts: list[str] = []
    for commands in subpaths:
        for op, args in commands:
            if op == "Z":
                parts.append("Z")
            else:
                parts.append(op + " " + " ".join(_fmt(v) for v in args))
    return " ".join(parts)


def _paint(prefix: str, color: RGBA) -> dict[str, str]:
    attrs = {prefix: to_hex(color)}
    if color[3] < 1.0:
        attrs[f"{prefix}-opacity"] = _fmt(color[3])
    return attrs


def _fmt(value: float) -> str:
    out = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if out in ("-0", "") else out
