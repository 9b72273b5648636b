from __future__ import annotations

import unittest
import xml.etree.ElementTree as ET

import numpy as np

from gridplot import DrawingSurface, RasterSurface, SvgSurface
from gridplot.raster.draw_lines import dash_polyline


RED = (1.0, 0.0, 0.0, 1.0)
BLACK = (0.0, 0.0, 0.0, 1.0)


def _rect(surface: DrawingSurface, x: float, y: float, w: float, h: float) -> None:
    surface.move_to(x, y)
    surface.line_to(x + w, y)
    surface.line_to(x + w, y + h)
    surface.line_to(x, y + h)
    surface.close_path()


class RasterSurfaceTests(unittest.TestCase):
    def test_surfaces_satisfy_protocol(self) -> None:
        self.assertIsInstance(RasterSurface(4, 4), DrawingSurface)
        self.assertIsInstance(SvgSurface(4, 4), DrawingSurface)

    def test_rect_fill(self) -> None:
        surface = RasterSurface(20, 20)
        surface.set_color(RED)
        _rect(surface, 5, 5, 10, 10)
        surface.fill()
        pixels = surface.pixels
        self.assertEqual(pixels[10, 10].tolist(), [255, 0, 0, 255])
        self.assertEqual(pixels[2, 2].tolist(), [255, 255, 255, 255])
        self.assertEqual(pixels[17, 17].tolist(), [255, 255, 255, 255])

    def test_overlapping_subpaths_fill_once(self) -> None:
        surface = RasterSurface(30, 20)
        surface.set_color((0.0, 0.0, 0.0, 0.5))
        _rect(surface, 2, 2, 15, 15)
        _rect(surface, 10, 2, 15, 15)
        surface.fill()
        pixels = surface.pixels
        self.assertEqual(pixels[8, 5].tolist(), pixels[8, 12].tolist())

    def test_half_alpha_blends_over_white(self) -> None:
        surface = RasterSurface(10, 10)
        surface.set_color((0.0, 0.0, 0.0, 0.5))
        _rect(surface, 0, 0, 10, 10)
        surface.fill()
        value = int(surface.pixels[5, 5, 0])
        self.assertLessEqual(abs(value - 127), 1)

    def test_horizontal_stroke(self) -> None:
        surface = RasterSurface(20, 20)
        surface.set_color(BLACK)
        surface.set_line_width(1.0)
        surface.move_to(2, 10)
        surface.line_to(18, 10)
        surface.stroke()
        pixels = surface.pixels
        self.assertEqual(pixels[10, 10].tolist(), [0, 0, 0, 255])
        self.assertEqual(pixels[13, 10].tolist(), [255, 255, 255, 255])

    def test_clip_limits_painting(self) -> None:
        surface = RasterSurface(20, 20)
        surface.set_clip((0, 0, 10, 20))
        surface.set_color(RED)
        _rect(surface, 0, 0, 20, 20)
        surface.fill()
        surface.set_clip(None)
        pixels = surface.pixels
        self.assertEqual(pixels[10, 5].tolist(), [255, 0, 0, 255])
        self.assertEqual(pixels[10, 15].tolist(), [255, 255, 255, 255])

    def test_circle_from_curves_covers_center(self) -> None:
        surface = RasterSurface(20, 20)
        surface.set_color(RED)
        k = 5 * 0.5522847498
        surface.move_to(15, 10)
        surface.curve_to(15, 10 + k, 10 + k, 15, 10, 15)
        surface.curve_to(10 - k, 15, 5, 10 + k, 5, 10)
        surface.curve_to(5, 10 - k, 10 - k, 5, 10, 5)
        surface.curve_to(10 + k, 5, 15, 10 - k, 15, 10)
        surface.close_path()
        surface.fill()
        pixels = surface.pixels
        self.assertEqual(pixels[10, 10].tolist(), [255, 0, 0, 255])
        self.assertEqual(pixels[5, 5].tolist(), [255, 255, 255, 255])

    def test_text_is_drawn_and_measured(self) -> None:
        surface = RasterSurface(80, 40)
        surface.set_color(BLACK)
        surface.draw_text("Hi", (2, 2), 14)
        self.assertTrue(np.any(surface.pixels[:, :, 0] < 128))
        w, h = surface.measure_text("Hello", 14)
        self.assertGreater(w, 0)
        self.assertGreater(h, 0)
        self.assertEqual(surface.measure_text("Hello", 14, rotate_deg=90), (h, w))

    def test_raster_surface_cannot_write_svg(self) -> None:
        surface = RasterSurface(4, 4)
        with self.assertLogs("gridplot.raster.surface", level="WARNING"):
            self.assertFalse(surface.write_svg("unused.svg"))

    def test_invalid_state_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            RasterSurface(0, 10)
        surface = RasterSurface(4, 4)
        with self.assertRaises(ValueError):
            surface.set_line_width(0.0)
        with self.assertRaises(ValueError):
            surface.set_dash((0.0, 0.0))


class DashTests(unittest.TestCase):
    def test_dash_pattern_splits_polyline(self) -> None:
        pieces = dash_polyline(np.asarray([[0.0, 0.0], [30.0, 0.0]]), (10.0, 5.0))
        self.assertEqual(len(pieces), 2)
        np.testing.assert_allclose(pieces[0], [[0.0, 0.0], [10.0, 0.0]])
        np.testing.assert_allclose(pieces[1], [[15.0, 0.0], [25.0, 0.0]])

    def test_dash_pattern_carries_across_vertices(self) -> None:
        pieces = dash_polyline(np.asarray([[0.0, 0.0], [6.0, 0.0], [6.0, 8.0]]), (10.0, 5.0))
        np.testing.assert_allclose(pieces[0], [[0.0, 0.0], [6.0, 0.0], [6.0, 4.0]])


class SvgSurfaceTests(unittest.TestCase):
    def _svg(self, surface: SvgSurface) -> ET.Element:
        return ET.fromstring(surface.to_string())

    def test_stroke_with_dash(self) -> None:
        surface = SvgSurface(100, 50)
        surface.set_color(RED)
        surface.set_dash((4.0, 4.0))
        surface.move_to(0, 10)
        surface.line_to(100, 10)
        surface.stroke()
        paths = [n for n in self._svg(surface).iter() if n.tag.endswith("path")]
        self.assertEqual(len(paths), 1)
        self.assertEqual(paths[0].get("stroke-dasharray"), "4 4")
        self.assertEqual(paths[0].get("stroke"), "#ff0000")
        self.assertEqual(paths[0].get("d"), "M 0 10 L 100 10")

    def test_fill_opacity_and_text(self) -> None:
        surface = SvgSurface(100, 50)
        surface.set_color((0.0, 0.0, 1.0, 0.5))
        _rect(surface, 1, 1, 10, 10)
        surface.fill()
        surface.draw_text("label", (5, 5), 12, rotate_deg=90)
        text = surface.to_string()
        self.assertIn("fill-opacity=\"0.5\"", text)
        self.assertIn("<text", text)
        self.assertIn("rotate(-90)", text)

    def test_clip_wraps_following_paint(self) -> None:
        surface = SvgSurface(100, 50)
        surface.set_clip((10, 10, 50, 20))
        _rect(surface, 0, 0, 100, 50)
        surface.fill()
        root = self._svg(surface)
        groups = [n for n in root.iter() if n.tag.rsplit("}", 1)[-1] == "g"]
        self.assertEqual(len(groups), 1)
        self.assertTrue(groups[0].get("clip-path", "").startswith("url(#clip"))
        self.assertEqual(len([n for n in groups[0] if n.tag.endswith("path")]), 1)

    def test_svg_surface_cannot_write_png(self) -> None:
        with self.assertLogs("gridplot.svg", level="WARNING"):
            self.assertFalse(SvgSurface(4, 4).write_png("unused.png"))


if __name__ == "__main__":
    unittest.main()
