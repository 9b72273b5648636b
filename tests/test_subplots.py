from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from PIL import Image

from gridplot import HistogramPlot, LinePlot, PlotDataError, ScatterPlot, SubplotGrid, SubplotIndexError
from gridplot.raster.surface import RasterSurface


class SubplotGridTests(unittest.TestCase):
    def test_out_of_range_indices_raise(self) -> None:
        grid = SubplotGrid(2, 2)
        for row, col in ((2, 0), (0, 2), (-1, 0), (0, -1)):
            with self.assertRaises(SubplotIndexError):
                grid.get_subplot(row, col)

    def test_index_error_is_an_index_error(self) -> None:
        with self.assertRaises(IndexError):
            SubplotGrid(1, 1).get_subplot(1, 0)

    def test_cells_are_distinct_and_stable(self) -> None:
        grid = SubplotGrid(2, 2)
        a = grid.get_subplot(0, 0)
        self.assertIs(grid.get_subplot(0, 0), a)
        self.assertIsNot(grid.get_subplot(0, 1), a)
        self.assertEqual(len({id(p) for p in grid}), 4)

    def test_data_stays_in_its_cell(self) -> None:
        grid = SubplotGrid(1, 2)
        grid.get_subplot(0, 0).add_series([1.0], [1.0])
        self.assertEqual(grid.get_subplot(0, 0).series_count(), 1)
        self.assertEqual(grid.get_subplot(0, 1).series_count(), 0)

    def test_pristine_cell_switches_kind(self) -> None:
        grid = SubplotGrid(1, 2)
        line = grid.get_subplot(0, 0, LinePlot)
        self.assertIsInstance(line, LinePlot)
        self.assertIs(grid.get_subplot(0, 0, LinePlot), line)
        hist = grid.get_subplot(0, 1, HistogramPlot)
        self.assertIsInstance(hist, HistogramPlot)

    def test_configured_cell_cannot_switch_kind(self) -> None:
        grid = SubplotGrid(1, 1)
        grid.get_subplot(0, 0).add_series([1.0], [2.0])
        with self.assertRaises(PlotDataError):
            grid.get_subplot(0, 0, LinePlot)
        self.assertIsInstance(grid.get_subplot(0, 0), ScatterPlot)

    def test_cell_geometry(self) -> None:
        grid = SubplotGrid(2, 2)
        cell = grid.get_subplot(0, 0)
        self.assertEqual((cell.width, cell.height), (510, 382))
        rects = grid.cell_rects()
        self.assertAlmostEqual(rects[0][0].x, 60.0)
        self.assertAlmostEqual(rects[0][0].y, 45.0)
        self.assertAlmostEqual(rects[0][0].width, 510.0)
        self.assertAlmostEqual(rects[0][0].height, 382.5)
        self.assertAlmostEqual(rects[1][1].x, 630.0)
        self.assertAlmostEqual(rects[1][1].y, 472.5)

    def test_main_title_shifts_cells_down(self) -> None:
        grid = SubplotGrid(2, 2)
        before = grid.cell_rects()
        grid.set_main_title("Overview")
        after = grid.cell_rects()
        self.assertGreater(after[0][0].y, before[0][0].y)
        self.assertLess(after[0][0].height, before[0][0].height)
        self.assertAlmostEqual(after[0][0].width, before[0][0].width)

    def test_render_reports_in_row_major_order(self) -> None:
        grid = SubplotGrid(2, 2)
        for i, plot in enumerate(grid):
            plot.add_series([0.0, 1.0], [0.0, float(i + 1)])
        reports = grid.render(RasterSurface(grid.width, grid.height))
        self.assertEqual(len(reports), 4)
        self.assertAlmostEqual(reports[0].transform.plot_left, 140.0)
        self.assertLess(reports[0].transform.plot_left, reports[1].transform.plot_left)
        self.assertAlmostEqual(reports[0].transform.plot_left, reports[2].transform.plot_left)
        self.assertLess(reports[0].transform.plot_top, reports[2].transform.plot_top)
        self.assertAlmostEqual(reports[3].limits.ymax, 4.2)

    def test_save_png_uses_grid_size(self) -> None:
        grid = SubplotGrid(2, 2)
        grid.set_main_title("Grid")
        grid.get_subplot(1, 1, HistogramPlot).add_histogram([1.0, 2.0, 2.0, 3.0])
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "grid.png"
            self.assertTrue(grid.save_png(path))
            with Image.open(path) as img:
                self.assertEqual(img.size, (1200, 900))

    def test_dimensions_and_validation(self) -> None:
        grid = SubplotGrid(3, 1, 600, 900)
        self.assertEqual((grid.get_rows(), grid.get_cols()), (3, 1))
        self.assertEqual((grid.rows, grid.cols, grid.width, grid.height), (3, 1, 600, 900))
        with self.assertRaises(PlotDataError):
            SubplotGrid(0, 2)
        with self.assertRaises(PlotDataError):
            SubplotGrid(2, 2, 0, 100)
        with self.assertRaises(PlotDataError):
            SubplotGrid(2, 2, spacing=0.6)


if __name__ == "__main__":
    unittest.main()
