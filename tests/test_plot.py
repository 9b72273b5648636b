from __future__ import annotations

import unittest

import numpy as np

from gridplot import LinePlot, Plot, PlotDataError, RasterSurface, ScatterPlot


class PlotDataTests(unittest.TestCase):
    def test_length_mismatch_is_rejected(self) -> None:
        plot = ScatterPlot()
        with self.assertRaises(PlotDataError):
            plot.add_series([1.0, 2.0], [1.0])
        self.assertEqual(plot.series_count(), 0)

    def test_auto_names_and_distinct_colors(self) -> None:
        plot = ScatterPlot()
        a = plot.add_series([1.0, 2.0], [1.0, 2.0])
        b = plot.add_series([1.0, 2.0], [2.0, 3.0])
        assert a is not None and b is not None
        self.assertEqual((a.style.label, b.style.label), ("Series 1", "Series 2"))
        self.assertEqual(a.style.color, (0.0, 0.0, 1.0, 0.8))
        self.assertEqual(b.style.color, (1.0, 0.0, 0.0, 0.8))

    def test_explicit_color_keeps_plot_alpha(self) -> None:
        plot = ScatterPlot()
        series = plot.add_series([0.0], [0.0], name="pts", color="red")
        assert series is not None
        self.assertEqual(series.style.color, (1.0, 0.0, 0.0, 0.8))
        self.assertEqual(series.name, "pts")

    def test_series_arrays_are_read_only(self) -> None:
        plot = ScatterPlot()
        x = np.asarray([1.0, 2.0, 3.0])
        series = plot.add_series(x, [4.0, 5.0, 6.0])
        assert series is not None
        x[0] = 100.0
        self.assertEqual(float(series.x[0]), 1.0)
        with self.assertRaises(ValueError):
            series.x[0] = 9.0

    def test_non_finite_pairs_are_dropped(self) -> None:
        plot = LinePlot()
        series = plot.add_line([1.0, float("nan"), 3.0], [1.0, 2.0, float("inf")])
        assert series is not None
        self.assertEqual(series.x.tolist(), [1.0])

    def test_empty_series_is_ignored_with_warning(self) -> None:
        plot = ScatterPlot()
        with self.assertLogs("gridplot.plot", level="WARNING"):
            self.assertIsNone(plot.add_series([], []))
        self.assertTrue(plot.is_pristine)

    def test_add_point_appends_to_latest_series(self) -> None:
        plot = ScatterPlot()
        plot.add_point(1.0, 2.0)
        series = plot.add_point(3.0, 4.0)
        assert series is not None
        self.assertEqual(plot.series_count(), 1)
        self.assertEqual([(p.x, p.y) for p in series.points], [(1.0, 2.0), (3.0, 4.0)])

    def test_line_plot_settings_are_validated(self) -> None:
        plot = LinePlot()
        plot.set_default_line_style("dotted")
        plot.set_default_line_width(3.5)
        with self.assertRaises(PlotDataError):
            plot.set_default_line_style("wavy")  # type: ignore[arg-type]
        with self.assertRaises(PlotDataError):
            plot.set_default_line_width(0.0)
        with self.assertRaises(PlotDataError):
            plot.set_default_marker_type("star")  # type: ignore[arg-type]
        self.assertEqual((plot.line_style, plot.line_width), ("dotted", 3.5))


class ClusterTests(unittest.TestCase):
    def test_cluster_ids_are_sorted_with_outliers_first(self) -> None:
        plot = ScatterPlot()
        clusters = plot.add_clusters([(0, 0), (1, 1), (2, 2), (3, 3)], [2, 0, -1, 0])
        assert clusters is not None
        self.assertEqual(clusters.cluster_ids, (-1, 0, 2))
        self.assertEqual(plot.cluster_series_count(), 1)
        xs, _ = clusters.members(0)
        self.assertEqual(xs.tolist(), [1.0, 3.0])

    def test_invalid_labels_are_rejected(self) -> None:
        plot = ScatterPlot()
        with self.assertRaises(PlotDataError):
            plot.add_clusters([(0, 0), (1, 1)], [0])
        with self.assertRaises(PlotDataError):
            plot.add_clusters([(0, 0)], [-2])
        with self.assertRaises(PlotDataError):
            plot.add_clusters([(0, 0)], [0.5])
        self.assertEqual(plot.series_count(), 0)

    def test_custom_names_and_colors(self) -> None:
        plot = ScatterPlot()
        clusters = plot.add_clusters(
            [(0, 0), (1, 1)],
            [-1, 0],
            names={-1: "noise", 0: "core"},
            colors={0: "black"},
        )
        assert clusters is not None
        self.assertEqual(clusters.display_name(-1), "noise")
        self.assertEqual(clusters.display_name(0), "core")
        self.assertEqual(clusters.color_for(0), (0.0, 0.0, 0.0, 0.8))

    def test_default_display_names(self) -> None:
        plot = ScatterPlot()
        clusters = plot.add_clusters([(0, 0), (1, 1)], [-1, 3])
        assert clusters is not None
        self.assertEqual(clusters.display_name(-1), "Outliers")
        self.assertEqual(clusters.display_name(3), "Cluster 3")

    def test_add_cluster_point(self) -> None:
        plot = ScatterPlot()
        plot.add_cluster_point(1.0, 1.0, 0)
        clusters = plot.add_cluster_point(5.0, 5.0, -1)
        assert clusters is not None
        self.assertEqual(plot.cluster_series_count(), 1)
        self.assertEqual(clusters.cluster_ids, (-1, 0))
        self.assertEqual(len(clusters), 2)


class ReferenceLineTests(unittest.TestCase):
    def test_auto_labels_count_only_unlabeled_lines(self) -> None:
        plot = ScatterPlot()
        first = plot.add_horizontal_line(1.0)
        plot.add_horizontal_line(2.0, "limit")
        second = plot.add_vertical_line(3.0)
        self.assertEqual(first.label, "Ref Line 1")
        self.assertEqual(second.label, "Ref Line 2")
        self.assertEqual(plot.reference_line_count(), 3)

    def test_auto_color_avoids_series_colors(self) -> None:
        plot = ScatterPlot()
        plot.add_series([0.0], [0.0])
        plot.add_series([1.0], [1.0], color="red")
        line = plot.add_horizontal_line(0.5)
        self.assertEqual(line.color, (0.0, 0.7, 0.0, 1.0))

    def test_clear_reference_lines_resets_numbering(self) -> None:
        plot = ScatterPlot()
        plot.add_horizontal_line(1.0)
        plot.clear_reference_lines()
        self.assertEqual(plot.add_horizontal_line(1.0).label, "Ref Line 1")


class BoundsAndStateTests(unittest.TestCase):
    def test_set_bounds_validates(self) -> None:
        plot = ScatterPlot()
        with self.assertRaises(PlotDataError):
            plot.set_bounds(5.0, 1.0, 0.0, 1.0)
        with self.assertRaises(PlotDataError):
            plot.set_bounds(0.0, float("nan"), 0.0, 1.0)
        self.assertIsNone(plot.bounds_override)

    def test_set_bounds_widens_degenerate_axis(self) -> None:
        plot = ScatterPlot()
        plot.set_bounds(1.0, 1.0, 0.0, 10.0)
        limits = plot.bounds_override
        assert limits is not None
        self.assertEqual((limits.xmin, limits.xmax), (0.5, 1.5))
        self.assertEqual((limits.ymin, limits.ymax), (0.0, 10.0))
        plot.auto_bounds()
        self.assertIsNone(plot.bounds_override)

    def test_clear_resets_everything_but_size(self) -> None:
        plot = ScatterPlot(640, 480)
        plot.add_series([0.0], [0.0])
        plot.add_vertical_line(1.0)
        plot.set_labels("t", "x", "y")
        plot.set_bounds(0.0, 1.0, 0.0, 1.0)
        plot.hide_legend_item("Series 1")
        plot.set_legend_enabled(False)
        plot.clear()
        self.assertTrue(plot.is_pristine)
        self.assertTrue(plot.legend_enabled)
        self.assertEqual(plot.hidden_legend_items, frozenset())
        self.assertEqual((plot.width, plot.height), (640, 480))
        series = plot.add_series([0.0], [0.0])
        assert series is not None
        self.assertEqual(series.style.color[:3], (0.0, 0.0, 1.0))

    def test_invalid_size_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            Plot(0, 100)


class LegendTests(unittest.TestCase):
    def _legend_labels(self, plot: Plot) -> list[str]:
        report = plot.render(RasterSurface(plot.width, plot.height))
        return [entry.label for entry in report.legend]

    def test_series_then_reference_lines(self) -> None:
        plot = ScatterPlot()
        plot.add_series([0.0, 1.0], [0.0, 1.0], name="data")
        plot.add_horizontal_line(0.5, "threshold")
        self.assertEqual(self._legend_labels(plot), ["data", "threshold"])

    def test_duplicate_entries_collapse(self) -> None:
        plot = ScatterPlot()
        plot.add_series([0.0], [0.0], name="same", color="blue")
        plot.add_series([1.0], [1.0], name="same", color="blue")
        plot.add_series([2.0], [2.0], name="same", color="green")
        self.assertEqual(self._legend_labels(plot), ["same", "same"])

    def test_hidden_items_and_disabled_legend(self) -> None:
        plot = ScatterPlot()
        plot.add_series([0.0], [0.0], name="a")
        plot.add_series([1.0], [1.0], name="b")
        plot.hide_legend_item("a")
        self.assertEqual(self._legend_labels(plot), ["b"])
        plot.show_legend_item("a")
        self.assertEqual(self._legend_labels(plot), ["a", "b"])
        plot.hide_legend_item("b")
        plot.show_all_legend_items()
        plot.set_legend_enabled(False)
        self.assertEqual(self._legend_labels(plot), [])

    def test_cluster_entries_per_label(self) -> None:
        plot = ScatterPlot()
        plot.add_clusters([(0, 0), (1, 1), (2, 2)], [1, -1, 0])
        self.assertEqual(self._legend_labels(plot), ["Outliers", "Cluster 0", "Cluster 1"])


if __name__ == "__main__":
    unittest.main()
