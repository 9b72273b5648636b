from __future__ import annotations

import unittest

from gridplot import PlotDataError, ScatterPlot
from gridplot.colors import CLUSTER_PALETTE, OUTLIER_COLOR, ColorAssigner, cluster_color, resolve_color
from gridplot.legend import build_legend_entries


class ColorAssignerTests(unittest.TestCase):
    def test_series_rotation_starts_with_blue_then_red(self) -> None:
        assigner = ColorAssigner()
        self.assertEqual(assigner.next_auto_color(), "blue")
        self.assertEqual(assigner.next_auto_color(), "red")
        self.assertEqual(assigner.next_auto_color(), "green")

    def test_reference_line_skips_colors_used_by_data(self) -> None:
        assigner = ColorAssigner()
        self.assertEqual(assigner.next_auto_color("series"), "blue")
        assigner.note_series_color(resolve_color("red"))
        self.assertEqual(assigner.next_auto_color("reference_line"), "green")

    def test_reference_line_falls_back_to_rotation_when_palette_exhausted(self) -> None:
        assigner = ColorAssigner(palette=("blue", "red"))
        assigner.next_auto_color("series")
        assigner.next_auto_color("series")
        self.assertEqual(assigner.next_auto_color("reference_line"), "blue")

    def test_reset_restarts_rotation(self) -> None:
        assigner = ColorAssigner()
        assigner.next_auto_color()
        assigner.reset()
        self.assertEqual(assigner.next_auto_color(), "blue")
        self.assertEqual(len(assigner.used_series_colors), 1)

    def test_unknown_context_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ColorAssigner().next_auto_color("legend")  # type: ignore[arg-type]


class ClusterColorTests(unittest.TestCase):
    def test_outliers_are_red_and_palette_has_no_red(self) -> None:
        self.assertEqual(cluster_color(-1), OUTLIER_COLOR)
        self.assertNotIn((1.0, 0.0, 0.0), CLUSTER_PALETTE)

    def test_labels_wrap_around_palette(self) -> None:
        self.assertEqual(cluster_color(0), cluster_color(len(CLUSTER_PALETTE)))

    def test_labels_below_minus_one_are_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            cluster_color(-2)

    def test_cluster_colors_match_across_plots(self) -> None:
        first = ScatterPlot()
        second = ScatterPlot()
        first.add_series([0.0, 1.0], [0.0, 1.0])
        a = first.add_clusters([(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)], [0, 1, -1])
        b = second.add_clusters([(5.0, 5.0)], [0])
        assert a is not None and b is not None
        self.assertEqual(a.color_for(0), b.color_for(0))

    def test_hiding_legend_items_does_not_change_colors(self) -> None:
        plot = ScatterPlot()
        clusters = plot.add_clusters([(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)], [0, 1, -1])
        assert clusters is not None
        before = {e.label: e.color for e in build_legend_entries(plot.series, plot.reference_lines)}
        plot.hide_legend_item("Cluster 0")
        after = build_legend_entries(plot.series, plot.reference_lines, hidden=plot.hidden_legend_items)
        self.assertNotIn("Cluster 0", [e.label for e in after])
        for entry in after:
            self.assertEqual(entry.color, before[entry.label])
        self.assertEqual(clusters.color_for(1), before["Cluster 1"])


class ResolveColorTests(unittest.TestCase):
    def test_named_colors_are_case_insensitive(self) -> None:
        self.assertEqual(resolve_color("Blue"), (0.0, 0.0, 1.0, 1.0))
        self.assertEqual(resolve_color("grey", alpha=0.5), (0.5, 0.5, 0.5, 0.5))

    def test_hex_colors(self) -> None:
        self.assertEqual(resolve_color("#ff0000"), (1.0, 0.0, 0.0, 1.0))
        r, g, b, a = resolve_color("#00ff0080")
        self.assertEqual((r, g, b), (0.0, 1.0, 0.0))
        self.assertAlmostEqual(a, 128 / 255)

    def test_tuples(self) -> None:
        self.assertEqual(resolve_color((0.1, 0.2, 0.3), alpha=0.5), (0.1, 0.2, 0.3, 0.5))
        self.assertEqual(resolve_color((0.1, 0.2, 0.3, 0.4), alpha=0.5), (0.1, 0.2, 0.3, 0.4))

    def test_invalid_colors_are_rejected(self) -> None:
        for bad in ("chartreuse-ish", "#12345", (1.5, 0.0, 0.0), (0.0, 0.0)):
            with self.assertRaises(PlotDataError):
                resolve_color(bad)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
