from __future__ import annotations

import math
import unittest

import numpy as np

from gridplot import PlotDataError
from gridplot.scales import format_tick, format_ticks_for_axis, generate_nice_ticks, nice_step


RANGES = (
    (0.0, 1.0),
    (0.0, 10.0),
    (-3.7, 12.2),
    (0.001, 0.0042),
    (1e5, 3.3e5),
    (-50.0, -2.0),
    (0.1, 10.1),
    (2.5, 2.5),
    (-1e-3, 1e-3),
)


class TickEngineTests(unittest.TestCase):
    def test_ticks_strictly_increasing(self) -> None:
        for lo, hi in RANGES:
            for target in (3, 5, 6, 10):
                ticks = generate_nice_ticks(lo, hi, target)
                self.assertGreaterEqual(ticks.size, 2, (lo, hi, target))
                self.assertTrue(np.all(np.diff(ticks) > 0), (lo, hi, target, ticks))

    def test_step_is_one_two_or_five_times_power_of_ten(self) -> None:
        for lo, hi in RANGES:
            for target in (3, 5, 6, 10):
                step = nice_step(lo, hi, target)
                exp = math.floor(math.log10(step))
                mantissa = step / 10.0**exp
                self.assertTrue(
                    any(math.isclose(mantissa, m, rel_tol=1e-6) for m in (1.0, 2.0, 5.0, 10.0)),
                    (lo, hi, target, step),
                )

    def test_tick_count_near_target(self) -> None:
        for lo, hi in RANGES:
            for target in (5, 6):
                ticks = generate_nice_ticks(lo, hi, target)
                self.assertLessEqual(abs(ticks.size - target), 2, (lo, hi, target, ticks))

    def test_ticks_bracket_the_range(self) -> None:
        for lo, hi in RANGES:
            if lo == hi:
                continue
            ticks = generate_nice_ticks(lo, hi, 5)
            tol = nice_step(lo, hi, 5) * 1e-6
            self.assertLessEqual(ticks[0], lo + tol)
            self.assertGreaterEqual(ticks[-1], hi - tol)

    def test_narrow_range_at_large_offset_stays_increasing(self) -> None:
        for lo, hi in ((1e6, 1e6 + 1e-10), (-3e12, -3e12 + 1e-4), (1e15, 1e15 + 1.0)):
            ticks = generate_nice_ticks(lo, hi, 5)
            self.assertGreaterEqual(ticks.size, 2, (lo, hi))
            self.assertTrue(np.all(np.diff(ticks) > 0), (lo, hi, ticks))
            self.assertLessEqual(ticks[0], lo)
            self.assertGreaterEqual(ticks[-1], hi)

    def test_unit_range_ticks(self) -> None:
        np.testing.assert_allclose(generate_nice_ticks(0.0, 1.0, 5), [0.0, 0.2, 0.4, 0.6, 0.8, 1.0])
        np.testing.assert_allclose(generate_nice_ticks(0.0, 10.0, 5), [0.0, 2.0, 4.0, 6.0, 8.0, 10.0])

    def test_nice_step_rounds_up(self) -> None:
        self.assertAlmostEqual(nice_step(0.0, 1.0, 5), 0.2)
        self.assertAlmostEqual(nice_step(0.0, 7.0, 5), 2.0)
        self.assertAlmostEqual(nice_step(0.0, 100.0, 5), 20.0)
        self.assertAlmostEqual(nice_step(0.0, 0.3, 5), 0.1)
        self.assertAlmostEqual(nice_step(0.0, 30.0, 5), 10.0)

    def test_ticks_are_deterministic(self) -> None:
        a = generate_nice_ticks(-3.7, 12.2, 5)
        b = generate_nice_ticks(-3.7, 12.2, 5)
        self.assertTrue(np.array_equal(a, b))

    def test_zero_tick_is_positive_zero(self) -> None:
        ticks = generate_nice_ticks(-1.0, 1.0, 5)
        zeros = ticks[ticks == 0.0]
        self.assertEqual(zeros.size, 1)
        self.assertEqual(math.copysign(1.0, float(zeros[0])), 1.0)

    def test_degenerate_range_is_widened(self) -> None:
        ticks = generate_nice_ticks(2.5, 2.5, 5)
        self.assertLess(ticks[0], 2.5)
        self.assertGreater(ticks[-1], 2.5)

    def test_invalid_target_and_range(self) -> None:
        with self.assertRaises(ValueError):
            generate_nice_ticks(0.0, 1.0, 0)
        with self.assertRaises(PlotDataError):
            generate_nice_ticks(0.0, float("inf"), 5)


class TickFormattingTests(unittest.TestCase):
    def test_formatting_uses_decimals_from_step(self) -> None:
        labels = format_ticks_for_axis(np.asarray([1.5, 2.0, 2.5, 3.0]))
        self.assertEqual(labels, ["1.5", "2", "2.5", "3"])

    def test_formatting_keeps_integer_zeros(self) -> None:
        labels = format_ticks_for_axis(np.asarray([20.0, 30.0, 40.0]))
        self.assertEqual(labels, ["20", "30", "40"])

    def test_formatting_snaps_near_zero(self) -> None:
        labels = format_ticks_for_axis(np.asarray([-1.0, -4.4409e-16, 1.0]))
        self.assertEqual(labels[1], "0")

    def test_decimals_are_capped(self) -> None:
        self.assertEqual(format_tick(1.0 / 3.0), "0.33")
        self.assertEqual(format_tick(0.25, step=0.05), "0.25")
        self.assertEqual(format_tick(0.3333, step=0.1), "0.3")

    def test_large_values_use_compact_scientific(self) -> None:
        self.assertEqual(format_tick(1234567.0, step=100000.0), "1.23e6")
        self.assertEqual(format_tick(0.004, step=0.001), "4e-3")

    def test_adjacent_labels_are_distinct(self) -> None:
        for lo, hi in RANGES + ((1.0, 1.02), (1e6, 1e6 + 10.0), (0.001, 0.0011), (1e6, 1e6 + 1e-10), (-2.5e7, -2.5e7 + 3.0)):
            for target in (5, 6, 10):
                labels = format_ticks_for_axis(generate_nice_ticks(lo, hi, target))
                self.assertEqual(len(set(labels)), len(labels), (lo, hi, target, labels))

    def test_scientific_mantissa_follows_step(self) -> None:
        labels = format_ticks_for_axis(generate_nice_ticks(1.0, 1.02, 5))
        self.assertEqual(labels, ["1e0", "1.005e0", "1.01e0", "1.015e0", "1.02e0"])
        labels = format_ticks_for_axis(generate_nice_ticks(1e6, 1e6 + 10.0, 5))
        self.assertEqual(labels[:2], ["1e6", "1.000002e6"])

    def test_negative_zero_formats_as_zero(self) -> None:
        self.assertEqual(format_tick(-0.0), "0")
        self.assertEqual(format_tick(-0.001), "0")


if __name__ == "__main__":
    unittest.main()
