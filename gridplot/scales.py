from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math

import numpy as np

from gridplot.config import (
    BOUNDS_PADDING_FRACTION,
    DEFAULT_TICK_TARGET,
    DEGENERATE_MIN_HALF_SPAN,
    MAX_SCIENTIFIC_DIGITS,
    MAX_TICK_DECIMALS,
    MIN_RELATIVE_TICK_SPAN,
)
from gridplot.errors import PlotDataError


@dataclass(frozen=True)
class DataLimits:
    xmin: float
    xmax: float
    ymin: float
    ymax: float

    @property
    def x_span(self) -> float:
        return self.xmax - self.xmin

    @property
    def y_span(self) -> float:
        return self.ymax - self.ymin

    def contains(self, x: float, y: float) -> bool:
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax

    def strictly_contains(self, x: float, y: float) -> bool:
        return self.xmin < x < self.xmax and self.ymin < y < self.ymax


def widen_degenerate(lo: float, hi: float, *, fraction: float = BOUNDS_PADDING_FRACTION) -> tuple[float, float]:
    if hi > lo:
        return lo, hi
    half = max(abs(lo) * fraction, DEGENERATE_MIN_HALF_SPAN)
    return lo - half, hi + half


def pad_range(lo: float, hi: float, fraction: float) -> tuple[float, float]:
    if hi <= lo:
        return widen_degenerate(lo, hi)
    pad = (hi - lo) * fraction
    return lo - pad, hi + pad


def nice_step(vmin: float, vmax: float, target: int = DEFAULT_TICK_TARGET) -> float:
    """Smallest step of the form 1, 2 or 5 times a power of ten covering the range in ``target`` steps."""
    if target <= 0:
        raise ValueError("target must be > 0")
    lo, hi = _tick_range(vmin, vmax)
    return _nice_number((hi - lo) / target)


def generate_nice_ticks(vmin: float, vmax: float, target: int = DEFAULT_TICK_TARGET) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if not (math.isfinite(vmin) and math.isfinite(vmax)):
        raise PlotDataError(f"tick range must be finite, got ({vmin!r}, {vmax!r})")
    lo, hi = _tick_range(vmin, vmax)
    step = _nice_number((hi - lo) / target)

    # Tolerance keeps exact multiples (0.3 / 0.1 == 2.9999...) from growing an extra tick.
    first = math.floor(lo / step + 1e-9)
    last = math.ceil(hi / step - 1e-9)
    if last <= first:
        last = first + 1

    ticks = np.arange(first, last + 1, dtype=np.float64) * step
    ticks = np.round(ticks, _decimals_from_step(step))
    ticks[ticks == 0.0] = 0.0
    return ticks


def format_tick(value: float, *, step: float | None = None) -> str:
    if not math.isfinite(value):
        return str(value)
    if step is not None and math.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    fine_step = step is not None and 0 < step < 10.0**-MAX_TICK_DECIMALS
    if abs_v != 0 and (abs_v >= 1e6 or fine_step):
        return _format_scientific(value, step=step)

    decimals = min(MAX_TICK_DECIMALS, _decimals_from_step(step)) if step is not None else MAX_TICK_DECIMALS
    d = Decimal(repr(float(value)))
    try:
        q = d.quantize(Decimal("1").scaleb(-decimals))
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    diff = float(abs(ticks[1] - ticks[0]))
    step = None
    if diff > 0 and math.isfinite(diff):
        # Snap subtraction drift (0.0050000000000000044) back onto the nice step.
        nice = _nice_number(diff)
        step = nice if math.isclose(diff, nice, rel_tol=1e-6) else diff
    return [format_tick(float(v), step=step) for v in ticks]


def _format_scientific(value: float, *, step: float | None = None) -> str:
    """Compact ``1.23e6`` notation with enough mantissa digits to resolve ``step``."""
    digits = MAX_TICK_DECIMALS
    if step is not None and step > 0 and math.isfinite(step):
        value_exp = math.floor(math.log10(abs(value)))
        step_exp = int(Decimal(repr(float(step))).normalize().as_tuple().exponent)
        digits = min(MAX_SCIENTIFIC_DIGITS, max(digits, value_exp - step_exp))
    mantissa, exponent = f"{value:.{digits}e}".split("e")
    if "." in mantissa:
        mantissa = mantissa.rstrip("0").rstrip(".")
    return f"{mantissa}e{int(exponent)}"


def _tick_range(vmin: float, vmax: float) -> tuple[float, float]:
    lo, hi = widen_degenerate(min(vmin, vmax), max(vmin, vmax))
    # Spans below float resolution at this magnitude cannot hold distinct ticks.
    min_span = max(abs(lo), abs(hi)) * MIN_RELATIVE_TICK_SPAN
    if hi - lo < min_span:
        mid = (lo + hi) / 2.0
        lo, hi = mid - min_span / 2.0, mid + min_span / 2.0
    return lo, hi


def _nice_number(value: float) -> float:
    exp = math.floor(math.log10(value))
    # Dividing by a positive power of ten keeps 0.2 / 0.5 exact in binary.
    base = 10.0**exp if exp >= 0 else 1.0 / 10.0 ** (-exp)
    frac = value / base
    for multiple in (1.0, 2.0, 5.0):
        if frac <= multiple * (1.0 + 1e-9):
            return multiple * base if exp >= 0 else multiple / 10.0 ** (-exp)
    return 10.0 ** (exp + 1) if exp + 1 >= 0 else 1.0 / 10.0 ** (-(exp + 1))


def _decimals_from_step(step: float | None) -> int:
    if step is None or step <= 0 or not math.isfinite(step):
        return MAX_TICK_DECIMALS
    d = Decimal(repr(step)).normalize()
    exp = d.as_tuple().exponent
    return max(0, -int(exp))
