from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import Any

import numpy as np

from gridplot.errors import PlotDataError
from gridplot.series import Point


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class XYData:
    """Finite (x, y) pairs plus the mask that selected them from the raw input."""

    x: np.ndarray
    y: np.ndarray
    mask: np.ndarray

    @property
    def size(self) -> int:
        return int(self.x.size)


def normalize_xy(x: Any, y: Any) -> XYData:
    x_arr = _coerce_1d_numeric(x, label="x")
    y_arr = _coerce_1d_numeric(y, label="y")
    if x_arr.shape != y_arr.shape:
        raise PlotDataError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")
    return _finite_pairs(x_arr, y_arr)


def normalize_points(points: Any) -> XYData:
    """Accept an (N, 2) array/tensor or a sequence of ``Point``/(x, y) pairs."""
    if torch is not None and isinstance(points, torch.Tensor):
        points = _tensor_to_numpy(points)
    if pd is not None and isinstance(points, pd.DataFrame):
        points = points.to_numpy()
    if isinstance(points, np.ndarray):
        if points.size == 0:
            return _finite_pairs(np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64))
        if points.ndim != 2 or points.shape[1] != 2:
            raise PlotDataError(f"points array must have shape (N, 2), got {points.shape}")
        return _finite_pairs(
            _coerce_ndarray(points[:, 0], label="x"),
            _coerce_ndarray(points[:, 1], label="y"),
        )
    if not isinstance(points, Sequence) or isinstance(points, (str, bytes, bytearray)):
        raise PlotDataError(f"unsupported points input type: {type(points)!r}")
    xs: list[Any] = []
    ys: list[Any] = []
    for i, item in enumerate(points):
        if isinstance(item, Point):
            xs.append(item.x)
            ys.append(item.y)
            continue
        try:
            px, py = item
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"point at index {i} is not an (x, y) pair: {item!r}") from exc
        xs.append(px)
        ys.append(py)
    return normalize_xy(xs, ys)


def normalize_values(values: Any) -> np.ndarray:
    arr = _coerce_1d_numeric(values, label="values")
    finite = np.isfinite(arr)
    dropped = int(arr.size - np.count_nonzero(finite))
    if dropped:
        LOGGER.debug("dropped %d non-finite values", dropped)
    return arr[finite]


def normalize_labels(labels: Any, *, expected: int) -> np.ndarray:
    arr = _coerce_1d_numeric(labels, label="labels")
    if arr.size != expected:
        raise PlotDataError(f"points and labels length mismatch: {expected} != {arr.size}")
    if arr.size and (not np.all(np.isfinite(arr)) or not np.all(arr == np.rint(arr))):
        raise PlotDataError("cluster labels must be integers")
    out = arr.astype(np.int64)
    if out.size and int(out.min()) < -1:
        raise PlotDataError(f"cluster labels must be >= -1, got {int(out.min())}")
    return out


def normalize_counts(counts: Any) -> np.ndarray:
    arr = _coerce_1d_numeric(counts, label="counts")
    if arr.size and (not np.all(np.isfinite(arr)) or not np.all(arr == np.rint(arr))):
        raise PlotDataError("histogram counts must be integers")
    if arr.size and float(arr.min()) < 0:
        raise PlotDataError(f"histogram counts must be >= 0, got {float(arr.min())!r}")
    return arr.astype(np.int64)


def _finite_pairs(x_arr: np.ndarray, y_arr: np.ndarray) -> XYData:
    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    dropped = int(mask.size - np.count_nonzero(mask))
    if dropped:
        LOGGER.debug("dropped %d non-finite points", dropped)
    return XYData(x=x_arr[mask], y=y_arr[mask], mask=mask)


def _tensor_to_numpy(tensor: Any) -> np.ndarray:
    tensor = tensor.detach()
    if tensor.is_cuda:
        tensor = tensor.cpu()
    return tensor.to(torch.float64).numpy()


def _coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _tensor_to_numpy(value)

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        arr = np.asarray(value, dtype=object)
        if arr.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(arr, label=label)

    raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
