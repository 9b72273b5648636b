from gridplot.adapters.normalize import (
    XYData,
    normalize_counts,
    normalize_labels,
    normalize_points,
    normalize_values,
    normalize_xy,
)

__all__ = [
    "XYData",
    "normalize_counts",
    "normalize_labels",
    "normalize_points",
    "normalize_values",
    "normalize_xy",
]
