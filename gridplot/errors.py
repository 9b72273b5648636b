from __future__ import annotations


class PlotDataError(ValueError):
    """Raised when plot input is malformed or contradicts the plot's current contents."""


class SubplotIndexError(IndexError):
    """Raised when a subplot row/column lies outside the grid."""
