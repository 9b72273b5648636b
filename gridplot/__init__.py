from gridplot.api import figure, subplots
from gridplot.bounds import BoundsResult, compute_plot_bounds
from gridplot.colors import ColorAssigner, cluster_color, resolve_color
from gridplot.config import Margins, PlotTheme
from gridplot.errors import PlotDataError, SubplotIndexError
from gridplot.histogram import compute_bins
from gridplot.plot import HistogramPlot, LinePlot, Plot, ScatterPlot
from gridplot.raster.surface import RasterSurface
from gridplot.render import RenderPipeline, RenderReport, RenderStage
from gridplot.scales import DataLimits, format_tick, generate_nice_ticks, nice_step
from gridplot.series import Point, Style
from gridplot.subplots import SubplotGrid
from gridplot.surface import DrawingSurface
from gridplot.svg import SvgSurface
from gridplot.transform import CellPlacement, CoordinateTransform

__all__ = [
    "BoundsResult",
    "CellPlacement",
    "ColorAssigner",
    "CoordinateTransform",
    "DataLimits",
    "DrawingSurface",
    "HistogramPlot",
    "LinePlot",
    "Margins",
    "Plot",
    "PlotDataError",
    "PlotTheme",
    "Point",
    "RasterSurface",
    "RenderPipeline",
    "RenderReport",
    "RenderStage",
    "ScatterPlot",
    "Style",
    "SubplotGrid",
    "SubplotIndexError",
    "SvgSurface",
    "cluster_color",
    "compute_bins",
    "compute_plot_bounds",
    "figure",
    "format_tick",
    "generate_nice_ticks",
    "nice_step",
    "resolve_color",
    "subplots",
]
