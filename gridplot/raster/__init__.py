from .canvas import blend_mask, new_canvas
from .draw_lines import dash_polyline, stroke_polyline
from .draw_polygons import fill_polygons
from .draw_text import font_ascent, text_mask, text_size
from .surface import RasterSurface

__all__ = [
    "RasterSurface",
    "blend_mask",
    "dash_polyline",
    "fill_polygons",
    "font_ascent",
    "new_canvas",
    "stroke_polyline",
    "text_mask",
    "text_size",
]
