"""Public API for Mandelbrot escape-time rendering."""

from .evaluator import ESCAPE_RADIUS_SQUARED, evaluate
from .renderer import (
    DEFAULT_GRID,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_VIEWPORT,
    ConfigurationError,
    Grid,
    RenderCancelled,
    RenderParameters,
    RenderResult,
    SamplingMetadata,
    Viewport,
    plane_axes,
    render,
    render_frame,
    sampling_metadata,
)
from .coloring import IN_SET_COLOR, ColormapPalette, color_of, colorize, parse_hex_color, reference_palette, to_image
from .viewport import ViewportParseError, apply_zoom, parse_viewport, pixel_to_complex, recenter

__all__ = [
    "DEFAULT_GRID",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_VIEWPORT",
    "ESCAPE_RADIUS_SQUARED",
    "IN_SET_COLOR",
    "ColormapPalette",
    "ConfigurationError",
    "Grid",
    "RenderCancelled",
    "RenderParameters",
    "RenderResult",
    "SamplingMetadata",
    "Viewport",
    "ViewportParseError",
    "apply_zoom",
    "color_of",
    "colorize",
    "evaluate",
    "parse_hex_color",
    "parse_viewport",
    "pixel_to_complex",
    "plane_axes",
    "recenter",
    "reference_palette",
    "render",
    "render_frame",
    "sampling_metadata",
    "to_image",
]
