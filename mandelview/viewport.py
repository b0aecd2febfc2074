"""Utilities for moving the viewport between renders."""

from __future__ import annotations

import numpy as np

from .renderer import ConfigurationError, SamplingMetadata, Viewport, plane_coordinate


class ViewportParseError(ValueError):
    """Raised when a viewport bound cannot be read as a number."""

    def __init__(self, field: str, text: str) -> None:
        super().__init__(f"{field} must be a number, got {text!r}.")
        self.field = field
        self.text = text


def parse_viewport(re_min: str, re_max: str, im_min: str, im_max: str) -> Viewport:
    """Build a validated viewport from four text fields."""

    values = {}
    for field, text in (("re_min", re_min), ("re_max", re_max), ("im_min", im_min), ("im_max", im_max)):
        try:
            values[field] = float(str(text).strip())
        except ValueError as exc:
            raise ViewportParseError(field, text) from exc
    return Viewport(**values).validate()


def pixel_to_complex(metadata: SamplingMetadata, x: int, y: int) -> tuple[float, float]:
    """Plane coordinate sampled for pixel ``(x, y)``."""

    if not (0 <= x < metadata.width and 0 <= y < metadata.height):
        raise IndexError(f"Pixel ({x}, {y}) lies outside a {metadata.width}x{metadata.height} grid.")
    c = plane_coordinate(metadata.re_min, metadata.precision, int(x), metadata.coordinates)
    ci = plane_coordinate(metadata.im_min, metadata.precision, int(y), metadata.coordinates)
    return c, ci


def recenter(viewport: Viewport, metadata: SamplingMetadata, x: int, y: int) -> Viewport:
    """Move the centre of ``viewport`` onto pixel ``(x, y)`` of a previous render."""

    re_center, im_center = pixel_to_complex(metadata, x, y)
    return Viewport.from_center(re_center, im_center, viewport.re_width, viewport.im_height).validate()


def apply_zoom(viewport: Viewport, zoom_factor: float) -> Viewport:
    """Scale both sides of ``viewport`` around its centre.

    Factors below one zoom in, factors above one zoom out.
    """

    if not np.isfinite(zoom_factor) or zoom_factor <= 0:
        raise ConfigurationError(f"zoom_factor must be a positive number, got {zoom_factor}.")
    re_width = np.float64(viewport.re_width) * np.float64(zoom_factor)
    im_height = np.float64(viewport.im_height) * np.float64(zoom_factor)
    return Viewport.from_center(viewport.re_center, viewport.im_center, float(re_width), float(im_height)).validate()
