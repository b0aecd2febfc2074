"""Mapping of escape-time iterations to display colours."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
import PIL.Image

from matplotlib import colormaps as _mpl_colormaps

from .renderer import ConfigurationError, validate_max_iterations

Color = tuple[int, int, int]
Palette = Callable[[np.ndarray, int], np.ndarray]

# AliceBlue
IN_SET_COLOR: Color = (240, 248, 255)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def color_of(iteration: int, max_iterations: int) -> Color:
    """Colour of a single iteration result.

    Escaping points run from black through green to pale green as they get
    slower to escape. Points that never escaped get ``IN_SET_COLOR``.
    """

    max_iterations = validate_max_iterations(max_iterations)
    if iteration == max_iterations:
        return IN_SET_COLOR

    t = iteration / max_iterations
    c1 = _clamp(255 * 2 * t, 0.0, 255.0)
    c2 = _clamp(255 * (2 * t - 1), 0.0, 255.0)
    return (int(round(c2)), int(round(c1)), int(round(c2)))


def reference_palette(iterations: np.ndarray, max_iterations: int) -> np.ndarray:
    """Vectorised :func:`color_of` over a whole grid."""

    iters = np.asarray(iterations)
    t = iters.astype(np.float64) / max_iterations
    c1 = np.clip(255 * 2 * t, 0.0, 255.0)
    c2 = np.clip(255 * (2 * t - 1), 0.0, 255.0)
    rgb = np.rint(np.stack((c2, c1, c2), axis=-1)).astype(np.uint8)
    rgb[iters == max_iterations] = IN_SET_COLOR
    return rgb


def parse_hex_color(hex_color: str) -> Color:
    """Parse ``#RRGGBB`` into an integer RGB triple."""

    hex_color = hex_color.strip().lstrip("#")
    if len(hex_color) != 6:
        raise ValueError("Colors must be in the form #RRGGBB.")
    try:
        return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]
    except ValueError as exc:
        raise ValueError("Colors must contain only hexadecimal digits.") from exc


@dataclass(frozen=True)
class ColormapPalette:
    """Colour escaping points with a matplotlib colormap."""

    name: str = "twilight_shifted"
    inside_color: Color = IN_SET_COLOR
    invert: bool = False

    def __post_init__(self) -> None:
        if self.name not in _mpl_colormaps:
            raise ConfigurationError(f"Unknown matplotlib colormap '{self.name}'.")

    def __call__(self, iterations: np.ndarray, max_iterations: int) -> np.ndarray:
        iters = np.asarray(iterations)
        v = np.clip(iters.astype(np.float64) / max_iterations, 0.0, 1.0)
        if self.invert:
            v = 1.0 - v
        cmap = _mpl_colormaps[self.name]
        rgba = np.array(cmap(v), copy=True)
        rgb = np.uint8(np.clip(np.rint(rgba[..., :3] * 255), 0, 255))
        rgb[iters == max_iterations] = self.inside_color
        return rgb


def colorize(iterations: np.ndarray, max_iterations: int, palette: Optional[Palette] = None) -> np.ndarray:
    """Turn an iteration grid into a ``uint8`` RGB grid with a trailing channel axis."""

    max_iterations = validate_max_iterations(max_iterations)
    palette = reference_palette if palette is None else palette
    return palette(iterations, max_iterations)


def to_image(colors: np.ndarray) -> PIL.Image.Image:
    """Build an in-memory RGB image from a ``(width, height, 3)`` colour grid."""

    colors = np.asarray(colors, dtype=np.uint8)
    if colors.ndim != 3 or colors.shape[-1] != 3:
        raise ValueError(f"Expected a (width, height, 3) colour grid, got shape {colors.shape}.")
    return PIL.Image.fromarray(np.ascontiguousarray(colors.transpose(1, 0, 2)))
