"""Rendering primitives for Mandelbrot escape-time grids."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np

from .evaluator import evaluate

DEFAULT_MAX_ITERATIONS = 50
COORDINATE_MODES = ("direct", "accumulate")
BACKENDS = ("python", "tensorflow")


class ConfigurationError(ValueError):
    """Raised when a render is requested with an unusable configuration."""


class RenderCancelled(RuntimeError):
    """Raised when a cancellation signal is observed during a render."""


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class Viewport:
    """Rectangular region of the complex plane."""

    re_min: float
    re_max: float
    im_min: float
    im_max: float

    @classmethod
    def from_center(cls, re_center: float, im_center: float, re_width: float, im_height: float) -> "Viewport":
        half_re = np.float64(re_width) / 2.0
        half_im = np.float64(im_height) / 2.0
        return cls(
            re_min=float(re_center - half_re),
            re_max=float(re_center + half_re),
            im_min=float(im_center - half_im),
            im_max=float(im_center + half_im),
        )

    @property
    def re_width(self) -> float:
        return self.re_max - self.re_min

    @property
    def im_height(self) -> float:
        return self.im_max - self.im_min

    @property
    def re_center(self) -> float:
        return (self.re_min + self.re_max) / 2.0

    @property
    def im_center(self) -> float:
        return (self.im_min + self.im_max) / 2.0

    def validate(self) -> "Viewport":
        for name in ("re_min", "re_max", "im_min", "im_max"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a finite number, got {getattr(self, name)!r}.")
        if not self.re_max > self.re_min:
            raise ConfigurationError(f"re_max ({self.re_max}) must be greater than re_min ({self.re_min}).")
        if not self.im_max > self.im_min:
            raise ConfigurationError(f"im_max ({self.im_max}) must be greater than im_min ({self.im_min}).")
        return self


@dataclass(frozen=True)
class Grid:
    """Pixel dimensions of a render."""

    width: int
    height: int

    @property
    def size(self) -> int:
        return self.width * self.height

    def validate(self) -> "Grid":
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}.")
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}.")
        return self


DEFAULT_VIEWPORT = Viewport(re_min=-2.0, re_max=1.0, im_min=-1.2, im_max=1.2)
DEFAULT_GRID = Grid(width=740, height=605)


def validate_max_iterations(max_iterations: int) -> int:
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
        raise ConfigurationError(f"max_iterations must be an integer, got {max_iterations!r}.")
    if max_iterations < 1:
        raise ConfigurationError(f"max_iterations must be at least 1, got {max_iterations}.")
    return int(max_iterations)


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render of the Mandelbrot set."""

    viewport: Viewport = DEFAULT_VIEWPORT
    grid: Grid = DEFAULT_GRID
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    coordinates: str = "direct"

    def __post_init__(self) -> None:
        self.viewport.validate()
        self.grid.validate()
        validate_max_iterations(self.max_iterations)
        if self.coordinates not in COORDINATE_MODES:
            raise ConfigurationError(
                f"Unknown coordinate mode '{self.coordinates}'. Valid choices: {', '.join(COORDINATE_MODES)}."
            )


@dataclass(frozen=True)
class SamplingMetadata:
    """Metadata describing the pixel-to-plane mapping of a rendered frame."""

    re_min: float
    im_min: float
    precision: float
    width: int
    height: int
    coordinates: str = "direct"

    @property
    def re_last(self) -> float:
        """Real coordinate of the last column, which may lie past ``re_max``."""
        return plane_coordinate(self.re_min, self.precision, self.width - 1, self.coordinates)

    @property
    def im_last(self) -> float:
        return plane_coordinate(self.im_min, self.precision, self.height - 1, self.coordinates)


@dataclass(frozen=True)
class RenderResult:
    """Container for the iteration grid of a render.

    ``iterations`` has shape ``(width, height)`` and is indexed ``[x, y]``.
    """

    iterations: np.ndarray
    metadata: SamplingMetadata


def sampling_metadata(params: RenderParameters) -> SamplingMetadata:
    viewport = params.viewport
    grid = params.grid
    precision = max(
        (viewport.re_max - viewport.re_min) / grid.width,
        (viewport.im_max - viewport.im_min) / grid.height,
    )
    return SamplingMetadata(
        re_min=float(viewport.re_min),
        im_min=float(viewport.im_min),
        precision=float(precision),
        width=int(grid.width),
        height=int(grid.height),
        coordinates=params.coordinates,
    )


def plane_coordinate(start: float, step: float, index: int, mode: str = "direct") -> float:
    if mode == "accumulate":
        value = start
        for _ in range(index):
            value = value + step
        return value
    return start + index * step


def _axis(start: float, step: float, count: int, mode: str) -> np.ndarray:
    if mode == "accumulate":
        values = np.empty(count, dtype=np.float64)
        value = start
        for index in range(count):
            values[index] = value
            value = value + step
        return values
    return np.float64(start) + np.arange(count, dtype=np.float64) * np.float64(step)


def plane_axes(metadata: SamplingMetadata) -> tuple[np.ndarray, np.ndarray]:
    """Return the real and imaginary coordinates of every column and row."""

    re_axis = _axis(metadata.re_min, metadata.precision, metadata.width, metadata.coordinates)
    im_axis = _axis(metadata.im_min, metadata.precision, metadata.height, metadata.coordinates)
    return re_axis, im_axis


def _check_cancel(cancel: Optional[CancelSignal]) -> None:
    if cancel is not None and cancel.is_set():
        raise RenderCancelled("Render cancelled before completion.")


def _render_python(
    re_axis: np.ndarray,
    im_axis: np.ndarray,
    max_iterations: int,
    cancel: Optional[CancelSignal],
) -> np.ndarray:
    iterations = np.empty((re_axis.size, im_axis.size), dtype=np.int32)
    re_values = re_axis.tolist()
    im_values = im_axis.tolist()
    for x, c in enumerate(re_values):
        for y, ci in enumerate(im_values):
            _check_cancel(cancel)
            iterations[x, y] = evaluate(c, ci, max_iterations)
    return iterations


def render_frame(
    params: RenderParameters,
    *,
    backend: str = "python",
    cancel: Optional[CancelSignal] = None,
    device: Optional[str] = None,
    chunk_size: int = 128,
) -> RenderResult:
    """Render the escape-time grid described by ``params``."""

    if backend not in BACKENDS:
        raise ConfigurationError(f"Unknown backend '{backend}'. Valid choices: {', '.join(BACKENDS)}.")

    metadata = sampling_metadata(params)
    re_axis, im_axis = plane_axes(metadata)

    if backend == "tensorflow":
        from .kernels import escape_time_grid

        iterations = escape_time_grid(
            re_axis,
            im_axis,
            params.max_iterations,
            device=device,
            cancel=cancel,
            chunk_size=chunk_size,
        )
    else:
        iterations = _render_python(re_axis, im_axis, params.max_iterations, cancel)

    return RenderResult(iterations=iterations, metadata=metadata)


def render(
    viewport: Viewport,
    grid: Grid,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    **options,
) -> np.ndarray:
    """Return the ``(width, height)`` iteration grid for ``viewport``.

    ``coordinates`` is forwarded to :class:`RenderParameters`, any other
    keyword goes to :func:`render_frame`.
    """

    coordinates = options.pop("coordinates", "direct")
    params = RenderParameters(
        viewport=viewport,
        grid=grid,
        max_iterations=max_iterations,
        coordinates=coordinates,
    )
    return render_frame(params, **options).iterations
