"""Scalar escape-time evaluation for a single point of the complex plane."""

from __future__ import annotations

ESCAPE_RADIUS_SQUARED = 4.0


def evaluate(c: float, ci: float, max_iterations: int) -> int:
    """Return the zero-based step at which the orbit of ``c + ci*i`` escapes.

    The orbit starts at ``0`` and follows ``z -> z**2 + c``. The first step
    whose squared magnitude reaches ``ESCAPE_RADIUS_SQUARED`` is returned.
    ``max_iterations`` is returned when the orbit stays bounded for the whole
    budget, meaning the point is presumed to belong to the set.
    """

    z = 0.0
    zi = 0.0
    for i in range(max_iterations):
        zi_next = 2 * (z * zi)
        z_next = z * z - (zi * zi)
        z = z_next + c
        zi = zi_next + ci

        if z * z + zi * zi >= ESCAPE_RADIUS_SQUARED:
            return i
    return max_iterations
