import threading

import numpy as np
import pytest

tf = pytest.importorskip("tensorflow")

from mandelview import DEFAULT_VIEWPORT, Grid, RenderCancelled, RenderParameters, Viewport, render, render_frame
from mandelview.kernels import default_device, escape_time_grid


def test_tensorflow_backend_agrees_with_scalar_evaluator():
    grid = Grid(48, 40)
    scalar = render(DEFAULT_VIEWPORT, grid, 60)
    vectorised = render(DEFAULT_VIEWPORT, grid, 60, backend="tensorflow", chunk_size=16)
    assert vectorised.shape == scalar.shape
    assert vectorised.dtype == np.int32
    assert np.mean(vectorised == scalar) > 0.99
    assert np.max(np.abs(vectorised.astype(int) - scalar.astype(int))) <= 1


def test_tensorflow_backend_known_points():
    iterations = escape_time_grid(np.array([0.0, 1.0, -2.0]), np.array([0.0, -1.2]), 25)
    assert iterations.shape == (3, 2)
    assert iterations[0, 0] == 25
    assert iterations[1, 0] == 1
    assert iterations[2, 1] == 0


def test_tensorflow_backend_is_deterministic():
    params = RenderParameters(Viewport(-0.8, -0.7, 0.05, 0.15), Grid(20, 20), 200)
    first = render_frame(params, backend="tensorflow").iterations
    second = render_frame(params, backend="tensorflow", chunk_size=3).iterations
    np.testing.assert_array_equal(first, second)


def test_tensorflow_backend_checks_cancel_between_chunks():
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(RenderCancelled):
        render(DEFAULT_VIEWPORT, Grid(16, 16), 10, backend="tensorflow", cancel=cancel)


def test_default_device_is_a_device_string():
    assert default_device() in ("/CPU:0", "/GPU:0")
