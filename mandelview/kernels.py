"""Vectorised escape-time kernel running on TensorFlow devices."""

from __future__ import annotations

from typing import Optional

import numpy as np
import tensorflow as tf

from .evaluator import ESCAPE_RADIUS_SQUARED
from .renderer import CancelSignal, RenderCancelled


def default_device() -> str:
    """Pick the first GPU when TensorFlow sees one, otherwise the CPU."""

    gpus = tf.config.list_physical_devices("GPU")
    if not gpus:
        return "/CPU:0"
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError:
        # Memory growth can only be set before the GPU is initialised.
        return "/CPU:0"
    return "/GPU:0"


@tf.function
def _escape_step(
    z: tf.Tensor,
    zi: tf.Tensor,
    c: tf.Tensor,
    ci: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    i: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every orbit that has not escaped yet by one step."""

    zi_next = tf.constant(2.0, dtype=z.dtype) * (z * zi)
    z_next = z * z - (zi * zi)
    z_next = z_next + c
    zi_next = zi_next + ci

    z = tf.where(active, z_next, z)
    zi = tf.where(active, zi_next, zi)
    horizon = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=z.dtype)
    escaped = tf.logical_and(active, z * z + zi * zi >= horizon)
    ns = tf.where(escaped, tf.fill(tf.shape(ns), i), ns)
    active = tf.logical_and(active, tf.logical_not(escaped))
    return z, zi, ns, active


@tf.function
def _escape_run(c: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    """Iterate the escape-time recurrence with a TensorFlow while loop."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    z = tf.zeros_like(c)
    zi = tf.zeros_like(ci)
    ns = tf.fill(tf.shape(c), max_iterations)
    active = tf.ones_like(ns, tf.bool)

    def cond(i, z, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, z, zi, ns, active):
        z, zi, ns, active = _escape_step(z, zi, c, ci, ns, active, i)
        return i + 1, z, zi, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, z, zi, ns, active))
    return ns


def escape_time_grid(
    re_axis: np.ndarray,
    im_axis: np.ndarray,
    max_iterations: int,
    *,
    device: Optional[str] = None,
    cancel: Optional[CancelSignal] = None,
    chunk_size: int = 128,
) -> np.ndarray:
    """Evaluate every ``(re, im)`` pair of the two axes.

    The result has shape ``(len(re_axis), len(im_axis))``. Columns are
    processed in chunks of ``chunk_size`` and ``cancel`` is checked before
    each chunk.
    """

    re_axis = np.asarray(re_axis, dtype=np.float64)
    im_axis = np.asarray(im_axis, dtype=np.float64)
    chunk_size = max(int(chunk_size), 1)
    iterations = np.empty((re_axis.size, im_axis.size), dtype=np.int32)
    budget = tf.constant(max_iterations, dtype=tf.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        im_tf = tf.convert_to_tensor(im_axis, dtype=tf.float64)
        for start in range(0, re_axis.size, chunk_size):
            if cancel is not None and cancel.is_set():
                raise RenderCancelled("Render cancelled before completion.")
            stop = min(start + chunk_size, re_axis.size)
            re_tf = tf.convert_to_tensor(re_axis[start:stop], dtype=tf.float64)
            C, CI = tf.meshgrid(re_tf, im_tf, indexing="ij")
            ns = _escape_run(C, CI, budget)
            iterations[start:stop, :] = ns.numpy()

    return iterations
