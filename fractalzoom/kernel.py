"""Escape-time iteration for the quadratic and cubic Mandelbrot maps."""

from __future__ import annotations

import enum
from typing import Callable, Optional

import numpy as np
import tensorflow as tf

from .errors import ConfigurationError

HORIZON_SQ = 4.0
NO_ESCAPE = -1


def escape_time(c: complex, limit: int) -> Optional[int]:
    """Return the iteration at which ``z -> z**2 + c`` leaves the radius 2 disk.

    The orbit starts at ``z = 0`` and is tested before every update, so a point
    outside the disk is only detected at iteration 1. ``None`` means the orbit
    stayed bounded for ``limit`` iterations.
    """

    z = 0j
    for i in range(limit):
        if z.real * z.real + z.imag * z.imag > HORIZON_SQ:
            return i
        z = z * z + c
    return None


def cubic_escape_time(c: complex, limit: int) -> Optional[int]:
    """Same as :func:`escape_time` for ``z -> z**3 + c``."""

    z = 0j
    for i in range(limit):
        if z.real * z.real + z.imag * z.imag > HORIZON_SQ:
            return i
        z = z * z * z + c
    return None


# The tensor steps spell out complex multiplication component-wise in the same
# order Python uses for ``complex * complex`` so both kernels agree.
def _quadratic_step(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    return zr * zr - zi * zi + cr, zr * zi + zi * zr + ci


def _cubic_step(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    sr = zr * zr - zi * zi
    si = zr * zi + zi * zr
    return sr * zr - si * zi + cr, sr * zi + si * zr + ci


_RUN_SIGNATURE = (
    tf.TensorSpec(shape=[None], dtype=tf.float64),
    tf.TensorSpec(shape=[None], dtype=tf.float64),
    tf.TensorSpec(shape=[], dtype=tf.int32),
)


def _build_escape_run(step: Callable[..., tuple[tf.Tensor, tf.Tensor]]):
    @tf.function(input_signature=_RUN_SIGNATURE)
    def run(cr: tf.Tensor, ci: tf.Tensor, limit: tf.Tensor) -> tf.Tensor:
        """Iterate every point with a TensorFlow while loop, freezing escaped orbits."""

        i = tf.constant(0, dtype=tf.int32)
        zr = tf.zeros_like(cr)
        zi = tf.zeros_like(ci)
        counts = tf.fill(tf.shape(cr), tf.constant(NO_ESCAPE, dtype=tf.int32))
        active = tf.ones_like(cr, dtype=tf.bool)
        horizon = tf.constant(HORIZON_SQ, dtype=tf.float64)

        def cond(i, zr, zi, counts, active):
            return tf.logical_and(tf.less(i, limit), tf.reduce_any(active))

        def body(i, zr, zi, counts, active):
            escaped = tf.logical_and(active, zr * zr + zi * zi > horizon)
            counts = tf.where(escaped, i, counts)
            active = tf.logical_and(active, tf.logical_not(escaped))
            next_zr, next_zi = step(zr, zi, cr, ci)
            zr = tf.where(active, next_zr, zr)
            zi = tf.where(active, next_zi, zi)
            return i + 1, zr, zi, counts, active

        _, _, _, counts, _ = tf.while_loop(cond, body, (i, zr, zi, counts, active))
        return counts

    return run


class Recurrence(enum.Enum):
    """Closed set of escape-time maps, chosen once at startup."""

    QUADRATIC = "mandelbrot"
    CUBIC = "cubic"

    @classmethod
    def from_name(cls, name: str) -> "Recurrence":
        key = name.strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        choices = ", ".join(member.value for member in cls)
        raise ConfigurationError(f"Unknown fractal '{name}'. Valid choices: {choices}.")

    def escape(self, c: complex, limit: int) -> Optional[int]:
        return _SCALAR_KERNELS[self](c, limit)

    def escape_counts(
        self,
        re: np.ndarray,
        im: np.ndarray,
        limit: int,
        *,
        device: Optional[str] = None,
    ) -> np.ndarray:
        """Vectorized escape times for a grid of points; ``-1`` marks bounded orbits."""

        re = np.asarray(re, dtype=np.float64)
        im = np.asarray(im, dtype=np.float64)
        if re.shape != im.shape:
            raise ValueError(f"Real and imaginary grids differ in shape: {re.shape} != {im.shape}.")

        with tf.device(device if device is not None else "/CPU:0"):
            counts = _TENSOR_KERNELS[self](
                tf.convert_to_tensor(re.ravel(), dtype=tf.float64),
                tf.convert_to_tensor(im.ravel(), dtype=tf.float64),
                tf.constant(limit, dtype=tf.int32),
            )
        return counts.numpy().reshape(re.shape)


_SCALAR_KERNELS = {
    Recurrence.QUADRATIC: escape_time,
    Recurrence.CUBIC: cubic_escape_time,
}

_TENSOR_KERNELS = {
    Recurrence.QUADRATIC: _build_escape_run(_quadratic_step),
    Recurrence.CUBIC: _build_escape_run(_cubic_step),
}
