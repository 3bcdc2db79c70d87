"""Mapping between the pixel canvas and the complex plane."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .errors import ConfigurationError

Bounds = tuple[int, int]


@dataclass(frozen=True)
class Viewport:
    """Axis-aligned rectangle of the complex plane shown on the canvas.

    ``upper_left`` has the smallest real part and the largest imaginary part.
    Viewports produced by repeated zooming are not validated: once the extent
    drops below float64 resolution the view simply degenerates.
    """

    upper_left: complex
    lower_right: complex

    def __post_init__(self) -> None:
        object.__setattr__(self, "upper_left", complex(self.upper_left))
        object.__setattr__(self, "lower_right", complex(self.lower_right))

    @classmethod
    def from_center(cls, center: complex, width: float, height: float) -> "Viewport":
        center = complex(center)
        return cls(
            complex(center.real - width / 2.0, center.imag + height / 2.0),
            complex(center.real + width / 2.0, center.imag - height / 2.0),
        )

    @property
    def width(self) -> float:
        return self.lower_right.real - self.upper_left.real

    @property
    def height(self) -> float:
        return self.upper_left.imag - self.lower_right.imag

    @property
    def center(self) -> complex:
        return complex(
            (self.upper_left.real + self.lower_right.real) / 2.0,
            (self.upper_left.imag + self.lower_right.imag) / 2.0,
        )

    def validate(self) -> "Viewport":
        if not (np.isfinite(self.width) and self.width > 0):
            raise ConfigurationError(
                f"Viewport width must be positive, got {self.width!r} "
                f"(upper_left={self.upper_left}, lower_right={self.lower_right})."
            )
        if not (np.isfinite(self.height) and self.height > 0):
            raise ConfigurationError(
                f"Viewport height must be positive, got {self.height!r} "
                f"(upper_left={self.upper_left}, lower_right={self.lower_right})."
            )
        return self


def check_bounds(bounds: Bounds) -> Bounds:
    width, height = bounds
    if int(width) != width or int(height) != height or width < 1 or height < 1:
        raise ConfigurationError(f"Canvas bounds must be positive integers, got {bounds!r}.")
    return int(width), int(height)


def pixel_to_point(bounds: Bounds, pixel: tuple[float, float], viewport: Viewport) -> complex:
    """Map a pixel to the complex plane. Pixel y grows downward, imaginary parts grow upward.

    Pixels outside ``[0, bounds)`` extrapolate linearly.
    """

    width, height = bounds
    x, y = pixel
    return complex(
        viewport.upper_left.real + x * viewport.width / width,
        viewport.upper_left.imag - y * viewport.height / height,
    )


def point_to_pixel(bounds: Bounds, point: complex, viewport: Viewport) -> tuple[float, float]:
    """Inverse of :func:`pixel_to_point`; returns fractional pixel coordinates."""

    width, height = bounds
    point = complex(point)
    x = (point.real - viewport.upper_left.real) * width / viewport.width
    y = (viewport.upper_left.imag - point.imag) * height / viewport.height
    return x, y


def band_points(bounds: Bounds, top: int, rows: int, viewport: Viewport) -> tuple[np.ndarray, np.ndarray]:
    """Real and imaginary grids for canvas rows ``[top, top + rows)``.

    Coordinates are taken against the full canvas and full viewport, with the
    same operation order as :func:`pixel_to_point`, so every entry matches the
    scalar mapping exactly.
    """

    width, height = bounds
    xs = np.arange(width, dtype=np.float64)
    ys = np.arange(top, top + rows, dtype=np.float64)
    re = viewport.upper_left.real + xs * viewport.width / width
    im = viewport.upper_left.imag - ys * viewport.height / height
    return (
        np.broadcast_to(re, (rows, width)),
        np.broadcast_to(im[:, np.newaxis], (rows, width)),
    )
