"""Band-parallel rendering of escape-time frames into an RGB pixel buffer."""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .colors import ColorTable
from .errors import ConfigurationError
from .geometry import Bounds, Viewport, band_points, check_bounds, pixel_to_point
from .kernel import Recurrence


@dataclass(frozen=True)
class Band:
    """Horizontal strip of the canvas rendered as one unit of work.

    ``viewport`` spans from the band's first row to one row past its last.
    It describes the band only; :func:`render_band` maps pixels against the
    full canvas and full viewport instead.
    """

    index: int
    top: int
    rows: int
    viewport: Viewport


def new_buffer(bounds: Bounds) -> np.ndarray:
    width, height = check_bounds(bounds)
    return np.zeros((height, width, 3), dtype=np.uint8)


def split_bands(bounds: Bounds, viewport: Viewport, band_height: int = 1) -> list[Band]:
    width, height = check_bounds(bounds)
    if band_height < 1:
        raise ConfigurationError(f"Band height must be at least 1, got {band_height}.")

    bands = []
    for index, top in enumerate(range(0, height, band_height)):
        rows = min(band_height, height - top)
        band_viewport = Viewport(
            pixel_to_point(bounds, (0, top), viewport),
            pixel_to_point(bounds, (width, top + rows), viewport),
        )
        bands.append(Band(index=index, top=top, rows=rows, viewport=band_viewport))
    return bands


def render_band(
    buffer: np.ndarray,
    band: Band,
    bounds: Bounds,
    viewport: Viewport,
    color_table: ColorTable,
    iteration_limit: int,
    recurrence: Recurrence,
    *,
    device: Optional[str] = None,
) -> None:
    """Fill the rows of ``buffer`` covered by ``band``."""

    re, im = band_points(bounds, band.top, band.rows, viewport)
    counts = recurrence.escape_counts(re, im, iteration_limit, device=device)
    buffer[band.top:band.top + band.rows] = color_table.colorize(counts)


def _check_buffer(buffer: np.ndarray, bounds: Bounds) -> None:
    width, height = bounds
    shape = getattr(buffer, "shape", None)
    if shape != (height, width, 3) or buffer.dtype != np.uint8:
        raise ConfigurationError(
            f"Pixel buffer must be a uint8 array of shape {(height, width, 3)}, "
            f"got {getattr(buffer, 'dtype', type(buffer).__name__)} {shape}."
        )


def render(
    buffer: np.ndarray,
    bounds: Bounds,
    viewport: Viewport,
    color_table: ColorTable,
    iteration_limit: int,
    recurrence: Recurrence = Recurrence.QUADRATIC,
    *,
    band_height: int = 1,
    executor: Optional[Executor] = None,
    workers: Optional[int] = None,
    device: Optional[str] = None,
) -> np.ndarray:
    """Render one frame into ``buffer`` and return it once every band is done.

    Bands share only the read-only viewport and color table and write disjoint
    rows, so the result does not depend on scheduling or worker count. When no
    ``executor`` is given a pool of ``workers`` threads lives for this frame.
    """

    bounds = check_bounds(bounds)
    _check_buffer(buffer, bounds)
    color_table.check_limit(iteration_limit)
    bands = split_bands(bounds, viewport, band_height)

    def _render(band: Band) -> None:
        render_band(buffer, band, bounds, viewport, color_table, iteration_limit, recurrence, device=device)

    if executor is None:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(_render, bands))
    else:
        list(executor.map(_render, bands))
    return buffer


class FrameRenderer:
    """Render successive frames with one long-lived worker pool."""

    def __init__(
        self,
        color_table: ColorTable,
        iteration_limit: int,
        recurrence: Recurrence = Recurrence.QUADRATIC,
        *,
        band_height: int = 1,
        workers: Optional[int] = None,
        device: Optional[str] = None,
    ) -> None:
        color_table.check_limit(iteration_limit)
        if band_height < 1:
            raise ConfigurationError(f"Band height must be at least 1, got {band_height}.")
        self.color_table = color_table
        self.iteration_limit = iteration_limit
        self.recurrence = recurrence
        self.band_height = band_height
        self.device = device
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="band")

    def render(self, buffer: np.ndarray, bounds: Bounds, viewport: Viewport) -> np.ndarray:
        return render(
            buffer,
            bounds,
            viewport,
            self.color_table,
            self.iteration_limit,
            self.recurrence,
            band_height=self.band_height,
            executor=self._executor,
            device=self.device,
        )

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "FrameRenderer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
