"""Precomputed color lookup tables sampled from matplotlib colormaps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from matplotlib import colormaps as _mpl_colormaps
from matplotlib.colors import Colormap

from .errors import ConfigurationError

INSIDE_COLOR = (0, 0, 0)

Gradient = Callable[[np.ndarray], np.ndarray]
RGB = tuple[int, int, int]


def get_colormap(name: str, *, invert: bool = False) -> Colormap:
    try:
        cmap = _mpl_colormaps[name]
    except KeyError as exc:
        raise ConfigurationError(f"Unknown colormap '{name}'.") from exc
    return cmap.reversed() if invert else cmap


def parse_hex_color(hex_color: str) -> RGB:
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6:
        raise ValueError('inside_color must be in the form #RRGGBB.')
    try:
        return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError as exc:
        raise ValueError('inside_color must contain only hexadecimal digits.') from exc


@dataclass(frozen=True, eq=False)
class ColorTable:
    """Read-only RGB lookup indexed by remaining iteration count.

    Entry ``size - count - 1`` colors a point that escaped at ``count``, so
    points escaping immediately take the last entry. Indices are clamped to
    the table, which only matters for counts produced with a larger limit
    than the table was built for. Bounded orbits use ``inside``.
    """

    colors: np.ndarray
    inside: RGB = INSIDE_COLOR

    def __post_init__(self) -> None:
        colors = np.array(self.colors, dtype=np.uint8)
        if colors.ndim != 2 or colors.shape[1] != 3 or colors.shape[0] == 0:
            raise ConfigurationError(f"Color table must have shape (size, 3), got {colors.shape}.")
        colors.flags.writeable = False
        object.__setattr__(self, "colors", colors)
        object.__setattr__(self, "inside", tuple(int(v) for v in self.inside))

    @property
    def size(self) -> int:
        return int(self.colors.shape[0])

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, index: int) -> RGB:
        return tuple(int(v) for v in self.colors[index])

    def check_limit(self, iteration_limit: int) -> None:
        if self.size != iteration_limit:
            raise ConfigurationError(
                f"Color table has {self.size} entries but the iteration limit is {iteration_limit}."
            )

    def index_for(self, count: int) -> int:
        return min(max(self.size - count - 1, 0), self.size - 1)

    def color_for(self, count: Optional[int]) -> RGB:
        if count is None:
            return self.inside
        return self[self.index_for(count)]

    def colorize(self, counts: np.ndarray) -> np.ndarray:
        """Map an array of escape counts (``-1`` for bounded orbits) to RGB."""

        counts = np.asarray(counts)
        indices = np.clip(self.size - counts.astype(np.int64) - 1, 0, self.size - 1)
        rgb = self.colors[indices]
        rgb[counts < 0] = self.inside
        return rgb


def build_color_table(size: int, gradient: Gradient, *, inside: RGB = INSIDE_COLOR) -> ColorTable:
    """Sample ``gradient`` at ``i / size`` for every entry.

    Channels are converted with ``int(component * 255)``, truncating toward
    zero rather than rounding.
    """

    if size < 1:
        raise ConfigurationError(f"Color table size must be at least 1, got {size}.")

    positions = np.arange(size, dtype=np.float64) / np.float64(size)
    rgba = np.asarray(gradient(positions), dtype=np.float64)
    rgb = np.clip(rgba[..., :3], 0.0, 1.0)
    return ColorTable(np.uint8(rgb * 255), inside=inside)
