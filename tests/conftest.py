import numpy as np
import pytest

from fractalzoom import ColorTable, Viewport

# Escape counts for the 4x4 canvas over (-1, 1)..(1, -1) with a limit of 10,
# traced by hand; None marks orbits that stay bounded.
GOLDEN_COUNTS = [
    [3, 4, None, 2],
    [5, None, None, 5],
    [None, None, None, 5],
    [5, None, None, 5],
]


@pytest.fixture
def unit_viewport():
    return Viewport(complex(-1.0, 1.0), complex(1.0, -1.0))


@pytest.fixture
def ramp_table():
    """Ten distinguishable colors: entry i is (i, 10 * i, 20 * i)."""
    return ColorTable(np.array([[i, 10 * i, 20 * i] for i in range(10)]))


def gray_gradient(positions):
    positions = np.asarray(positions, dtype=np.float64)
    return np.stack([positions, positions, positions], axis=-1)
