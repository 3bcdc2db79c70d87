import numpy as np
import pytest

from fractalzoom import ConfigurationError, Recurrence, Viewport, band_points, cubic_escape_time, escape_time

from conftest import GOLDEN_COUNTS


def test_point_outside_disk_escapes_after_first_update():
    # z0 = 0 is tested before the first update, so |c| > 2 is seen at iteration 1.
    assert escape_time(complex(3.0, 0.0), 10) == 1
    assert escape_time(complex(0.0, -2.5), 1000) == 1


@pytest.mark.parametrize("limit", [0, 1])
def test_tiny_limits_never_escape(limit):
    assert escape_time(complex(3.0, 0.0), limit) is None
    assert cubic_escape_time(complex(3.0, 0.0), limit) is None


@pytest.mark.parametrize("c", [0j, complex(-1.0, 0.0), complex(-0.5, 0.0), complex(0.0, 1.0), complex(0.25, 0.0)])
def test_points_in_the_set_stay_bounded(c):
    assert escape_time(c, 1000) is None


def test_norm_threshold_is_strict():
    # c = 0.5 + i reaches |z|^2 = 4.0625 at iteration 2; c = -2 sits on |z|^2 == 4 forever.
    assert escape_time(complex(0.5, 1.0), 10) == 2
    assert escape_time(complex(-2.0, 0.0), 100) is None


def test_golden_grid_scalar():
    for row, expected_row in enumerate(GOLDEN_COUNTS):
        for col, expected in enumerate(expected_row):
            c = complex(-1.0 + 0.5 * col, 1.0 - 0.5 * row)
            assert escape_time(c, 10) == expected, c


def test_overflowing_point_escapes():
    assert escape_time(complex(1e300, 1e300), 5) == 1


def test_cubic_differs_from_quadratic():
    # -1 cycles under z^2 + c but runs 0, -1, -2, -9 under z^3 + c.
    assert escape_time(complex(-1.0, 0.0), 100) is None
    assert cubic_escape_time(complex(-1.0, 0.0), 100) == 3
    assert cubic_escape_time(complex(0.0, 1.0), 100) is None
    assert cubic_escape_time(0j, 100) is None


def test_recurrence_dispatches_to_scalar_kernels():
    assert Recurrence.QUADRATIC.escape(complex(-1.0, 0.0), 50) is None
    assert Recurrence.CUBIC.escape(complex(-1.0, 0.0), 50) == 3


@pytest.mark.parametrize(
    "name, expected",
    [
        ("mandelbrot", Recurrence.QUADRATIC),
        ("Quadratic", Recurrence.QUADRATIC),
        ("cubic", Recurrence.CUBIC),
        (" CUBIC ", Recurrence.CUBIC),
    ],
)
def test_recurrence_from_name(name, expected):
    assert Recurrence.from_name(name) is expected


def test_recurrence_from_unknown_name():
    with pytest.raises(ConfigurationError, match="julia"):
        Recurrence.from_name("julia")


def test_tensor_kernel_matches_golden_grid(unit_viewport):
    re, im = band_points((4, 4), 0, 4, unit_viewport)
    counts = Recurrence.QUADRATIC.escape_counts(re, im, 10)

    expected = np.array([[-1 if v is None else v for v in row] for row in GOLDEN_COUNTS])
    assert counts.shape == (4, 4)
    np.testing.assert_array_equal(counts, expected)


def test_tensor_kernel_cubic():
    points = np.array([3.0, -1.0, 0.0, 0.0]), np.array([0.0, 0.0, 1.0, 0.0])
    counts = Recurrence.CUBIC.escape_counts(*points, 100)
    np.testing.assert_array_equal(counts, [1, 3, -1, -1])


def test_tensor_kernel_respects_limit():
    re = np.array([3.0, -1.0, 0.5])
    im = np.zeros(3)
    np.testing.assert_array_equal(Recurrence.QUADRATIC.escape_counts(re, im, 1), [-1, -1, -1])
    np.testing.assert_array_equal(Recurrence.QUADRATIC.escape_counts(re, im, 5), [1, -1, -1])
    np.testing.assert_array_equal(Recurrence.QUADRATIC.escape_counts(re, im, 6), [1, -1, 5])


def test_tensor_kernel_empty_and_mismatched_inputs():
    empty = Recurrence.QUADRATIC.escape_counts(np.zeros((0, 3)), np.zeros((0, 3)), 10)
    assert empty.shape == (0, 3)

    with pytest.raises(ValueError):
        Recurrence.QUADRATIC.escape_counts(np.zeros(3), np.zeros(4), 10)


def test_tensor_kernel_agrees_with_scalar_on_coarse_grid():
    viewport = Viewport(complex(-2.0, 1.5), complex(1.0, -1.5))
    re, im = band_points((16, 12), 0, 12, viewport)
    counts = Recurrence.QUADRATIC.escape_counts(re, im, 12)

    for (row, col), count in np.ndenumerate(counts):
        expected = escape_time(complex(re[row, col], im[row, col]), 12)
        assert count == (-1 if expected is None else expected)
