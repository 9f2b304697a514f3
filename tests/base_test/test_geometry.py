#!filepath: tests/base_test/test_geometry.py
import numpy as np
import pytest

from dispbdt.utils.geometry import direction_cosines, line_point_distance


def test_direction_cosines_vertical():
    c = direction_cosines(0.0, 123.0)

    assert np.allclose(c, [0.0, 0.0, 1.0])


def test_direction_cosines_unit_length():
    c = direction_cosines(35.0, 210.0)

    assert np.dot(c, c) == pytest.approx(1.0)


def test_vertical_line_distance_is_horizontal_distance():
    # vertical axis through (0, 0, 0), point at (3, 4, 10)
    assert line_point_distance(0, 0, 0, 0.0, 0.0, 3, 4, 10) == pytest.approx(5.0)


def test_point_on_line():
    c = direction_cosines(30.0, 45.0)
    p = 100.0 * c

    assert line_point_distance(0, 0, 0, 30.0, 45.0, *p) == pytest.approx(0.0, abs=1e-9)


def test_inclined_line():
    # axis along x (ze = 90, az = 0); point at (50, 0, 7) -> distance 7
    assert line_point_distance(0, 0, 0, 90.0, 0.0, 50, 0, 7) == pytest.approx(7.0)
