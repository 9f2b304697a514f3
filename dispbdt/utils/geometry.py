# dispbdt/utils/geometry.py
"""
Shower-axis geometry.

Coordinate convention (ground frame, right handed):
    callers pass (y, -x, z) for both the axis point and the telescope,
    i.e. the x axis is flipped before entering these functions.
Angles are in degrees.
"""

from __future__ import annotations

import numpy as np


def direction_cosines(ze: float, az: float) -> np.ndarray:
    """
    Unit vector of a line with zenith angle `ze` and azimuth `az` (degrees).
    """
    ze_rad = np.deg2rad(ze)
    az_rad = np.deg2rad(az)

    return np.array(
        [
            np.sin(ze_rad) * np.cos(az_rad),
            np.sin(ze_rad) * np.sin(az_rad),
            np.cos(ze_rad),
        ]
    )


def line_point_distance(
    x1: float,
    y1: float,
    z1: float,
    ze: float,
    az: float,
    x: float,
    y: float,
    z: float,
) -> float:
    """
    Perpendicular distance between point (x, y, z) and the line through
    (x1, y1, z1) with direction (ze, az).

        d = |(p - p1) x c| / |c|

    Returns -1 for a degenerate (zero length) direction.
    """
    c = direction_cosines(ze, az)
    norm = float(np.dot(c, c))
    if norm <= 0.0:
        return -1.0

    delta = np.array([x - x1, y - y1, z - z1], dtype=float)
    a = np.cross(delta, c)

    return float(np.sqrt(np.dot(a, a) / norm))
