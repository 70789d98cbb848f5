"""
FormCoach Coach Service - Geometry

Planar joint-angle computation shared by every exercise processor.
"""

from typing import Optional

import numpy as np

from .landmarks import Landmark


def calculate_angle(
    a: Optional[Landmark],
    b: Optional[Landmark],
    c: Optional[Landmark]
) -> Optional[float]:
    """
    Calculate the interior angle at vertex b formed by points a-b-c.

    Uses the difference of the atan2 bearings of b->c and b->a, so only
    the x/y coordinates take part.

    Returns:
        Angle in degrees (0-180), or None if any point is missing
    """
    if a is None or b is None or c is None:
        return None

    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = abs(float(np.degrees(radians)))

    if angle > 180.0:
        angle = 360.0 - angle

    return angle


def mean_y(a: Landmark, b: Landmark) -> float:
    return (a.y + b.y) / 2


def horizontal_distance(a: Landmark, b: Landmark) -> float:
    return abs(a.x - b.x)
