"""
Joint angle geometry and landmark parsing.
"""

import math
import random

import pytest

from coach_service.models.errors import IncompletePoseData
from coach_service.models.geometry import calculate_angle, horizontal_distance, mean_y
from coach_service.models.landmarks import (
    JointType,
    Landmark,
    parse_pose_frame,
    require_joints,
)


def lm(x, y):
    return Landmark(x=x, y=y)


def test_right_angle():
    assert calculate_angle(lm(0, 1), lm(0, 0), lm(1, 0)) == pytest.approx(90.0)


def test_straight_line_is_180():
    assert calculate_angle(lm(0, 0), lm(0.5, 0.5), lm(1, 1)) == pytest.approx(180.0)


def test_reflex_angle_is_folded_back():
    # Bearing difference of 270 degrees is reported as the interior 90
    a = lm(math.cos(math.radians(170)), math.sin(math.radians(170)))
    c = lm(math.cos(math.radians(-100)), math.sin(math.radians(-100)))
    assert calculate_angle(a, lm(0, 0), c) == pytest.approx(90.0)


def test_missing_point_gives_none():
    assert calculate_angle(None, lm(0, 0), lm(1, 0)) is None
    assert calculate_angle(lm(0, 0), None, lm(1, 0)) is None


def test_symmetric_and_bounded():
    rng = random.Random(42)
    for _ in range(500):
        a, b, c = (lm(rng.random(), rng.random()) for _ in range(3))
        if (a.x, a.y) == (b.x, b.y) or (c.x, c.y) == (b.x, b.y):
            continue
        forward = calculate_angle(a, b, c)
        backward = calculate_angle(c, b, a)
        assert forward == pytest.approx(backward, abs=1e-9)
        assert 0.0 <= forward <= 180.0


def test_only_xy_take_part():
    flat = calculate_angle(lm(0, 1), lm(0, 0), lm(1, 0))
    deep = calculate_angle(Landmark(0, 1, z=5.0), Landmark(0, 0, z=-3.0), Landmark(1, 0, z=1.0))
    assert flat == pytest.approx(deep)


def test_helpers():
    assert mean_y(lm(0, 0.2), lm(1, 0.4)) == pytest.approx(0.3)
    assert horizontal_distance(lm(0.7, 0), lm(0.2, 1)) == pytest.approx(0.5)


class TestParsePoseFrame:

    def test_absent_or_short_frame_is_incomplete(self):
        assert parse_pose_frame(None) is None
        assert parse_pose_frame([{"x": 0.1, "y": 0.2}] * 32) is None

    def test_full_frame_keeps_index_layout(self):
        raw = [{"x": i / 100, "y": 0.5} for i in range(33)]
        raw[5] = None
        raw[6] = {"x": 0.1}
        frame = parse_pose_frame(raw)

        assert len(frame) == 33
        assert frame[5] is None
        assert frame[6] is None
        assert frame[JointType.LEFT_SHOULDER.value].x == pytest.approx(0.11)
        assert frame[0].visibility == 1.0

    def test_require_joints_raises_on_missing_joint(self):
        raw = [{"x": 0.5, "y": 0.5}] * 33
        frame = parse_pose_frame(raw)
        frame[JointType.LEFT_KNEE.value] = None

        with pytest.raises(IncompletePoseData):
            require_joints(frame, JointType.LEFT_HIP, JointType.LEFT_KNEE)

        hip, = require_joints(frame, JointType.LEFT_HIP)
        assert hip.y == 0.5
