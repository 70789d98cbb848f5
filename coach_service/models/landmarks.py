"""
FormCoach Coach Service - Pose Landmarks

Joint index glossary for the 33-point pose model and frame parsing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence

from .errors import IncompletePoseData


POSE_LANDMARK_COUNT = 33


class JointType(Enum):
    """Body joint indices for pose estimation."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


@dataclass
class Landmark:
    """A single pose landmark, coordinates normalized to [0, 1] of the camera frame."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0

    @classmethod
    def from_value(cls, value: Any) -> Optional["Landmark"]:
        """Build from a Landmark, a mapping with x/y keys, or an object with x/y attributes."""
        if value is None or isinstance(value, Landmark):
            return value
        if isinstance(value, dict):
            if value.get("x") is None or value.get("y") is None:
                return None
            return cls(
                x=float(value["x"]),
                y=float(value["y"]),
                z=float(value.get("z") or 0.0),
                visibility=float(value["visibility"]) if value.get("visibility") is not None else 1.0,
            )
        x, y = getattr(value, "x", None), getattr(value, "y", None)
        if x is None or y is None:
            return None
        z = getattr(value, "z", None)
        visibility = getattr(value, "visibility", None)
        return cls(
            x=float(x),
            y=float(y),
            z=float(z) if z is not None else 0.0,
            visibility=float(visibility) if visibility is not None else 1.0,
        )


PoseFrame = List[Optional[Landmark]]


def parse_pose_frame(raw: Optional[Sequence[Any]]) -> Optional[PoseFrame]:
    """
    Normalize an incoming landmark array.

    Returns None for an incomplete frame (absent, or fewer than 33 entries).
    Entries that cannot be read as a point are kept as None so that the
    index layout is preserved.
    """
    if raw is None or len(raw) < POSE_LANDMARK_COUNT:
        return None
    return [Landmark.from_value(item) for item in raw]


def require_joints(frame: Optional[PoseFrame], *joints: JointType) -> List[Landmark]:
    """Return the requested landmarks, raising IncompletePoseData if any is unavailable."""
    if frame is None or len(frame) < POSE_LANDMARK_COUNT:
        raise IncompletePoseData()
    points = []
    for joint in joints:
        point = frame[joint.value]
        if point is None:
            raise IncompletePoseData()
        points.append(point)
    return points
