"""
Mountain climber: every knee drive counts as one rep, alternating legs.

The stage is the leg currently driven forward ("none", "left" or "right").
The plank line is only checked on legs that are extended.
"""

from typing import Optional

from shared.utils import clamp

from ..geometry import calculate_angle
from ..landmarks import JointType, PoseFrame, require_joints
from ..thresholds import ExerciseKind, MountainClimberThresholds
from .base import ExerciseProcessor


class MountainClimberProcessor(ExerciseProcessor):
    kind = ExerciseKind.MOUNTAIN_CLIMBER
    initial_stage = "none"
    initial_feedback = "Get into a plank position to start."
    thresholds: MountainClimberThresholds

    def _step(self, frame: Optional[PoseFrame]):
        t = self.thresholds
        (l_shoulder, l_hip, l_knee, l_ankle,
         r_shoulder, r_hip, r_knee, r_ankle) = require_joints(
            frame,
            JointType.LEFT_SHOULDER, JointType.LEFT_HIP, JointType.LEFT_KNEE, JointType.LEFT_ANKLE,
            JointType.RIGHT_SHOULDER, JointType.RIGHT_HIP, JointType.RIGHT_KNEE, JointType.RIGHT_ANKLE,
        )

        l_body_angle = calculate_angle(l_shoulder, l_hip, l_ankle)
        r_body_angle = calculate_angle(r_shoulder, r_hip, r_ankle)
        active_leg = self.state.stage

        hips_sagging = (
            (active_leg != "left" and l_body_angle < t.plank_min)
            or (active_leg != "right" and r_body_angle < t.plank_min)
        )

        if hips_sagging:
            self._set_feedback(violation="Keep your back straight!")
        else:
            l_knee_forward = l_knee.y - l_hip.y > t.knee_drive_margin
            r_knee_forward = r_knee.y - r_hip.y > t.knee_drive_margin

            if l_knee_forward and active_leg != "left":
                self._transition("left", credit_rep=True)
                self._set_feedback(transition="Good pace!")
            elif r_knee_forward and active_leg != "right":
                self._transition("right", credit_rep=True)
                self._set_feedback(transition="Keep it up!")
            elif not l_knee_forward and not r_knee_forward:
                self._transition("none")

        plank_error = min(1.0, ((abs(180 - l_body_angle) + abs(180 - r_body_angle)) / 2) / t.plank_span)
        l_range = max(t.min_extent, abs(l_ankle.y - l_hip.y))
        r_range = max(t.min_extent, abs(r_ankle.y - r_hip.y))
        l_drive = clamp((l_knee.y - l_hip.y) / l_range, 0.0, 1.0)
        r_drive = clamp((r_knee.y - r_hip.y) / r_range, 0.0, 1.0)
        drive_score = (l_drive + r_drive) / 2
        self._update_score(100 * (1 - 0.5 * plank_error) * (0.5 + 0.5 * drive_score))
