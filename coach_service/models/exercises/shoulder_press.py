"""
Shoulder press: down -> up -> down, one rep credited when the weight is back below the shoulders.
"""

from typing import Optional

from ..geometry import calculate_angle
from ..landmarks import JointType, PoseFrame, require_joints
from ..thresholds import ExerciseKind, ShoulderPressThresholds
from .base import ExerciseProcessor


class ShoulderPressProcessor(ExerciseProcessor):
    kind = ExerciseKind.SHOULDER_PRESS
    initial_stage = "down"
    initial_feedback = "Start with weights at shoulder level."
    thresholds: ShoulderPressThresholds

    def _step(self, frame: Optional[PoseFrame]):
        t = self.thresholds
        (l_shoulder, l_elbow, l_wrist, l_hip,
         r_shoulder, r_elbow, r_wrist, r_hip) = require_joints(
            frame,
            JointType.LEFT_SHOULDER, JointType.LEFT_ELBOW, JointType.LEFT_WRIST, JointType.LEFT_HIP,
            JointType.RIGHT_SHOULDER, JointType.RIGHT_ELBOW, JointType.RIGHT_WRIST, JointType.RIGHT_HIP,
        )

        l_elbow_angle = calculate_angle(l_shoulder, l_elbow, l_wrist)
        r_elbow_angle = calculate_angle(r_shoulder, r_elbow, r_wrist)
        l_shoulder_angle = calculate_angle(l_hip, l_shoulder, l_elbow)
        r_shoulder_angle = calculate_angle(r_hip, r_shoulder, r_elbow)

        is_up = (
            l_elbow_angle > t.elbow_up and r_elbow_angle > t.elbow_up
            and l_shoulder_angle > t.shoulder_up and r_shoulder_angle > t.shoulder_up
        )
        # Image y grows downward, so a larger y means the elbow sits below the shoulder
        is_down = (
            l_elbow_angle < t.elbow_down and r_elbow_angle < t.elbow_down
            and l_elbow.y > l_shoulder.y and r_elbow.y > r_shoulder.y
        )

        transition = None
        if is_up and self.state.stage == "down":
            self._transition("up")
            transition = "Lower the weight with control."
        elif is_down and self.state.stage == "up":
            self._transition("down", credit_rep=True)
            transition = "Great press!"

        hint = None
        if self.state.stage == "down" and l_shoulder_angle > t.shoulder_partial:
            hint = "Press all the way up."
        elif self.state.stage == "up" and l_elbow_angle < t.elbow_partial:
            hint = "Lower until your elbows are below your shoulders."
        self._set_feedback(transition=transition, hint=hint)

        if self.state.stage == "up":
            elbow_target, shoulder_target, span = t.target_elbow_up, t.target_shoulder_up, t.span_up
        else:
            elbow_target, shoulder_target, span = t.target_elbow_down, t.target_shoulder_down, t.span_down
        elbow_error = min(1.0, ((abs(l_elbow_angle - elbow_target) + abs(r_elbow_angle - elbow_target)) / 2) / span)
        shoulder_error = min(
            1.0, ((abs(l_shoulder_angle - shoulder_target) + abs(r_shoulder_angle - shoulder_target)) / 2) / span
        )
        self._update_score(100 * (1 - (t.elbow_weight * elbow_error + t.shoulder_weight * shoulder_error)))
