"""
Push-up: up -> down -> up, gated on a straight shoulder-hip-ankle line.
"""

from typing import Optional

from ..geometry import calculate_angle
from ..landmarks import JointType, PoseFrame, require_joints
from ..thresholds import ExerciseKind, PushUpThresholds
from .base import ExerciseProcessor, deviation


class PushUpProcessor(ExerciseProcessor):
    kind = ExerciseKind.PUSH_UP
    initial_stage = "up"
    initial_feedback = "Get into a plank position to start."
    thresholds: PushUpThresholds

    def _step(self, frame: Optional[PoseFrame]):
        t = self.thresholds
        (l_shoulder, l_elbow, l_wrist, l_hip, l_ankle,
         r_shoulder, r_elbow, r_wrist, r_hip, r_ankle) = require_joints(
            frame,
            JointType.LEFT_SHOULDER, JointType.LEFT_ELBOW, JointType.LEFT_WRIST,
            JointType.LEFT_HIP, JointType.LEFT_ANKLE,
            JointType.RIGHT_SHOULDER, JointType.RIGHT_ELBOW, JointType.RIGHT_WRIST,
            JointType.RIGHT_HIP, JointType.RIGHT_ANKLE,
        )

        l_elbow_angle = calculate_angle(l_shoulder, l_elbow, l_wrist)
        r_elbow_angle = calculate_angle(r_shoulder, r_elbow, r_wrist)
        l_body_angle = calculate_angle(l_shoulder, l_hip, l_ankle)
        r_body_angle = calculate_angle(r_shoulder, r_hip, r_ankle)

        is_body_straight = l_body_angle > t.body_line_min and r_body_angle > t.body_line_min
        is_down = l_elbow_angle < t.elbow_down and r_elbow_angle < t.elbow_down
        is_up = l_elbow_angle > t.elbow_up and r_elbow_angle > t.elbow_up

        if not is_body_straight:
            # Sagging hips block any stage change, so no rep can be credited
            self._set_feedback(violation="Straighten your back! Don't let your hips sag.")
        elif is_down and self.state.stage == "up":
            self._transition("down")
            self._set_feedback(transition="Now push up.")
        elif is_up and self.state.stage == "down":
            self._transition("up", credit_rep=True)
            self._set_feedback(transition="Great rep!")
        elif self.state.stage == "up" and min(l_elbow_angle, r_elbow_angle) < t.elbow_partial:
            self._set_feedback(hint="Go lower.")

        if self.state.stage == "down":
            target, span = t.target_elbow_down, t.span_down
        else:
            target, span = t.target_elbow_up, t.span_up
        elbow_error = min(1.0, ((abs(l_elbow_angle - target) + abs(r_elbow_angle - target)) / 2) / span)
        body_error = deviation((l_body_angle + r_body_angle) / 2, 180.0, t.body_span)
        self._update_score(100 * (1 - (t.elbow_weight * elbow_error + t.body_weight * body_error)))
