"""
Tricep dip: up -> down -> up, one rep credited on full arm extension.
"""

from typing import Optional

from ..geometry import calculate_angle
from ..landmarks import JointType, PoseFrame, require_joints
from ..thresholds import ExerciseKind, TricepDipThresholds
from .base import ExerciseProcessor


class TricepDipProcessor(ExerciseProcessor):
    kind = ExerciseKind.TRICEP_DIP
    initial_stage = "up"
    initial_feedback = "Start with your arms fully extended."
    thresholds: TricepDipThresholds

    def _step(self, frame: Optional[PoseFrame]):
        t = self.thresholds
        l_shoulder, l_elbow, l_wrist, r_shoulder, r_elbow, r_wrist = require_joints(
            frame,
            JointType.LEFT_SHOULDER, JointType.LEFT_ELBOW, JointType.LEFT_WRIST,
            JointType.RIGHT_SHOULDER, JointType.RIGHT_ELBOW, JointType.RIGHT_WRIST,
        )

        l_elbow_angle = calculate_angle(l_shoulder, l_elbow, l_wrist)
        r_elbow_angle = calculate_angle(r_shoulder, r_elbow, r_wrist)

        is_down = l_elbow_angle < t.elbow_down and r_elbow_angle < t.elbow_down
        is_up = l_elbow_angle > t.elbow_up and r_elbow_angle > t.elbow_up

        if is_down and self.state.stage == "up":
            self._transition("down")
            self._set_feedback(transition="Now push up.")
        elif is_up and self.state.stage == "down":
            self._transition("up", credit_rep=True)
            self._set_feedback(transition="Great rep!")
        elif self.state.stage == "up" and l_elbow_angle < t.elbow_partial:
            self._set_feedback(hint="Lower your body until your elbows hit 90 degrees.")

        if self.state.stage == "down":
            target, span = t.target_elbow_down, t.span_down
        else:
            target, span = t.target_elbow_up, t.span_up
        elbow_error = min(1.0, ((abs(l_elbow_angle - target) + abs(r_elbow_angle - target)) / 2) / span)
        self._update_score(100 * (1 - elbow_error))
