"""
Squat: up -> down -> up, one rep credited on the return to standing.
"""

from typing import Optional

from ..geometry import calculate_angle
from ..landmarks import JointType, PoseFrame, require_joints
from ..thresholds import ExerciseKind, SquatThresholds
from .base import ExerciseProcessor, deviation


class SquatProcessor(ExerciseProcessor):
    kind = ExerciseKind.SQUAT
    initial_stage = "up"
    initial_feedback = "Start your squat."
    thresholds: SquatThresholds

    def _step(self, frame: Optional[PoseFrame]):
        t = self.thresholds
        (l_shoulder, l_hip, l_knee, l_ankle,
         r_shoulder, r_hip, r_knee, r_ankle) = require_joints(
            frame,
            JointType.LEFT_SHOULDER, JointType.LEFT_HIP, JointType.LEFT_KNEE, JointType.LEFT_ANKLE,
            JointType.RIGHT_SHOULDER, JointType.RIGHT_HIP, JointType.RIGHT_KNEE, JointType.RIGHT_ANKLE,
        )

        l_knee_angle = calculate_angle(l_hip, l_knee, l_ankle)
        r_knee_angle = calculate_angle(r_hip, r_knee, r_ankle)
        l_hip_angle = calculate_angle(l_shoulder, l_hip, l_knee)
        r_hip_angle = calculate_angle(r_shoulder, r_hip, r_knee)

        is_deep_enough = l_knee_angle < t.knee_down and r_knee_angle < t.knee_down
        is_back_straight = l_hip_angle > t.hip_min and r_hip_angle > t.hip_min
        is_standing = l_knee_angle > t.knee_up and r_knee_angle > t.knee_up

        transition = None
        if is_standing and self.state.stage == "down":
            self._transition("up", credit_rep=True)
            transition = "Great rep!"
        elif is_deep_enough and is_back_straight and self.state.stage == "up":
            self._transition("down")
            transition = "Now go up."

        violation = None
        hint = None
        if self.state.stage == "down" and not is_back_straight:
            violation = "Keep your chest up and back straight!"
        elif (self.state.stage == "up" and not is_deep_enough
              and min(l_knee_angle, r_knee_angle) < t.knee_partial):
            hint = "Go lower!"
        self._set_feedback(violation, transition, hint)

        if self.state.stage == "down":
            target, span = t.target_knee_down, t.span_down
        else:
            target, span = t.target_knee_up, t.span_up
        knee_error = (deviation(l_knee_angle, target, span) + deviation(r_knee_angle, target, span)) / 2
        back_factor = 1.0 if (l_hip_angle + r_hip_angle) / 2 > t.hip_good else t.lean_penalty
        self._update_score(100 * back_factor * (1 - knee_error))
