"""
Bicep curl: down -> up -> down, one rep credited on the return to full extension.

The mean shoulder height is captured while the arms are extended; if it
drifts too far while curling the body is swinging and the rep is withheld.
"""

from dataclasses import dataclass
from typing import Optional

from ..geometry import calculate_angle, mean_y
from ..landmarks import JointType, PoseFrame, require_joints
from ..thresholds import BicepCurlThresholds, ExerciseKind
from .base import ExerciseProcessor, deviation


@dataclass
class BicepCurlAux:
    initial_shoulder_y: Optional[float] = None


class BicepCurlProcessor(ExerciseProcessor):
    kind = ExerciseKind.BICEP_CURL
    initial_stage = "down"
    initial_feedback = "Start with your arms extended."
    thresholds: BicepCurlThresholds
    aux: BicepCurlAux

    def _initial_aux(self) -> BicepCurlAux:
        return BicepCurlAux()

    def _step(self, frame: Optional[PoseFrame]):
        t = self.thresholds
        l_shoulder, l_elbow, l_wrist, r_shoulder, r_elbow, r_wrist = require_joints(
            frame,
            JointType.LEFT_SHOULDER, JointType.LEFT_ELBOW, JointType.LEFT_WRIST,
            JointType.RIGHT_SHOULDER, JointType.RIGHT_ELBOW, JointType.RIGHT_WRIST,
        )

        l_elbow_angle = calculate_angle(l_shoulder, l_elbow, l_wrist)
        r_elbow_angle = calculate_angle(r_shoulder, r_elbow, r_wrist)

        is_up = l_elbow_angle < t.elbow_up and r_elbow_angle < t.elbow_up
        is_down = l_elbow_angle > t.elbow_down and r_elbow_angle > t.elbow_down

        shoulder_y = mean_y(l_shoulder, r_shoulder)
        if self.state.stage == "down" and is_down:
            self.aux.initial_shoulder_y = shoulder_y

        is_swinging = (
            self.aux.initial_shoulder_y is not None
            and self.state.stage == "up"
            and abs(shoulder_y - self.aux.initial_shoulder_y) > t.max_shoulder_drift
        )

        if is_swinging:
            self._set_feedback(violation="Avoid swinging your body. Keep your torso stable.")
        elif is_up and self.state.stage == "down":
            self._transition("up")
            self._set_feedback(transition="Now lower with control.")
        elif is_down and self.state.stage == "up":
            self._transition("down", credit_rep=True)
            self.aux.initial_shoulder_y = None
            self._set_feedback(transition="Excellent curl!")
        elif self.state.stage == "down" and l_elbow_angle < t.elbow_partial:
            if l_elbow_angle < t.elbow_squeeze:
                self._set_feedback(hint="Squeeze at the top.")
            else:
                self._set_feedback(hint="Curl higher.")

        if self.state.stage == "up":
            target, span = t.target_elbow_up, t.span_up
        else:
            target, span = t.target_elbow_down, t.span_down
        elbow_error = (deviation(l_elbow_angle, target, span) + deviation(r_elbow_angle, target, span)) / 2
        instantaneous = 100 * (1 - elbow_error)
        if is_swinging:
            instantaneous *= t.sway_penalty
        self._update_score(instantaneous)
