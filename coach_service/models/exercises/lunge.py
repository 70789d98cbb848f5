"""
Lunge: up -> down -> up with the leading leg re-detected at the top of every cycle.
"""

from dataclasses import dataclass
from typing import Optional

from ..geometry import calculate_angle, horizontal_distance
from ..landmarks import JointType, PoseFrame, require_joints
from ..thresholds import ExerciseKind, LungeThresholds
from .base import ExerciseProcessor, deviation


@dataclass
class LungeAux:
    leading_leg: Optional[str] = None  # "left" or "right"


class LungeProcessor(ExerciseProcessor):
    kind = ExerciseKind.LUNGE
    initial_stage = "up"
    initial_feedback = "Start your lunge."
    thresholds: LungeThresholds
    aux: LungeAux

    def _initial_aux(self) -> LungeAux:
        return LungeAux()

    def _step(self, frame: Optional[PoseFrame]):
        t = self.thresholds
        (l_shoulder, l_hip, l_knee, l_ankle,
         r_shoulder, r_hip, r_knee, r_ankle) = require_joints(
            frame,
            JointType.LEFT_SHOULDER, JointType.LEFT_HIP, JointType.LEFT_KNEE, JointType.LEFT_ANKLE,
            JointType.RIGHT_SHOULDER, JointType.RIGHT_HIP, JointType.RIGHT_KNEE, JointType.RIGHT_ANKLE,
        )

        # Side-on view: the ankle with the smaller x is in front
        if self.state.stage == "up":
            if horizontal_distance(l_ankle, r_ankle) > t.stance_min_offset:
                self.aux.leading_leg = "left" if l_ankle.x < r_ankle.x else "right"
            else:
                self.aux.leading_leg = None

        if self.aux.leading_leg is None:
            self._set_feedback(hint="Please step into a lunge position.")
            return

        if self.aux.leading_leg == "left":
            front_hip, front_knee, front_ankle = l_hip, l_knee, l_ankle
            back_shoulder, back_hip, back_knee, back_ankle = r_shoulder, r_hip, r_knee, r_ankle
        else:
            front_hip, front_knee, front_ankle = r_hip, r_knee, r_ankle
            back_shoulder, back_hip, back_knee, back_ankle = l_shoulder, l_hip, l_knee, l_ankle

        front_knee_angle = calculate_angle(front_hip, front_knee, front_ankle)
        back_knee_angle = calculate_angle(back_hip, back_knee, back_ankle)
        torso_angle = calculate_angle(back_shoulder, back_hip, back_knee)

        is_front_knee_bent = t.knee_down_min < front_knee_angle < t.knee_down_max
        is_back_knee_bent = t.knee_down_min < back_knee_angle < t.knee_down_max
        is_torso_upright = torso_angle > t.torso_min

        is_down = is_front_knee_bent and is_back_knee_bent
        is_up = front_knee_angle > t.knee_up and back_knee_angle > t.knee_up

        violation = None
        transition = None
        hint = None
        if is_up and self.state.stage == "down":
            self._transition("up", credit_rep=True)
            transition = "Good rep!"
        elif is_down and self.state.stage == "up":
            if is_torso_upright:
                self._transition("down")
                transition = "Now push back up."
            else:
                violation = "Keep your chest up!"

        if self.state.stage == "up" and front_knee_angle < t.knee_partial:
            if front_knee.x < front_ankle.x - t.knee_over_toe_margin:
                violation = "Don't let your front knee pass your toes."
            elif not is_torso_upright:
                violation = violation or "Keep your torso upright."
            else:
                hint = "Lower your back knee."
        self._set_feedback(violation, transition, hint)

        if self.state.stage == "down":
            target, span = t.target_knee_down, t.span_down
        else:
            target, span = t.target_knee_up, t.span_up
        knee_error = (deviation(front_knee_angle, target, span) + deviation(back_knee_angle, target, span)) / 2
        torso_factor = 1.0 if is_torso_upright else t.torso_penalty
        self._update_score(100 * torso_factor * (1 - knee_error))
