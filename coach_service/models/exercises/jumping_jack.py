"""
Jumping jack: in -> out -> in. Arms and legs have to reach each position together.
"""

from typing import Optional

from shared.utils import clamp

from ..geometry import horizontal_distance, mean_y
from ..landmarks import JointType, PoseFrame, require_joints
from ..thresholds import ExerciseKind, JumpingJackThresholds
from .base import ExerciseProcessor


class JumpingJackProcessor(ExerciseProcessor):
    kind = ExerciseKind.JUMPING_JACK
    initial_stage = "in"
    initial_feedback = "Start with your feet together and arms by your side."
    thresholds: JumpingJackThresholds

    def _step(self, frame: Optional[PoseFrame]):
        t = self.thresholds
        (l_shoulder, l_wrist, l_hip, l_ankle,
         r_shoulder, r_wrist, r_hip, r_ankle) = require_joints(
            frame,
            JointType.LEFT_SHOULDER, JointType.LEFT_WRIST, JointType.LEFT_HIP, JointType.LEFT_ANKLE,
            JointType.RIGHT_SHOULDER, JointType.RIGHT_WRIST, JointType.RIGHT_HIP, JointType.RIGHT_ANKLE,
        )

        shoulder_width = horizontal_distance(l_shoulder, r_shoulder)
        ankle_distance = horizontal_distance(l_ankle, r_ankle)

        arms_up = l_wrist.y < l_shoulder.y and r_wrist.y < r_shoulder.y
        arms_down = l_wrist.y > l_hip.y and r_wrist.y > r_hip.y
        legs_out = ankle_distance > shoulder_width * t.legs_out_ratio
        legs_in = ankle_distance < shoulder_width * t.legs_in_ratio

        transition = None
        if arms_up and legs_out and self.state.stage == "in":
            self._transition("out")
            transition = "Good! Now back in."
        elif arms_down and legs_in and self.state.stage == "out":
            self._transition("in", credit_rep=True)
            transition = "Nice rhythm!"

        hint = None
        moving_out = ankle_distance > shoulder_width or l_wrist.y < r_hip.y
        if self.state.stage == "in" and moving_out:
            if not arms_up and legs_out:
                hint = "Bring your arms up!"
            elif arms_up and not legs_out:
                hint = "Jump your feet out!"
        self._set_feedback(transition=transition, hint=hint)

        torso_height = max(t.min_extent, abs(mean_y(l_hip, r_hip) - mean_y(l_shoulder, r_shoulder)))
        if self.state.stage == "out":
            arm_raise = (
                max(0.0, (l_shoulder.y - l_wrist.y) / torso_height)
                + max(0.0, (r_shoulder.y - r_wrist.y) / torso_height)
            ) / 2
            arm_score = min(1.0, arm_raise)
            leg_score = min(1.0, ankle_distance / max(t.min_extent, shoulder_width * t.legs_out_ratio))
        else:
            arm_score = clamp(((l_wrist.y - l_hip.y) + (r_wrist.y - r_hip.y)) / (2 * torso_height), 0.0, 1.0)
            legs_in_width = max(t.min_extent, shoulder_width * t.legs_in_ratio)
            leg_score = clamp((legs_in_width - ankle_distance) / legs_in_width, 0.0, 1.0)
        self._update_score(100 * (t.arm_weight * arm_score + t.leg_weight * leg_score))
