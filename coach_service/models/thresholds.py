"""
FormCoach Coach Service - Exercise Thresholds

Every angle, ratio and scoring constant an exercise automaton uses.
Angles are in degrees; distances are in normalized image coordinates.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ExerciseKind(Enum):
    """Exercises with a real-time processor. Values are canonical catalog names."""
    SQUAT = "Squat"
    LUNGE = "Lunge"
    PUSH_UP = "Push-up"
    BICEP_CURL = "Bicep Curl"
    SHOULDER_PRESS = "Shoulder Press"
    JUMPING_JACK = "Jumping Jack"
    TRICEP_DIP = "Tricep Dip"
    MOUNTAIN_CLIMBER = "Mountain Climber"


@dataclass(frozen=True)
class SquatThresholds:
    knee_down: float = 100.0          # both knees below -> deep enough
    knee_up: float = 160.0            # both knees above -> standing
    knee_partial: float = 150.0       # either knee below -> on the way down
    hip_min: float = 80.0             # hip angle above -> back straight
    target_knee_down: float = 90.0
    target_knee_up: float = 170.0
    span_down: float = 60.0
    span_up: float = 30.0
    hip_good: float = 100.0           # mean hip angle above -> no lean penalty
    lean_penalty: float = 0.7


@dataclass(frozen=True)
class LungeThresholds:
    stance_min_offset: float = 0.1    # ankle x-offset needed to identify the leading leg
    knee_down_min: float = 80.0
    knee_down_max: float = 110.0
    knee_up: float = 160.0
    knee_partial: float = 150.0
    torso_min: float = 150.0
    knee_over_toe_margin: float = 0.05
    target_knee_down: float = 90.0
    target_knee_up: float = 170.0
    span_down: float = 60.0
    span_up: float = 30.0
    torso_penalty: float = 0.7


@dataclass(frozen=True)
class PushUpThresholds:
    elbow_down: float = 100.0
    elbow_up: float = 160.0
    elbow_partial: float = 150.0
    body_line_min: float = 160.0      # shoulder-hip-ankle
    target_elbow_down: float = 90.0
    target_elbow_up: float = 170.0
    span_down: float = 60.0
    span_up: float = 30.0
    body_span: float = 40.0
    elbow_weight: float = 0.6
    body_weight: float = 0.4


@dataclass(frozen=True)
class BicepCurlThresholds:
    elbow_up: float = 50.0            # both elbows below -> contracted
    elbow_down: float = 160.0         # both elbows above -> extended
    elbow_partial: float = 150.0
    elbow_squeeze: float = 70.0
    max_shoulder_drift: float = 0.05  # vertical shoulder travel that counts as swinging
    target_elbow_up: float = 40.0
    target_elbow_down: float = 170.0
    span_up: float = 60.0
    span_down: float = 30.0
    sway_penalty: float = 0.7


@dataclass(frozen=True)
class ShoulderPressThresholds:
    elbow_up: float = 160.0
    shoulder_up: float = 160.0        # hip-shoulder-elbow
    elbow_down: float = 100.0
    shoulder_partial: float = 100.0
    elbow_partial: float = 150.0
    target_elbow_up: float = 175.0
    target_elbow_down: float = 90.0
    target_shoulder_up: float = 170.0
    target_shoulder_down: float = 90.0
    span_up: float = 25.0
    span_down: float = 45.0
    elbow_weight: float = 0.7
    shoulder_weight: float = 0.3


@dataclass(frozen=True)
class JumpingJackThresholds:
    legs_out_ratio: float = 1.5       # ankle distance / shoulder width
    legs_in_ratio: float = 0.8
    arm_weight: float = 0.6
    leg_weight: float = 0.4
    min_extent: float = 0.001


@dataclass(frozen=True)
class TricepDipThresholds:
    elbow_down: float = 100.0
    elbow_up: float = 160.0
    elbow_partial: float = 150.0
    target_elbow_down: float = 90.0
    target_elbow_up: float = 170.0
    span_down: float = 45.0
    span_up: float = 30.0


@dataclass(frozen=True)
class MountainClimberThresholds:
    plank_min: float = 150.0          # shoulder-hip-ankle on the extended leg
    knee_drive_margin: float = 0.0    # knee y beyond hip y counts as driven forward
    plank_span: float = 40.0
    min_extent: float = 0.001


DEFAULT_THRESHOLDS: Dict[ExerciseKind, Any] = {
    ExerciseKind.SQUAT: SquatThresholds(),
    ExerciseKind.LUNGE: LungeThresholds(),
    ExerciseKind.PUSH_UP: PushUpThresholds(),
    ExerciseKind.BICEP_CURL: BicepCurlThresholds(),
    ExerciseKind.SHOULDER_PRESS: ShoulderPressThresholds(),
    ExerciseKind.JUMPING_JACK: JumpingJackThresholds(),
    ExerciseKind.TRICEP_DIP: TricepDipThresholds(),
    ExerciseKind.MOUNTAIN_CLIMBER: MountainClimberThresholds(),
}


def thresholds_for(kind: ExerciseKind, overrides: Optional[Mapping[str, float]] = None):
    """
    Get the thresholds for an exercise with optional overrides applied.

    Raises:
        ValueError: if an override names a field the exercise does not have
    """
    base = DEFAULT_THRESHOLDS[kind]
    if not overrides:
        return base

    known = {f.name for f in fields(base)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(
            f"Unknown threshold(s) for {kind.value}: {sorted(unknown)}. Valid: {sorted(known)}"
        )
    return replace(base, **{k: float(v) for k, v in overrides.items()})
