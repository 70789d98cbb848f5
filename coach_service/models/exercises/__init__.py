"""
FormCoach Exercise Processors

One rep counting / form scoring state machine per supported exercise.
"""

from typing import Dict, Mapping, Optional, Type

from ..thresholds import ExerciseKind
from .base import ExerciseProcessor, ProcessorState, ProcessResult
from .bicep_curl import BicepCurlProcessor
from .jumping_jack import JumpingJackProcessor
from .lunge import LungeProcessor
from .mountain_climber import MountainClimberProcessor
from .push_up import PushUpProcessor
from .shoulder_press import ShoulderPressProcessor
from .squat import SquatProcessor
from .tricep_dip import TricepDipProcessor


PROCESSOR_REGISTRY: Dict[ExerciseKind, Type[ExerciseProcessor]] = {
    ExerciseKind.SQUAT: SquatProcessor,
    ExerciseKind.LUNGE: LungeProcessor,
    ExerciseKind.PUSH_UP: PushUpProcessor,
    ExerciseKind.BICEP_CURL: BicepCurlProcessor,
    ExerciseKind.SHOULDER_PRESS: ShoulderPressProcessor,
    ExerciseKind.JUMPING_JACK: JumpingJackProcessor,
    ExerciseKind.TRICEP_DIP: TricepDipProcessor,
    ExerciseKind.MOUNTAIN_CLIMBER: MountainClimberProcessor,
}


def get_processor_class(exercise_name: str) -> Optional[Type[ExerciseProcessor]]:
    """Look up the processor for a canonical exercise name, None if there is none."""
    try:
        kind = ExerciseKind(exercise_name)
    except ValueError:
        return None
    return PROCESSOR_REGISTRY.get(kind)


def create_processor(
    exercise_name: str,
    overrides: Optional[Mapping[str, float]] = None
) -> Optional[ExerciseProcessor]:
    """Instantiate a fresh processor for a canonical exercise name."""
    processor_cls = get_processor_class(exercise_name)
    if processor_cls is None:
        return None
    return processor_cls(overrides=overrides)


__all__ = [
    "ExerciseKind",
    "ExerciseProcessor",
    "ProcessorState",
    "ProcessResult",
    "PROCESSOR_REGISTRY",
    "get_processor_class",
    "create_processor",
    "SquatProcessor",
    "LungeProcessor",
    "PushUpProcessor",
    "BicepCurlProcessor",
    "ShoulderPressProcessor",
    "JumpingJackProcessor",
    "TricepDipProcessor",
    "MountainClimberProcessor",
]
