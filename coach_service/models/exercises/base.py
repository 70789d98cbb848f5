"""
FormCoach Coach Service - Exercise Processor Base

Common contract for the per-exercise rep counting state machines.
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from core.config import settings
from shared.utils import clamp, round_half_up

from ..errors import IncompletePoseData
from ..landmarks import PoseFrame, parse_pose_frame
from ..thresholds import ExerciseKind, thresholds_for


@dataclass
class ProcessorState:
    """Mutable per-session state shared by every exercise automaton."""
    stage: str
    rep_count: int = 0
    feedback: str = ""
    form_score: int = 0
    score_ema: float = 0.0  # unrounded smoothing accumulator behind form_score


@dataclass
class ProcessResult:
    """Outcome of one processed frame."""
    rep_count: int
    feedback: str
    stage: str
    score: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "repCount": self.rep_count,
            "feedback": self.feedback,
            "stage": self.stage,
            "score": self.score,
        }


def deviation(angle: float, target: float, span: float) -> float:
    """Normalized distance of angle from target, saturating at 1."""
    return min(1.0, abs(angle - target) / span)


class ExerciseProcessor(ABC):
    """
    Base class for exercise processors.

    Subclasses declare their kind, initial stage/feedback and auxiliary
    state, and implement `_step`, which reads the joints it needs, runs
    the automaton and reports an instantaneous score.
    """

    kind: ExerciseKind
    initial_stage: str
    initial_feedback: str

    def __init__(
        self,
        thresholds: Any = None,
        overrides: Optional[Mapping[str, float]] = None,
        smoothing: Optional[float] = None
    ):
        self.thresholds = thresholds or thresholds_for(self.kind, overrides)
        self.smoothing = settings.SCORE_SMOOTHING if smoothing is None else smoothing
        self.state = ProcessorState(stage=self.initial_stage, feedback=self.initial_feedback)
        self.aux = self._initial_aux()

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    @property
    def rep_count(self) -> int:
        return self.state.rep_count

    @property
    def stage(self) -> str:
        return self.state.stage

    @property
    def form_score(self) -> int:
        return self.state.form_score

    @property
    def feedback(self) -> str:
        return self.state.feedback

    def process(self, landmarks: Optional[Sequence[Any]]) -> ProcessResult:
        """
        Process one frame of pose landmarks.

        An incomplete frame leaves stage, rep count and score untouched and
        reports "Pose data not found".
        """
        frame = parse_pose_frame(landmarks)
        try:
            self._step(frame)
        except IncompletePoseData as e:
            return self._result(feedback=e.message)
        return self._result()

    def snapshot(self) -> Tuple[ProcessorState, Any]:
        return copy.deepcopy((self.state, self.aux))

    def restore(self, snapshot: Tuple[ProcessorState, Any]):
        self.state, self.aux = copy.deepcopy(snapshot)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _initial_aux(self) -> Any:
        return None

    @abstractmethod
    def _step(self, frame: Optional[PoseFrame]):
        """Advance the automaton by one frame."""

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def _transition(self, stage: str, credit_rep: bool = False):
        self.state.stage = stage
        if credit_rep:
            self.state.rep_count += 1

    def _set_feedback(
        self,
        violation: Optional[str] = None,
        transition: Optional[str] = None,
        hint: Optional[str] = None
    ):
        # Form violations outrank stage encouragement, which outranks progress hints
        message = violation or transition or hint
        if message:
            self.state.feedback = message

    def _update_score(self, instantaneous: float):
        sample = clamp(instantaneous, 0.0, 100.0)
        self.state.score_ema = self.smoothing * self.state.score_ema + (1 - self.smoothing) * sample
        self.state.form_score = int(clamp(round_half_up(self.state.score_ema), 0, 100))

    def _result(self, feedback: Optional[str] = None) -> ProcessResult:
        return ProcessResult(
            rep_count=self.state.rep_count,
            feedback=feedback if feedback is not None else self.state.feedback,
            stage=self.state.stage,
            score=self.state.form_score,
        )
