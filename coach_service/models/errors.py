"""
FormCoach Coach Service - Errors

Every error carries the message that is shown to the connected client.
"""


class CoachError(Exception):
    """Base class for coaching engine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IncompletePoseData(CoachError):
    """Landmark frame is absent, short, or missing a joint the processor needs."""

    def __init__(self, message: str = "Pose data not found"):
        super().__init__(message)


class ExerciseNotFound(CoachError):
    """Requested exercise is not in the exercise catalog."""

    def __init__(self, exercise: str):
        super().__init__(f"Exercise '{exercise}' not found in the library.")
        self.exercise = exercise


class ProcessorUnavailable(CoachError):
    """Exercise exists in the catalog but has no real-time processor."""

    def __init__(self, exercise: str):
        super().__init__(f"Sorry, real-time analysis for '{exercise}' is not available yet.")
        self.exercise = exercise


class SessionAlreadyActive(CoachError):
    """A connection tried to start a second session while one is active."""

    def __init__(self, exercise: str):
        super().__init__(
            f"A '{exercise}' session is already active on this connection. End it before starting another."
        )
        self.exercise = exercise


class ProcessingFault(CoachError):
    """A processor raised while handling a frame."""

    def __init__(self, message: str = "Failed to process pose frame."):
        super().__init__(message)
