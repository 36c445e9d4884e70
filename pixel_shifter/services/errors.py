"""Domain exceptions."""
from typing import Optional


class PixelShifterError(Exception):
    """Base class for pipeline errors."""


class RequestFailedError(PixelShifterError):
    """A model request failed after the resilient caller gave up."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.attempts = attempts


class ConceptGenerationError(PixelShifterError):
    """Concept synthesis produced no image. `reason` is shown to the operator."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class SessionStateError(PixelShifterError):
    """The requested action is not allowed in the current session state."""


class UnknownPoseError(PixelShifterError):
    """No pose with the given id exists in the current catalog."""

    def __init__(self, pose_id: str) -> None:
        super().__init__(f"Unknown pose: {pose_id}")
        self.pose_id = pose_id
