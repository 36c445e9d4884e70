"""Request/response models for the session API."""
from typing import Optional

from pydantic import BaseModel, Field

from pixel_shifter.models.image import PoseState, PoseVerdict


class ReferenceUpload(BaseModel):
    """Reference style sample sent by the front-end as base64."""

    mime_type: str = Field(..., min_length=1)
    data: str = Field(..., min_length=1)


class PoseSnapshot(BaseModel):
    """One row of the pose grid."""

    id: str
    label: str
    state: Optional[PoseState] = None
    attempt: Optional[int] = None
    max_attempts: Optional[int] = None
    image: Optional[str] = None  # data URI
    verdict: Optional[PoseVerdict] = None


class SessionSnapshot(BaseModel):
    """Everything the front-end renders for the current session."""

    has_reference: bool
    character: dict[str, str]
    concept: Optional[str] = None  # data URI
    concept_revision: Optional[int] = None
    concept_in_progress: bool = False
    error: Optional[str] = None
    poses: list[PoseSnapshot]


class LaunchResponse(BaseModel):
    """Pose ids scheduled by a generation request."""

    scheduled: list[str]


class CancelResponse(BaseModel):
    """Pose ids whose in-flight tasks were cancelled."""

    cancelled: list[str]
