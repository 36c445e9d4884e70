"""Image artifact and pose data models."""
import base64
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pixel_shifter.models.character import CharacterSpec


class ImageArtifact(BaseModel):
    """Binary image payload with its MIME type. Never mutated in place."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "image/png"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


class ConceptImage(ImageArtifact):
    """Canonical reference character every pose is conditioned on.

    `revision` increases on every successful synthesis within a session.
    `spec` is the character the concept was drawn from; poses follow it even
    if the form changes afterwards.
    """

    revision: int = Field(..., ge=1)
    spec: Optional[CharacterSpec] = None


class PoseDescriptor(BaseModel):
    """A named view/action template with its generation and verification text."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    prompt_suffix: str
    verification_criterion: str


class PoseState(str, Enum):
    """Transient per-pose status tags. Absent poses have no status entry."""

    generating = "generating"
    verifying = "verifying"
    retrying = "retrying"


class PoseStatus(BaseModel):
    """Status of an in-flight pose task."""

    model_config = ConfigDict(frozen=True)

    state: PoseState
    attempt: int = Field(default=1, ge=1)
    max_attempts: int = Field(default=1, ge=1)


class VerificationOutcome(str, Enum):
    """Result of one verification call.

    `unverified` means the verifier itself failed and the image was let
    through; it is accepted like `passed` but kept distinguishable.
    """

    passed = "passed"
    failed = "failed"
    unverified = "unverified"

    @property
    def accepted(self) -> bool:
        return self is not VerificationOutcome.failed


class PoseVerdict(str, Enum):
    """How a stored pose result came to be accepted."""

    passed = "passed"
    unverified = "unverified"
    rejected = "rejected"  # attempts exhausted, last candidate kept


class PoseResult(BaseModel):
    """A stored pose image together with its provenance."""

    model_config = ConfigDict(frozen=True)

    pose_id: str
    image: ImageArtifact
    verdict: PoseVerdict
    attempts: int = Field(..., ge=1)
    concept_revision: Optional[int] = None
