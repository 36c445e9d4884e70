"""Tests for image artifact and pose result models."""
import base64

import pytest
from pydantic import ValidationError

from pixel_shifter.models.image import (
    ConceptImage,
    ImageArtifact,
    PoseResult,
    PoseStatus,
    PoseState,
    PoseVerdict,
    VerificationOutcome,
)


class TestImageArtifact:
    def test_data_uri(self) -> None:
        image = ImageArtifact(data=b"\x89PNG", mime_type="image/png")
        assert image.to_data_uri() == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()

    def test_defaults_to_png(self) -> None:
        assert ImageArtifact(data=b"x").mime_type == "image/png"

    def test_is_immutable(self) -> None:
        image = ImageArtifact(data=b"x")
        with pytest.raises(ValidationError):
            image.data = b"y"  # type: ignore[misc]


class TestConceptImage:
    def test_revision_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ConceptImage(data=b"x", revision=0)

    def test_is_an_image_artifact(self) -> None:
        concept = ConceptImage(data=b"x", revision=2)
        assert isinstance(concept, ImageArtifact)
        assert concept.to_data_uri().startswith("data:image/png;base64,")


class TestVerificationOutcome:
    def test_passed_and_unverified_are_accepted(self) -> None:
        assert VerificationOutcome.passed.accepted
        assert VerificationOutcome.unverified.accepted

    def test_failed_is_not_accepted(self) -> None:
        assert not VerificationOutcome.failed.accepted


class TestPoseModels:
    def test_status_defaults(self) -> None:
        status = PoseStatus(state=PoseState.generating)
        assert status.attempt == 1
        assert status.max_attempts == 1

    def test_result_requires_an_attempt(self) -> None:
        with pytest.raises(ValidationError):
            PoseResult(
                pose_id="front",
                image=ImageArtifact(data=b"x"),
                verdict=PoseVerdict.passed,
                attempts=0,
            )
