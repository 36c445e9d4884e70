"""Shared test fixtures and configuration."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from gemini_fakes import image_response, text_response
from pixel_shifter.models.character import CharacterSpec
from pixel_shifter.models.image import ConceptImage, ImageArtifact


@pytest.fixture(autouse=True)
def set_required_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set required Gemini environment variables for all tests."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-api-key")


@pytest.fixture
def spec() -> CharacterSpec:
    return CharacterSpec(
        gender="Female",
        race="Elf",
        character_class="Archer",
        armor="Leather",
        weapon="Sword",
    )


@pytest.fixture
def reference() -> ImageArtifact:
    return ImageArtifact(data=b"reference-bytes", mime_type="image/jpeg")


@pytest.fixture
def concept() -> ConceptImage:
    return ConceptImage(data=b"concept-bytes", mime_type="image/png", revision=1)


@pytest.fixture
def gemini() -> MagicMock:
    """GeminiClient stand-in: every image request succeeds, every check passes."""
    mock = MagicMock()
    mock.generate_image = AsyncMock(return_value=image_response())
    mock.generate_json = AsyncMock(return_value=text_response('{"valid": true}'))
    return mock
