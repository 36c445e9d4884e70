"""Tests for the Gemini client wrapper and response parsing."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import errors

from gemini_fakes import empty_response, image_response, text_response
from pixel_shifter.models.image import ImageArtifact
from pixel_shifter.services.errors import RequestFailedError
from pixel_shifter.services.gemini import GeminiClient, extract_image, extract_text
from pixel_shifter.services.image import VerificationAnswer

IMAGE = ImageArtifact(data=b"img", mime_type="image/png")


async def _no_sleep(_delay: float) -> None:
    return None


@pytest.fixture
def sdk() -> MagicMock:
    mock = MagicMock()
    mock.aio.models.generate_content = AsyncMock(return_value=image_response(b"out"))
    return mock


@pytest.fixture
def client(sdk: MagicMock) -> GeminiClient:
    return GeminiClient(
        api_key="k",
        image_model="image-model",
        verification_model="verify-model",
        sleep=_no_sleep,
        client=sdk,
    )


class TestExtractImage:
    def test_returns_inline_payload(self) -> None:
        image = extract_image(image_response(b"pixels"))
        assert image is not None
        assert image.data == b"pixels"
        assert image.mime_type == "image/png"

    def test_skips_leading_text_part(self) -> None:
        image = extract_image(image_response(b"pixels", text="Here you go"))
        assert image is not None
        assert image.data == b"pixels"

    def test_none_for_text_only(self) -> None:
        assert extract_image(text_response("I can't draw that")) is None

    def test_none_without_candidates(self) -> None:
        assert extract_image(empty_response()) is None


class TestExtractText:
    def test_returns_first_text(self) -> None:
        assert extract_text(text_response("  refused  ")) == "refused"

    def test_none_for_image_only(self) -> None:
        assert extract_text(image_response()) is None

    def test_none_without_candidates(self) -> None:
        assert extract_text(empty_response()) is None


class TestGenerateImage:
    async def test_uses_image_model_and_both_modalities(
        self, client: GeminiClient, sdk: MagicMock
    ) -> None:
        response = await client.generate_image("draw it", IMAGE)

        assert extract_image(response).data == b"out"  # type: ignore[union-attr]
        kwargs = sdk.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "image-model"
        assert kwargs["config"].response_modalities == ["TEXT", "IMAGE"]

    async def test_sends_prompt_then_inline_image(
        self, client: GeminiClient, sdk: MagicMock
    ) -> None:
        await client.generate_image("draw it", IMAGE)

        parts = sdk.aio.models.generate_content.call_args.kwargs["contents"]
        assert parts[0].text == "draw it"
        assert parts[1].inline_data.data == b"img"
        assert parts[1].inline_data.mime_type == "image/png"

    async def test_retries_retryable_status(self, client: GeminiClient, sdk: MagicMock) -> None:
        error = errors.APIError(503, {"error": {"code": 503, "status": "UNAVAILABLE"}})
        sdk.aio.models.generate_content.side_effect = [error, image_response(b"second")]

        response = await client.generate_image("draw it", IMAGE)

        assert extract_image(response).data == b"second"  # type: ignore[union-attr]
        assert sdk.aio.models.generate_content.call_count == 2

    async def test_raises_request_failed_on_terminal_status(
        self, client: GeminiClient, sdk: MagicMock
    ) -> None:
        sdk.aio.models.generate_content.side_effect = errors.APIError(
            400, {"error": {"code": 400, "status": "INVALID_ARGUMENT"}}
        )
        with pytest.raises(RequestFailedError):
            await client.generate_image("draw it", IMAGE)
        assert sdk.aio.models.generate_content.call_count == 1


class TestGenerateJson:
    async def test_uses_verification_model_and_json_mode(
        self, client: GeminiClient, sdk: MagicMock
    ) -> None:
        await client.generate_json("Is it?", IMAGE, VerificationAnswer)

        kwargs = sdk.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "verify-model"
        assert kwargs["config"].response_mime_type == "application/json"
        assert kwargs["config"].response_schema is VerificationAnswer


class TestClientConstruction:
    def test_api_key_client_is_created_lazily(self) -> None:
        with patch("pixel_shifter.services.gemini.genai.Client") as factory:
            gemini = GeminiClient(api_key="secret")
            factory.assert_not_called()
            _ = gemini.client
            _ = gemini.client
        factory.assert_called_once_with(api_key="secret")

    def test_vertex_client_uses_global_location(self) -> None:
        with patch("pixel_shifter.services.gemini.genai.Client") as factory:
            _ = GeminiClient(use_vertexai=True, project_id="proj").client
        factory.assert_called_once_with(vertexai=True, project="proj", location="global")
