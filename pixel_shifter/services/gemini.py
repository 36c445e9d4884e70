"""Thin async wrapper around the Gemini generate_content endpoint."""
import logging
from typing import Optional

from google import genai
from google.genai import types
from pydantic import BaseModel

from pixel_shifter.models.image import ImageArtifact
from pixel_shifter.services.retry import (
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    Sleep,
    call_with_retry,
)

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_VERIFICATION_MODEL = "gemini-2.5-flash-preview-09-2025"


class GeminiClient:
    """Issues multimodal requests through the resilient caller.

    Image requests ask for TEXT and IMAGE modalities so a refusal comes back
    as explanatory text. JSON requests ask for a schema-constrained answer.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        image_model: str = DEFAULT_IMAGE_MODEL,
        verification_model: str = DEFAULT_VERIFICATION_MODEL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        use_vertexai: bool = False,
        project_id: Optional[str] = None,
        sleep: Optional[Sleep] = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.image_model = image_model
        self.verification_model = verification_model
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.use_vertexai = use_vertexai
        self.project_id = project_id
        self._sleep = sleep
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if self.use_vertexai:
                # Image preview models are only served from the global endpoint.
                self._client = genai.Client(
                    vertexai=True,
                    project=self.project_id,
                    location="global",
                )
            else:
                self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate_image(
        self, prompt: str, image: ImageArtifact
    ) -> types.GenerateContentResponse:
        """Request an image conditioned on `image` and the text prompt."""
        return await self._generate(
            model=self.image_model,
            contents=_multimodal_parts(prompt, image),
            config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
            description="image generation",
        )

    async def generate_json(
        self, prompt: str, image: ImageArtifact, schema: type[BaseModel]
    ) -> types.GenerateContentResponse:
        """Ask the verification model a question about `image`, answered as JSON."""
        return await self._generate(
            model=self.verification_model,
            contents=_multimodal_parts(prompt, image),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
            ),
            description="verification",
        )

    async def _generate(
        self,
        model: str,
        contents: list[types.Part],
        config: types.GenerateContentConfig,
        description: str,
    ) -> types.GenerateContentResponse:
        client = self.client
        return await call_with_retry(
            lambda: client.aio.models.generate_content(
                model=model, contents=contents, config=config
            ),
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            sleep=self._sleep,
            description=description,
        )


def _multimodal_parts(prompt: str, image: ImageArtifact) -> list[types.Part]:
    return [
        types.Part(text=prompt),
        types.Part(inline_data=types.Blob(data=image.data, mime_type=image.mime_type)),
    ]


def _parts(response: types.GenerateContentResponse) -> list[types.Part]:
    candidates = response.candidates
    if not candidates or candidates[0].content is None:
        return []
    return list(candidates[0].content.parts or [])


def extract_image(response: types.GenerateContentResponse) -> Optional[ImageArtifact]:
    """Return the first inline image payload of the first candidate, if any."""
    for part in _parts(response):
        if part.inline_data is not None and part.inline_data.data:
            return ImageArtifact(
                data=bytes(part.inline_data.data),
                mime_type=part.inline_data.mime_type or "image/png",
            )
    return None


def extract_text(response: types.GenerateContentResponse) -> Optional[str]:
    """Return the first non-empty text part of the first candidate, if any."""
    for part in _parts(response):
        if part.text and part.text.strip():
            return part.text.strip()
    return None
