"""Sprite generation service: concept synthesis, pose synthesis and verification."""
import logging
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from pixel_shifter.models.character import CharacterSpec
from pixel_shifter.models.image import (
    ConceptImage,
    ImageArtifact,
    PoseDescriptor,
    PoseResult,
    PoseState,
    PoseStatus,
    PoseVerdict,
    VerificationOutcome,
)
from pixel_shifter.services.errors import ConceptGenerationError, RequestFailedError
from pixel_shifter.services.gemini import GeminiClient, extract_image, extract_text

logger = logging.getLogger(__name__)

DEFAULT_POSE_ATTEMPTS = 5

CHROMA_KEY = "#00ff00"

CORRECTIVE_NOTE = (
    "IMPORTANT: Previous generation was incorrect. "
    "Ensure the view direction and action are correct this time."
)

StatusCallback = Callable[[str, PoseStatus], None]


class VerificationAnswer(BaseModel):
    """Structured answer expected from the verification model."""

    model_config = ConfigDict(strict=True)

    valid: bool


def build_concept_prompt(spec: CharacterSpec) -> str:
    """Build the one-shot instruction for the canonical reference character."""
    return (
        "You are a professional pixel art character designer.\n\n"
        "TASK 1: ANALYZE the visual style of the provided reference image. Note the "
        "proportions (e.g. chibi, realistic), shading technique, color palette, and "
        "outline style.\n\n"
        "TASK 2: GENERATE A NEW CHARACTER that perfectly matches that analyzed style.\n\n"
        "New Character Details:\n"
        f"- Gender: {spec.gender}\n"
        f"- Race: {spec.race}\n"
        f"- Class: {spec.character_class}\n"
        f"- Equipment: Wearing {spec.armor} armor and holding a {spec.weapon}.\n"
        "- Aesthetic: Cute Cartoon/Anime Pixel Art (Vibrant colors, clear design).\n\n"
        "Output Requirements:\n"
        "- Pose: Neutral standing pose, full body visible.\n"
        f"- Background: Solid green {CHROMA_KEY} (CRITICAL).\n"
        "- Quality: High definition pixel art."
    )


def build_pose_prompt(spec: CharacterSpec, pose: PoseDescriptor, retry: bool = False) -> str:
    """Build the sprite prompt for one pose.

    Args:
        spec: Character attributes.
        pose: View/action template.
        retry: Whether a previous attempt was rejected or undecodable.

    Returns:
        Prompt string sent alongside the concept image.
    """
    prompt = (
        f"Retro 16-bit pixel art game sprite asset on a solid green {CHROMA_KEY} background.\n"
        "The character is centered and maintains a strict, consistent scale and "
        '"five-short" body proportion (approximately 3 heads tall) relative to the canvas '
        "boundaries across all variations, occupying roughly 70% of the total vertical "
        "height regardless of the pose.\n\n"
        f"Character Description: A {spec.gender} {spec.race} {spec.character_class} "
        f"wearing {spec.armor} armor and holding a {spec.weapon}.\n\n"
        "Reference Image: A character concept art.\n"
        "TASK: Generate a pixel art sprite of the EXACT SAME character from the reference "
        "image in the specified view.\n"
        f"VIEW: {pose.prompt_suffix}.\n\n"
        "REQUIREMENTS:\n"
        "1. Same character features and colors as reference.\n"
        '2. STRICT 3-head tall proportion ("five-short" style).\n'
        f"3. Solid green {CHROMA_KEY} background."
    )
    if retry:
        prompt += f"\n{CORRECTIVE_NOTE}"
    return prompt


def build_verification_prompt(criterion: str) -> str:
    return (
        f"Look at this pixel art image. {criterion} "
        'Reply with a valid JSON object: { "valid": boolean }'
    )


class SpriteGenerationService:
    """Generates the concept image and verified pose sprites via Gemini."""

    def __init__(
        self,
        gemini: GeminiClient,
        max_pose_attempts: int = DEFAULT_POSE_ATTEMPTS,
    ) -> None:
        self.gemini = gemini
        self.max_pose_attempts = max_pose_attempts

    async def synthesize_concept(
        self, reference: ImageArtifact, spec: CharacterSpec, revision: int = 1
    ) -> ConceptImage:
        """Generate the canonical reference character in the style of `reference`.

        Raises:
            ConceptGenerationError: When the request fails or no image comes back.
                A refusal carries the model's explanation in `reason`.
        """
        try:
            response = await self.gemini.generate_image(build_concept_prompt(spec), reference)
        except RequestFailedError as exc:
            raise ConceptGenerationError(f"Concept generation failed: {exc}") from exc

        image = extract_image(response)
        if image is None:
            text = extract_text(response)
            if text:
                raise ConceptGenerationError(f"Model declined to generate: {text}")
            raise ConceptGenerationError("No image was generated")

        logger.info("Concept image generated (revision %d)", revision)
        return ConceptImage(
            data=image.data, mime_type=image.mime_type, revision=revision, spec=spec
        )

    async def verify(self, image: ImageArtifact, criterion: str) -> VerificationOutcome:
        """Ask the verification model whether `image` satisfies `criterion`.

        Fails open: any transport or parse failure yields `unverified`, which
        callers accept like a pass.
        """
        try:
            response = await self.gemini.generate_json(
                build_verification_prompt(criterion), image, VerificationAnswer
            )
            answer = VerificationAnswer.model_validate_json(extract_text(response) or "")
        except (RequestFailedError, ValidationError) as exc:
            logger.warning(
                "Verification failed, skipping check: %s: %s", type(exc).__name__, exc
            )
            return VerificationOutcome.unverified
        return VerificationOutcome.passed if answer.valid else VerificationOutcome.failed

    async def generate_pose(
        self,
        concept: ConceptImage,
        spec: CharacterSpec,
        pose: PoseDescriptor,
        on_status: Optional[StatusCallback] = None,
    ) -> Optional[PoseResult]:
        """Generate one pose, verifying and retrying until accepted or out of attempts.

        An attempt whose response has no image consumes the attempt without a
        verification call. A rejected image is kept as the candidate, so after
        the last attempt the most recent decoded image is returned even if it
        never passed. A request failure aborts the pose and discards any
        earlier candidate.

        Args:
            concept: Canonical reference image the pose is conditioned on.
            spec: Character attributes.
            pose: View/action template.
            on_status: Called with (pose_id, status) on every state change.

        Returns:
            The accepted or last candidate PoseResult, or None when no attempt
            produced an image or a request failed.
        """
        max_attempts = self.max_pose_attempts
        candidate: Optional[ImageArtifact] = None
        attempts_made = 0

        def report(state: PoseState, attempt: int) -> None:
            if on_status is not None:
                on_status(
                    pose.id,
                    PoseStatus(state=state, attempt=attempt, max_attempts=max_attempts),
                )

        for attempt in range(1, max_attempts + 1):
            attempts_made = attempt
            report(PoseState.generating if attempt == 1 else PoseState.retrying, attempt)
            prompt = build_pose_prompt(spec, pose, retry=attempt > 1)
            try:
                response = await self.gemini.generate_image(prompt, concept)
            except RequestFailedError:
                logger.error(
                    "Pose generation request failed for %s",
                    pose.id,
                    exc_info=True,
                    extra={"pose_id": pose.id, "attempt": attempt},
                )
                return None

            image = extract_image(response)
            if image is None:
                logger.info(
                    "No image returned for %s (attempt %d/%d)",
                    pose.id,
                    attempt,
                    max_attempts,
                    extra={"pose_id": pose.id, "attempt": attempt},
                )
                continue

            candidate = image
            report(PoseState.verifying, attempt)
            outcome = await self.verify(image, pose.verification_criterion)
            if outcome.accepted:
                return PoseResult(
                    pose_id=pose.id,
                    image=image,
                    verdict=PoseVerdict(outcome.value),
                    attempts=attempt,
                    concept_revision=concept.revision,
                )
            logger.info(
                "Verification rejected %s (attempt %d/%d)",
                pose.id,
                attempt,
                max_attempts,
                extra={"pose_id": pose.id, "attempt": attempt},
            )

        if candidate is None:
            logger.error(
                "Failed to generate pose %s after %d attempts",
                pose.id,
                attempts_made,
                extra={"pose_id": pose.id, "attempt": attempts_made},
            )
            return None

        logger.warning(
            "Keeping unverified candidate for %s after %d attempts",
            pose.id,
            attempts_made,
            extra={"pose_id": pose.id, "attempt": attempts_made},
        )
        return PoseResult(
            pose_id=pose.id,
            image=candidate,
            verdict=PoseVerdict.rejected,
            attempts=attempts_made,
            concept_revision=concept.revision,
        )
