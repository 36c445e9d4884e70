"""GenerationSession: the operator's working set and the pose task group."""
import asyncio
from typing import Optional

from pixel_shifter.core.logging import setup_logging
from pixel_shifter.models.character import CharacterSelection, CharacterSpec
from pixel_shifter.models.image import (
    ConceptImage,
    ImageArtifact,
    PoseDescriptor,
    PoseResult,
    PoseStatus,
)
from pixel_shifter.models.session import PoseSnapshot, SessionSnapshot
from pixel_shifter.services.errors import (
    ConceptGenerationError,
    SessionStateError,
    UnknownPoseError,
)
from pixel_shifter.services.image import SpriteGenerationService
from pixel_shifter.services.poses import build_pose_catalog, find_pose
from pixel_shifter.services.retry import Sleep

logger = setup_logging("session")

DEFAULT_LAUNCH_STAGGER = 0.2
DEFAULT_MAX_CONCURRENT_POSES = 4


class GenerationSession:
    """Owns all state of one operator session.

    Every operator action maps to one method: set_reference, set_character,
    synthesize_concept, generate_pose, generate_all, cancel_all, reset.

    Pose tasks are keyed by pose id, so concurrent tasks never write the same
    slot. Launches are staggered and run under a semaphore. Synthesizing a new
    concept cancels every in-flight pose task first, and a finished task only
    stores its result if it was conditioned on the current concept revision.
    """

    def __init__(
        self,
        sprite_service: SpriteGenerationService,
        launch_stagger: float = DEFAULT_LAUNCH_STAGGER,
        max_concurrent_poses: int = DEFAULT_MAX_CONCURRENT_POSES,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.sprite_service = sprite_service
        self.launch_stagger = launch_stagger
        self._sleep = sleep or asyncio.sleep
        self._semaphore = asyncio.Semaphore(max_concurrent_poses)
        self._tasks: dict[str, asyncio.Task] = {}
        self._revision = 0

        self.reference: Optional[ImageArtifact] = None
        self.selection = CharacterSelection()
        self.concept: Optional[ConceptImage] = None
        self.concept_in_progress = False
        self.error: Optional[str] = None
        self.results: dict[str, PoseResult] = {}
        self.statuses: dict[str, PoseStatus] = {}

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def spec(self) -> CharacterSpec:
        return self.selection.resolve()

    @property
    def pose_spec(self) -> CharacterSpec:
        """Spec poses are generated from: the concept's once one exists."""
        if self.concept is not None and self.concept.spec is not None:
            return self.concept.spec
        return self.spec

    @property
    def poses(self) -> list[PoseDescriptor]:
        return build_pose_catalog(self.pose_spec.weapon)

    @property
    def in_flight(self) -> list[str]:
        return list(self._tasks)

    def get_pose(self, pose_id: str) -> PoseDescriptor:
        pose = find_pose(self.poses, pose_id)
        if pose is None:
            raise UnknownPoseError(pose_id)
        return pose

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------

    def set_reference(self, data: bytes, mime_type: str) -> ImageArtifact:
        """Store the uploaded style sample.

        Raises:
            SessionStateError: When the upload is empty or not an image.
        """
        if not mime_type.startswith("image/"):
            self.error = "Please upload a valid image file (PNG, JPG)"
            raise SessionStateError(self.error)
        if not data:
            self.error = "The uploaded image is empty"
            raise SessionStateError(self.error)
        self.reference = ImageArtifact(data=data, mime_type=mime_type)
        self.error = None
        logger.info("Reference image set (%s, %d bytes)", mime_type, len(data))
        return self.reference

    def set_character(self, selection: CharacterSelection) -> CharacterSpec:
        self.selection = selection
        return self.spec

    async def synthesize_concept(self) -> ConceptImage:
        """Generate a new concept image, invalidating every pose.

        Raises:
            SessionStateError: No reference uploaded, or a synthesis is running.
            ConceptGenerationError: The model produced no image. The reason is
                also kept in `error` for the front-end banner.
        """
        if self.reference is None:
            raise SessionStateError("Upload a reference image first")
        if self.concept_in_progress:
            raise SessionStateError("Concept generation already in progress")

        cancelled = self.cancel_all()
        if cancelled:
            logger.info("Cancelled %d pose tasks for concept regeneration", len(cancelled))

        self._revision += 1
        revision = self._revision
        self.concept_in_progress = True
        self.error = None
        self.concept = None
        self.results.clear()
        try:
            concept = await self.sprite_service.synthesize_concept(
                self.reference, self.spec, revision=revision
            )
        except ConceptGenerationError as exc:
            if revision == self._revision:
                self.error = exc.reason
            logger.error("Concept generation failed: %s", exc.reason)
            raise
        finally:
            if revision == self._revision:
                self.concept_in_progress = False

        # A reset while awaiting the model invalidates this concept.
        if revision != self._revision:
            logger.info("Discarding concept revision %d after session reset", revision)
            return concept
        self.concept = concept
        return concept

    def generate_pose(self, pose_id: str) -> bool:
        """Launch (or re-launch) one pose. Returns False if it is already in flight.

        Raises:
            UnknownPoseError: `pose_id` is not in the catalog.
            SessionStateError: No concept image yet.
        """
        pose = self.get_pose(pose_id)
        concept = self._require_concept()
        if pose.id in self._tasks:
            return False
        self._launch(pose, concept, delay=0.0)
        return True

    def generate_all(self) -> list[str]:
        """Launch every pose that has no result and no running task.

        Launch delays grow by `launch_stagger` per catalog position. Returns
        immediately with the scheduled pose ids.
        """
        concept = self._require_concept()
        scheduled: list[str] = []
        for index, pose in enumerate(self.poses):
            if pose.id in self.results or pose.id in self._tasks:
                continue
            self._launch(pose, concept, delay=index * self.launch_stagger)
            scheduled.append(pose.id)
        logger.info("Scheduled %d poses", len(scheduled))
        return scheduled

    def cancel_all(self) -> list[str]:
        """Cancel every in-flight pose task and clear their statuses."""
        cancelled = list(self._tasks)
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()
        self.statuses.clear()
        return cancelled

    def reset(self) -> None:
        """Return to an empty session. A concept synthesis still running is discarded."""
        self.cancel_all()
        self._revision += 1
        self.concept_in_progress = False
        self.reference = None
        self.selection = CharacterSelection()
        self.concept = None
        self.error = None
        self.results.clear()

    async def drain(self) -> None:
        """Wait until every in-flight pose task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def get_result(self, pose_id: str) -> Optional[PoseResult]:
        self.get_pose(pose_id)
        return self.results.get(pose_id)

    def snapshot(self) -> SessionSnapshot:
        rows: list[PoseSnapshot] = []
        for pose in self.poses:
            status = self.statuses.get(pose.id)
            result = self.results.get(pose.id)
            rows.append(
                PoseSnapshot(
                    id=pose.id,
                    label=pose.label,
                    state=status.state if status else None,
                    attempt=status.attempt if status else None,
                    max_attempts=status.max_attempts if status else None,
                    image=result.image.to_data_uri() if result else None,
                    verdict=result.verdict if result else None,
                )
            )
        spec = self.spec
        return SessionSnapshot(
            has_reference=self.reference is not None,
            character={
                "gender": spec.gender,
                "race": spec.race,
                "character_class": spec.character_class,
                "armor": spec.armor,
                "weapon": spec.weapon,
            },
            concept=self.concept.to_data_uri() if self.concept else None,
            concept_revision=self.concept.revision if self.concept else None,
            concept_in_progress=self.concept_in_progress,
            error=self.error,
            poses=rows,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_concept(self) -> ConceptImage:
        if self.concept is None:
            raise SessionStateError("Generate a concept image first")
        return self.concept

    def _launch(self, pose: PoseDescriptor, concept: ConceptImage, delay: float) -> None:
        spec = concept.spec or self.spec
        task = asyncio.create_task(
            self._run_pose(pose, concept, spec, delay), name=f"pose:{pose.id}"
        )
        self._tasks[pose.id] = task

        def _forget(done: asyncio.Task) -> None:
            if self._tasks.get(pose.id) is done:
                del self._tasks[pose.id]

        task.add_done_callback(_forget)

    def _set_status(self, pose_id: str, status: PoseStatus) -> None:
        self.statuses[pose_id] = status

    async def _run_pose(
        self,
        pose: PoseDescriptor,
        concept: ConceptImage,
        spec: CharacterSpec,
        delay: float,
    ) -> None:
        if delay > 0:
            await self._sleep(delay)
        try:
            async with self._semaphore:
                result = await self.sprite_service.generate_pose(
                    concept, spec, pose, on_status=self._set_status
                )
        except Exception:
            logger.error(
                "Pose task crashed for %s",
                pose.id,
                exc_info=True,
                extra={"pose_id": pose.id},
            )
            return
        finally:
            # A cancelled task must not clear the status of its replacement.
            if self._tasks.get(pose.id) in (None, asyncio.current_task()):
                self.statuses.pop(pose.id, None)

        if result is None:
            return
        if self.concept is None or self.concept.revision != result.concept_revision:
            logger.info(
                "Discarding %s generated from stale concept revision %s",
                pose.id,
                result.concept_revision,
                extra={"pose_id": pose.id},
            )
            return
        self.results[pose.id] = result
