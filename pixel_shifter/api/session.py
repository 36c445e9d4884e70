"""Session API router: reference intake, concept, poses and downloads."""
import base64
import binascii
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from pixel_shifter.models.character import CharacterOptions, CharacterSelection, character_options
from pixel_shifter.models.session import (
    CancelResponse,
    LaunchResponse,
    ReferenceUpload,
    SessionSnapshot,
)
from pixel_shifter.services.errors import (
    ConceptGenerationError,
    SessionStateError,
    UnknownPoseError,
)
from pixel_shifter.services.export import build_archive, sprite_filename
from pixel_shifter.services.session import GenerationSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["session"])


def get_session(request: Request) -> GenerationSession:
    """FastAPI dependency: retrieve GenerationSession from app.state.

    Returns HTTP 503 if the session was not initialized at startup
    (i.e. Gemini client configuration is missing).
    """
    session: GenerationSession | None = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(
            status_code=503,
            detail="Generation service unavailable. Service not initialized.",
        )
    return session


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}


@router.get("/options", response_model=CharacterOptions)
async def get_options() -> CharacterOptions:
    """Option lists for the character form."""
    return character_options()


@router.get("/session", response_model=SessionSnapshot)
async def get_snapshot(session: GenerationSession = Depends(get_session)) -> SessionSnapshot:
    return session.snapshot()


@router.put("/session/reference", response_model=SessionSnapshot)
async def upload_reference(
    body: ReferenceUpload,
    session: GenerationSession = Depends(get_session),
) -> SessionSnapshot:
    """Store the style sample. Accepts raw base64 or a data URI.

    Raises:
        HTTPException 422: Payload is not base64 or not an image.
    """
    payload = body.data.split(",", 1)[1] if body.data.startswith("data:") else body.data
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=422, detail="Image data is not valid base64") from exc
    try:
        session.set_reference(data, body.mime_type)
    except SessionStateError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return session.snapshot()


@router.put("/session/character", response_model=SessionSnapshot)
async def update_character(
    body: CharacterSelection,
    session: GenerationSession = Depends(get_session),
) -> SessionSnapshot:
    session.set_character(body)
    return session.snapshot()


@router.post("/session/concept", response_model=SessionSnapshot)
async def create_concept(session: GenerationSession = Depends(get_session)) -> SessionSnapshot:
    """Synthesize the concept image. Waits for the model.

    Raises:
        HTTPException 409: No reference image, or synthesis already running.
        HTTPException 502: The model produced no image.
    """
    try:
        await session.synthesize_concept()
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ConceptGenerationError as exc:
        logger.error(
            "create_concept failed",
            exc_info=True,
            extra={"service": "SessionRouter", "error_type": type(exc).__name__},
        )
        raise HTTPException(status_code=502, detail=exc.reason) from exc
    return session.snapshot()


@router.post(
    "/session/poses",
    response_model=LaunchResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def generate_all_poses(session: GenerationSession = Depends(get_session)) -> LaunchResponse:
    """Launch every unresolved pose in the background."""
    try:
        scheduled = session.generate_all()
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return LaunchResponse(scheduled=scheduled)


@router.delete("/session/poses", response_model=CancelResponse)
async def cancel_poses(session: GenerationSession = Depends(get_session)) -> CancelResponse:
    return CancelResponse(cancelled=session.cancel_all())


@router.post(
    "/session/poses/{pose_id}",
    response_model=LaunchResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def generate_pose(
    pose_id: str,
    session: GenerationSession = Depends(get_session),
) -> LaunchResponse:
    """Launch or re-run a single pose. Already running poses are not duplicated."""
    try:
        launched = session.generate_pose(pose_id)
    except UnknownPoseError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return LaunchResponse(scheduled=[pose_id] if launched else [])


@router.get("/session/poses/{pose_id}/image")
async def download_pose(
    pose_id: str,
    session: GenerationSession = Depends(get_session),
) -> Response:
    try:
        result = session.get_result(pose_id)
    except UnknownPoseError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if result is None:
        raise HTTPException(status_code=404, detail=f"No image for pose: {pose_id}")
    pose = session.get_pose(pose_id)
    return Response(
        content=result.image.data,
        media_type=result.image.mime_type,
        headers=_attachment(sprite_filename(pose)),
    )


@router.get("/session/export")
async def export_poses(session: GenerationSession = Depends(get_session)) -> Response:
    """Download every finished pose as one ZIP archive."""
    if not session.results:
        raise HTTPException(status_code=404, detail="No poses generated yet")
    return Response(
        content=build_archive(session.poses, session.results),
        media_type="application/zip",
        headers=_attachment("sprites.zip"),
    )


@router.post("/session/reset", response_model=SessionSnapshot)
async def reset_session(session: GenerationSession = Depends(get_session)) -> SessionSnapshot:
    session.reset()
    return session.snapshot()
