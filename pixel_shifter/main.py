"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from pixel_shifter.core.config import get_settings
from pixel_shifter.core.logging import setup_logging

# Setup logging
logger = setup_logging("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize services at startup, cancel pose tasks at shutdown."""
    settings = get_settings()
    try:
        from pixel_shifter.services.gemini import GeminiClient
        from pixel_shifter.services.image import SpriteGenerationService
        from pixel_shifter.services.session import GenerationSession

        gemini = GeminiClient(
            api_key=settings.gemini_api_key,
            image_model=settings.image_model,
            verification_model=settings.verification_model,
            max_attempts=settings.request_max_attempts,
            initial_delay=settings.request_initial_delay,
            use_vertexai=settings.use_vertexai,
            project_id=settings.gcp_project_id or None,
        )
        sprite_service = SpriteGenerationService(
            gemini=gemini,
            max_pose_attempts=settings.pose_max_attempts,
        )
        app.state.session = GenerationSession(
            sprite_service=sprite_service,
            launch_stagger=settings.launch_stagger,
            max_concurrent_poses=settings.max_concurrent_poses,
        )
        logger.info("Services initialized successfully")
    except Exception as exc:
        logger.error(
            "Service initialization failed, running in degraded mode",
            exc_info=True,
            extra={"service": "main", "error_type": type(exc).__name__},
        )
        # Continue without services; endpoints return 503 until fixed

    yield

    session = getattr(app.state, "session", None)
    if session is not None:
        cancelled = session.cancel_all()
        if cancelled:
            logger.info("Cancelled %d pose tasks on shutdown", len(cancelled))


# Create FastAPI app
app = FastAPI(
    title="Pixel Art Shifter",
    description="Pixel-art character concept and pose sprite generator backed by Gemini",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[f"http://localhost:{settings.frontend_port}"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
from pixel_shifter.api.session import router as session_router  # noqa: E402

app.include_router(session_router)


@app.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Always returns HTTP 200; check `services.generator` for actual status.
    """
    session = getattr(request.app.state, "session", None)

    logger.info("Health check requested")
    return {
        "status": "ok",
        "version": app.version,
        "services": {
            "generator": "ok" if session is not None else "unavailable",
            "in_flight_poses": len(session.in_flight) if session is not None else 0,
        },
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    cfg = get_settings()
    uvicorn.run("pixel_shifter.main:app", host=cfg.backend_host, port=cfg.backend_port)
