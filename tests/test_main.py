"""Tests for FastAPI app entry point."""
from fastapi.testclient import TestClient


def test_health_endpoint_returns_200() -> None:
    """Health check endpoint should return HTTP 200."""
    from pixel_shifter.main import app
    with TestClient(app) as client:
        response = client.get("/health")
    assert response.status_code == 200


def test_health_reports_generator_ready() -> None:
    """With GEMINI_API_KEY set, startup builds the session."""
    from pixel_shifter.main import app
    with TestClient(app) as client:
        data = client.get("/health").json()
    assert data["status"] == "ok"
    assert "version" in data
    assert data["services"]["generator"] == "ok"
    assert data["services"]["in_flight_poses"] == 0


def test_app_has_correct_title() -> None:
    """FastAPI app should have the project title."""
    from pixel_shifter.main import app
    assert app.title == "Pixel Art Shifter"


def test_app_has_cors_middleware() -> None:
    """App should allow requests from frontend origin."""
    from pixel_shifter.main import app
    from starlette.middleware.cors import CORSMiddleware
    middleware_classes = [m.cls for m in app.user_middleware]
    assert CORSMiddleware in middleware_classes
