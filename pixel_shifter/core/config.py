"""Configuration management using pydantic-settings."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Gemini credentials (required)
    gemini_api_key: str

    # Optional Vertex AI routing instead of the Developer API key
    use_vertexai: bool = False
    gcp_project_id: str = ""

    # Models
    image_model: str = "gemini-2.5-flash-image-preview"
    verification_model: str = "gemini-2.5-flash-preview-09-2025"

    # Retry budgets
    request_max_attempts: int = Field(default=5, ge=1)
    request_initial_delay: float = Field(default=1.0, ge=0)
    pose_max_attempts: int = Field(default=5, ge=1)

    # Batch driver
    launch_stagger: float = Field(default=0.2, ge=0)
    max_concurrent_poses: int = Field(default=4, ge=1)

    # Application settings
    app_name: str = "pixel-shifter"

    # Server settings
    backend_host: str = "localhost"
    backend_port: int = 8000
    frontend_port: int = 3000


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
