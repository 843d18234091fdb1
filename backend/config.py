"""Application configuration."""

from pydantic import BaseModel


class Settings(BaseModel):
    """Application settings."""

    app_name: str = "Asset Graph Viewer API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]
    api_prefix: str = "/api"

    # Session settings
    session_ttl_seconds: int = 3600
    max_sessions: int = 100


settings = Settings()
