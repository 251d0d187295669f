"""
Runtime settings for the RepoGrade service.

Values come from the environment (optionally a .env file in the working
directory) and are passed explicitly to create_app(); nothing else reads
os.environ directly.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8080",
]


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    github_token: str | None = None
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    ai_timeout_seconds: float = 30.0
    github_timeout_seconds: float = 15.0
    database_url: str = "sqlite:///./repograde.db"
    cache_ttl_seconds: int = 24 * 60 * 60
    analysis_freshness_hours: int = 24
    rate_limit: str = "10/minute"
    allowed_origins: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    environment: str = "development"
    log_level: str = "INFO"


def load_settings(env_file: str | None = None) -> Settings:
    """Build Settings from the environment, loading .env first if present."""
    load_dotenv(env_file)

    return Settings(
        github_token=os.getenv("GITHUB_TOKEN") or None,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        ai_timeout_seconds=float(os.getenv("AI_TIMEOUT_SECONDS", "30")),
        github_timeout_seconds=float(os.getenv("GITHUB_TIMEOUT_SECONDS", "15")),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./repograde.db"),
        cache_ttl_seconds=int(os.getenv("CACHE_TTL_SECONDS", str(24 * 60 * 60))),
        analysis_freshness_hours=int(os.getenv("ANALYSIS_FRESHNESS_HOURS", "24")),
        rate_limit=os.getenv("RATE_LIMIT", "10/minute"),
        allowed_origins=_split_csv(os.getenv("ALLOWED_ORIGINS")) or list(DEFAULT_ALLOWED_ORIGINS),
        environment=os.getenv("ENVIRONMENT", "development").lower(),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
