import logging
import os
from typing import List, Optional

from dotenv import load_dotenv # For local development with .env file
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_API_BASE_URL = "https://api.github.com"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_ALLOWED_ORIGINS = "http://localhost:8501,http://127.0.0.1:8501"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


class Settings(BaseModel):
    github_token: Optional[str] = None
    github_api_base_url: str = DEFAULT_GITHUB_API_BASE_URL
    google_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    tree_max_concurrency: int = 1
    tree_max_depth: Optional[int] = None
    skip_binary_content: bool = False
    allowed_origins: List[str] = []
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Reads settings from the environment (and a .env file, if present)."""
    load_dotenv()

    # Accept the browser-build name of the token as well
    token = os.getenv("GITHUB_TOKEN") or os.getenv("NEXT_PUBLIC_GITHUB_TOKEN") or None

    origins_string = os.getenv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)
    origins = [origin.strip() for origin in origins_string.split(',') if origin.strip()]
    if not origins: # Empty or whitespace-only setting
        origins = ["*"]

    return Settings(
        github_token=token,
        github_api_base_url=os.getenv("GITHUB_API_BASE_URL", DEFAULT_GITHUB_API_BASE_URL).rstrip("/"),
        google_api_key=os.getenv("GOOGLE_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        tree_max_concurrency=_env_int("TREE_MAX_CONCURRENCY") or 1,
        tree_max_depth=_env_int("TREE_MAX_DEPTH"),
        skip_binary_content=_env_flag("SKIP_BINARY_CONTENT"),
        allowed_origins=origins,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def warn_if_anonymous(settings: Settings) -> None:
    if not settings.github_token:
        logger.warning(
            "GITHUB_TOKEN is not set; using anonymous GitHub API access (lower rate limits)."
        )
