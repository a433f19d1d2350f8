"""Project-level configuration and path helpers."""

import os
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"
DEFAULT_DB_PATH = DATA_DIR / "awareos.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"
DEFAULT_MODEL = "claude-sonnet-4-20250514"


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def get_api_key() -> str | None:
    """Credential for the reasoning service, or None for observe-only mode."""
    return os.getenv("ANTHROPIC_API_KEY") or None


def get_model() -> str:
    return os.getenv("AWAREOS_MODEL", DEFAULT_MODEL)
