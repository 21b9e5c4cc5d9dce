import os
from dataclasses import dataclass
from dotenv import load_dotenv
from pathlib import Path

load_dotenv(override=False)


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    return v if v not in (None, "", "null", "None") else default


def _int_env(name: str, default: int) -> int:
    raw = _env(name)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


SUPABASE_URL = _env("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = _env("SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_TABLE = _env("SUPABASE_TABLE", "submissions")


FRONTEND_URL = _env("FRONTEND_URL", "http://localhost:5173")
HOST = _env("HOST", "0.0.0.0")
PORT = _int_env("PORT", 5000)
APP_ENV = _env("APP_ENV", "development")


RATE_LIMIT_REQUESTS = _int_env("RATE_LIMIT_REQUESTS", 100)
RATE_LIMIT_WINDOW = _int_env("RATE_LIMIT_WINDOW", 15 * 60)
MAX_BODY_BYTES = _int_env("MAX_BODY_BYTES", 10 * 1024 * 1024)


API_URL = _env("API_URL", "http://localhost:5000")
DRAFT_PATH = Path(_env("DRAFT_PATH", str(Path.home() / ".tis_intake" / "local_storage.json")))


@dataclass
class Settings:
    """Server settings handed to ``create_app``; defaults come from the environment."""

    frontend_url: str = FRONTEND_URL
    rate_limit_requests: int = RATE_LIMIT_REQUESTS
    rate_limit_window: int = RATE_LIMIT_WINDOW
    max_body_bytes: int = MAX_BODY_BYTES
    supabase_url: str | None = SUPABASE_URL
    supabase_key: str | None = SUPABASE_SERVICE_ROLE_KEY
    supabase_table: str = SUPABASE_TABLE
    app_env: str = APP_ENV
