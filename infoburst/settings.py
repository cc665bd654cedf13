from pydantic import BaseModel, Field
import os


def _env(name: str, default: str | None = None):
    return Field(default_factory=lambda: os.getenv(name, default))


def _timeout() -> float | None:
    raw = os.getenv("INFOBURST_STORE_TIMEOUT")
    return float(raw) if raw else None


class Settings(BaseModel):
    # Store backend: "supabase" (remote REST), "sqlite" (local persistent), or "memory" (in-process demo backend)
    store_backend: str = _env("INFOBURST_STORE", "sqlite")

    supabase_url: str | None = _env("SUPABASE_URL")
    supabase_key: str | None = _env("SUPABASE_KEY")

    sqlite_path: str = _env("INFOBURST_SQLITE_PATH", "./infoburst.sqlite")
    votes_path: str = _env("INFOBURST_VOTES_PATH", "./infoburst_votes.json")

    list_limit: int = Field(default_factory=lambda: int(os.getenv("INFOBURST_LIST_LIMIT", "5000")))

    # None means wait for the store indefinitely.
    store_timeout_s: float | None = Field(default_factory=_timeout)

    log_level: str = _env("INFOBURST_LOG_LEVEL", "INFO")
    log_json: bool = Field(default_factory=lambda: os.getenv("INFOBURST_LOG_JSON", "0") == "1")
