import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_MODEL_NAME = "gemini-2.5-flash"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = (os.getenv(name) or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_origins(raw: str) -> Tuple[str, ...]:
    return tuple(origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    model_name: str = DEFAULT_MODEL_NAME
    api_key: str = ""
    project_id: str = ""
    location: str = "global"
    max_retries: int = 3
    combined_call: bool = False
    resolve_day_night: bool = True
    use_mock: bool = False
    allowed_origins: Tuple[str, ...] = field(default_factory=lambda: ("http://localhost:5173",))
    rate_limit_window_seconds: int = 900
    rate_limit_max_requests: int = 100
    trust_proxy: bool = False
    log_level: str = "INFO"
    port: int = 8080

    @property
    def allow_any_origin(self) -> bool:
        return "*" in self.allowed_origins

    def is_origin_allowed(self, origin: Optional[str]) -> bool:
        if not origin:
            return False
        if self.allow_any_origin:
            return True
        return origin.rstrip("/") in self.allowed_origins


def load_settings() -> Settings:
    """Read settings from the environment (and a local .env file)."""
    load_dotenv()
    return Settings(
        model_name=os.getenv("GEMINI_MODEL", DEFAULT_MODEL_NAME),
        api_key=(os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip(),
        project_id=os.getenv("GCP_PROJECT_ID", ""),
        location=os.getenv("GCP_GLOBAL_LOCATION") or os.getenv("GCP_LOCATION") or "global",
        max_retries=max(1, _env_int("GEMINI_MAX_RETRIES", 3)),
        combined_call=_env_bool("GEMINI_COMBINED_CALL"),
        resolve_day_night=_env_bool("RESOLVE_DAY_NIGHT", True),
        use_mock=_env_bool("USE_MOCK_GEMINI"),
        allowed_origins=_parse_origins(os.getenv("ALLOWED_ORIGINS", "http://localhost:5173")),
        rate_limit_window_seconds=max(1, _env_int("RATE_LIMIT_WINDOW_SECONDS", 900)),
        rate_limit_max_requests=max(1, _env_int("RATE_LIMIT_MAX_REQUESTS", 100)),
        trust_proxy=_env_bool("TRUST_PROXY"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=_env_int("PORT", 8080),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
