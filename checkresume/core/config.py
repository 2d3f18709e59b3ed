from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    environment: str
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_credentials: bool
    analysis_db_path: str
    run_log_retention_days: int
    max_upload_bytes: int
    allowed_upload_types: tuple[str, ...]
    min_resume_chars: int
    openai_api_key: str | None
    openai_model: str
    groq_api_key: str | None
    groq_model: str
    ai_max_tokens: int
    ai_temperature: float
    ai_timeout_s: float


settings = Settings(
    environment=(_get_env("APP_ENV", "development") or "development").strip().lower(),
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://localhost:4173",
            "https://checkresumeai.com",
            "https://checkresumeai.vercel.app",
        ],
    ),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", True),
    analysis_db_path=_get_env("ANALYSIS_DB_PATH", "data/checkresume.db") or "data/checkresume.db",
    run_log_retention_days=_get_env_int("RUN_LOG_RETENTION_DAYS", 90),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
    allowed_upload_types=_get_env_list("ALLOWED_FILE_TYPES", ["pdf", "docx", "txt"]),
    min_resume_chars=_get_env_int("MIN_RESUME_CHARS", 100),
    openai_api_key=_get_env("OPENAI_API_KEY"),
    openai_model=_get_env("OPENAI_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
    groq_api_key=_get_env("GROQ_API_KEY"),
    groq_model=_get_env("GROQ_MODEL", "llama-3.3-70b-versatile") or "llama-3.3-70b-versatile",
    ai_max_tokens=_get_env_int("AI_MAX_TOKENS", 4000),
    ai_temperature=_get_env_float("AI_TEMPERATURE", 0.3),
    ai_timeout_s=_get_env_float("AI_TIMEOUT_S", 45.0),
)

if settings.max_upload_bytes <= 0:
    raise RuntimeError("MAX_UPLOAD_BYTES must be a positive integer.")
