from __future__ import annotations

from dataclasses import dataclass

from checkresume.core.config import settings


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def _clean_key(value: str | None) -> str | None:
    key = (value or "").strip()
    if not key or _looks_like_placeholder(key):
        return None
    return key


@dataclass(frozen=True)
class AnalyzerConfig:
    primary_provider_key: str | None = None
    secondary_provider_key: str | None = None
    model: str = "gpt-4o-mini"
    secondary_model: str = "llama-3.3-70b-versatile"
    max_tokens: int = 4000
    temperature: float = 0.3
    timeout_s: float = 45.0

    @property
    def has_primary(self) -> bool:
        return _clean_key(self.primary_provider_key) is not None

    @property
    def has_secondary(self) -> bool:
        return _clean_key(self.secondary_provider_key) is not None


def load_analyzer_config() -> AnalyzerConfig:
    return AnalyzerConfig(
        primary_provider_key=_clean_key(settings.openai_api_key),
        secondary_provider_key=_clean_key(settings.groq_api_key),
        model=settings.openai_model.strip(),
        secondary_model=settings.groq_model.strip(),
        max_tokens=max(256, settings.ai_max_tokens),
        temperature=settings.ai_temperature,
        timeout_s=max(1.0, settings.ai_timeout_s),
    )
