from __future__ import annotations

from checkresume.ai.providers.openai_provider import OpenAIProvider

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
GROQ_MAX_TOKENS = 8000


class GroqProvider(OpenAIProvider):
    """Groq through its OpenAI-compatible endpoint."""

    name = "groq"

    def __init__(self, api_key: str, timeout_s: float = 45.0, max_retries: int = 1):
        super().__init__(
            api_key=api_key,
            base_url=GROQ_BASE_URL,
            timeout_s=timeout_s,
            max_retries=max_retries,
        )

    def _max_tokens(self, requested: int) -> int:
        return min(requested, GROQ_MAX_TOKENS)
