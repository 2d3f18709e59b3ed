from checkresume.ai.config import AnalyzerConfig
from checkresume.ai.types import AIClient

from checkresume.ai.providers.openai_provider import OpenAIProvider
from checkresume.ai.providers.groq_provider import GroqProvider


def build_providers(cfg: AnalyzerConfig) -> tuple[AIClient | None, AIClient | None]:
    primary: AIClient | None = None
    secondary: AIClient | None = None

    if cfg.has_primary:
        primary = OpenAIProvider(api_key=cfg.primary_provider_key or "", timeout_s=cfg.timeout_s)

    if cfg.has_secondary:
        secondary = GroqProvider(api_key=cfg.secondary_provider_key or "", timeout_s=cfg.timeout_s)

    return primary, secondary
