"""Resume analysis synthesizer.

Tries the primary AI provider, then the secondary one, then the deterministic
heuristic, stopping at the first tier that yields a usable result. Attempts
are strictly sequential; each provider call runs under its own deadline so a
hung provider cannot starve the tiers after it.

A reply that arrives but is not a parseable analysis skips the remaining
providers and goes straight to the heuristic.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Literal

from checkresume.ai.config import AnalyzerConfig, load_analyzer_config
from checkresume.ai.factory import build_providers
from checkresume.ai.prompts import SYSTEM_PROMPT, build_analysis_prompt
from checkresume.ai.types import AIClient, ProviderError
from checkresume.core.errors import ExternalServiceError, ValidationError
from checkresume.schemas.analysis import ResumeAnalysisResult
from checkresume.services.heuristic import generate_fallback_analysis, normalize_job_role
from checkresume.services.normalize import parse_analysis_reply

logger = logging.getLogger(__name__)

AnalysisSource = Literal["primary", "secondary", "heuristic"]

_RAW_LOG_MAX_CHARS = 500
DEFAULT_ANALYSIS_TYPE = "comprehensive"


def normalize_analysis_type(analysis_type: str | None) -> str:
    return (analysis_type or "").strip() or DEFAULT_ANALYSIS_TYPE


class _MalformedReply(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ResumeAnalyzer:
    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        *,
        primary: AIClient | None = None,
        secondary: AIClient | None = None,
    ):
        self._config = config or load_analyzer_config()
        if primary is None and secondary is None:
            primary, secondary = build_providers(self._config)
        self._primary = primary
        self._secondary = secondary

    @property
    def config(self) -> AnalyzerConfig:
        return self._config

    async def analyze(
        self,
        resume_text: str,
        job_role: str | None = "general",
        analysis_type: str = "comprehensive",
    ) -> ResumeAnalysisResult:
        result, _ = await self.analyze_with_source(resume_text, job_role, analysis_type)
        return result

    async def analyze_with_source(
        self,
        resume_text: str,
        job_role: str | None = "general",
        analysis_type: str = "comprehensive",
    ) -> tuple[ResumeAnalysisResult, AnalysisSource]:
        if not resume_text or not resume_text.strip():
            raise ValidationError("Resume text is required")

        role = normalize_job_role(job_role)
        kind = normalize_analysis_type(analysis_type)
        logger.info("resume_analysis_started job_role=%s analysis_type=%s", role, kind)

        prompt = build_analysis_prompt(resume_text, role, kind)
        tiers: list[tuple[AnalysisSource, AIClient | None, str]] = [
            ("primary", self._primary, self._config.model),
            ("secondary", self._secondary, self._config.secondary_model),
        ]

        for source, client, model in tiers:
            if client is None:
                continue
            try:
                result = await self._attempt(client, prompt, model, role)
            except ProviderError as exc:
                logger.warning("resume_analysis_provider_failed tier=%s provider=%s: %s", source, client.name, exc)
                continue
            except asyncio.TimeoutError:
                logger.warning(
                    "resume_analysis_provider_timeout tier=%s provider=%s timeout_s=%s",
                    source,
                    client.name,
                    self._config.timeout_s,
                )
                continue
            except _MalformedReply as exc:
                logger.warning("resume_analysis_malformed_reply tier=%s provider=%s reason=%s", source, client.name, exc.reason)
                break
            except Exception as exc:
                logger.exception("resume_analysis_unexpected_error tier=%s provider=%s", source, client.name)
                raise ExternalServiceError(
                    "Resume analysis service is temporarily unavailable",
                    service="AI_SERVICE",
                ) from exc

            logger.info("resume_analysis_completed tier=%s provider=%s", source, client.name)
            return result, source

        logger.info("resume_analysis_completed tier=heuristic")
        return generate_fallback_analysis(resume_text, role), "heuristic"

    async def _attempt(self, client: AIClient, prompt: str, model: str, role: str) -> ResumeAnalysisResult:
        started = time.perf_counter()
        raw = await asyncio.wait_for(
            client.complete(
                SYSTEM_PROMPT,
                prompt,
                model=model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
            ),
            timeout=self._config.timeout_s,
        )
        logger.debug(
            "resume_analysis_reply provider=%s latency_ms=%s",
            client.name,
            int((time.perf_counter() - started) * 1000),
        )
        parsed = parse_analysis_reply(raw, role)
        if not parsed.ok or parsed.result is None:
            logger.warning(
                "resume_analysis_unparsable_reply provider=%s raw=%r",
                client.name,
                (raw or "")[:_RAW_LOG_MAX_CHARS],
            )
            raise _MalformedReply(parsed.reason or "invalid_reply")
        return parsed.result


_default_analyzer: ResumeAnalyzer | None = None


def get_analyzer() -> ResumeAnalyzer:
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = ResumeAnalyzer(load_analyzer_config())
    return _default_analyzer
