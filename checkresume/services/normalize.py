from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any

from checkresume.schemas.analysis import (
    SECTION_NAMES,
    EstimatedReading,
    FormattingAnalysis,
    IndustryBenchmark,
    KeywordAnalysis,
    Recommendation,
    ResumeAnalysisResult,
    SectionAnalysis,
    SectionFeedback,
    SkillsAnalysis,
)
from checkresume.services.heuristic import normalize_job_role

VALID_PRIORITIES: set[str] = {"high", "medium", "low"}
VALID_DIFFICULTIES: set[str] = {"easy", "medium", "hard"}
MAX_READING_SECONDS = 600.0

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_SECTION_KEYS = {
    "contact_info": "contactInfo",
    "summary": "summary",
    "experience": "experience",
    "education": "education",
    "skills": "skills",
}


@dataclass(frozen=True)
class ParsedReply:
    ok: bool
    result: ResumeAnalysisResult | None = None
    reason: str | None = None


def _safe_str(value: Any, max_len: int = 600) -> str:
    if not isinstance(value, str):
        return ""
    text = re.sub(r"\s+", " ", value).strip()
    if len(text) > max_len:
        text = text[:max_len].rstrip()
    return text


def _safe_str_list(value: Any, max_items: int, max_len: int = 240) -> list[str]:
    if not isinstance(value, list):
        return []
    output: list[str] = []
    for item in value:
        text = _safe_str(item, max_len=max_len)
        if text:
            output.append(text)
        if len(output) >= max_items:
            break
    return output


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for value in values:
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        output.append(value)
    return output


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return False
    try:
        return math.isfinite(float(value))
    except (ValueError, OverflowError):
        return False


def _clamp_int(value: Any, default: int, min_value: int = 0, max_value: int = 100) -> int:
    if not _is_number(value):
        return default
    parsed = int(round(float(value)))
    return max(min_value, min(max_value, parsed))


def _clamp_float(value: Any, default: float, min_value: float = 0.0, max_value: float = 100.0) -> float:
    if not _is_number(value):
        return default
    parsed = float(value)
    return max(min_value, min(max_value, parsed))


def _section(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _recommendations(value: Any) -> list[Recommendation]:
    if not isinstance(value, list):
        return []
    output: list[Recommendation] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        description = _safe_str(item.get("description"))
        if not description:
            continue
        priority = _safe_str(item.get("priority"), max_len=16).lower()
        output.append(
            Recommendation(
                category=_safe_str(item.get("category"), max_len=80) or "General",
                priority=priority if priority in VALID_PRIORITIES else "medium",  # type: ignore[arg-type]
                description=description,
                impact=_clamp_int(item.get("impact"), 50),
            )
        )
        if len(output) >= 12:
            break
    return output


def _skills(value: Any) -> SkillsAnalysis:
    data = _section(value)
    present = _dedupe(_safe_str_list(data.get("presentSkills"), max_items=60, max_len=80))
    present_keys = {skill.lower() for skill in present}
    missing = [
        skill
        for skill in _dedupe(_safe_str_list(data.get("missingSkills"), max_items=60, max_len=80))
        if skill.lower() not in present_keys
    ]
    return SkillsAnalysis(
        present_skills=present,
        missing_skills=missing,
        skills_match=_clamp_int(data.get("skillsMatch"), 0),
        industry_relevance=_clamp_int(data.get("industryRelevance"), 0),
    )


def _sections(value: Any, fallback_score: int) -> SectionAnalysis:
    data = _section(value)
    sections: dict[str, SectionFeedback] = {}
    for name in SECTION_NAMES:
        item = _section(data.get(_SECTION_KEYS[name]))
        sections[name] = SectionFeedback(
            score=_clamp_int(item.get("score"), fallback_score),
            feedback=_safe_str(item.get("feedback")),
        )
    return SectionAnalysis(**sections)


def coerce_analysis(payload: dict[str, Any], job_role: str | None = None) -> ResumeAnalysisResult:
    """Build a complete result from a provider payload, defaulting anything missing or out of range.

    The caller must have checked that both core scores are numeric.
    """
    role = normalize_job_role(job_role)
    overall_score = _clamp_int(payload.get("overallScore"), 0)

    keywords = _section(payload.get("keywordAnalysis"))
    formatting = _section(payload.get("formatting"))
    benchmark = _section(payload.get("industryBenchmark"))
    reading = _section(payload.get("estimatedReading"))
    difficulty = _safe_str(reading.get("difficulty"), max_len=16).lower()

    return ResumeAnalysisResult(
        ats_score=_clamp_int(payload.get("atsScore"), 0),
        overall_score=overall_score,
        strengths=_safe_str_list(payload.get("strengths"), max_items=20),
        weaknesses=_safe_str_list(payload.get("weaknesses"), max_items=20),
        recommendations=_recommendations(payload.get("recommendations")),
        skills_analysis=_skills(payload.get("skillsAnalysis")),
        section_analysis=_sections(payload.get("sectionAnalysis"), overall_score),
        keyword_analysis=KeywordAnalysis(
            density=_clamp_int(keywords.get("density"), 0),
            relevant_keywords=_dedupe(_safe_str_list(keywords.get("relevantKeywords"), max_items=60, max_len=80)),
            missing_keywords=_dedupe(_safe_str_list(keywords.get("missingKeywords"), max_items=60, max_len=80)),
        ),
        formatting=FormattingAnalysis(
            score=_clamp_int(formatting.get("score"), overall_score),
            issues=_safe_str_list(formatting.get("issues"), max_items=20),
            suggestions=_safe_str_list(formatting.get("suggestions"), max_items=20),
        ),
        industry_benchmark=IndustryBenchmark(
            industry=_safe_str(benchmark.get("industry"), max_len=120) or role,
            average_score=_clamp_float(benchmark.get("averageScore"), 0.0),
            percentile=_clamp_float(benchmark.get("percentile"), 0.0),
        ),
        estimated_reading=EstimatedReading(
            time_seconds=_clamp_float(reading.get("timeSeconds"), 0.0, 0.0, MAX_READING_SECONDS),
            difficulty=difficulty if difficulty in VALID_DIFFICULTIES else "medium",  # type: ignore[arg-type]
        ),
    )


def _strip_code_fence(raw: str) -> str:
    return _FENCE_RE.sub("", raw.strip()).strip()


def parse_analysis_reply(raw: str, job_role: str | None = None) -> ParsedReply:
    text = _strip_code_fence(raw or "")
    if not text:
        return ParsedReply(ok=False, reason="empty_reply")
    try:
        payload = json.loads(text)
    except (ValueError, RecursionError):
        return ParsedReply(ok=False, reason="invalid_json")
    if not isinstance(payload, dict):
        return ParsedReply(ok=False, reason="not_an_object")
    if not _is_number(payload.get("atsScore")) or not _is_number(payload.get("overallScore")):
        return ParsedReply(ok=False, reason="missing_scores")
    return ParsedReply(ok=True, result=coerce_analysis(payload, job_role))
