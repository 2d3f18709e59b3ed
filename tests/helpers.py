import asyncio
import json
from typing import Any

from checkresume.schemas.analysis import ResumeAnalysisResult

SCENARIO_A_TEXT = (
    "Jane Roe\n"
    "jane.roe@example.com | 555-123-4567\n"
    "Summary\n"
    "Backend developer with eight years of experience building payment APIs for online retailers."
)


def long_resume_text(words: int = 500) -> str:
    head = "jane@example.com 555-123-4567 experience education skills"
    filler = " ".join(["lorem"] * (words - len(head.split())))
    return f"{head} {filler}"


def ai_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "atsScore": 92,
        "overallScore": 88,
        "strengths": ["Quantified achievements", "Clear structure"],
        "weaknesses": ["Summary is generic"],
        "recommendations": [
            {
                "category": "Summary",
                "priority": "high",
                "description": "Tailor the summary to backend roles",
                "impact": 80,
            }
        ],
        "skillsAnalysis": {
            "presentSkills": ["Python", "SQL"],
            "missingSkills": ["Docker", "Kubernetes"],
            "skillsMatch": 75,
            "industryRelevance": 82,
        },
        "sectionAnalysis": {
            "contactInfo": {"score": 95, "feedback": "Complete"},
            "summary": {"score": 60, "feedback": "Generic"},
            "experience": {"score": 90, "feedback": "Strong impact"},
            "education": {"score": 70, "feedback": "Fine"},
            "skills": {"score": 85, "feedback": "Relevant"},
        },
        "keywordAnalysis": {
            "density": 68,
            "relevantKeywords": ["APIs", "payments"],
            "missingKeywords": ["microservices"],
        },
        "formatting": {
            "score": 80,
            "issues": ["Inconsistent dates"],
            "suggestions": ["Use one date format"],
        },
        "industryBenchmark": {"industry": "Software", "averageScore": 71.5, "percentile": 84},
        "estimatedReading": {"timeSeconds": 45, "difficulty": "easy"},
    }
    payload.update(overrides)
    return payload


class FakeProvider:
    def __init__(
        self,
        name: str,
        reply: str | None = None,
        error: BaseException | None = None,
        delay: float = 0.0,
    ):
        self.name = name
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, Any]] = []

    @classmethod
    def replying(cls, name: str, payload: dict[str, Any]) -> "FakeProvider":
        return cls(name, reply=json.dumps(payload))

    async def complete(self, system_prompt, user_prompt, *, model, max_tokens, temperature):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "model": model,
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply or ""


def out_of_range_fields(result: ResumeAnalysisResult) -> list[str]:
    """Return the names of numeric fields that fall outside their declared range."""
    checks = {
        "ats_score": result.ats_score,
        "overall_score": result.overall_score,
        "skills_match": result.skills_analysis.skills_match,
        "industry_relevance": result.skills_analysis.industry_relevance,
        "keyword_density": result.keyword_analysis.density,
        "formatting": result.formatting.score,
        "average_score": result.industry_benchmark.average_score,
        "percentile": result.industry_benchmark.percentile,
    }
    for name in ("contact_info", "summary", "experience", "education", "skills"):
        checks[f"section.{name}"] = getattr(result.section_analysis, name).score
    for idx, rec in enumerate(result.recommendations):
        checks[f"recommendation.{idx}"] = rec.impact
    bad = [name for name, value in checks.items() if not 0 <= value <= 100]
    if not 0 <= result.estimated_reading.time_seconds <= 600:
        bad.append("time_seconds")
    return bad
