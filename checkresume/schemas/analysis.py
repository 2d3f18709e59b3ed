from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Priority = Literal["high", "medium", "low"]
Difficulty = Literal["easy", "medium", "hard"]

SECTION_NAMES: tuple[str, ...] = ("contact_info", "summary", "experience", "education", "skills")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Recommendation(CamelModel):
    category: str
    priority: Priority
    description: str
    impact: int = Field(ge=0, le=100)


class SkillsAnalysis(CamelModel):
    present_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    skills_match: int = Field(ge=0, le=100)
    industry_relevance: int = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _validate_disjoint(self) -> "SkillsAnalysis":
        present = {skill.lower() for skill in self.present_skills}
        overlap = [skill for skill in self.missing_skills if skill.lower() in present]
        if overlap:
            raise ValueError(f"skills listed as both present and missing: {overlap}")
        return self


class SectionFeedback(CamelModel):
    score: int = Field(ge=0, le=100)
    feedback: str = ""


class SectionAnalysis(CamelModel):
    contact_info: SectionFeedback
    summary: SectionFeedback
    experience: SectionFeedback
    education: SectionFeedback
    skills: SectionFeedback


class KeywordAnalysis(CamelModel):
    density: int = Field(ge=0, le=100)
    relevant_keywords: list[str] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)


class FormattingAnalysis(CamelModel):
    score: int = Field(ge=0, le=100)
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class IndustryBenchmark(CamelModel):
    industry: str
    average_score: float = Field(ge=0.0, le=100.0)
    percentile: float = Field(ge=0.0, le=100.0)


class EstimatedReading(CamelModel):
    time_seconds: float = Field(ge=0.0, le=600.0)
    difficulty: Difficulty


class ResumeAnalysisResult(CamelModel):
    ats_score: int = Field(ge=0, le=100)
    overall_score: int = Field(ge=0, le=100)
    strengths: list[str]
    weaknesses: list[str]
    recommendations: list[Recommendation]
    skills_analysis: SkillsAnalysis
    section_analysis: SectionAnalysis
    keyword_analysis: KeywordAnalysis
    formatting: FormattingAnalysis
    industry_benchmark: IndustryBenchmark
    estimated_reading: EstimatedReading

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
