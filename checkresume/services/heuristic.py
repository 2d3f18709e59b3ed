"""Deterministic resume analysis used when no AI provider produces a usable reply.

Scores are capped below what an AI-verified analysis can report (ATS 85,
overall 80).
"""

from __future__ import annotations

import re

from checkresume.schemas.analysis import (
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

DEFAULT_JOB_ROLE = "general"

HEURISTIC_ATS_CEILING = 85
HEURISTIC_OVERALL_CEILING = 80

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
EXPERIENCE_RE = re.compile(r"experience|work|job|position|role", re.IGNORECASE)
EDUCATION_RE = re.compile(r"education|degree|university|college|school", re.IGNORECASE)
SKILLS_RE = re.compile(r"skills|proficient|knowledge|familiar", re.IGNORECASE)


def normalize_job_role(job_role: str | None) -> str:
    role = re.sub(r"\s+", " ", job_role or "").strip()
    return role or DEFAULT_JOB_ROLE


def count_words(text: str) -> int:
    return len(text.split())


def readability_seconds(word_count: int) -> float:
    return max(30.0, min(120.0, word_count * 0.2))


def generate_fallback_analysis(resume_text: str, job_role: str | None = None) -> ResumeAnalysisResult:
    role = normalize_job_role(job_role)
    word_count = count_words(resume_text)
    has_email = bool(EMAIL_RE.search(resume_text))
    has_phone = bool(PHONE_RE.search(resume_text))
    has_experience = bool(EXPERIENCE_RE.search(resume_text))
    has_education = bool(EDUCATION_RE.search(resume_text))
    has_skills = bool(SKILLS_RE.search(resume_text))

    ats_score = min(
        HEURISTIC_ATS_CEILING,
        60
        + (5 if has_email else 0)
        + (5 if has_phone else 0)
        + (10 if has_experience else 0)
        + (5 if has_education else 0),
    )
    overall_score = min(
        HEURISTIC_OVERALL_CEILING,
        50
        + (15 if word_count > 200 else 0)
        + (10 if has_skills else 0)
        + (15 if has_experience else 0),
    )

    strengths: list[str] = []
    if has_email and has_phone:
        strengths.append("Complete contact information")
    if has_experience:
        strengths.append("Work experience included")
    if has_education:
        strengths.append("Educational background provided")
    if has_skills:
        strengths.append("Skills section present")
    if word_count > 300:
        strengths.append("Comprehensive content")

    weaknesses: list[str] = []
    if not has_email:
        weaknesses.append("Missing email address")
    if not has_phone:
        weaknesses.append("Missing phone number")
    if not has_experience:
        weaknesses.append("Limited work experience details")
    if not has_education:
        weaknesses.append("Education background not clearly listed")
    if not has_skills:
        weaknesses.append("Skills section missing or unclear")
    if word_count < 200:
        weaknesses.append("Resume too brief")

    return ResumeAnalysisResult(
        ats_score=ats_score,
        overall_score=overall_score,
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=[
            Recommendation(
                category="Contact Information",
                priority="high",
                description="Ensure all contact details are clearly visible",
                impact=90,
            ),
            Recommendation(
                category="Keywords",
                priority="high",
                description=f"Add relevant keywords for {role} position",
                impact=85,
            ),
        ],
        skills_analysis=SkillsAnalysis(
            present_skills=[],
            missing_skills=[f"Key {role} skills", "Technical skills", "Soft skills"],
            skills_match=60,
            industry_relevance=70,
        ),
        section_analysis=SectionAnalysis(
            contact_info=SectionFeedback(
                score=90 if has_email and has_phone else 60,
                feedback="Basic contact information analysis",
            ),
            summary=SectionFeedback(score=70, feedback="Professional summary evaluation needed"),
            experience=SectionFeedback(score=75 if has_experience else 50, feedback="Experience section analysis"),
            education=SectionFeedback(score=80 if has_education else 60, feedback="Education section review"),
            skills=SectionFeedback(score=70 if has_skills else 50, feedback="Skills section assessment"),
        ),
        keyword_analysis=KeywordAnalysis(
            density=65,
            relevant_keywords=[],
            missing_keywords=[f"{role} keywords", "Industry terms"],
        ),
        formatting=FormattingAnalysis(
            score=75,
            issues=["Limited formatting analysis available"],
            suggestions=["Use consistent formatting", "Ensure ATS compatibility"],
        ),
        industry_benchmark=IndustryBenchmark(industry=role, average_score=72, percentile=65),
        estimated_reading=EstimatedReading(
            time_seconds=readability_seconds(word_count),
            difficulty="medium" if word_count > 400 else "easy",
        ),
    )
