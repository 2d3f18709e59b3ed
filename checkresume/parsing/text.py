from __future__ import annotations

import re

from .models import ContentValidation

_SECTION_PATTERNS: dict[str, re.Pattern[str]] = {
    "contact": re.compile(r"(?:contact|personal)\s*(?:information|details|info)?", re.IGNORECASE),
    "summary": re.compile(r"summary|profile|objective|about", re.IGNORECASE),
    "experience": re.compile(r"experience|work|employment|career|professional", re.IGNORECASE),
    "education": re.compile(r"education|academic|qualification|degree", re.IGNORECASE),
    "skills": re.compile(r"skills|competencies|abilities|expertise|technical", re.IGNORECASE),
    "projects": re.compile(r"projects|portfolio|work samples", re.IGNORECASE),
    "certifications": re.compile(r"certifications?|certificates?|licenses?", re.IGNORECASE),
    "achievements": re.compile(r"achievements?|accomplishments?|awards?|honors?", re.IGNORECASE),
    "references": re.compile(r"references?|recommendations?", re.IGNORECASE),
}
_HEADER_MAX_CHARS = 50

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_RE = re.compile(r"\(?([0-9]{3})\)?[-. ]?([0-9]{3})[-. ]?([0-9]{4})")
_EXPERIENCE_RE = re.compile(r"experience|work|employment|job|position|role", re.IGNORECASE)
_EDUCATION_RE = re.compile(r"education|degree|university|college|school", re.IGNORECASE)
_SKILLS_RE = re.compile(r"skills|competencies|abilities", re.IGNORECASE)


def clean_resume_text(text: str) -> str:
    cleaned = re.sub(r"[^\w\s@.-]", " ", text)
    return re.sub(r"\s+", " ", cleaned).strip()


def extract_resume_sections(text: str) -> dict[str, str]:
    sections: dict[str, str] = {}
    current = "other"
    buffer: list[str] = []

    def flush() -> None:
        content = "\n".join(buffer).strip()
        if content:
            existing = sections.get(current)
            sections[current] = f"{existing}\n{content}" if existing else content

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        header = None
        if len(stripped) < _HEADER_MAX_CHARS:
            header = next(
                (name for name, pattern in _SECTION_PATTERNS.items() if pattern.search(stripped)),
                None,
            )
        if header is None:
            buffer.append(stripped)
            continue
        flush()
        current = header
        buffer = []

    flush()
    return sections


def validate_resume_content(text: str) -> ContentValidation:
    issues: list[str] = []

    if len(text) < 200:
        issues.append("Resume content is too short (minimum 200 characters required)")
    if not EMAIL_RE.search(text):
        issues.append("No email address found")
    if not PHONE_RE.search(text):
        issues.append("No phone number found")
    if not _EXPERIENCE_RE.search(text):
        issues.append("No work experience section found")
    if not _EDUCATION_RE.search(text):
        issues.append("No education section found")
    if not _SKILLS_RE.search(text):
        issues.append("No skills section found")

    word_count = len(text.split())
    if word_count < 150:
        issues.append("Resume is too brief (minimum 150 words recommended)")
    elif word_count > 1000:
        issues.append("Resume is too lengthy (maximum 1000 words recommended)")

    return ContentValidation(is_valid=not issues, issues=issues)
