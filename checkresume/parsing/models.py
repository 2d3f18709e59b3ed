from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class DocumentMetadata(BaseModel):
    title: str | None = None
    author: str | None = None
    creator: str | None = None
    producer: str | None = None


class ExtractedResume(BaseModel):
    doc_id: str
    source_type: str
    text: str
    pages: int | None = None
    word_count: int = 0
    character_count: int = 0
    metadata: DocumentMetadata | None = None
    sections: dict[str, str] = Field(default_factory=dict)
    parsing_warnings: list[str] = Field(default_factory=list)

    @field_validator("source_type")
    @classmethod
    def _validate_source_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"pdf", "docx", "txt"}:
            raise ValueError("source_type must be one of: pdf, docx, txt")
        return normalized


class ContentValidation(BaseModel):
    is_valid: bool
    issues: list[str] = Field(default_factory=list)
