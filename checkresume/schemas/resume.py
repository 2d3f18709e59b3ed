from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from checkresume.schemas.analysis import ResumeAnalysisResult


class AnalyzeTextRequest(BaseModel):
    resume_text: str = Field(default="", max_length=50000)
    job_role: str | None = Field(default=None, max_length=120)
    analysis_type: str = Field(default="comprehensive", max_length=40)


class ValidateTextRequest(BaseModel):
    resume_text: str = Field(default="", max_length=50000)


class CompareRequest(BaseModel):
    analysis_id_1: str = Field(min_length=1, max_length=64)
    analysis_id_2: str = Field(min_length=1, max_length=64)


class AnalysisResponse(BaseModel):
    message: str
    analysis_id: str
    result: ResumeAnalysisResult
    timestamp: datetime


class AnalysisSummary(BaseModel):
    id: str
    job_role: str
    analysis_type: str
    file_name: str
    ats_score: int
    overall_score: int
    created_at: str
    result: dict[str, Any] = Field(default_factory=dict)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class HistoryResponse(BaseModel):
    analyses: list[AnalysisSummary]
    pagination: Pagination


class AnalysisRecord(BaseModel):
    id: str
    user_id: str
    job_role: str
    analysis_type: str
    file_name: str
    file_size: int
    resume_text: str
    ats_score: int
    overall_score: int
    result: dict[str, Any]
    created_at: str
    updated_at: str


class DeleteResponse(BaseModel):
    message: str
    analysis_id: str


class Insight(BaseModel):
    type: Literal["improvement", "decline", "trend", "milestone"]
    category: str
    message: str
    impact: Literal["positive", "negative", "neutral"]
