import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile

from checkresume.core.config import settings
from checkresume.core.errors import NotFoundError, ValidationError
from checkresume.core.rate_limit import rate_limit
from checkresume.core.security import current_user_id
from checkresume.parsing.models import ContentValidation
from checkresume.parsing.parse import extract_text
from checkresume.parsing.text import validate_resume_content
from checkresume.schemas.resume import (
    AnalysisRecord,
    AnalysisResponse,
    AnalyzeTextRequest,
    CompareRequest,
    DeleteResponse,
    HistoryResponse,
    Pagination,
    ValidateTextRequest,
)
from checkresume.services import analytics as analytics_service
from checkresume.services.analyzer import ResumeAnalyzer, get_analyzer, normalize_analysis_type
from checkresume.services.heuristic import normalize_job_role
from checkresume.storage import db

logger = logging.getLogger(__name__)

router = APIRouter()

_UPLOAD_CHUNK_BYTES = 64 * 1024


def _require_min_length(text: str) -> None:
    if len(text.strip()) < settings.min_resume_chars:
        raise ValidationError(
            f"Resume text is required and must be at least {settings.min_resume_chars} characters long"
        )


async def _read_upload(file: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


async def _run_analysis(
    analyzer: ResumeAnalyzer,
    *,
    user_id: str,
    resume_text: str,
    job_role: str | None,
    analysis_type: str,
    file_name: str,
    file_size: int,
) -> AnalysisResponse:
    role = normalize_job_role(job_role)
    kind = normalize_analysis_type(analysis_type)
    started = time.perf_counter()
    result, source = await analyzer.analyze_with_source(resume_text, role, kind)
    model = {
        "primary": analyzer.config.model,
        "secondary": analyzer.config.secondary_model,
    }.get(source)
    analytics_service.log_analysis_run(
        run_id=uuid.uuid4().hex,
        source=source,
        model=model,
        latency_ms=int((time.perf_counter() - started) * 1000),
    )

    saved = analytics_service.save_analysis(
        user_id,
        analytics_service.AnalysisData(
            resume_text=resume_text,
            job_role=role,
            analysis_type=kind,
            result=result,
            file_name=file_name,
            file_size=file_size,
        ),
    )
    logger.info("resume_analysis_request_completed user_id=%s analysis_id=%s", user_id, saved["id"])
    return AnalysisResponse(
        message="Resume analysis completed successfully",
        analysis_id=saved["id"],
        result=result,
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/resume/analyze", response_model=AnalysisResponse)
@rate_limit()
async def analyze_resume_file(
    request: Request,
    resume: UploadFile = File(...),
    job_role: str | None = Form(default=None),
    analysis_type: str = Form(default="comprehensive"),
    user_id: str = Depends(current_user_id),
    analyzer: ResumeAnalyzer = Depends(get_analyzer),
):
    _ = request
    filename = resume.filename or "resume"
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in settings.allowed_upload_types:
        raise ValidationError(
            f"Unsupported file type '.{ext}'. Allowed: {', '.join(sorted(settings.allowed_upload_types))}."
        )

    content = await _read_upload(resume)
    if not content:
        raise ValidationError("Resume file is required")

    logger.info("resume_analysis_upload user_id=%s file_type=%s bytes=%s", user_id, ext, len(content))
    extracted = extract_text(filename, content)
    if len(extracted.text) < settings.min_resume_chars:
        raise ValidationError(
            "Resume content is too short or could not be extracted. Please ensure the file is readable."
        )

    return await _run_analysis(
        analyzer,
        user_id=user_id,
        resume_text=extracted.text,
        job_role=job_role,
        analysis_type=analysis_type,
        file_name=filename,
        file_size=len(content),
    )


@router.post("/resume/analyze-text", response_model=AnalysisResponse)
@rate_limit()
async def analyze_resume_text(
    request: Request,
    payload: AnalyzeTextRequest,
    user_id: str = Depends(current_user_id),
    analyzer: ResumeAnalyzer = Depends(get_analyzer),
):
    _ = request
    _require_min_length(payload.resume_text)
    return await _run_analysis(
        analyzer,
        user_id=user_id,
        resume_text=payload.resume_text,
        job_role=payload.job_role,
        analysis_type=payload.analysis_type,
        file_name="text-input",
        file_size=len(payload.resume_text),
    )


@router.post("/resume/validate", response_model=ContentValidation)
async def validate_resume_text(payload: ValidateTextRequest, _: str = Depends(current_user_id)):
    return validate_resume_content(payload.resume_text)


@router.get("/resume/history", response_model=HistoryResponse)
def analysis_history(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=50),
    job_role: str | None = Query(default=None, max_length=120),
    analysis_type: str | None = Query(default=None, max_length=40),
    user_id: str = Depends(current_user_id),
):
    analyses = db.list_analyses(user_id, job_role=job_role, analysis_type=analysis_type, page=page, limit=limit)
    total = db.count_analyses(user_id, job_role=job_role, analysis_type=analysis_type)
    return HistoryResponse(analyses=analyses, pagination=Pagination(page=page, limit=limit, total=total))


@router.post("/resume/compare")
def compare_resume_analyses(payload: CompareRequest, user_id: str = Depends(current_user_id)):
    comparison = analytics_service.compare_analyses(user_id, payload.analysis_id_1, payload.analysis_id_2)
    return {"message": "Resume comparison completed", "comparison": comparison}


@router.get("/resume/{analysis_id}", response_model=AnalysisRecord)
def get_resume_analysis(analysis_id: str, user_id: str = Depends(current_user_id)):
    record = db.get_analysis(analysis_id, user_id)
    if record is None:
        raise NotFoundError("Analysis not found or access denied")
    return record


@router.delete("/resume/{analysis_id}", response_model=DeleteResponse)
def delete_resume_analysis(analysis_id: str, user_id: str = Depends(current_user_id)):
    if not db.delete_analysis(analysis_id, user_id):
        raise NotFoundError("Analysis not found or access denied")
    logger.info("analysis_deleted id=%s user_id=%s", analysis_id, user_id)
    return DeleteResponse(message="Analysis deleted successfully", analysis_id=analysis_id)
