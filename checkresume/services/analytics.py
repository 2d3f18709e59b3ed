from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any

from checkresume.core.errors import NotFoundError, PersistenceError, ValidationError
from checkresume.schemas.analysis import ResumeAnalysisResult
from checkresume.storage import db

logger = logging.getLogger(__name__)

READABILITY_BY_DIFFICULTY = {"easy": 90, "medium": 70, "hard": 50}
TREND_WINDOW = 30
RECENT_ANALYSES = 10
MILESTONE_ANALYSES = 5

_EMPTY_ANALYTICS: dict[str, Any] = {
    "ats_score": 0,
    "previous_ats_score": 0,
    "overall_score": 0,
    "skills_matched": 0,
    "total_skills": 0,
    "readability_score": 0,
    "keyword_density": 0,
    "total_analyses": 0,
}


@dataclass(frozen=True)
class AnalysisData:
    resume_text: str
    job_role: str
    analysis_type: str
    result: ResumeAnalysisResult
    file_name: str
    file_size: int


def readability_score(result: ResumeAnalysisResult) -> int:
    return READABILITY_BY_DIFFICULTY.get(result.estimated_reading.difficulty, 50)


def save_analysis(user_id: str, data: AnalysisData) -> dict[str, Any]:
    try:
        record = db.insert_analysis(
            user_id=user_id,
            job_role=data.job_role,
            analysis_type=data.analysis_type,
            file_name=data.file_name,
            file_size=data.file_size,
            resume_text=data.resume_text,
            ats_score=data.result.ats_score,
            overall_score=data.result.overall_score,
            result=data.result.to_wire(),
        )
    except sqlite3.Error as exc:
        logger.error("analysis_save_failed user_id=%s: %s", user_id, exc)
        raise PersistenceError("Failed to save analysis to database") from exc

    update_user_analytics(user_id, data.result)
    logger.info("analysis_saved id=%s user_id=%s", record["id"], user_id)
    return record


def update_user_analytics(user_id: str, result: ResumeAnalysisResult) -> None:
    skills = result.skills_analysis
    readability = readability_score(result)
    try:
        db.upsert_user_analytics(
            user_id=user_id,
            ats_score=result.ats_score,
            overall_score=result.overall_score,
            skills_matched=len(skills.present_skills),
            total_skills=len(skills.present_skills) + len(skills.missing_skills),
            readability_score=readability,
            keyword_density=result.keyword_analysis.density,
        )
    except sqlite3.Error:
        logger.exception("user_analytics_update_failed user_id=%s", user_id)
        return

    try:
        db.insert_trend(
            user_id=user_id,
            ats_score=result.ats_score,
            overall_score=result.overall_score,
            readability_score=readability,
            keyword_density=result.keyword_analysis.density,
            skills_match=skills.skills_match,
        )
    except sqlite3.Error:
        logger.exception("analytics_trend_insert_failed user_id=%s", user_id)


def get_user_dashboard(user_id: str) -> dict[str, Any]:
    try:
        analytics = db.get_user_analytics(user_id)
    except sqlite3.Error as exc:
        logger.error("user_analytics_fetch_failed user_id=%s: %s", user_id, exc)
        raise PersistenceError("Failed to fetch analytics") from exc

    try:
        trends = db.list_trends(user_id, limit=TREND_WINDOW)
    except sqlite3.Error as exc:
        logger.error("analytics_trends_fetch_failed user_id=%s: %s", user_id, exc)
        trends = []

    try:
        recent = db.list_recent_analyses(user_id, limit=RECENT_ANALYSES)
    except sqlite3.Error as exc:
        logger.error("recent_analyses_fetch_failed user_id=%s: %s", user_id, exc)
        recent = []

    return {
        "analytics": analytics or dict(_EMPTY_ANALYTICS),
        "trends": trends,
        "recent_analyses": recent,
    }


def _mean(values: list[int]) -> float:
    return sum(values) / len(values)


def generate_insights(user_id: str) -> list[dict[str, str]]:
    try:
        dashboard = get_user_dashboard(user_id)
    except PersistenceError:
        logger.exception("analytics_insights_failed user_id=%s", user_id)
        return []

    analytics = dashboard["analytics"]
    trends = dashboard["trends"]
    insights: list[dict[str, str]] = []

    current = float(analytics.get("ats_score") or 0)
    previous = float(analytics.get("previous_ats_score") or 0)
    if current > previous:
        insights.append(
            {
                "type": "improvement",
                "category": "ATS Score",
                "message": f"Your ATS score improved by {current - previous:.1f} points!",
                "impact": "positive",
            }
        )
    elif current < previous:
        insights.append(
            {
                "type": "decline",
                "category": "ATS Score",
                "message": f"Your ATS score decreased by {previous - current:.1f} points.",
                "impact": "negative",
            }
        )

    if len(trends) >= 3:
        recent = [int(t["ats_score"]) for t in trends[:3]]
        older = [int(t["ats_score"]) for t in trends[3:6]]
        if older and _mean(recent) > _mean(older) + 5:
            insights.append(
                {
                    "type": "trend",
                    "category": "Progress",
                    "message": "You're on an upward trend! Keep up the great work.",
                    "impact": "positive",
                }
            )

    total = int(analytics.get("total_analyses") or 0)
    if total >= MILESTONE_ANALYSES:
        insights.append(
            {
                "type": "milestone",
                "category": "Usage",
                "message": f"You've completed {total} resume analyses. You're becoming a pro!",
                "impact": "neutral",
            }
        )

    return insights


def compare_analyses(user_id: str, first_id: str, second_id: str) -> dict[str, Any]:
    if not first_id or not second_id:
        raise ValidationError("Both analysis IDs are required")
    if first_id == second_id:
        raise ValidationError("Choose two different analyses to compare")

    try:
        records = {record["id"]: record for record in db.get_analyses_by_ids([first_id, second_id], user_id)}
    except sqlite3.Error as exc:
        logger.error("analysis_compare_fetch_failed user_id=%s: %s", user_id, exc)
        raise PersistenceError("Failed to fetch analyses") from exc

    if first_id not in records or second_id not in records:
        raise NotFoundError("One or both analyses not found or access denied")

    first, second = records[first_id], records[second_id]
    change = int(second["ats_score"]) - int(first["ats_score"])
    base = int(first["ats_score"])
    percentage = round(change / base * 100, 2) if base else 0.0

    def _summary(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": record["id"],
            "job_role": record["job_role"],
            "ats_score": record["ats_score"],
            "overall_score": record["overall_score"],
            "created_at": record["created_at"],
        }

    return {
        "analysis1": _summary(first),
        "analysis2": _summary(second),
        "improvements": {
            "ats_score_change": change,
            "overall_score_change": int(second["overall_score"]) - int(first["overall_score"]),
            "percentage": percentage,
        },
    }


def log_analysis_run(*, run_id: str, source: str, model: str | None, latency_ms: int) -> None:
    try:
        db.log_ai_analysis_run(
            run_id=run_id,
            source=source,
            model=model,
            status="success",
            latency_ms=latency_ms,
        )
    except sqlite3.Error:  # pragma: no cover
        logger.debug("ai_run_logging_failed", exc_info=True)
