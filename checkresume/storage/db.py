from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from checkresume.core.config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_db_path() -> Path:
    return Path(settings.analysis_db_path)


def _connect() -> sqlite3.Connection:
    conn = sqlite3.connect(_get_db_path(), timeout=5)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA busy_timeout=5000;")
    return conn


def _row_to_dict(row: sqlite3.Row | None) -> dict[str, Any] | None:
    if row is None:
        return None
    return {key: row[key] for key in row.keys()}


def init_db() -> None:
    db_path = _get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with closing(_connect()) as conn, conn:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS resume_analyses (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                job_role TEXT NOT NULL,
                analysis_type TEXT NOT NULL,
                file_name TEXT NOT NULL,
                file_size INTEGER NOT NULL,
                resume_text TEXT NOT NULL,
                ats_score INTEGER NOT NULL,
                overall_score INTEGER NOT NULL,
                result_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_resume_analyses_user_created
            ON resume_analyses (user_id, created_at)
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_analytics (
                user_id TEXT PRIMARY KEY,
                ats_score INTEGER NOT NULL DEFAULT 0,
                previous_ats_score INTEGER NOT NULL DEFAULT 0,
                overall_score INTEGER NOT NULL DEFAULT 0,
                skills_matched INTEGER NOT NULL DEFAULT 0,
                total_skills INTEGER NOT NULL DEFAULT 0,
                readability_score INTEGER NOT NULL DEFAULT 0,
                keyword_density INTEGER NOT NULL DEFAULT 0,
                total_analyses INTEGER NOT NULL DEFAULT 0,
                last_analysis_date TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS analytics_trends (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                ats_score INTEGER NOT NULL,
                overall_score INTEGER NOT NULL,
                readability_score INTEGER NOT NULL,
                keyword_density INTEGER NOT NULL,
                skills_match INTEGER NOT NULL,
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_analytics_trends_user
            ON analytics_trends (user_id, id)
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS ai_analysis_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                run_id TEXT NOT NULL,
                source TEXT NOT NULL,
                model TEXT,
                status TEXT NOT NULL,
                latency_ms INTEGER
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_ai_analysis_runs_created_at
            ON ai_analysis_runs (created_at)
            """
        )


def _analysis_from_row(row: sqlite3.Row | None) -> dict[str, Any] | None:
    record = _row_to_dict(row)
    if record is None:
        return None
    raw = record.pop("result_json", None)
    record["result"] = json.loads(raw) if raw else {}
    return record


def insert_analysis(
    *,
    user_id: str,
    job_role: str,
    analysis_type: str,
    file_name: str,
    file_size: int,
    resume_text: str,
    ats_score: int,
    overall_score: int,
    result: dict[str, Any],
) -> dict[str, Any]:
    analysis_id = str(uuid.uuid4())
    now = _utc_now()
    with closing(_connect()) as conn, conn:
        conn.execute(
            """
            INSERT INTO resume_analyses (
                id, user_id, job_role, analysis_type, file_name, file_size, resume_text,
                ats_score, overall_score, result_json, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                analysis_id,
                user_id,
                job_role,
                analysis_type,
                file_name,
                file_size,
                resume_text,
                ats_score,
                overall_score,
                json.dumps(result, ensure_ascii=False),
                now,
                now,
            ),
        )
        row = conn.execute("SELECT * FROM resume_analyses WHERE id = ?", (analysis_id,)).fetchone()
    record = _analysis_from_row(row)
    if record is None:
        raise sqlite3.DatabaseError(f"analysis {analysis_id} missing after insert")
    return record


def get_analysis(analysis_id: str, user_id: str) -> dict[str, Any] | None:
    with closing(_connect()) as conn:
        row = conn.execute(
            "SELECT * FROM resume_analyses WHERE id = ? AND user_id = ?",
            (analysis_id, user_id),
        ).fetchone()
    return _analysis_from_row(row)


def get_analyses_by_ids(analysis_ids: list[str], user_id: str) -> list[dict[str, Any]]:
    if not analysis_ids:
        return []
    placeholders = ", ".join("?" for _ in analysis_ids)
    with closing(_connect()) as conn:
        rows = conn.execute(
            f"SELECT * FROM resume_analyses WHERE user_id = ? AND id IN ({placeholders})",
            (user_id, *analysis_ids),
        ).fetchall()
    return [record for record in (_analysis_from_row(row) for row in rows) if record is not None]


def _history_filters(user_id: str, job_role: str | None, analysis_type: str | None) -> tuple[str, list[Any]]:
    clauses = ["user_id = ?"]
    params: list[Any] = [user_id]
    if job_role:
        clauses.append("job_role = ?")
        params.append(job_role)
    if analysis_type:
        clauses.append("analysis_type = ?")
        params.append(analysis_type)
    return " AND ".join(clauses), params


def list_analyses(
    user_id: str,
    *,
    job_role: str | None = None,
    analysis_type: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> list[dict[str, Any]]:
    where, params = _history_filters(user_id, job_role, analysis_type)
    offset = (max(1, page) - 1) * limit
    with closing(_connect()) as conn:
        rows = conn.execute(
            f"""
            SELECT id, job_role, analysis_type, file_name, ats_score, overall_score, created_at, result_json
            FROM resume_analyses
            WHERE {where}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()
    return [record for record in (_analysis_from_row(row) for row in rows) if record is not None]


def count_analyses(user_id: str, *, job_role: str | None = None, analysis_type: str | None = None) -> int:
    where, params = _history_filters(user_id, job_role, analysis_type)
    with closing(_connect()) as conn:
        row = conn.execute(f"SELECT COUNT(*) FROM resume_analyses WHERE {where}", params).fetchone()
    return int(row[0] or 0)


def list_recent_analyses(user_id: str, limit: int = 10) -> list[dict[str, Any]]:
    with closing(_connect()) as conn:
        rows = conn.execute(
            """
            SELECT id, job_role, analysis_type, file_name, ats_score, created_at
            FROM resume_analyses
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()
    return [record for record in (_row_to_dict(row) for row in rows) if record is not None]


def delete_analysis(analysis_id: str, user_id: str) -> bool:
    with closing(_connect()) as conn, conn:
        cur = conn.execute(
            "DELETE FROM resume_analyses WHERE id = ? AND user_id = ?",
            (analysis_id, user_id),
        )
        return (cur.rowcount or 0) > 0


def upsert_user_analytics(
    *,
    user_id: str,
    ats_score: int,
    overall_score: int,
    skills_matched: int,
    total_skills: int,
    readability_score: int,
    keyword_density: int,
) -> dict[str, Any]:
    """Record a new analysis in the per-user aggregate in a single statement.

    The stored ``ats_score`` moves into ``previous_ats_score`` inside the same
    statement, so concurrent analyses for one user never lose an update.
    """
    now = _utc_now()
    with closing(_connect()) as conn, conn:
        conn.execute(
            """
            INSERT INTO user_analytics (
                user_id, ats_score, previous_ats_score, overall_score, skills_matched, total_skills,
                readability_score, keyword_density, total_analyses, last_analysis_date, created_at, updated_at
            ) VALUES (?, ?, 0, ?, ?, ?, ?, ?, 1, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                previous_ats_score = user_analytics.ats_score,
                ats_score = excluded.ats_score,
                overall_score = excluded.overall_score,
                skills_matched = excluded.skills_matched,
                total_skills = excluded.total_skills,
                readability_score = excluded.readability_score,
                keyword_density = excluded.keyword_density,
                total_analyses = user_analytics.total_analyses + 1,
                last_analysis_date = excluded.last_analysis_date,
                updated_at = excluded.updated_at
            """,
            (
                user_id,
                ats_score,
                overall_score,
                skills_matched,
                total_skills,
                readability_score,
                keyword_density,
                now,
                now,
                now,
            ),
        )
        row = conn.execute("SELECT * FROM user_analytics WHERE user_id = ?", (user_id,)).fetchone()
    record = _row_to_dict(row)
    if record is None:
        raise sqlite3.DatabaseError(f"user_analytics row missing for {user_id}")
    return record


def get_user_analytics(user_id: str) -> dict[str, Any] | None:
    with closing(_connect()) as conn:
        row = conn.execute("SELECT * FROM user_analytics WHERE user_id = ?", (user_id,)).fetchone()
    return _row_to_dict(row)


def insert_trend(
    *,
    user_id: str,
    ats_score: int,
    overall_score: int,
    readability_score: int,
    keyword_density: int,
    skills_match: int,
) -> None:
    with closing(_connect()) as conn, conn:
        conn.execute(
            """
            INSERT INTO analytics_trends (
                user_id, ats_score, overall_score, readability_score, keyword_density, skills_match, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (user_id, ats_score, overall_score, readability_score, keyword_density, skills_match, _utc_now()),
        )


def list_trends(user_id: str, limit: int = 30) -> list[dict[str, Any]]:
    with closing(_connect()) as conn:
        rows = conn.execute(
            """
            SELECT ats_score, overall_score, readability_score, keyword_density, skills_match, created_at
            FROM analytics_trends
            WHERE user_id = ?
            ORDER BY id DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()
    return [record for record in (_row_to_dict(row) for row in rows) if record is not None]


def log_ai_analysis_run(
    *,
    run_id: str,
    source: str,
    model: str | None,
    status: str,
    latency_ms: int | None = None,
) -> None:
    with closing(_connect()) as conn, conn:
        conn.execute(
            """
            INSERT INTO ai_analysis_runs (created_at, run_id, source, model, status, latency_ms)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (_utc_now(), run_id, source, model, status, latency_ms),
        )


def purge_old_records() -> dict[str, int]:
    retention = max(1, int(settings.run_log_retention_days))
    cutoff = datetime.now(timezone.utc).timestamp() - retention * 86400
    cutoff_iso = datetime.fromtimestamp(cutoff, timezone.utc).isoformat()
    with closing(_connect()) as conn, conn:
        cur = conn.execute("DELETE FROM ai_analysis_runs WHERE created_at < ?", (cutoff_iso,))
        return {"ai_analysis_runs": int(cur.rowcount or 0)}
