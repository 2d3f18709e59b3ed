import sqlite3
import tempfile
import unittest
from contextlib import closing
from pathlib import Path
from unittest.mock import patch

from checkresume.core.errors import NotFoundError, PersistenceError, ValidationError
from checkresume.services import analytics
from checkresume.services.analytics import AnalysisData
from checkresume.services.heuristic import generate_fallback_analysis
from checkresume.services.normalize import coerce_analysis
from checkresume.storage import db
from tests.helpers import SCENARIO_A_TEXT, ai_payload


def _data(ats_score: int, overall_score: int = 70, job_role: str = "Backend Engineer") -> AnalysisData:
    result = coerce_analysis(ai_payload(atsScore=ats_score, overallScore=overall_score), job_role)
    return AnalysisData(
        resume_text=SCENARIO_A_TEXT,
        job_role=job_role,
        analysis_type="comprehensive",
        result=result,
        file_name="resume.txt",
        file_size=len(SCENARIO_A_TEXT),
    )


class AnalyticsStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = Path(self._tmp.name) / "analytics.db"
        self._patcher = patch.object(db, "_get_db_path", return_value=self.db_path)
        self._patcher.start()
        db.init_db()

    def tearDown(self):
        self._patcher.stop()
        self._tmp.cleanup()

    def test_save_analysis_persists_result_and_analytics(self):
        record = analytics.save_analysis("user-1", _data(72))

        self.assertEqual(record["user_id"], "user-1")
        self.assertEqual(record["ats_score"], 72)
        self.assertEqual(record["result"]["atsScore"], 72)
        self.assertEqual(record["result"]["skillsAnalysis"]["presentSkills"], ["Python", "SQL"])

        stats = db.get_user_analytics("user-1")
        self.assertEqual(stats["ats_score"], 72)
        self.assertEqual(stats["previous_ats_score"], 0)
        self.assertEqual(stats["total_analyses"], 1)
        self.assertEqual(stats["skills_matched"], 2)
        self.assertEqual(stats["total_skills"], 4)
        self.assertEqual(stats["readability_score"], 90)
        self.assertEqual(stats["keyword_density"], 68)

    def test_second_analysis_moves_score_to_previous(self):
        analytics.save_analysis("user-1", _data(60))
        analytics.save_analysis("user-1", _data(75))

        stats = db.get_user_analytics("user-1")
        self.assertEqual(stats["ats_score"], 75)
        self.assertEqual(stats["previous_ats_score"], 60)
        self.assertEqual(stats["total_analyses"], 2)

    def test_trends_are_newest_first_and_scoped_to_user(self):
        for score in (50, 55, 60):
            analytics.save_analysis("user-1", _data(score))
        analytics.save_analysis("user-2", _data(99))

        trends = db.list_trends("user-1")
        self.assertEqual([t["ats_score"] for t in trends], [60, 55, 50])
        self.assertEqual([t["ats_score"] for t in db.list_trends("user-2")], [99])

    def test_dashboard_for_new_user_is_empty(self):
        dashboard = analytics.get_user_dashboard("nobody")
        self.assertEqual(dashboard["analytics"]["total_analyses"], 0)
        self.assertEqual(dashboard["trends"], [])
        self.assertEqual(dashboard["recent_analyses"], [])

    def test_dashboard_lists_recent_analyses(self):
        first = analytics.save_analysis("user-1", _data(60))
        second = analytics.save_analysis("user-1", _data(70))

        dashboard = analytics.get_user_dashboard("user-1")

        self.assertEqual([r["id"] for r in dashboard["recent_analyses"]], [second["id"], first["id"]])
        self.assertEqual(len(dashboard["trends"]), 2)

    def test_insights_report_improvement_and_decline(self):
        analytics.save_analysis("user-1", _data(60))
        analytics.save_analysis("user-1", _data(72))
        insights = analytics.generate_insights("user-1")
        self.assertEqual(insights[0]["type"], "improvement")
        self.assertEqual(insights[0]["message"], "Your ATS score improved by 12.0 points!")

        analytics.save_analysis("user-2", _data(80))
        analytics.save_analysis("user-2", _data(70))
        insights = analytics.generate_insights("user-2")
        self.assertEqual(insights[0]["type"], "decline")
        self.assertEqual(insights[0]["impact"], "negative")

    def test_insights_report_upward_trend_and_milestone(self):
        for score in (50, 50, 50, 70, 70, 70):
            analytics.save_analysis("user-1", _data(score))

        types = [insight["type"] for insight in analytics.generate_insights("user-1")]

        self.assertNotIn("improvement", types)
        self.assertIn("trend", types)
        self.assertIn("milestone", types)

    def test_first_analysis_counts_as_improvement(self):
        analytics.save_analysis("user-1", _data(40))
        types = [insight["type"] for insight in analytics.generate_insights("user-1")]
        self.assertEqual(types, ["improvement"])

    def test_insights_are_empty_when_store_fails(self):
        with patch.object(db, "get_user_analytics", side_effect=sqlite3.OperationalError("locked")):
            self.assertEqual(analytics.generate_insights("user-1"), [])

    def test_compare_reports_score_changes(self):
        first = analytics.save_analysis("user-1", _data(60, overall_score=50))
        second = analytics.save_analysis("user-1", _data(75, overall_score=58))

        comparison = analytics.compare_analyses("user-1", first["id"], second["id"])

        self.assertEqual(comparison["analysis1"]["id"], first["id"])
        self.assertEqual(comparison["analysis2"]["id"], second["id"])
        self.assertEqual(comparison["improvements"]["ats_score_change"], 15)
        self.assertEqual(comparison["improvements"]["overall_score_change"], 8)
        self.assertEqual(comparison["improvements"]["percentage"], 25.0)

    def test_compare_with_zero_base_reports_zero_percentage(self):
        first = analytics.save_analysis("user-1", _data(0))
        second = analytics.save_analysis("user-1", _data(40))

        comparison = analytics.compare_analyses("user-1", first["id"], second["id"])

        self.assertEqual(comparison["improvements"]["ats_score_change"], 40)
        self.assertEqual(comparison["improvements"]["percentage"], 0.0)

    def test_compare_rejects_bad_requests(self):
        mine = analytics.save_analysis("user-1", _data(60))
        theirs = analytics.save_analysis("user-2", _data(70))

        with self.assertRaises(ValidationError):
            analytics.compare_analyses("user-1", mine["id"], "")
        with self.assertRaises(ValidationError):
            analytics.compare_analyses("user-1", mine["id"], mine["id"])
        with self.assertRaises(NotFoundError):
            analytics.compare_analyses("user-1", mine["id"], theirs["id"])

    def test_analysis_access_is_scoped_to_owner(self):
        record = analytics.save_analysis("user-1", _data(60))

        self.assertIsNone(db.get_analysis(record["id"], "user-2"))
        self.assertFalse(db.delete_analysis(record["id"], "user-2"))
        self.assertIsNotNone(db.get_analysis(record["id"], "user-1"))
        self.assertTrue(db.delete_analysis(record["id"], "user-1"))
        self.assertIsNone(db.get_analysis(record["id"], "user-1"))

    def test_history_filters_and_paginates(self):
        for score in (50, 60, 70):
            analytics.save_analysis("user-1", _data(score, job_role="Designer"))
        analytics.save_analysis("user-1", _data(80, job_role="Nurse"))

        self.assertEqual(db.count_analyses("user-1"), 4)
        self.assertEqual(db.count_analyses("user-1", job_role="Designer"), 3)
        page_one = db.list_analyses("user-1", job_role="Designer", page=1, limit=2)
        page_two = db.list_analyses("user-1", job_role="Designer", page=2, limit=2)
        self.assertEqual([r["ats_score"] for r in page_one], [70, 60])
        self.assertEqual([r["ats_score"] for r in page_two], [50])

    def test_analytics_failure_does_not_fail_the_save(self):
        with patch.object(db, "upsert_user_analytics", side_effect=sqlite3.OperationalError("locked")):
            record = analytics.save_analysis("user-1", _data(65))

        self.assertIsNotNone(db.get_analysis(record["id"], "user-1"))
        self.assertIsNone(db.get_user_analytics("user-1"))
        self.assertEqual(db.list_trends("user-1"), [])

    def test_save_failure_raises_persistence_error(self):
        with patch.object(db, "insert_analysis", side_effect=sqlite3.OperationalError("disk full")):
            with self.assertRaises(PersistenceError):
                analytics.save_analysis("user-1", _data(65))

    def test_heuristic_results_are_stored_like_ai_results(self):
        result = generate_fallback_analysis(SCENARIO_A_TEXT, "general")
        data = AnalysisData(
            resume_text=SCENARIO_A_TEXT,
            job_role="general",
            analysis_type="quick",
            result=result,
            file_name="text-input.txt",
            file_size=len(SCENARIO_A_TEXT),
        )

        record = analytics.save_analysis("user-1", data)

        self.assertEqual(record["result"], result.to_wire())
        self.assertEqual(db.get_user_analytics("user-1")["total_skills"], 3)

    def test_purge_removes_expired_run_logs(self):
        analytics.log_analysis_run(run_id="fresh", source="primary", model="gpt-4o-mini", latency_ms=120)
        with closing(sqlite3.connect(self.db_path)) as conn, conn:
            conn.execute(
                "INSERT INTO ai_analysis_runs (created_at, run_id, source, model, status, latency_ms) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                ("2000-01-01T00:00:00+00:00", "stale", "heuristic", None, "success", 3),
            )

        removed = db.purge_old_records()

        self.assertEqual(removed, {"ai_analysis_runs": 1})
        with closing(sqlite3.connect(self.db_path)) as conn:
            remaining = [row[0] for row in conn.execute("SELECT run_id FROM ai_analysis_runs")]
        self.assertEqual(remaining, ["fresh"])


if __name__ == "__main__":
    unittest.main()
