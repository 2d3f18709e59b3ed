import unittest

from checkresume.ai.config import AnalyzerConfig
from checkresume.ai.types import ProviderError
from checkresume.core.errors import ExternalServiceError, ValidationError
from checkresume.services.analyzer import ResumeAnalyzer
from checkresume.services.heuristic import generate_fallback_analysis
from tests.helpers import SCENARIO_A_TEXT, FakeProvider, ai_payload, long_resume_text

CONFIG = AnalyzerConfig(model="primary-model", secondary_model="secondary-model", timeout_s=5.0)


class ResumeAnalyzerTests(unittest.IsolatedAsyncioTestCase):
    async def test_primary_reply_is_used_when_valid(self):
        primary = FakeProvider.replying("openai", ai_payload())
        secondary = FakeProvider.replying("groq", ai_payload(atsScore=10, overallScore=10))
        analyzer = ResumeAnalyzer(CONFIG, primary=primary, secondary=secondary)

        result, source = await analyzer.analyze_with_source(long_resume_text(), "Backend Engineer", "quick")

        self.assertEqual(source, "primary")
        self.assertEqual(result.ats_score, 92)
        self.assertEqual(len(primary.calls), 1)
        self.assertEqual(secondary.calls, [])
        call = primary.calls[0]
        self.assertEqual(call["model"], "primary-model")
        self.assertEqual(call["temperature"], 0.3)
        self.assertEqual(call["max_tokens"], 4000)
        self.assertIn("Job Role/Industry: Backend Engineer", call["user_prompt"])
        self.assertIn("Analysis Type: quick", call["user_prompt"])
        self.assertIn("valid JSON", call["system_prompt"])

    async def test_primary_impact_is_clamped(self):
        payload = ai_payload(
            recommendations=[{"category": "Keywords", "priority": "high", "description": "Add terms", "impact": 150}]
        )
        analyzer = ResumeAnalyzer(CONFIG, primary=FakeProvider.replying("openai", payload))

        result = await analyzer.analyze(long_resume_text(), "general")

        self.assertEqual(result.recommendations[0].impact, 100)

    async def test_provider_failure_moves_to_secondary(self):
        primary = FakeProvider("openai", error=ProviderError("quota exceeded", provider="openai"))
        secondary = FakeProvider.replying("groq", ai_payload(atsScore=71, overallScore=69))
        analyzer = ResumeAnalyzer(CONFIG, primary=primary, secondary=secondary)

        result, source = await analyzer.analyze_with_source(long_resume_text(), "general")

        self.assertEqual(source, "secondary")
        self.assertEqual(result.ats_score, 71)
        self.assertEqual(secondary.calls[0]["model"], "secondary-model")

    async def test_both_providers_failing_uses_heuristic(self):
        primary = FakeProvider("openai", error=ProviderError("down", provider="openai"))
        secondary = FakeProvider("groq", error=ProviderError("down", provider="groq"))
        analyzer = ResumeAnalyzer(CONFIG, primary=primary, secondary=secondary)

        result, source = await analyzer.analyze_with_source(long_resume_text(), "general")

        self.assertEqual(source, "heuristic")
        self.assertLessEqual(result.ats_score, 85)
        self.assertLessEqual(result.overall_score, 80)
        self.assertEqual(len(secondary.calls), 1)

    async def test_malformed_primary_reply_skips_secondary(self):
        primary = FakeProvider("openai", reply='{"atsScore": 90, "overall')
        secondary = FakeProvider.replying("groq", ai_payload())
        analyzer = ResumeAnalyzer(CONFIG, primary=primary, secondary=secondary)

        result, source = await analyzer.analyze_with_source(SCENARIO_A_TEXT, "Backend Engineer")

        self.assertEqual(source, "heuristic")
        self.assertEqual(secondary.calls, [])
        self.assertEqual(result, generate_fallback_analysis(SCENARIO_A_TEXT, "Backend Engineer"))

    async def test_reply_without_scores_is_malformed(self):
        primary = FakeProvider("openai", reply='{"strengths": ["Clear"]}')
        secondary = FakeProvider.replying("groq", ai_payload())
        analyzer = ResumeAnalyzer(CONFIG, primary=primary, secondary=secondary)

        _, source = await analyzer.analyze_with_source(SCENARIO_A_TEXT, "general")

        self.assertEqual(source, "heuristic")
        self.assertEqual(secondary.calls, [])

    async def test_undecodable_replies_fall_back_to_heuristic(self):
        oversized_number = '{"atsScore": ' + "9" * 5000 + ', "overallScore": 50}'
        deeply_nested = "[" * 100000 + "]" * 100000
        for raw in (oversized_number, deeply_nested):
            with self.subTest(raw=raw[:20]):
                secondary = FakeProvider.replying("groq", ai_payload())
                analyzer = ResumeAnalyzer(CONFIG, primary=FakeProvider("openai", reply=raw), secondary=secondary)

                result, source = await analyzer.analyze_with_source(SCENARIO_A_TEXT, "general")

                self.assertEqual(source, "heuristic")
                self.assertEqual(secondary.calls, [])
                self.assertEqual(result, generate_fallback_analysis(SCENARIO_A_TEXT, "general"))

    async def test_blank_analysis_type_uses_comprehensive(self):
        primary = FakeProvider.replying("openai", ai_payload())
        analyzer = ResumeAnalyzer(CONFIG, primary=primary)

        await analyzer.analyze(long_resume_text(), "general", "   ")

        self.assertIn("Analysis Type: comprehensive", primary.calls[0]["user_prompt"])

    async def test_hung_provider_times_out_and_moves_on(self):
        config = AnalyzerConfig(timeout_s=0.05)
        primary = FakeProvider.replying("openai", ai_payload())
        primary.delay = 1.0
        secondary = FakeProvider.replying("groq", ai_payload(atsScore=66, overallScore=61))
        analyzer = ResumeAnalyzer(config, primary=primary, secondary=secondary)

        result, source = await analyzer.analyze_with_source(long_resume_text(), "general")

        self.assertEqual(source, "secondary")
        self.assertEqual(result.ats_score, 66)

    async def test_unexpected_error_surfaces_as_service_error(self):
        primary = FakeProvider("openai", error=KeyError("choices"))
        secondary = FakeProvider.replying("groq", ai_payload())
        analyzer = ResumeAnalyzer(CONFIG, primary=primary, secondary=secondary)

        with self.assertRaises(ExternalServiceError) as ctx:
            await analyzer.analyze(long_resume_text(), "general")

        self.assertEqual(ctx.exception.service, "AI_SERVICE")
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(secondary.calls, [])

    async def test_empty_resume_is_rejected(self):
        analyzer = ResumeAnalyzer(CONFIG, primary=FakeProvider.replying("openai", ai_payload()))
        for text in ("", "   \n "):
            with self.assertRaises(ValidationError):
                await analyzer.analyze(text, "general")

    async def test_without_providers_heuristic_is_used(self):
        analyzer = ResumeAnalyzer(AnalyzerConfig())

        result, source = await analyzer.analyze_with_source(SCENARIO_A_TEXT, "general")

        self.assertEqual(source, "heuristic")
        self.assertEqual(result.ats_score, 80)
        self.assertEqual(result.overall_score, 65)

    async def test_only_secondary_configured(self):
        secondary = FakeProvider.replying("groq", ai_payload(atsScore=58, overallScore=57))
        analyzer = ResumeAnalyzer(CONFIG, secondary=secondary)

        result, source = await analyzer.analyze_with_source(long_resume_text(), "")

        self.assertEqual(source, "secondary")
        self.assertEqual(result.overall_score, 57)
        self.assertIn("Job Role/Industry: general", secondary.calls[0]["user_prompt"])


class AnalyzerConfigTests(unittest.TestCase):
    def test_placeholder_keys_are_not_configured(self):
        cfg = AnalyzerConfig(primary_provider_key="your_openai_key", secondary_provider_key="  ")
        self.assertFalse(cfg.has_primary)
        self.assertFalse(cfg.has_secondary)

    def test_real_keys_are_configured(self):
        cfg = AnalyzerConfig(primary_provider_key="sk-test", secondary_provider_key="gsk-test")
        self.assertTrue(cfg.has_primary)
        self.assertTrue(cfg.has_secondary)


if __name__ == "__main__":
    unittest.main()
