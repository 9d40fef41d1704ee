"""
Unit Tests for the Analysis Capability

Gemini client error surfacing, prompt construction and reply parsing.
No network: the LangChain model is replaced with a mock.
"""
import json
from unittest.mock import AsyncMock, Mock

import pytest
from langchain_core.messages import AIMessage

from cardiaguard.core.features import DEFAULT_RECORD, set_field
from cardiaguard.core.llm import (
    GeminiClient,
    GeminiConfig,
    GeminiResponse,
    HeartAnalyzer,
    RiskLevel,
    build_prompt,
    parse_analysis,
)
from cardiaguard.utils import (
    AnalysisConfigurationError,
    AnalysisError,
    AnalysisResponseError,
)


# Fixtures
@pytest.fixture
def gemini_config() -> GeminiConfig:
    """Config without API key."""
    return GeminiConfig(api_key=None, model="gemini-2.5-flash", temperature=0.2)


@pytest.fixture
def reply_payload() -> dict:
    return {
        "risk_level": "High",
        "risk_score": 78,
        "diagnosis": "Probable coronary artery disease",
        "summary": "Reversible thallium defect with ST depression.",
        "key_factors": [
            {"feature": "thal", "impact": "increases risk", "note": "reversible defect"},
            {"feature": "oldpeak", "impact": "increases risk"},
        ],
        "recommendations": ["Consult a cardiologist promptly."],
    }


def _client_with_llm(config: GeminiConfig, llm) -> GeminiClient:
    client = GeminiClient(config)
    client._llm = llm
    return client


class TestGeminiClient:
    """Tests for GeminiClient."""

    def test_init_without_api_key(self, gemini_config):
        client = GeminiClient(gemini_config)
        assert not client.is_available
        assert client.get_stats()["request_count"] == 0

    async def test_unconfigured_client_raises(self, gemini_config):
        client = GeminiClient(gemini_config)
        with pytest.raises(AnalysisConfigurationError) as exc:
            await client.generate_async("prompt")
        assert "GEMINI_API_KEY" in exc.value.message

    async def test_generate_async(self, gemini_config):
        message = AIMessage(
            content='{"ok": true}',
            usage_metadata={"input_tokens": 12, "output_tokens": 5, "total_tokens": 17},
        )
        llm = Mock()
        llm.ainvoke = AsyncMock(return_value=message)
        client = _client_with_llm(gemini_config, llm)

        response = await client.generate_async("prompt", system_instruction="system")

        assert isinstance(response, GeminiResponse)
        assert response.text == '{"ok": true}'
        assert response.prompt_tokens == 12
        assert response.completion_tokens == 5
        llm.ainvoke.assert_awaited_once_with("system\n\nprompt")
        assert client.get_stats()["request_count"] == 1

    async def test_remote_failure_raises_analysis_error(self, gemini_config):
        llm = Mock()
        llm.ainvoke = AsyncMock(side_effect=ConnectionError("network unreachable"))
        client = _client_with_llm(gemini_config, llm)

        with pytest.raises(AnalysisError) as exc:
            await client.generate_async("prompt")
        assert exc.value.message == "network unreachable"


class TestPrompt:
    """Tests for build_prompt."""

    def test_contains_every_feature(self):
        prompt = build_prompt(DEFAULT_RECORD)
        for line in ("- age (Patient Age): 54", "- oldpeak (Oldpeak (>1.0 Risk)): 1.2",
                     "- thal (Thal (3, 6, 7)): 3 [Normal (3)]"):
            assert line in prompt

    def test_nan_described(self):
        prompt = build_prompt(set_field(DEFAULT_RECORD, "chol", "?"))
        assert "- chol (Cholesterol): not provided" in prompt


class TestParseAnalysis:
    """Tests for parse_analysis."""

    def test_valid_reply(self, reply_payload):
        analysis = parse_analysis(json.dumps(reply_payload))
        assert analysis.risk_level == RiskLevel.HIGH
        assert analysis.risk_score == 78.0
        assert [f.feature for f in analysis.key_factors] == ["thal", "oldpeak"]
        assert analysis.recommendations == ["Consult a cardiologist promptly."]

    def test_fenced_reply(self, reply_payload):
        text = "```json\n" + json.dumps(reply_payload) + "\n```"
        assert parse_analysis(text).diagnosis == "Probable coronary artery disease"

    def test_level_case_insensitive(self, reply_payload):
        reply_payload["risk_level"] = "moderate"
        assert parse_analysis(json.dumps(reply_payload)).risk_level == RiskLevel.MODERATE

    def test_score_clamped(self, reply_payload):
        reply_payload["risk_score"] = 140
        assert parse_analysis(json.dumps(reply_payload)).risk_score == 100.0

    def test_not_json(self):
        with pytest.raises(AnalysisResponseError):
            parse_analysis("The patient looks fine.")

    def test_missing_key(self, reply_payload):
        del reply_payload["diagnosis"]
        with pytest.raises(AnalysisResponseError) as exc:
            parse_analysis(json.dumps(reply_payload))
        assert "diagnosis" in exc.value.message

    def test_unknown_level(self, reply_payload):
        reply_payload["risk_level"] = "Severe"
        with pytest.raises(AnalysisResponseError):
            parse_analysis(json.dumps(reply_payload))

    def test_to_dict(self, reply_payload):
        data = parse_analysis(json.dumps(reply_payload)).to_dict()
        assert data["risk_level"] == "High"
        assert data["key_factors"][1] == {
            "feature": "oldpeak", "impact": "increases risk", "note": ""
        }


class TestHeartAnalyzer:
    """Tests for HeartAnalyzer.analyze."""

    async def test_analyze(self, reply_payload):
        client = Mock()
        client.generate_async = AsyncMock(return_value=GeminiResponse(
            text=json.dumps(reply_payload), model="gemini-2.5-flash", latency_ms=420.0
        ))
        analyzer = HeartAnalyzer(client=client)

        analysis = await analyzer.analyze(DEFAULT_RECORD)

        assert analysis.model == "gemini-2.5-flash"
        assert analysis.latency_ms == 420.0
        prompt = client.generate_async.await_args.args[0]
        assert "age (Patient Age): 54" in prompt

    async def test_bad_reply_raises(self):
        client = Mock()
        client.generate_async = AsyncMock(return_value=GeminiResponse(text="[]", model="m"))
        with pytest.raises(AnalysisResponseError):
            await HeartAnalyzer(client=client).analyze(DEFAULT_RECORD)

    async def test_unconfigured_analyzer(self, gemini_config):
        analyzer = HeartAnalyzer(client=GeminiClient(gemini_config))
        assert not analyzer.is_available
        with pytest.raises(AnalysisConfigurationError):
            await analyzer.analyze(DEFAULT_RECORD)
