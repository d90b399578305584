"""
Tests for the AI enhancement adapter (OpenAI client mocked).
"""

import json
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from talentmatch.agents.enhancement_agent import (
    Enhancer,
    OpenAIEnhancer,
    build_enhancer_from_env,
    clamp_timeout,
    parse_enhancement,
)
from talentmatch.core.errors import MalformedEnhancementResponse
from talentmatch.core.normalizer import normalize_profile


GOOD_PAYLOAD = {
    "industryAlignment": ["software", "fintech"],
    "careerTrajectory": "data_science",
    "skillGaps": ["cloud"],
    "workingStyle": "collaborative",
    "marketValue": "high",
    "confidence": 0.82,
}


def _client(content=None, side_effect=None):
    client = MagicMock()
    if side_effect is not None:
        client.chat.completions.create.side_effect = side_effect
    else:
        resp = MagicMock()
        resp.choices = [MagicMock(message=MagicMock(content=content))]
        client.chat.completions.create.return_value = resp
    return client


@pytest.fixture
def profile(make_profile):
    return make_profile(
        university="AUD", major="Computer Science", skills=["Python"], location="Dubai",
        bio="Reach me at jane.doe@example.com or +971 50 123 4567 for projects.",
    )


class TestOpenAIEnhancer:
    """enhance() merges on success and fails open otherwise."""

    def test_success_sets_ai_enhancement_only(self, kb, profile):
        base = normalize_profile(profile, kb)
        out = OpenAIEnhancer(client=_client(json.dumps(GOOD_PAYLOAD))).enhance(profile, base)
        assert out.ai_enhancement.industry_alignment == ("software", "fintech")
        assert out.ai_enhancement.confidence == 0.82
        assert out.university == base.university
        assert out.skills == base.skills

    def test_json_wrapped_in_prose_is_accepted(self, kb, profile):
        base = normalize_profile(profile, kb)
        content = "Sure! " + json.dumps(GOOD_PAYLOAD) + "\n"
        out = OpenAIEnhancer(client=_client(content)).enhance(profile, base)
        assert out.ai_enhancement is not None

    def test_timeout_returns_base(self, kb, profile):
        base = normalize_profile(profile, kb)
        err = openai.APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        assert OpenAIEnhancer(client=_client(side_effect=err)).enhance(profile, base) is base

    def test_unexpected_error_returns_base(self, kb, profile):
        base = normalize_profile(profile, kb)
        assert OpenAIEnhancer(client=_client(side_effect=RuntimeError("boom"))).enhance(profile, base) is base

    @pytest.mark.parametrize("content", [
        "not json at all",
        "",
        None,
        json.dumps({**GOOD_PAYLOAD, "industryAlignment": "software"}),
        json.dumps({**GOOD_PAYLOAD, "confidence": "high"}),
        json.dumps({k: v for k, v in GOOD_PAYLOAD.items() if k != "careerTrajectory"}),
    ])
    def test_malformed_payload_returns_base(self, kb, profile, content):
        base = normalize_profile(profile, kb)
        assert OpenAIEnhancer(client=_client(content)).enhance(profile, base) is base

    def test_request_is_redacted(self, kb, profile):
        client = _client(json.dumps(GOOD_PAYLOAD))
        OpenAIEnhancer(client=client).enhance(profile, normalize_profile(profile, kb))
        kwargs = client.chat.completions.create.call_args.kwargs
        sent = kwargs["messages"][1]["content"]
        assert "jane.doe@example.com" not in sent
        assert "123 4567" not in sent
        assert "American University of Dubai" in sent

    def test_request_uses_strict_schema_and_timeout(self, kb, profile, monkeypatch):
        monkeypatch.delenv("ENHANCE_TIMEOUT_SECONDS", raising=False)
        client = _client(json.dumps(GOOD_PAYLOAD))
        OpenAIEnhancer(client=client, model="test-model").enhance(profile, normalize_profile(profile, kb))
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["timeout"] == 12.0
        assert kwargs["response_format"]["json_schema"]["strict"] is True

    def test_base_enhancer_is_a_no_op(self, kb, profile):
        base = normalize_profile(profile, kb)
        assert Enhancer().enhance(profile, base) is base


class TestHelpers:
    """Timeout clamping, payload parsing and env wiring."""

    @pytest.mark.parametrize("value,expected", [(30, 15.0), (1, 10.0), ("13", 13.0), ("abc", 12.0), (None, 12.0)])
    def test_clamp_timeout(self, value, expected):
        assert clamp_timeout(value) == expected

    def test_parse_enhancement_clamps_confidence(self):
        assert parse_enhancement({**GOOD_PAYLOAD, "confidence": 3}).confidence == 1.0
        assert parse_enhancement({**GOOD_PAYLOAD, "confidence": None}).confidence is None

    def test_parse_enhancement_rejects_non_objects(self):
        with pytest.raises(MalformedEnhancementResponse):
            parse_enhancement("[1, 2, 3]")

    def test_no_key_means_no_enhancer(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert build_enhancer_from_env() is None

    def test_disabled_flag(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("AI_ENHANCEMENT_ENABLED", "false")
        assert build_enhancer_from_env() is None

    def test_enabled_with_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("AI_ENHANCEMENT_ENABLED", "true")
        monkeypatch.setenv("ENHANCE_TIMEOUT_SECONDS", "14")
        enhancer = build_enhancer_from_env()
        assert isinstance(enhancer, OpenAIEnhancer)
        assert enhancer.timeout == 14.0
