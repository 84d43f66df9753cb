"""AI onboarding reflection: provider routing, JSON extraction, static fallback."""
import asyncio
import json

import httpx
import pytest
from pydantic import ValidationError as SchemaError

from wellnest.providers.base import BaseProvider
from wellnest.providers.groq_provider import GroqProvider
from wellnest.services.feedback_service import (
    FALLBACK_FEEDBACK,
    FeedbackService,
    OnboardingFeedbackRequest,
    build_user_prompt,
    extract_json_object,
)
from wellnest.services.llm_router import LLMRouter

GOOD_REPLY = {
    "personalized_greeting": "Hi there, thanks for sharing.",
    "strength_highlight": "You keep showing up.",
    "daily_suggestion": "Try 5 minutes of box breathing before lunch.",
    "full_response": "Stress is high, but you are resourceful.",
    "action_type": "breathing",
}

PAYLOAD = {
    "mood_score": 2,
    "lifestyle": {"sleep_quality": 4, "energy_level": 3, "stress_level": 8, "social_connection": 6},
    "assessment": {"anxiety_frequency": "several_days", "interest_loss_frequency": "never"},
    "focus_areas": ["reduce_stress", "improve_sleep"],
}


def _provider(name, reply=None, error=None, calls=None):
    class FakeProvider(BaseProvider):
        def __init__(self, api_key):
            self.api_key = api_key

        @property
        def name(self):
            return name

        async def chat(self, messages, model=None, json_mode=False):
            if calls is not None:
                calls.append((name, self.api_key, json_mode))
            if error:
                return self._result("fake-model", error=error)
            return self._result("fake-model", text=reply)

    return FakeProvider


def _router(*entries):
    return LLMRouter(providers=[
        {"name": cls(api_key="").name, "provider_class": cls, "priority": i + 1, "keys": keys}
        for i, (cls, keys) in enumerate(entries)
    ])


def _generate(router):
    return asyncio.run(FeedbackService(router).generate(OnboardingFeedbackRequest(**PAYLOAD)))


def test_valid_reply_is_parsed():
    reply = "Sure! Here you go:\n```json\n" + json.dumps(GOOD_REPLY) + "\n```"
    result = _generate(_router((_provider("gemini", reply=reply), ["k1"])))

    assert result.is_fallback is False
    assert result.provider == "gemini"
    assert result.feedback.action_type == "breathing"
    assert result.feedback.daily_suggestion.startswith("Try 5 minutes")


def test_falls_through_to_next_provider():
    calls = []
    result = _generate(_router(
        (_provider("gemini", error="HTTP 500", calls=calls), ["g1"]),
        (_provider("groq", reply=json.dumps(GOOD_REPLY), calls=calls), ["q1"]),
    ))

    assert result.provider == "groq"
    assert [c[0] for c in calls] == ["gemini", "groq"]
    assert all(c[2] for c in calls)


def test_rate_limited_key_rotates_to_next_key():
    calls = []

    class RateLimited(_provider("gemini", calls=calls)):
        async def chat(self, messages, model=None, json_mode=False):
            calls.append(("gemini", self.api_key, json_mode))
            if self.api_key == "k1":
                return self._result("m", error="HTTP 429")
            return self._result("m", text=json.dumps(GOOD_REPLY))

    result = _generate(_router((RateLimited, ["k1", "k2"])))
    assert result.is_fallback is False
    assert [c[1] for c in calls] == ["k1", "k2"]


def test_providers_without_keys_are_skipped():
    router = _router((_provider("gemini", reply="{}"), []))
    assert router.providers == []
    result = _generate(router)
    assert result.is_fallback is True
    assert result.feedback == FALLBACK_FEEDBACK


@pytest.mark.parametrize("reply", [
    "I cannot help with that.",
    "{not json}",
    json.dumps({**GOOD_REPLY, "action_type": "skydiving"}),
    json.dumps({"personalized_greeting": "hi"}),
])
def test_unusable_replies_fall_back(reply):
    result = _generate(_router((_provider("gemini", reply=reply), ["k"])))
    assert result.is_fallback is True
    assert result.feedback.action_type == "mindfulness"


def test_provider_exception_falls_back():
    class Exploding(_provider("gemini")):
        async def chat(self, messages, model=None, json_mode=False):
            raise RuntimeError("boom")

    result = _generate(_router((Exploding, ["k"])))
    assert result.is_fallback is True


def test_request_validation():
    with pytest.raises(SchemaError):
        OnboardingFeedbackRequest(**{**PAYLOAD, "mood_score": 5})
    with pytest.raises(SchemaError):
        OnboardingFeedbackRequest(**{**PAYLOAD, "focus_areas": ["get_rich"]})
    with pytest.raises(SchemaError):
        OnboardingFeedbackRequest(**{**PAYLOAD, "lifestyle": {**PAYLOAD["lifestyle"], "stress_level": 11}})


def test_user_prompt_mentions_answers():
    prompt = build_user_prompt(OnboardingFeedbackRequest(**PAYLOAD))
    assert "MOOD: 2/4 (Okay)" in prompt
    assert "Stress Level: 8/10" in prompt
    assert "reduce_stress, improve_sleep" in prompt


def test_extract_json_object():
    assert extract_json_object('noise {"a": 1} trailing') == {"a": 1}
    assert extract_json_object("[1, 2]") is None
    assert extract_json_object(None) is None


def test_groq_provider_parses_completion():
    def handler(request):
        body = json.loads(request.content)
        assert body["response_format"] == {"type": "json_object"}
        assert request.headers["Authorization"] == "Bearer secret"
        return httpx.Response(200, json={"choices": [{"message": {"content": "hello"}}]})

    provider = GroqProvider("secret", transport=httpx.MockTransport(handler))
    result = asyncio.run(provider.chat([{"role": "user", "content": "hi"}], json_mode=True))
    assert result["status"] == "success"
    assert result["text"] == "hello"


def test_groq_provider_reports_http_errors():
    provider = GroqProvider("secret", transport=httpx.MockTransport(lambda r: httpx.Response(429)))
    result = asyncio.run(provider.chat([{"role": "user", "content": "hi"}]))
    assert result["status"] == "failed"
    assert result["error"] == "HTTP 429"
