"""
feedback_service.py — Onboarding AI reflection
Turns the onboarding questionnaire into one structured wellness-coach reply.
The ledger never depends on this call: any failure yields a static fallback.
"""

import json
import logging
from typing import List, Literal

from pydantic import BaseModel, Field, ValidationError as SchemaError

from wellnest.services.llm_router import LLMRouter, get_llm_router

logger = logging.getLogger(__name__)

Frequency = Literal["never", "several_days", "more_than_half_days", "nearly_every_day"]
FocusArea = Literal["reduce_stress", "improve_sleep", "boost_energy", "build_healthy_habits"]
ActionType = Literal["meditation", "journaling", "breathing", "movement", "reflection", "mindfulness"]

MOOD_LABELS = {1: "Low", 2: "Okay", 3: "Good", 4: "Great"}


# ── Pydantic schemas ──────────────────────────────────────────────
class Lifestyle(BaseModel):
    sleep_quality: int = Field(ge=0, le=10)
    energy_level: int = Field(ge=0, le=10)
    stress_level: int = Field(ge=0, le=10)
    social_connection: int = Field(ge=0, le=10)


class Assessment(BaseModel):
    anxiety_frequency: Frequency
    interest_loss_frequency: Frequency


class OnboardingFeedbackRequest(BaseModel):
    mood_score: int = Field(ge=1, le=4)
    lifestyle: Lifestyle
    assessment: Assessment
    focus_areas: List[FocusArea] = []


class OnboardingFeedback(BaseModel):
    personalized_greeting: str
    strength_highlight: str
    daily_suggestion: str
    full_response: str
    action_type: ActionType


class FeedbackResult(BaseModel):
    feedback: OnboardingFeedback
    is_fallback: bool = False
    provider: str | None = None


FALLBACK_FEEDBACK = OnboardingFeedback(
    personalized_greeting="Hey friend, I hear you're feeling a bit drained but resilient.",
    strength_highlight="You show up even on tough days, and consistency is a strength.",
    daily_suggestion="Try a gentle 5-minute walk outside this afternoon.",
    full_response=(
        "You seem to be carrying some stress, yet your ability to keep going stands out. "
        "Focus on one small act of care today: a short walk, slow breathing, or a mindful sip of water."
    ),
    action_type="mindfulness",
)

SYSTEM_PROMPT = """You are a compassionate wellness coach analyzing a user's onboarding responses to provide personalized mental health support.

ANALYSIS GUIDELINES:
- Mood Score: 1=Low, 2=Okay, 3=Good, 4=Great
- Lifestyle scores: 0-10 scale (higher = better for sleep, energy, social; higher = worse for stress)
- Anxiety/Interest Loss: never < several_days < more_than_half_days < nearly_every_day
- Focus areas indicate user priorities

RESPONSE TONE:
- Warm, empathetic, and non-judgmental
- Acknowledge their feelings without dismissing them
- Highlight strengths and resilience
- Provide hope and actionable guidance

ACTION TYPE SELECTION:
- meditation: For high stress, anxiety issues
- journaling: For processing emotions, low interest in activities
- breathing: For immediate anxiety relief, stress management
- movement: For low energy, mood improvement
- reflection: For self-awareness, understanding patterns
- mindfulness: For present-moment awareness, general wellness

DAILY SUGGESTION GUIDELINES:
- Must be specific and actionable (include duration/method)
- Should align with the selected action_type
- Keep it simple and achievable
- Do not recommend apps or products, only the actionable step

Return ONLY a JSON object with the keys: personalized_greeting, strength_highlight,
daily_suggestion, full_response, action_type."""


def build_user_prompt(data: OnboardingFeedbackRequest) -> str:
    life = data.lifestyle
    return (
        "Analyze this user's onboarding data and provide personalized wellness feedback:\n\n"
        f"MOOD: {data.mood_score}/4 ({MOOD_LABELS[data.mood_score]})\n\n"
        "LIFESTYLE:\n"
        f"- Sleep Quality: {life.sleep_quality}/10\n"
        f"- Energy Level: {life.energy_level}/10\n"
        f"- Stress Level: {life.stress_level}/10\n"
        f"- Social Connection: {life.social_connection}/10\n\n"
        "MENTAL HEALTH:\n"
        f"- Anxiety Frequency: {data.assessment.anxiety_frequency}\n"
        f"- Interest Loss Frequency: {data.assessment.interest_loss_frequency}\n\n"
        f"FOCUS AREAS: {', '.join(data.focus_areas) or 'None selected'}\n\n"
        "Provide encouraging, personalized feedback with a specific actionable suggestion."
    )


def extract_json_object(text: str | None) -> dict | None:
    """Pull the outermost {...} out of a model reply."""
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}") + 1
    if start == -1 or end <= start:
        return None
    try:
        parsed = json.loads(text[start:end])
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


class FeedbackService:
    def __init__(self, llm_router: LLMRouter | None = None):
        self.llm_router = llm_router or get_llm_router()

    async def generate(self, data: OnboardingFeedbackRequest) -> FeedbackResult:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(data)},
        ]
        resp = await self.llm_router.route(messages, json_mode=True)
        if resp.get("status") != "success":
            logger.warning("AI feedback unavailable, using fallback: %s", resp.get("error"))
            return FeedbackResult(feedback=FALLBACK_FEEDBACK, is_fallback=True)

        parsed = extract_json_object(resp.get("text"))
        if parsed is None:
            logger.warning("AI feedback from %s was not JSON, using fallback", resp.get("provider"))
            return FeedbackResult(feedback=FALLBACK_FEEDBACK, is_fallback=True)

        try:
            feedback = OnboardingFeedback.model_validate(parsed)
        except SchemaError as e:
            logger.warning("AI feedback failed schema validation, using fallback: %s", e.error_count())
            return FeedbackResult(feedback=FALLBACK_FEEDBACK, is_fallback=True)

        return FeedbackResult(feedback=feedback, provider=resp.get("provider"))
