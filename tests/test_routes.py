import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.exc import OperationalError

from wellnest.config import IDENTITY_JWT_ALGORITHM, IDENTITY_JWT_SECRET
from wellnest.database import get_db
from wellnest.main import app
from wellnest.routes.feedback_routes import get_feedback_service
from wellnest.services.feedback_service import FALLBACK_FEEDBACK, FeedbackResult
from wellnest.utils.day_keys import day_key


def _token(sub):
    return jwt.encode({"sub": sub}, IDENTITY_JWT_SECRET, algorithm=IDENTITY_JWT_ALGORITHM)


def _auth(sub="user_1"):
    return {"Authorization": f"Bearer {_token(sub)}"}


def _refuse_connection(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: the lifespan would create the on-disk database
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_requests_without_valid_token_are_rejected(client):
    assert client.get("/api/v1/streak").status_code == 401
    assert client.get("/api/v1/streak", headers={"Authorization": "Bearer nonsense"}).status_code == 401
    no_sub = jwt.encode({"name": "x"}, IDENTITY_JWT_SECRET, algorithm=IDENTITY_JWT_ALGORITHM)
    assert client.get("/api/v1/streak", headers={"Authorization": f"Bearer {no_sub}"}).status_code == 401


def test_signup_then_onboarding(client):
    resp = client.post("/api/v1/users/me", json={"name": "Avery"}, headers=_auth())
    assert resp.status_code == 200
    assert resp.json()["needs_onboarding"] is True

    resp = client.post("/api/v1/users/me/onboarding/complete", headers=_auth())
    body = resp.json()
    assert body["needs_onboarding"] is False
    assert [a["type"] for a in body["streak"]["achievements"]] == ["onboarding_complete"]


def test_dashboard_for_unknown_user_is_404(client):
    assert client.get("/api/v1/users/me/dashboard", headers=_auth("ghost")).status_code == 404


def test_logging_a_session_credits_aggregate_and_streak(client):
    resp = client.post("/api/v1/practice/meditation/sessions", json={"minutes": 12.7}, headers=_auth())
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["minutes"] == 13
    assert body["data"]["session_count"] == 1
    assert body["streak"]["current_streak"] == 1
    assert body["streak"]["last_entry_date"] == day_key()

    recent = client.get("/api/v1/practice/meditation/recent", headers=_auth()).json()
    assert [r["minutes"] for r in recent] == [13]


def test_session_can_skip_streak_credit(client):
    resp = client.post(
        "/api/v1/practice/breathing/sessions",
        json={"minutes": 4, "count_toward_streak": False},
        headers=_auth(),
    )
    assert resp.json()["streak"] is None
    assert client.get("/api/v1/streak", headers=_auth()).json()["current_streak"] == 0


def test_invalid_practice_input_is_422(client):
    assert client.post("/api/v1/practice/yoga/sessions", json={"minutes": 5}, headers=_auth()).status_code == 422
    assert client.post("/api/v1/practice/meditation/sessions", json={"minutes": -1},
                       headers=_auth()).status_code == 422
    assert client.post("/api/v1/practice/meditation/sessions", json={"minutes": 5, "date": "2024-1-5"},
                       headers=_auth()).status_code == 422


def test_journal_publish_flow(client):
    journal_id = client.post("/api/v1/journals", json={"title": "Morning"}, headers=_auth()).json()["id"]

    resp = client.put(f"/api/v1/journals/{journal_id}/content",
                      json={"content": [{"type": "paragraph"}], "word_count": 3, "is_draft": False},
                      headers=_auth())
    assert resp.status_code == 200
    assert resp.json()["data"]["is_draft"] is False
    assert resp.json()["streak"]["current_streak"] == 1

    client.put(f"/api/v1/journals/{journal_id}/tags", json={"tags": ["calm"]}, headers=_auth())
    found = client.get("/api/v1/journals/search", params={"tag": "calm"}, headers=_auth()).json()
    assert [j["id"] for j in found] == [journal_id]

    timeline = client.get("/api/v1/timeline", headers=_auth()).json()
    assert timeline[0]["date"] == day_key()
    assert timeline[0]["journal"]["title"] == "Morning"


def test_other_users_journal_is_404(client):
    journal_id = client.post("/api/v1/journals", json={}, headers=_auth("owner")).json()["id"]

    assert client.get(f"/api/v1/journals/{journal_id}", headers=_auth("intruder")).status_code == 404
    assert client.delete(f"/api/v1/journals/{journal_id}", headers=_auth("intruder")).status_code == 404
    assert client.get(f"/api/v1/journals/{journal_id}", headers=_auth("owner")).status_code == 200


def test_onboarding_feedback_uses_service(client):
    class StubService:
        async def generate(self, data):
            assert data.mood_score == 3
            return FeedbackResult(feedback=FALLBACK_FEEDBACK, is_fallback=True)

    app.dependency_overrides[get_feedback_service] = lambda: StubService()
    payload = {
        "mood_score": 3,
        "lifestyle": {"sleep_quality": 5, "energy_level": 5, "stress_level": 5, "social_connection": 5},
        "assessment": {"anxiety_frequency": "never", "interest_loss_frequency": "never"},
        "focus_areas": ["boost_energy"],
    }
    resp = client.post("/api/v1/onboarding/feedback", json=payload, headers=_auth())
    assert resp.status_code == 200
    assert resp.json()["is_fallback"] is True
    assert resp.json()["feedback"]["action_type"] == "mindfulness"

    bad = client.post("/api/v1/onboarding/feedback", json={**payload, "mood_score": 9}, headers=_auth())
    assert bad.status_code == 422


def test_store_failure_is_503(client, session_factory):
    def broken_get_db():
        db = session_factory()
        db.query = _refuse_connection
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = broken_get_db
    resp = client.get("/api/v1/streak", headers=_auth())

    assert resp.status_code == 503
    assert resp.json() == {"detail": "Storage temporarily unavailable, please retry"}


def test_onboarding_feedback_is_shown_on_dashboard(client):
    class StubService:
        async def generate(self, data):
            return FeedbackResult(feedback=FALLBACK_FEEDBACK, is_fallback=True)

    app.dependency_overrides[get_feedback_service] = lambda: StubService()
    payload = {
        "mood_score": 1,
        "lifestyle": {"sleep_quality": 2, "energy_level": 2, "stress_level": 9, "social_connection": 4},
        "assessment": {"anxiety_frequency": "nearly_every_day", "interest_loss_frequency": "several_days"},
        "focus_areas": ["reduce_stress"],
    }
    client.post("/api/v1/onboarding/feedback", json=payload, headers=_auth())

    onboarding = client.get("/api/v1/users/me/dashboard", headers=_auth()).json()["onboarding"]
    assert onboarding["responses"]["assessment"]["anxiety_frequency"] == "nearly_every_day"
    assert onboarding["feedback"]["is_fallback"] is True
    assert onboarding["feedback"]["feedback"]["action_type"] == "mindfulness"
