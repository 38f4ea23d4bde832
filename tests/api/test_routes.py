"""
API tests for the response and nomination routes.

Uses FastAPI's TestClient against the in-memory database, with get_db
overridden and (except in TestApiKeyAuth) the API key check stubbed.
Run: pytest tests/api/test_routes.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

import api.auth
from api.auth import APIKeyContext, hash_api_key, verify_api_key
from api.main import app
from config.settings import settings
from models import APIKey, Client
from utils.database import get_db

PARTICIPANT_ID = "participant-1"


@pytest.fixture
def http(engine, client_row):
    client_id = client_row.id

    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[verify_api_key] = lambda: APIKeyContext(
        client_id=client_id, api_key_id=1, api_key_name="test"
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def open_session(http, seeded, respondent=None):
    body = {"participant_assessment_id": seeded.assessment.id}
    if respondent:
        body["respondent"] = respondent
    response = http.post("/responses/sessions", json=body)
    assert response.status_code == 200, response.text
    return response.json()


class TestHealth:

    def test_ping_and_health(self, http):
        assert http.get("/ping").json() == {"message": "pong"}
        assert http.get("/health").json()["status"] == "healthy"


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class TestResponseRoutes:

    def test_open_session(self, http, pulse):
        view = open_session(http, pulse)

        assert view["session"]["status"] == "in_progress"
        assert view["catalog"]["has_steps"] is True
        assert [len(g["questions"]) for g in view["catalog"]["groups"]] == [3, 2]
        assert view["resume"] == {"question_index": 0, "step_index": 0}
        assert view["progress"] == {"answered": 0, "total": 5, "percentage": 0}
        assert view["assessment_status"] == "Not started"

    def test_advance_and_resume_after_step(self, http, make_assessment):
        seeded = make_assessment(step_sizes=(3, 1))
        session_id = open_session(http, seeded)["session"]["id"]

        for question_id in seeded.question_ids[:3]:
            response = http.post(
                f"/responses/sessions/{session_id}/advance",
                json={"question_id": question_id, "answer_text": "answer"},
            )
            assert response.status_code == 200, response.text

        body = response.json()
        assert body["progress"]["percentage"] == 75
        assert body["next_position"] == {"question_index": 3, "step_index": 1}

        resume = http.get(f"/responses/sessions/{session_id}/resume").json()
        assert resume == {"question_index": 3, "step_index": 1}
        assert open_session(http, seeded)["resume"] == {"question_index": 3, "step_index": 1}

    def test_progress_endpoint(self, http, flat):
        session_id = open_session(http, flat)["session"]["id"]
        http.post(f"/responses/sessions/{session_id}/advance",
                  json={"question_id": flat.question_ids[0], "answer_text": "x"})

        progress = http.get(f"/responses/sessions/{session_id}/progress").json()

        assert progress == {"answered": 1, "total": 4, "percentage": 25}

    def test_unknown_question_is_404(self, http, flat):
        session_id = open_session(http, flat)["session"]["id"]
        response = http.post(f"/responses/sessions/{session_id}/advance",
                             json={"question_id": "nope", "answer_text": "x"})
        assert response.status_code == 404

    def test_complete_without_body_and_retake(self, http, flat):
        session_id = open_session(http, flat)["session"]["id"]

        completed = http.post(f"/responses/sessions/{session_id}/complete")
        assert completed.status_code == 200, completed.text
        assert completed.json()["completion_percent"] == 100

        late = http.post(f"/responses/sessions/{session_id}/advance",
                         json={"question_id": flat.question_ids[0], "answer_text": "x"})
        assert late.status_code == 409

        retake = http.post(f"/responses/assessments/{flat.assessment.id}/retake")
        assert retake.status_code == 200, retake.text
        assert retake.json()["id"] == session_id
        assert retake.json()["completion_percent"] == 0

    def test_retake_of_unfinished_assessment_is_409(self, http, flat):
        open_session(http, flat)
        assert http.post(f"/responses/assessments/{flat.assessment.id}/retake").status_code == 409

    def test_reviewer_requires_nomination_id(self, http, flat):
        response = http.post("/responses/sessions", json={
            "participant_assessment_id": flat.assessment.id,
            "respondent": {"type": "reviewer"},
        })
        assert response.status_code == 422

    def test_catalog_endpoint(self, http, flat):
        catalog = http.get(f"/responses/cohort-assessments/{flat.cohort_assessment.id}/catalog").json()

        assert catalog["question_set_id"] == flat.definition.id
        assert catalog["has_steps"] is False
        assert catalog["total_questions"] == 4

    def test_other_clients_records_are_hidden(self, http, db, make_assessment):
        other = Client(name="globex", subdomain="globex")
        db.add(other)
        db.commit()
        seeded = make_assessment(step_sizes=None)
        seeded.cohort.client_id = other.id
        db.add(seeded.cohort)
        db.commit()

        response = http.post("/responses/sessions", json={"participant_assessment_id": seeded.assessment.id})

        assert response.status_code == 404

    def test_unknown_assessment_is_404(self, http):
        response = http.post("/responses/sessions", json={"participant_assessment_id": "missing"})
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Nominations
# ---------------------------------------------------------------------------

class TestNominationRoutes:

    def test_create_list_and_summary(self, http, flat):
        response = http.post("/nominations", json={
            "participant_assessment_id": flat.assessment.id,
            "nominated_by_id": PARTICIPANT_ID,
            "reviewer_ids": ["r1"],
            "external_reviewers": [{"email": "ext@example.com", "name": "Ext"}, {"email": "broken"}],
        })
        assert response.status_code == 201, response.text
        batch = response.json()
        assert len(batch["created"]) == 2
        assert batch["partial_failure"] is True
        assert "broken" in batch["errors"]

        listed = http.get("/nominations", params={"participant_assessment_id": flat.assessment.id}).json()
        nominee_types = sorted(item["nominee"]["type"] for item in listed)
        assert nominee_types == ["external", "internal"]

        summary = http.get("/nominations/summary", params={"participant_assessment_id": flat.assessment.id}).json()
        assert summary["active"] == 2
        assert summary["remaining"] == summary["quota"] - 2

    def test_empty_request_is_422(self, http, flat):
        response = http.post("/nominations", json={
            "participant_assessment_id": flat.assessment.id,
            "nominated_by_id": PARTICIPANT_ID,
        })
        assert response.status_code == 422

    def test_quota_exceeded_is_409_with_detail(self, http, make_assessment):
        seeded = make_assessment(step_sizes=None, nomination_quota=1)

        response = http.post("/nominations", json={
            "participant_assessment_id": seeded.assessment.id,
            "nominated_by_id": PARTICIPANT_ID,
            "reviewer_ids": ["r1", "r2"],
        })

        assert response.status_code == 409
        assert response.json()["detail"]["remaining"] == 1
        assert response.json()["detail"]["quota"] == 1

    def test_all_duplicates_is_409(self, http, flat):
        body = {
            "participant_assessment_id": flat.assessment.id,
            "nominated_by_id": PARTICIPANT_ID,
            "reviewer_ids": ["r1"],
        }
        assert http.post("/nominations", json=body).status_code == 201

        response = http.post("/nominations", json=body)

        assert response.status_code == 409
        assert response.json()["detail"]["reason"] == "all_duplicates"

    def test_wrong_nominator_is_403(self, http, flat):
        response = http.post("/nominations", json={
            "participant_assessment_id": flat.assessment.id,
            "nominated_by_id": "intruder",
            "reviewer_ids": ["r1"],
        })
        assert response.status_code == 403

    def test_accept_then_review(self, http, flat):
        created = http.post("/nominations", json={
            "participant_assessment_id": flat.assessment.id,
            "nominated_by_id": PARTICIPANT_ID,
            "reviewer_ids": ["r1"],
        }).json()["created"][0]

        inbox = http.get("/nominations/inbox", params={"reviewer_id": "r1"}).json()
        assert [item["id"] for item in inbox] == [created]

        accepted = http.post(f"/nominations/{created}/accept", json={"actor_id": "r1"})
        assert accepted.status_code == 200
        assert accepted.json()["request_status"] == "accepted"

        again = http.post(f"/nominations/{created}/reject", json={"actor_id": "r1"})
        assert again.status_code == 409

        view = open_session(http, flat, respondent={"type": "reviewer", "nomination_id": created, "reviewer_id": "r1"})
        assert view["session"]["respondent_type"] == "reviewer"

    def test_reviewer_cannot_open_pending_nomination(self, http, flat):
        created = http.post("/nominations", json={
            "participant_assessment_id": flat.assessment.id,
            "nominated_by_id": PARTICIPANT_ID,
            "reviewer_ids": ["r1"],
        }).json()["created"][0]

        response = http.post("/responses/sessions", json={
            "participant_assessment_id": flat.assessment.id,
            "respondent": {"type": "reviewer", "nomination_id": created},
        })

        assert response.status_code == 400

    def test_delete(self, http, flat):
        created = http.post("/nominations", json={
            "participant_assessment_id": flat.assessment.id,
            "nominated_by_id": PARTICIPANT_ID,
            "reviewer_ids": ["r1"],
        }).json()["created"][0]

        forbidden = http.delete(f"/nominations/{created}", params={"nominated_by_id": "r1"})
        assert forbidden.status_code == 403

        deleted = http.delete(f"/nominations/{created}", params={"nominated_by_id": PARTICIPANT_ID})
        assert deleted.status_code == 204
        assert http.post(f"/nominations/{created}/accept", json={"actor_id": "r1"}).status_code == 404

    def test_ensure_participant_assessment(self, http, flat):
        response = http.post("/nominations/participant-assessments", json={
            "participant_id": "participant-2",
            "cohort_assessment_id": flat.cohort_assessment.id,
        })

        assert response.status_code == 200, response.text
        assert response.json()["participant_id"] == "participant-2"
        assert response.json()["status"] == "Not started"


# ---------------------------------------------------------------------------
# API key authentication
# ---------------------------------------------------------------------------

class TestApiKeyAuth:

    @pytest.fixture
    def raw_http(self, engine, db, client_row, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", "sqlite://")
        monkeypatch.setattr(api.auth, "get_engine", lambda: engine)
        db.add(APIKey(key_hash=hash_api_key("secret"), name="test", client_id=client_row.id))
        db.add(APIKey(key_hash=hash_api_key("retired"), name="old", client_id=client_row.id, is_active=False))
        db.commit()

        def override_get_db():
            with Session(engine) as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        with TestClient(app) as test_client:
            yield test_client
        app.dependency_overrides.clear()

    def test_valid_key(self, raw_http, flat):
        response = raw_http.get(
            f"/responses/cohort-assessments/{flat.cohort_assessment.id}/catalog",
            headers={"X-API-Key": "secret"},
        )
        assert response.status_code == 200, response.text

    def test_unknown_key(self, raw_http, flat):
        response = raw_http.get(
            f"/responses/cohort-assessments/{flat.cohort_assessment.id}/catalog",
            headers={"X-API-Key": "wrong"},
        )
        assert response.status_code == 401

    def test_inactive_key(self, raw_http, flat):
        response = raw_http.get(
            f"/responses/cohort-assessments/{flat.cohort_assessment.id}/catalog",
            headers={"X-API-Key": "retired"},
        )
        assert response.status_code == 401

    def test_missing_key(self, raw_http, flat):
        response = raw_http.get(f"/responses/cohort-assessments/{flat.cohort_assessment.id}/catalog")
        assert response.status_code in (401, 403)

    def test_health_needs_no_key(self, raw_http):
        assert raw_http.get("/health").status_code == 200
