"""Unit tests for be.api with repository and embedder substituted."""

import pytest
from fastapi.testclient import TestClient

from ai.embeddings import get_embedder
from be import api, models
from be.api import app, parse_limit
from be.db import get_session

MATCHES_URL = "/api/patient-caregiver-matches"


def headers(user_id=1, role="patient", patient_id=100):
    h = {"X-User-Id": str(user_id), "X-User-Role": role}
    if patient_id is not None:
        h["X-Patient-Id"] = str(patient_id)
    return h


@pytest.fixture
def patient(user_factory):
    record = models.Patient(
        id=100, user_id=1, condition="Dementia", years="3", schedule="Full-time",
        description="Memory support", special=None, medical_history=None,
    )
    record.user = user_factory(1, "Ama Boateng", role="patient", location="Accra")
    return record


@pytest.fixture
def caregivers(user_factory, caregiver_factory):
    accra = caregiver_factory(
        10,
        user_factory(2, "Abena Mensah", location="Accra", photo_url="/uploads/photo-2.jpg"),
        bio="Dementia care and memory support",
        qualifications=("Dementia Care Certificate",),
        verification=models.Verification(
            id=1, document_type="Ghana Card", document="/uploads/id-2.pdf",
            photo="/uploads/selfie-2.jpg", status="approved",
        ),
    )
    tamale = caregiver_factory(
        11,
        user_factory(3, "Kofi Owusu", location="Tamale"),
        bio="Cooking and gardening",
        schedule="week-ends",
    )
    return [tamale, accra]


@pytest.fixture
def backend(patient, caregivers):
    return {"patient": patient, "caregivers": caregivers}


@pytest.fixture
def client(monkeypatch, backend, hashing_embedder):
    async def fake_get_patient(session, patient_id):
        found = backend["patient"]
        return found if found is not None and found.id == patient_id else None

    async def fake_get_caregivers(session):
        return list(backend["caregivers"])

    async def fake_session():
        yield None

    monkeypatch.setattr(api, "get_patient_with_user", fake_get_patient)
    monkeypatch.setattr(api, "get_available_caregivers_for_matching", fake_get_caregivers)
    app.dependency_overrides[get_session] = fake_session
    app.dependency_overrides[get_embedder] = lambda: hashing_embedder

    yield TestClient(app)

    app.dependency_overrides.clear()


class TestParseLimit:
    """The optional result cap."""

    @pytest.mark.parametrize("raw, expected", [
        (None, None),
        ("3", 3),
        ("0", None),
        ("-2", None),
        ("abc", None),
        ("100000", 500),
    ])
    def test_values(self, raw, expected):
        assert parse_limit(raw) == expected


class TestAccessControl:
    """Status codes before any matching happens."""

    def test_missing_identity(self, client):
        response = client.get(MATCHES_URL)
        assert response.status_code == 401

    def test_unknown_role(self, client):
        response = client.get(MATCHES_URL, headers=headers(role="superuser"))
        assert response.status_code == 401

    def test_caregiver_role_forbidden(self, client):
        response = client.get(MATCHES_URL, headers=headers(role="caregiver"))
        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden: insufficient role"

    def test_missing_patient_id(self, client):
        response = client.get(MATCHES_URL, headers=headers(patient_id=None))
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid patient ID"

    def test_patient_not_found(self, client):
        response = client.get(MATCHES_URL, headers=headers(patient_id=999))
        assert response.status_code == 404

    def test_other_users_patient(self, client):
        response = client.get(MATCHES_URL, headers=headers(user_id=42))
        assert response.status_code == 403

    def test_admin_may_view_any_patient(self, client):
        response = client.get(MATCHES_URL, headers=headers(user_id=42, role="admin"))
        assert response.status_code == 200


class TestMatches:
    """Successful matching responses."""

    def test_ranked_with_scores(self, client):
        response = client.get(MATCHES_URL, headers=headers())
        assert response.status_code == 200

        body = response.json()
        assert [m["id"] for m in body] == [10, 11]
        assert body[0]["score"] > body[1]["score"]
        assert body[0]["location_score"] == 1.0
        for match in body:
            assert 0.0 <= match["score"] <= 1.0

    def test_file_paths_become_urls(self, client):
        body = client.get(MATCHES_URL, headers=headers()).json()
        top = body[0]
        assert top["user"]["photo_url"] == "http://testserver/uploads/photo-2.jpg"
        assert top["verification"]["document"] == "http://testserver/uploads/id-2.pdf"
        assert top["verification"]["photo"] == "http://testserver/uploads/selfie-2.jpg"
        assert top["qualifications"][0]["file_url"] == "http://testserver/uploads/qual-10-0.pdf"

    def test_configured_public_base_url(self, client, monkeypatch):
        monkeypatch.setattr(api.settings.storage, "public_base_url", "https://files.example.com")
        top = client.get(MATCHES_URL, headers=headers()).json()[0]
        assert top["user"]["photo_url"] == "https://files.example.com/uploads/photo-2.jpg"

    def test_limit_truncates_after_ranking(self, client):
        body = client.get(MATCHES_URL, params={"limit": "1"}, headers=headers()).json()
        assert [m["id"] for m in body] == [10]

    @pytest.mark.parametrize("limit", ["0", "-1", "many"])
    def test_invalid_limit_means_no_cap(self, client, limit):
        body = client.get(MATCHES_URL, params={"limit": limit}, headers=headers()).json()
        assert len(body) == 2

    def test_no_eligible_caregivers(self, client, backend, hashing_embedder):
        backend["caregivers"] = []
        response = client.get(MATCHES_URL, headers=headers())
        assert response.status_code == 200
        assert response.json() == []
        assert hashing_embedder.calls == 0


class TestFailures:
    """Every matching failure gets the same opaque 500 body."""

    FAILED_BODY = {"error": "Failed to compute caregiver matches"}

    def test_embedding_failure(self, client, failing_embedder):
        app.dependency_overrides[get_embedder] = lambda: failing_embedder()
        response = client.get(MATCHES_URL, headers=headers())
        assert response.status_code == 500
        assert response.json() == self.FAILED_BODY

    def test_unexpected_failure(self, client, monkeypatch):
        async def broken(session):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(api, "get_available_caregivers_for_matching", broken)
        response = client.get(MATCHES_URL, headers=headers())
        assert response.status_code == 500
        assert response.json() == self.FAILED_BODY

    def test_patient_lookup_failure(self, client, monkeypatch):
        async def broken(session, patient_id):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(api, "get_patient_with_user", broken)
        response = client.get(MATCHES_URL, headers=headers())
        assert response.status_code == 500
        assert response.json() == self.FAILED_BODY


class TestTimeout:
    """The optional overall matching timeout."""

    def test_expired_timeout_is_a_matching_failure(self, client, monkeypatch, slow_embedder):
        monkeypatch.setattr(api.settings.matching, "timeout_seconds", 0.05)
        app.dependency_overrides[get_embedder] = lambda: slow_embedder(delay=0.5)

        response = client.get(MATCHES_URL, headers=headers())
        assert response.status_code == 500
        assert response.json() == TestFailures.FAILED_BODY

    def test_timeout_not_reached(self, client, monkeypatch):
        monkeypatch.setattr(api.settings.matching, "timeout_seconds", 30.0)

        response = client.get(MATCHES_URL, headers=headers())
        assert response.status_code == 200
        assert [m["id"] for m in response.json()] == [10, 11]


class TestServiceEndpoints:
    """Health and info endpoints."""

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["embedding_model"] == api.settings.embeddings.model_name

    def test_root(self, client):
        body = client.get("/").json()
        assert body["endpoints"]["patient_caregiver_matches"] == MATCHES_URL
