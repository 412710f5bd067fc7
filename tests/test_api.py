"""
HTTP tests for the intake, results and dashboard views.

Collaborators are replaced through dependency overrides; the lifespan hook
(MongoDB connect) does not run because the client is not used as a context
manager.
"""

import json

import pytest
from fastapi.testclient import TestClient

from main import app
from smart_triage.api.dependencies import (
    dashboard,
    dashboard_sessions,
    document_storage,
    patient_store,
    triage_client,
)
from smart_triage.models.intake import ParsedDocument
from smart_triage.services.dashboard_service import DashboardAggregator, DashboardSessions
from smart_triage.utils.errors import PersistenceError, RemoteProcedureError


@pytest.fixture
def board():
    return DashboardAggregator()


@pytest.fixture
def sessions():
    return DashboardSessions()


@pytest.fixture
def client(mock_store, mock_client, mock_storage, board, sessions):
    app.dependency_overrides[patient_store] = lambda: mock_store
    app.dependency_overrides[triage_client] = lambda: mock_client
    app.dependency_overrides[document_storage] = lambda: mock_storage
    app.dependency_overrides[dashboard] = lambda: board
    app.dependency_overrides[dashboard_sessions] = lambda: sessions
    yield TestClient(app)
    app.dependency_overrides.clear()


CHEST_PAIN_FORM = {"age": "45", "gender": "Female", "symptoms": ["Chest Pain"]}


class TestLanding:

    def test_root_lists_views(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "dashboard" in response.json()["views"]

    def test_catalog(self, client):
        data = client.get("/api/v1/intake/catalog").json()
        assert "Chest Pain" in data["symptoms"]
        assert "None" in data["conditions"]
        assert data["genders"] == ["Male", "Female", "Other"]


class TestSubmit:

    def test_end_to_end_high_risk(self, client, mock_store, make_patient):
        response = client.post("/api/v1/intake/submit", json=CHEST_PAIN_FORM)

        assert response.status_code == 200
        body = response.json()
        assert body["patient_id"] == "X"
        assert body["redirect_to"] == "/api/v1/patients/X/results"
        assert body["results"]["risk_label"] == "High Risk"
        assert body["results"]["recommended_department"] == "Cardiology"
        # carried in memory, no re-read
        mock_store.select_by_id.assert_not_awaited()

        mock_store.select_by_id.return_value = make_patient("X", "High", "Cardiology")
        followed = client.get(body["redirect_to"])
        assert followed.status_code == 200
        assert followed.json()["risk_label"] == "High Risk"

    def test_validation_error(self, client, mock_store):
        response = client.post("/api/v1/intake/submit", json={"age": "45"})

        assert response.status_code == 422
        assert response.json()["detail"]["stage"] == "validating"
        mock_store.insert.assert_not_awaited()

    def test_insert_failure(self, client, mock_store):
        mock_store.insert.side_effect = PersistenceError("down")

        response = client.post("/api/v1/intake/submit", json=CHEST_PAIN_FORM)

        assert response.status_code == 503
        assert "patient_id" not in response.json()["detail"]

    def test_classification_failure_then_pending_on_dashboard(
        self, client, mock_store, mock_client, make_patient
    ):
        mock_client.classify.side_effect = RemoteProcedureError("500", "triage")

        response = client.post("/api/v1/intake/submit", json=CHEST_PAIN_FORM)

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["stage"] == "classifying"
        assert detail["patient_id"] == "X"

        mock_store.select_all.return_value = [make_patient("X", None, None)]
        queue = client.get("/api/v1/dashboard").json()["queue"]
        assert queue[0]["patient_id"] == "X"
        assert queue[0]["risk_badge"] == "Pending"

    def test_finalize_failure(self, client, mock_store):
        mock_store.update.side_effect = PersistenceError("write failed")

        response = client.post("/api/v1/intake/submit", json=CHEST_PAIN_FORM)

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["stage"] == "finalizing"
        assert "could not be saved" in detail["message"]


class TestResults:

    def test_fetches_stored_patient(self, client, mock_store, make_patient):
        mock_store.select_by_id.return_value = make_patient(
            "X", "High", "Cardiology", confidence_score=92, ai_explanation="why",
        )

        data = client.get("/api/v1/patients/X/results").json()

        assert data["risk_label"] == "High Risk"
        assert data["recommended_department"] == "Cardiology"
        assert data["explanation"] == "why"
        assert data["summary"]["symptoms"] == ["Chest Pain"]

    def test_unclassified_is_pending(self, client, mock_store, make_patient):
        mock_store.select_by_id.return_value = make_patient("Y")

        data = client.get("/api/v1/patients/Y/results").json()

        assert data["risk_label"] == "Pending"
        assert data["recommended_department"] == "Pending"

    def test_not_found(self, client):
        response = client.get("/api/v1/patients/missing/results")

        assert response.status_code == 404
        intake_path = response.json()["detail"]["intake_path"]
        assert intake_path == "/api/v1/intake/catalog"
        assert client.get(intake_path).status_code == 200


class TestDocuments:

    def test_upload_merges_into_form(self, client, mock_client):
        mock_client.parse_document.return_value = ParsedDocument(age=None, gender="Male")

        response = client.post(
            "/api/v1/intake/documents",
            files={"file": ("ehr.pdf", b"%PDF-1.4", "application/pdf")},
            data={"form": json.dumps({"age": "40"})},
        )

        assert response.status_code == 200
        form = response.json()["form"]
        assert form["age"] == "40"
        assert form["gender"] == "Male"

    def test_parse_failure(self, client, mock_client):
        mock_client.parse_document.side_effect = RemoteProcedureError("x", "parse-document")

        response = client.post(
            "/api/v1/intake/documents",
            files={"file": ("ehr.png", b"png", "image/png")},
        )

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to process document"

    def test_bad_extension(self, client):
        response = client.post(
            "/api/v1/intake/documents",
            files={"file": ("ehr.txt", b"text", "text/plain")},
        )
        assert response.status_code == 422


class TestDashboard:

    def test_filters_and_stats(self, client, mock_store, make_patient):
        mock_store.select_all.return_value = [
            make_patient("a", "Low", "General Medicine"),
            make_patient("b", "High", "Cardiology"),
            make_patient("c", None, None),
        ]

        data = client.get("/api/v1/dashboard", params={"risk": "High"}).json()

        assert [row["patient_id"] for row in data["queue"]] == ["b"]
        assert data["stats"]["risk_counts"] == {"High": 1, "Medium": 0, "Low": 1}
        assert data["stats"]["total_patients"] == 3
        assert data["notifications"] == []

    def test_fetch_failure_is_a_notification(self, client, mock_store, board, make_patient):
        board._patients = (make_patient("old", "Low"),)
        mock_store.select_all.side_effect = PersistenceError("down")

        response = client.get("/api/v1/dashboard")

        assert response.status_code == 200
        data = response.json()
        assert data["notifications"] == ["Failed to load patients"]
        assert data["queue"][0]["patient_id"] == "old"

    def test_unknown_risk_filter(self, client):
        response = client.get("/api/v1/dashboard", params={"risk": "Critical"})
        assert response.status_code == 422

    def test_selection_toggle(self, client, mock_store, make_patient):
        mock_store.select_all.return_value = [make_patient("a")]
        client.get("/api/v1/dashboard")

        first = client.post("/api/v1/dashboard/select/a").json()
        second = client.post("/api/v1/dashboard/select/a").json()

        assert first["selected_patient_id"] == "a"
        assert second["selected_patient_id"] is None

    def test_generate_synthetic(self, client, mock_store, make_patient):
        mock_store.select_all.return_value = [make_patient("s1"), make_patient("s2")]

        data = client.post("/api/v1/dashboard/synthetic").json()

        assert data["total_patients"] == 2

    def test_generate_synthetic_failure(self, client, mock_client):
        mock_client.generate_synthetic.side_effect = RemoteProcedureError("x", "generate-synthetic")

        response = client.post("/api/v1/dashboard/synthetic")

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to generate data"


class TestDashboardSessions:

    @pytest.fixture
    def clients(self, mock_store, mock_client, sessions):
        app.dependency_overrides[patient_store] = lambda: mock_store
        app.dependency_overrides[triage_client] = lambda: mock_client
        app.dependency_overrides[dashboard_sessions] = lambda: sessions
        yield TestClient(app), TestClient(app)
        app.dependency_overrides.clear()

    def test_selection_is_per_client(self, clients, sessions, mock_store, make_patient):
        mock_store.select_all.return_value = [make_patient("a"), make_patient("b")]
        nurse, doctor = clients

        nurse.get("/api/v1/dashboard")
        doctor.get("/api/v1/dashboard")
        assert len(sessions) == 2

        nurse.post("/api/v1/dashboard/select/a")
        doctor.post("/api/v1/dashboard/select/b")

        nurse_view = nurse.get("/api/v1/dashboard", params={"refresh": False}).json()
        doctor_view = doctor.get("/api/v1/dashboard", params={"refresh": False}).json()
        assert nurse_view["selected_patient"]["id"] == "a"
        assert doctor_view["selected_patient"]["id"] == "b"

    def test_failed_fetch_keeps_own_snapshot(self, clients, mock_store, make_patient):
        nurse, doctor = clients
        mock_store.select_all.return_value = [make_patient("old")]
        nurse.get("/api/v1/dashboard")

        mock_store.select_all.side_effect = PersistenceError("down")
        data = doctor.get("/api/v1/dashboard").json()

        assert data["notifications"] == ["Failed to load patients"]
        assert data["queue"] == []

    def test_submit_updates_open_dashboards(self, clients, mock_store, make_patient):
        nurse, _ = clients
        mock_store.select_all.return_value = [make_patient("X")]
        nurse.get("/api/v1/dashboard")

        nurse.post("/api/v1/intake/submit", json=CHEST_PAIN_FORM)
        queue = nurse.get("/api/v1/dashboard", params={"refresh": False}).json()["queue"]

        assert queue[0]["risk_badge"] == "High"
