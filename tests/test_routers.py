# /tests/test_routers.py

import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from app.main import app
from app.services import notification_service
from app.services.storage_service import StorageService, get_storage_service
from app.services.prediction_service import PredictionService, get_prediction_service
from app.services.database_helpers.blob_repository_file import BlobRepositoryFile


@pytest.fixture
def storage(tmp_path):
    return StorageService(backend=BlobRepositoryFile(str(tmp_path)))

@pytest.fixture
def client(storage):
    """
    A TestClient whose storage points at a temporary directory. The client is
    not used as a context manager, so the startup seeding does not run.
    """
    app.dependency_overrides[get_storage_service] = lambda: storage
    app.dependency_overrides[get_prediction_service] = lambda: PredictionService(api_key=None, batch_delay_seconds=0)
    yield TestClient(app)
    app.dependency_overrides.clear()
    notification_service.hub.set_permission("default")

@pytest.fixture
def student_id(client):
    response = client.post("/api/students", json={
        "name": "Ada Lovelace", "grade": "10th", "attendanceRate": 95, "currentGPA": 3.8, "behaviorScore": 4.5,
    })
    return response.json()["id"]


def test_health_check(client):
    assert client.get("/").json()["status"] == "Student Risk Monitor is running!"

# --- Students ---

def test_create_and_get_student(client, student_id):
    response = client.get(f"/api/students/{student_id}")
    assert response.status_code == 200
    assert response.json()["riskLevel"] == "Low"
    assert response.json()["riskScore"] == 0.22

def test_create_student_with_invalid_metrics_is_rejected(client):
    response = client.post("/api/students", json={"name": "Bad Data", "attendanceRate": 140})
    assert response.status_code == 422

def test_get_unknown_student_returns_404(client):
    assert client.get("/api/students/stu_missing").status_code == 404

def test_metric_update_raises_alert(client, student_id):
    response = client.put(f"/api/students/{student_id}", json={"attendanceRate": 40, "currentGPA": 1.0})
    assert response.status_code == 200
    assert response.json()["riskLevel"] == "High"

    alerts = client.get("/api/alerts", params={"student_id": student_id}).json()
    assert len(alerts) == 1
    assert alerts[0]["type"] == "Risk Level Change"

def test_empty_update_returns_400(client, student_id):
    assert client.put(f"/api/students/{student_id}", json={}).status_code == 400

def test_null_metric_update_is_rejected(client, student_id):
    response = client.put(f"/api/students/{student_id}", json={"attendanceRate": None})
    assert response.status_code == 422
    assert client.get(f"/api/students/{student_id}").json()["attendanceRate"] == 95

def test_record_for_unknown_student_returns_404(client):
    response = client.post("/api/students/stu_missing/attendance", json={"date": "2025-06-01", "status": "Present"})
    assert response.status_code == 404

def test_delete_student(client, student_id):
    assert client.delete(f"/api/students/{student_id}").status_code == 204
    assert client.delete(f"/api/students/{student_id}").status_code == 404

def test_predict_single_student_uses_fallback_without_key(client, student_id):
    response = client.post(f"/api/students/{student_id}/predict")
    assert response.status_code == 200
    assert response.json()["modelVersion"] == "1.0.0-fallback"
    assert client.get(f"/api/students/{student_id}/prediction").json()["riskScore"] == 0.22

# --- Alerts ---

def test_manual_alert_and_acknowledge(client, student_id):
    created = client.post("/api/alerts", json={"studentId": student_id, "message": "Parent meeting", "severity": "Low"})
    assert created.status_code == 201
    alert_id = created.json()["id"]

    assert len(client.get("/api/alerts/unacknowledged").json()) == 1

    acknowledged = client.post(f"/api/alerts/{alert_id}/acknowledge", json={"acknowledgedBy": "Ms. Johnson"})
    assert acknowledged.status_code == 200
    assert acknowledged.json()["acknowledgedBy"] == "Ms. Johnson"
    assert client.get("/api/alerts/unacknowledged").json() == []

def test_acknowledge_unknown_alert_returns_404(client):
    response = client.post("/api/alerts/alt_missing/acknowledge", json={"acknowledgedBy": "Ms. Johnson"})
    assert response.status_code == 404

def test_notification_websocket_reports_permission_state(client):
    with client.websocket_connect("/api/alerts/ws") as websocket:
        message = websocket.receive_json()
        assert message == {"type": "permission_state", "payload": {"permission": "default"}}

# --- Predictions & Settings ---

def test_batch_prediction_summary(client, student_id):
    response = client.post("/api/predictions/batch")
    assert response.status_code == 200
    body = response.json()
    assert len(body["predictions"]) == 1
    assert body["fallbackCount"] == 1
    assert body["alertsCreated"] == 0

def test_batch_prediction_writes_risk_back_to_students(client, student_id, mocker):
    mocker.patch('app.services.gemini_service.generate_text', new_callable=AsyncMock, return_value='{"riskScore": 0.9}')
    app.dependency_overrides[get_prediction_service] = lambda: PredictionService(api_key="test-key", batch_delay_seconds=0)

    response = client.post("/api/predictions/batch")
    assert response.status_code == 200
    assert response.json()["predictions"][0]["riskLevel"] == "High"

    student = client.get(f"/api/students/{student_id}").json()
    assert student["riskScore"] == 0.9
    assert student["riskLevel"] == "High"

def test_retrain_and_status(client, student_id):
    assert client.get("/api/predictions/retrain-status").json()["retrainDue"] is True
    retrained = client.post("/api/predictions/retrain")
    assert retrained.status_code == 200
    assert client.get("/api/settings/model").json()["version"] == retrained.json()["version"]
    assert client.get("/api/predictions/retrain-status").json()["retrainDue"] is False

def test_retrain_without_students_returns_409(client):
    assert client.post("/api/predictions/retrain").status_code == 409

def test_api_key_lifecycle(client):
    assert client.get("/api/settings/api-key").json() == {"configured": False}
    assert client.put("/api/settings/api-key", json={"apiKey": "abc123"}).json() == {"configured": True}
    assert client.get("/api/settings/api-key").json() == {"configured": True}
    assert client.delete("/api/settings/api-key").json() == {"configured": False}

def test_settings_reject_unordered_thresholds(client):
    settings = client.get("/api/settings").json()
    settings["riskThresholds"] = {"low": 0.7, "medium": 0.5, "high": 0.9}
    assert client.put("/api/settings", json=settings).status_code == 422

def test_threshold_change_relevels_stored_students(client, student_id):
    settings = client.get("/api/settings").json()
    settings["riskThresholds"] = {"low": 0.1, "medium": 0.2, "high": 0.9}
    assert client.put("/api/settings", json=settings).status_code == 200

    student = client.get(f"/api/students/{student_id}").json()
    assert student["riskScore"] == 0.22
    assert student["riskLevel"] == "High"

def test_dashboard_summary_and_export(client, student_id):
    summary = client.get("/api/dashboard/summary").json()
    assert summary["studentCount"] == 1
    export = client.get("/api/dashboard/export")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert "Ada Lovelace" in export.text
