# /tests/test_student_service.py

import pytest
from unittest.mock import MagicMock, AsyncMock
from pydantic import ValidationError

from app.services import student_service
from app.services.alert_service import AlertService
from app.services.storage_service import StorageService
from app.services.database_helpers.blob_repository_file import BlobRepositoryFile
from app.models.student_model import StudentCreate, StudentUpdate, RiskLevel
from app.models.record_model import AttendanceRecordCreate, GradeRecordCreate
from app.models.alert_model import AlertType, AlertSeverity
from app.models.settings_model import AppSettings, RiskThresholds
from app.models.prediction_model import RiskPrediction

# --- Test Data Fixtures ---

@pytest.fixture
def storage(tmp_path):
    return StorageService(backend=BlobRepositoryFile(str(tmp_path)))

@pytest.fixture
def alert_service(storage):
    notifier = MagicMock()
    notifier.notify = AsyncMock(return_value=False)
    return AlertService(db=storage, settings=AppSettings(), notifier=notifier)

@pytest.fixture
def student(storage):
    return student_service.create_student(
        StudentCreate(name="Ada Lovelace", grade="10th", attendanceRate=95, currentGPA=3.8, behaviorScore=4.5),
        db=storage,
    )

# --- Enrollment ---

def test_create_student_assigns_id_and_initial_risk(student, storage):
    assert student.id.startswith("stu_")
    assert student.riskScore == 0.22
    assert student.riskLevel == RiskLevel.LOW
    assert student.enrollmentDate
    assert student.lastUpdated
    assert storage.get_student(student.id) == student

# --- Metric Updates ---

@pytest.mark.asyncio
async def test_metric_update_recomputes_risk_and_alerts_on_level_change(student, storage, alert_service):
    """
    GIVEN: A Low risk student.
    WHEN:  Attendance drops to 40% and GPA to 1.0.
    THEN:  The stored risk becomes 0.72 / High and a Risk Level Change alert is raised.
    """
    updated = await student_service.update_student_metrics(
        storage, alert_service, student.id, {"attendanceRate": 40, "currentGPA": 1.0}
    )

    assert updated.riskScore == 0.72
    assert updated.riskLevel == RiskLevel.HIGH
    assert storage.get_student(student.id).riskLevel == RiskLevel.HIGH

    alerts = storage.get_alerts(student_id=student.id)
    assert len(alerts) == 1
    assert alerts[0].type == AlertType.RISK_LEVEL_CHANGE
    assert alerts[0].severity == AlertSeverity.HIGH
    assert alerts[0].message == "Ada Lovelace's risk level changed from Low to High"

@pytest.mark.asyncio
async def test_metric_update_without_level_change_raises_no_alert(student, storage, alert_service):
    updated = await student_service.update_student_metrics(storage, alert_service, student.id, {"attendanceRate": 90})
    assert updated.riskScore == 0.24
    assert updated.riskLevel == RiskLevel.LOW
    assert storage.get_alerts() == []

@pytest.mark.asyncio
async def test_non_metric_update_keeps_risk(student, storage, alert_service):
    updated = await student_service.update_student(student.id, StudentUpdate(email="ada@school.edu"), storage, alert_service)
    assert updated.email == "ada@school.edu"
    assert updated.riskScore == student.riskScore

@pytest.mark.asyncio
async def test_empty_update_is_rejected(student, storage, alert_service):
    with pytest.raises(ValueError):
        await student_service.update_student(student.id, StudentUpdate(), storage, alert_service)

@pytest.mark.asyncio
async def test_null_metric_in_update_is_ignored(student, storage, alert_service):
    updated = await student_service.update_student_metrics(
        storage, alert_service, student.id, {"attendanceRate": None, "currentGPA": 3.0}
    )
    assert updated.attendanceRate == 95
    assert updated.currentGPA == 3.0

@pytest.mark.asyncio
async def test_update_with_only_nulls_is_rejected(student, storage, alert_service):
    with pytest.raises(ValueError):
        await student_service.update_student_metrics(storage, alert_service, student.id, {"attendanceRate": None})

def test_update_model_rejects_explicit_null():
    with pytest.raises(ValidationError):
        StudentUpdate.model_validate({"currentGPA": None})

@pytest.mark.asyncio
async def test_update_unknown_student_returns_none(storage, alert_service):
    assert await student_service.update_student_metrics(storage, alert_service, "stu_missing", {"attendanceRate": 50}) is None

# --- History Records ---

def test_add_records_for_existing_student(student, storage):
    attendance = student_service.add_attendance_record(
        student.id, AttendanceRecordCreate(date="2025-06-01", status="Present"), db=storage
    )
    grade = student_service.add_grade_record(
        student.id,
        GradeRecordCreate(subject="Math", assignment="Quiz 1", score=40, maxScore=50, date="2025-06-01", category="Quiz"),
        db=storage,
    )
    assert attendance.id.startswith("att_")
    assert grade.id.startswith("grd_")
    assert storage.get_attendance_records(student_id=student.id) == [attendance]

def test_add_record_for_unknown_student_raises(storage):
    with pytest.raises(ValueError):
        student_service.add_attendance_record("stu_missing", AttendanceRecordCreate(date="2025-06-01", status="Absent"), db=storage)

# --- Risk Write-Back ---

def test_apply_risk_predictions_updates_known_students(student, storage):
    predictions = [
        RiskPrediction(studentId=student.id, riskScore=0.9, riskLevel=RiskLevel.HIGH, confidence=0.8, modelVersion="1.0.0-gemini-pro", predictedAt="2025-06-01T00:00:00+00:00"),
        RiskPrediction(studentId="stu_missing", riskScore=0.1, riskLevel=RiskLevel.LOW, confidence=0.8, modelVersion="1.0.0-gemini-pro", predictedAt="2025-06-01T00:00:00+00:00"),
    ]
    updated = student_service.apply_risk_predictions(storage, predictions)

    assert [s.id for s in updated] == [student.id]
    stored = storage.get_student(student.id)
    assert stored.riskScore == 0.9
    assert stored.riskLevel == RiskLevel.HIGH

def test_reapply_thresholds_moves_students_between_levels(student, storage):
    assert student_service.reapply_thresholds(storage, RiskThresholds(low=0.1, medium=0.2, high=0.9)) == 1
    assert storage.get_student(student.id).riskLevel == RiskLevel.HIGH
    assert storage.get_student(student.id).riskScore == 0.22

    assert student_service.reapply_thresholds(storage, RiskThresholds()) == 1
    assert storage.get_student(student.id).riskLevel == RiskLevel.LOW
    assert student_service.reapply_thresholds(storage, RiskThresholds()) == 0

def test_delete_student(student, storage):
    assert student_service.delete_student(student.id, db=storage) is True
    assert storage.get_student(student.id) is None
