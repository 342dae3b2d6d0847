# /app/services/student_service.py

"""
Business logic for the student roster and its history records. Whenever a
rolling metric changes, the student's risk score and level are recomputed
with the rule-based formula so the stored pair never goes stale.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..models import student_model, record_model
from ..models.settings_model import RiskThresholds
from ..models.prediction_model import RiskPrediction
from .storage_service import StorageService
from .alert_service import AlertService
from .risk_scoring import calculate_risk, map_score_to_level

METRIC_FIELDS = ("attendanceRate", "currentGPA", "behaviorScore")


def create_student(student_data: student_model.StudentCreate, db: StorageService, thresholds: Optional[RiskThresholds] = None) -> student_model.Student:
    """Enrolls a new student with a server-generated id and an initial rule-based risk."""
    record = student_data.model_dump()
    if not record.get("enrollmentDate"):
        record["enrollmentDate"] = datetime.now(timezone.utc).date().isoformat()

    risk_level, risk_score = calculate_risk(
        record["attendanceRate"], record["currentGPA"], record["behaviorScore"], thresholds
    )
    new_student = student_model.Student(
        **record,
        id=f"stu_{uuid.uuid4().hex[:12]}",
        riskLevel=risk_level,
        riskScore=risk_score,
        lastUpdated=datetime.now(timezone.utc).isoformat(),
    )
    return db.save_student(new_student)


async def update_student_metrics(
    db: StorageService,
    alert_service: AlertService,
    student_id: str,
    updates: Dict[str, Any],
) -> Optional[student_model.Student]:
    """
    Merges `updates` into the stored student. When any metric is part of the
    update the risk is recomputed, and a level change raises a
    risk-level-change alert. Returns None when the student does not exist.
    """
    updates = {field: value for field, value in updates.items() if value is not None}
    if not updates:
        raise ValueError("No update data provided.")

    existing = db.get_student(student_id)
    if existing is None:
        return None

    update_data = dict(updates)
    if any(field in update_data for field in METRIC_FIELDS):
        merged = {**existing.model_dump(), **update_data}
        risk_level, risk_score = calculate_risk(
            merged["attendanceRate"], merged["currentGPA"], merged["behaviorScore"],
            alert_service.settings.riskThresholds,
        )
        update_data["riskLevel"] = risk_level
        update_data["riskScore"] = risk_score

    updated = db.update_student(student_id, update_data)
    if updated is not None and updated.riskLevel != existing.riskLevel:
        await alert_service.create_risk_level_change_alert(updated, existing.riskLevel, updated.riskLevel)
    return updated


async def update_student(
    student_id: str,
    student_update: student_model.StudentUpdate,
    db: StorageService,
    alert_service: AlertService,
) -> Optional[student_model.Student]:
    return await update_student_metrics(db, alert_service, student_id, student_update.model_dump(exclude_unset=True))


def delete_student(student_id: str, db: StorageService) -> bool:
    # History records and alerts are not cascaded; they stay addressable by studentId.
    return db.delete_student(student_id)


# --- History Records ---

def _require_student(student_id: str, db: StorageService):
    if not db.get_student(student_id):
        raise ValueError(f"Student with ID {student_id} not found")


def add_attendance_record(student_id: str, record_data: record_model.AttendanceRecordCreate, db: StorageService) -> record_model.AttendanceRecord:
    _require_student(student_id, db)
    return db.save_attendance_record(record_model.AttendanceRecord(
        **record_data.model_dump(), id=f"att_{uuid.uuid4().hex[:12]}", studentId=student_id
    ))


def add_grade_record(student_id: str, record_data: record_model.GradeRecordCreate, db: StorageService) -> record_model.GradeRecord:
    _require_student(student_id, db)
    return db.save_grade_record(record_model.GradeRecord(
        **record_data.model_dump(), id=f"grd_{uuid.uuid4().hex[:12]}", studentId=student_id
    ))


def add_behavior_record(student_id: str, record_data: record_model.BehaviorRecordCreate, db: StorageService) -> record_model.BehaviorRecord:
    _require_student(student_id, db)
    return db.save_behavior_record(record_model.BehaviorRecord(
        **record_data.model_dump(), id=f"beh_{uuid.uuid4().hex[:12]}", studentId=student_id
    ))


# --- Risk Write-Back ---

def apply_risk_predictions(db: StorageService, predictions: List[RiskPrediction]) -> List[student_model.Student]:
    """
    Copies each prediction's score and level onto its student. Predictions for
    students that are no longer on the roster are skipped.
    """
    updated = []
    for prediction in predictions:
        student = db.update_student(prediction.studentId, {
            "riskScore": prediction.riskScore,
            "riskLevel": prediction.riskLevel,
        })
        if student is not None:
            updated.append(student)
    return updated


def reapply_thresholds(db: StorageService, thresholds: RiskThresholds) -> int:
    """
    Re-derives every stored student's level from their stored score under new
    thresholds. Returns how many students changed level.
    """
    students = db.get_students()
    changed = []
    for student in students:
        level = map_score_to_level(student.riskScore, thresholds)
        if level != student.riskLevel:
            changed.append(student.model_copy(update={"riskLevel": level}))
    if changed:
        db.save_students(changed)
    return len(changed)
