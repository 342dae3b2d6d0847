# /app/services/model_service.py

"""
Model lifecycle: deciding when a retrain is due and running one. A retrain
re-predicts every student, feeds the predictions through the alert service,
writes the new risk back onto the students and records new model metadata.
"""

import time
from datetime import datetime, timezone
from typing import List, Optional

from ..models.prediction_model import ModelMetadata, RiskPrediction, RetrainStatus
from ..models.settings_model import AppSettings
from .storage_service import StorageService
from .alert_service import AlertService
from .prediction_service import PredictionService, is_fallback
from .risk_scoring import calculate_risk
from . import student_service

BASE_MODEL_VERSION = "1.0.0"
RETRAIN_VERSION_MARKER = "-retrained-"


def get_retrain_status(db: StorageService, settings: Optional[AppSettings] = None) -> RetrainStatus:
    """
    A retrain is due when no model has been recorded yet, or when the roster
    has grown by at least `autoRetrainThreshold` students since the last one.
    """
    settings = settings or db.get_settings()
    metadata = db.get_model_metadata()
    student_count = len(db.get_students())
    threshold = settings.modelSettings.autoRetrainThreshold

    if metadata is None:
        retrain_due = student_count > 0
    else:
        retrain_due = threshold > 0 and (student_count - metadata.sampleSize) >= threshold

    return RetrainStatus(
        retrainDue=retrain_due,
        studentCount=student_count,
        lastSampleSize=metadata.sampleSize if metadata else None,
        autoRetrainThreshold=threshold,
    )


def is_retrain_due(db: StorageService, settings: Optional[AppSettings] = None) -> bool:
    return get_retrain_status(db, settings).retrainDue


def _next_version(current: Optional[ModelMetadata]) -> str:
    base = current.version.split(RETRAIN_VERSION_MARKER)[0] if current else BASE_MODEL_VERSION
    return f"{base}{RETRAIN_VERSION_MARKER}{int(time.time() * 1000)}"


def _baseline_agreement(db: StorageService, predictions: List[RiskPrediction], settings: AppSettings) -> float:
    """Share of predictions whose level matches the rule-based level for the same student."""
    students_by_id = {s.id: s for s in db.get_students()}
    compared = 0
    agreed = 0
    for prediction in predictions:
        student = students_by_id.get(prediction.studentId)
        if student is None:
            continue
        baseline_level, _ = calculate_risk(
            student.attendanceRate, student.currentGPA, student.behaviorScore, settings.riskThresholds
        )
        compared += 1
        agreed += int(baseline_level == prediction.riskLevel)
    return round(agreed / compared, 4) if compared else 0.0


async def retrain_model(
    db: StorageService,
    prediction_service: PredictionService,
    alert_service: AlertService,
) -> ModelMetadata:
    """Runs a full re-prediction of the roster and records the resulting model metadata."""
    settings = alert_service.settings
    students = db.get_students()
    if not students:
        raise ValueError("There are no students to train on.")

    predictions = await prediction_service.batch_predict(
        students,
        db.get_attendance_records(),
        db.get_grade_records(),
        db.get_behavior_records(),
    )

    await alert_service.process_risk_predictions(predictions)
    student_service.apply_risk_predictions(db, predictions)

    fallback_count = sum(1 for p in predictions if is_fallback(p))
    if fallback_count:
        print(f"WARNING: {fallback_count} of {len(predictions)} predictions used the rule-based fallback.")

    new_metadata = ModelMetadata(
        version=_next_version(db.get_model_metadata()),
        trainingDate=datetime.now(timezone.utc).isoformat(),
        sampleSize=len(students),
        accuracy=_baseline_agreement(db, predictions, settings),
        thresholds=settings.riskThresholds,
    )
    db.save_model_metadata(new_metadata)

    settings.modelSettings.currentModelVersion = new_metadata.version
    db.save_settings(settings)
    return new_metadata
