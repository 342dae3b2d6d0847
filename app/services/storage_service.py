# /app/services/storage_service.py

import os
from typing import List, Dict, Optional, Generator, Any
from dotenv import load_dotenv
from sqlalchemy.orm import Session
from fastapi import Depends

# --- Core Database Setup ---
from app.db.database import get_db

# --- Model Imports ---
from ..models.student_model import Student
from ..models.record_model import AttendanceRecord, GradeRecord, BehaviorRecord
from ..models.alert_model import Alert
from ..models.prediction_model import RiskPrediction, ModelMetadata
from ..models.settings_model import AppSettings

# --- Repository Imports ---
from .database_helpers.blob_repository_sql import BlobRepositorySQL
from .database_helpers.blob_repository_file import BlobRepositoryFile
from .database_helpers.collection_repository import CollectionRepository, SingletonRepository, StorageError

load_dotenv()

DATA_DIR = os.getenv("DATA_DIR", "app/data")

# Determine which blob backend to use based on an environment variable
USE_DATABASE = os.getenv("USE_DATABASE", "false").lower() == "true"

# --- Storage Keys ---
STORAGE_KEYS = {
    "STUDENTS": "srm_students",
    "ATTENDANCE": "srm_attendance",
    "GRADES": "srm_grades",
    "BEHAVIOR": "srm_behavior",
    "ALERTS": "srm_alerts",
    "PREDICTIONS": "srm_predictions",
    "MODEL_METADATA": "srm_model_metadata",
    "SETTINGS": "srm_settings",
}
# Kept apart from the structured settings so exporting settings never leaks it.
API_KEY_STORAGE_KEY = "gemini_api_key"

__all__ = ["StorageService", "StorageError", "get_storage_service", "STORAGE_KEYS", "API_KEY_STORAGE_KEY"]


class StorageService:
    def __init__(self, db_session: Optional[Session] = None, backend: Any = None):
        """
        Initializes the StorageService.
        An explicit `backend` wins. Otherwise, if USE_DATABASE is true, it
        requires a db_session; if not, it falls back to JSON files in DATA_DIR.
        """
        if backend is None:
            if USE_DATABASE:
                if not db_session:
                    raise ValueError("A database session is required when USE_DATABASE is true.")
                backend = BlobRepositorySQL(db_session)
            else:
                backend = BlobRepositoryFile(DATA_DIR)
        self.backend = backend

        # --- Initialize ALL Collection Repositories ---
        self.student_repo = CollectionRepository(backend, STORAGE_KEYS["STUDENTS"], Student)
        self.attendance_repo = CollectionRepository(backend, STORAGE_KEYS["ATTENDANCE"], AttendanceRecord)
        self.grade_repo = CollectionRepository(backend, STORAGE_KEYS["GRADES"], GradeRecord)
        self.behavior_repo = CollectionRepository(backend, STORAGE_KEYS["BEHAVIOR"], BehaviorRecord)
        self.alert_repo = CollectionRepository(backend, STORAGE_KEYS["ALERTS"], Alert)
        # Predictions are keyed by student: the latest prediction wins.
        self.prediction_repo = CollectionRepository(backend, STORAGE_KEYS["PREDICTIONS"], RiskPrediction, id_field="studentId")
        self.model_metadata_repo = SingletonRepository(backend, STORAGE_KEYS["MODEL_METADATA"], ModelMetadata)
        self.settings_repo = SingletonRepository(backend, STORAGE_KEYS["SETTINGS"], AppSettings, default_factory=AppSettings)
        self.api_key_repo = SingletonRepository(backend, API_KEY_STORAGE_KEY)

    # --- STUDENT METHODS (DELEGATED) ---
    def get_students(self) -> List[Student]: return self.student_repo.get_all()
    def get_student(self, student_id: str) -> Optional[Student]: return self.student_repo.get_one(student_id)
    def save_student(self, student) -> Student: return self.student_repo.save(student)
    def save_students(self, students: List) -> List[Student]: return self.student_repo.save_many(students)
    def update_student(self, student_id: str, updates: Dict) -> Optional[Student]:
        return self.student_repo.update(student_id, updates, touch_field="lastUpdated")
    # Related attendance/grade/behavior records are left in place.
    def delete_student(self, student_id: str) -> bool: return self.student_repo.delete(student_id)

    # --- ATTENDANCE, GRADE & BEHAVIOR METHODS (DELEGATED) ---
    def get_attendance_records(self, student_id: Optional[str] = None) -> List[AttendanceRecord]:
        return self.attendance_repo.get_all(studentId=student_id)
    def save_attendance_record(self, record) -> AttendanceRecord: return self.attendance_repo.save(record)
    def save_attendance_records(self, records: List) -> List[AttendanceRecord]: return self.attendance_repo.save_many(records)

    def get_grade_records(self, student_id: Optional[str] = None) -> List[GradeRecord]:
        return self.grade_repo.get_all(studentId=student_id)
    def save_grade_record(self, record) -> GradeRecord: return self.grade_repo.save(record)
    def save_grade_records(self, records: List) -> List[GradeRecord]: return self.grade_repo.save_many(records)

    def get_behavior_records(self, student_id: Optional[str] = None) -> List[BehaviorRecord]:
        return self.behavior_repo.get_all(studentId=student_id)
    def save_behavior_record(self, record) -> BehaviorRecord: return self.behavior_repo.save(record)
    def save_behavior_records(self, records: List) -> List[BehaviorRecord]: return self.behavior_repo.save_many(records)

    # --- ALERT METHODS (DELEGATED) ---
    def get_alerts(self, student_id: Optional[str] = None) -> List[Alert]: return self.alert_repo.get_all(studentId=student_id)
    def get_alert(self, alert_id: str) -> Optional[Alert]: return self.alert_repo.get_one(alert_id)
    def save_alert(self, alert) -> Alert: return self.alert_repo.save(alert)
    def save_alerts(self, alerts: List) -> List[Alert]: return self.alert_repo.save_many(alerts)
    def update_alert(self, alert_id: str, updates: Dict) -> Optional[Alert]: return self.alert_repo.update(alert_id, updates)

    # --- PREDICTION METHODS (DELEGATED) ---
    def get_risk_predictions(self) -> List[RiskPrediction]: return self.prediction_repo.get_all()
    def get_risk_prediction(self, student_id: str) -> Optional[RiskPrediction]: return self.prediction_repo.get_one(student_id)
    def save_risk_prediction(self, prediction) -> RiskPrediction: return self.prediction_repo.save(prediction)
    def save_risk_predictions(self, predictions: List) -> List[RiskPrediction]: return self.prediction_repo.save_many(predictions)

    # --- MODEL METADATA & SETTINGS METHODS (DELEGATED) ---
    def get_model_metadata(self) -> Optional[ModelMetadata]: return self.model_metadata_repo.get()
    def save_model_metadata(self, metadata) -> ModelMetadata: return self.model_metadata_repo.save(metadata)
    def get_settings(self) -> AppSettings: return self.settings_repo.get()
    def save_settings(self, settings) -> AppSettings: return self.settings_repo.save(settings)

    # --- API KEY METHODS (DELEGATED) ---
    def get_api_key(self) -> Optional[str]:
        value = self.api_key_repo.get()
        return value if isinstance(value, str) and value else None
    def save_api_key(self, api_key: str):
        if not api_key or not api_key.strip():
            raise ValueError("API key must not be empty.")
        self.api_key_repo.save(api_key.strip())
    def clear_api_key(self) -> bool: return self.api_key_repo.clear()


# --- DEPENDENCY PROVIDER ---
def get_storage_service(db: Session = Depends(get_db)) -> Generator[StorageService, None, None]:
    """
    FastAPI dependency that provides a StorageService instance.
    It decides whether to use the SQL table or the JSON files.
    """
    yield StorageService(db_session=db if USE_DATABASE else None)
