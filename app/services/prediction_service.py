# /app/services/prediction_service.py

"""
Risk prediction for students. Each prediction first asks Gemini for a
structured assessment built from the student's 30-day history; when the
remote call or its reply fails in any way, the rule-based formula is used
instead, so `predict` never raises.
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from fastapi import Depends

from ..models.student_model import Student
from ..models.record_model import AttendanceRecord, GradeRecord, BehaviorRecord
from ..models.prediction_model import RiskPrediction, RiskFactor, StudentFeatures
from ..models.settings_model import RiskThresholds
from .storage_service import StorageService, get_storage_service
from . import gemini_service, prompt_library
from .risk_scoring import calculate_risk, map_score_to_level, normalized_components, DEFAULT_THRESHOLDS
from .prediction_helpers.feature_assembly import assemble_student_features
from .prediction_helpers.response_parsing import parse_risk_assessment

MODEL_VERSION = "1.0.0"
GEMINI_MODEL_TAG = "gemini"
FALLBACK_MODEL_TAG = "fallback"
FALLBACK_CONFIDENCE = 0.75

# External rate limiting: at most BATCH_SIZE calls in flight, then a pause.
BATCH_SIZE = 5
BATCH_DELAY_SECONDS = 1.0


def is_fallback(prediction: RiskPrediction) -> bool:
    return prediction.modelVersion.endswith(f"-{FALLBACK_MODEL_TAG}")


class PredictionService:
    def __init__(
        self,
        api_key: Optional[str],
        thresholds: Optional[RiskThresholds] = None,
        batch_size: int = BATCH_SIZE,
        batch_delay_seconds: float = BATCH_DELAY_SECONDS,
    ):
        self.api_key = api_key
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds

    # --- Prompt Construction ---

    def _build_prompt(self, features: StudentFeatures) -> str:
        return prompt_library.RISK_ANALYSIS_PROMPT.format(
            student_name=features.studentName,
            grade=features.grade,
            enrollment_duration=features.enrollmentDuration,
            overall_gpa=features.overallGPA,
            overall_attendance_rate=features.overallAttendanceRate,
            recent_attendance_rate=features.recentAttendanceRate,
            recent_grade_average=features.recentGradeAverage,
            negative_incidents=features.negativeIncidents,
            positive_incidents=features.positiveIncidents,
            total_behavior_incidents=features.totalBehaviorIncidents,
            low_cutoff=self.thresholds.low,
            medium_cutoff=self.thresholds.medium,
        )

    # --- Single Prediction ---

    async def _remote_prediction(
        self,
        student: Student,
        attendance_records: List[AttendanceRecord],
        grade_records: List[GradeRecord],
        behavior_records: List[BehaviorRecord],
    ) -> RiskPrediction:
        if not self.api_key:
            raise ValueError("No Gemini API key is configured.")

        features = assemble_student_features(student, attendance_records, grade_records, behavior_records)
        ai_response = await gemini_service.generate_text(self._build_prompt(features), api_key=self.api_key)

        result = parse_risk_assessment(ai_response)
        if not result.success:
            raise ValueError(result.error)

        assessment = result.assessment
        return RiskPrediction(
            studentId=student.id,
            riskScore=assessment.riskScore,
            riskLevel=map_score_to_level(assessment.riskScore, self.thresholds),
            confidence=assessment.confidence,
            factors=assessment.factors,
            modelVersion=f"{MODEL_VERSION}-{GEMINI_MODEL_TAG}",
            predictedAt=datetime.now(timezone.utc).isoformat(),
            reasoning=assessment.reasoning,
        )

    async def predict(
        self,
        student: Student,
        attendance_records: List[AttendanceRecord],
        grade_records: List[GradeRecord],
        behavior_records: List[BehaviorRecord],
    ) -> RiskPrediction:
        """Predicts a student's risk with Gemini, falling back to the rule-based formula on any failure."""
        try:
            return await self._remote_prediction(student, attendance_records, grade_records, behavior_records)
        except Exception as e:
            print(f"ERROR in risk prediction for student {student.id}, using fallback: {e}")
            return self.fallback_prediction(student)

    def fallback_prediction(self, student: Student) -> RiskPrediction:
        attendance_score, gpa_score, behavior_score_norm = normalized_components(
            student.attendanceRate, student.currentGPA, student.behaviorScore
        )
        risk_level, risk_score = calculate_risk(
            student.attendanceRate, student.currentGPA, student.behaviorScore, self.thresholds
        )
        return RiskPrediction(
            studentId=student.id,
            riskScore=risk_score,
            riskLevel=risk_level,
            confidence=FALLBACK_CONFIDENCE,
            factors=[
                RiskFactor(
                    feature="Attendance Rate",
                    impact=0.3 if attendance_score < 0.8 else -0.1,
                    description=f"Current attendance: {student.attendanceRate}%",
                ),
                RiskFactor(
                    feature="Academic Performance",
                    impact=0.4 if gpa_score < 0.6 else -0.2,
                    description=f"Current GPA: {student.currentGPA}",
                ),
                RiskFactor(
                    feature="Behavioral Indicators",
                    impact=0.2 if behavior_score_norm > 0.6 else -0.1,
                    description=f"Behavior score: {student.behaviorScore}/5",
                ),
            ],
            modelVersion=f"{MODEL_VERSION}-{FALLBACK_MODEL_TAG}",
            predictedAt=datetime.now(timezone.utc).isoformat(),
        )

    # --- Batch Prediction ---

    @staticmethod
    def _records_for(student_id: str, attendance, grades, behavior) -> Tuple[list, list, list]:
        return (
            [r for r in attendance if r.studentId == student_id],
            [r for r in grades if r.studentId == student_id],
            [r for r in behavior if r.studentId == student_id],
        )

    async def batch_predict(
        self,
        students: List[Student],
        all_attendance_records: List[AttendanceRecord],
        all_grade_records: List[GradeRecord],
        all_behavior_records: List[BehaviorRecord],
    ) -> List[RiskPrediction]:
        """
        Predicts every student, `batch_size` at a time. Predictions within a
        batch run concurrently; a pause separates batches. Results follow the
        order of `students`, and any prediction that raises is replaced by the
        rule-based fallback.
        """
        predictions: List[RiskPrediction] = []

        for start in range(0, len(students), self.batch_size):
            batch = students[start:start + self.batch_size]
            tasks = [
                self.predict(student, *self._records_for(student.id, all_attendance_records, all_grade_records, all_behavior_records))
                for student in batch
            ]
            results = await asyncio.gather(*tasks, return_exceptions=True)

            for student, result in zip(batch, results):
                if isinstance(result, Exception):
                    print(f"ERROR: Failed to predict for student {student.id}: {result}")
                    predictions.append(self.fallback_prediction(student))
                else:
                    predictions.append(result)

            if start + self.batch_size < len(students):
                await asyncio.sleep(self.batch_delay_seconds)

        return predictions


# --- DEPENDENCY PROVIDER ---
def get_prediction_service(db: StorageService = Depends(get_storage_service)) -> PredictionService:
    """
    FastAPI dependency that builds a PredictionService from the stored API key
    (or the GOOGLE_API_KEY default) and the configured risk thresholds.
    """
    settings = db.get_settings()
    return PredictionService(
        api_key=gemini_service.resolve_api_key(db.get_api_key()),
        thresholds=settings.riskThresholds,
    )
