# /app/services/prediction_helpers/feature_assembly.py

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence
import pandas as pd
from pydantic import BaseModel

from ...models.student_model import Student
from ...models.record_model import AttendanceRecord, GradeRecord, BehaviorRecord, AttendanceStatus, BehaviorType
from ...models.prediction_model import StudentFeatures

RECENT_WINDOW_DAYS = 30
ATTENDED_STATUSES = [AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value]


def _records_frame(records: Sequence[BaseModel]) -> pd.DataFrame:
    return pd.DataFrame([r.model_dump(mode="json") for r in records])


def _filter_recent(frame: pd.DataFrame, cutoff: pd.Timestamp) -> pd.DataFrame:
    """Keeps rows dated on or after the cutoff day. Unparsable dates are dropped."""
    if frame.empty or "date" not in frame.columns:
        return frame.iloc[0:0]
    dates = pd.to_datetime(frame["date"], errors="coerce", utc=True, format="ISO8601")
    return frame[dates >= cutoff]


def _recent_attendance_rate(frame: pd.DataFrame) -> float:
    if frame.empty:
        return 0.0
    return float(frame["status"].isin(ATTENDED_STATUSES).mean() * 100)


def _recent_grade_average(frame: pd.DataFrame) -> float:
    if frame.empty:
        return 0.0
    graded = frame[frame["maxScore"] > 0]
    if graded.empty:
        return 0.0
    return float((graded["score"] / graded["maxScore"] * 100).mean())


def _count_behavior(frame: pd.DataFrame, behavior_type: BehaviorType) -> int:
    if frame.empty:
        return 0
    return int((frame["type"] == behavior_type.value).sum())


def _enrollment_duration_days(enrollment_date: str, now: pd.Timestamp) -> int:
    enrolled = pd.to_datetime(enrollment_date, errors="coerce", utc=True)
    if pd.isna(enrolled):
        return 0
    return max(0, (now - enrolled).days)


def assemble_student_features(
    student: Student,
    attendance_records: List[AttendanceRecord],
    grade_records: List[GradeRecord],
    behavior_records: List[BehaviorRecord],
    now: Optional[datetime] = None,
) -> StudentFeatures:
    """
    Computes the 30-day rolling aggregates for one student. Empty histories
    produce zero rates rather than errors.
    """
    now_ts = pd.Timestamp(now or datetime.now(timezone.utc))
    if now_ts.tzinfo is None:
        now_ts = now_ts.tz_localize("UTC")
    cutoff = (now_ts - timedelta(days=RECENT_WINDOW_DAYS)).normalize()

    recent_attendance = _filter_recent(_records_frame(attendance_records), cutoff)
    recent_grades = _filter_recent(_records_frame(grade_records), cutoff)
    recent_behavior = _filter_recent(_records_frame(behavior_records), cutoff)

    return StudentFeatures(
        studentName=student.name,
        grade=student.grade,
        enrollmentDuration=_enrollment_duration_days(student.enrollmentDate, now_ts),
        overallGPA=student.currentGPA,
        overallAttendanceRate=student.attendanceRate,
        recentAttendanceRate=_recent_attendance_rate(recent_attendance),
        recentGradeAverage=_recent_grade_average(recent_grades),
        negativeIncidents=_count_behavior(recent_behavior, BehaviorType.NEGATIVE),
        positiveIncidents=_count_behavior(recent_behavior, BehaviorType.POSITIVE),
        totalBehaviorIncidents=len(recent_behavior),
    )
