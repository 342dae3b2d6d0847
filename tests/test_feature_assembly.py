# /tests/test_feature_assembly.py

import pytest
from datetime import datetime, timezone

from app.services.prediction_helpers.feature_assembly import assemble_student_features
from app.models.student_model import Student
from app.models.record_model import AttendanceRecord, GradeRecord, BehaviorRecord

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)

# --- Test Data Fixtures ---

@pytest.fixture
def student():
    return Student(
        id="stu_1", name="Ada Lovelace", grade="10th", enrollmentDate="2025-06-20",
        attendanceRate=88, currentGPA=3.1, behaviorScore=3.5,
    )

@pytest.fixture
def attendance():
    return [
        AttendanceRecord(id="a1", studentId="stu_1", date="2025-06-29", status="Present"),
        AttendanceRecord(id="a2", studentId="stu_1", date="2025-06-28", status="Absent"),
        AttendanceRecord(id="a3", studentId="stu_1", date="2025-06-27", status="Late"),
        AttendanceRecord(id="a4", studentId="stu_1", date="2025-06-26", status="Excused"),
        # Outside the 30-day window
        AttendanceRecord(id="a5", studentId="stu_1", date="2025-05-01", status="Absent"),
    ]

@pytest.fixture
def grades():
    return [
        GradeRecord(id="g1", studentId="stu_1", subject="Math", assignment="Quiz 1", score=45, maxScore=50, date="2025-06-20", category="Quiz"),
        GradeRecord(id="g2", studentId="stu_1", subject="Math", assignment="Test 1", score=70, maxScore=100, date="2025-06-10", category="Test"),
        GradeRecord(id="g3", studentId="stu_1", subject="Art", assignment="Project 1", score=0, maxScore=100, date="2025-04-01", category="Project"),
    ]

@pytest.fixture
def behavior():
    return [
        BehaviorRecord(id="b1", studentId="stu_1", date="2025-06-25", type="Negative", severity=3),
        BehaviorRecord(id="b2", studentId="stu_1", date="2025-06-15", type="Negative", severity=2),
        BehaviorRecord(id="b3", studentId="stu_1", date="2025-06-05", type="Positive", severity=1),
        BehaviorRecord(id="b4", studentId="stu_1", date="2025-03-05", type="Negative", severity=5),
    ]

# --- Unit Tests ---

def test_assemble_features_uses_only_the_recent_window(student, attendance, grades, behavior):
    features = assemble_student_features(student, attendance, grades, behavior, now=NOW)

    # Present and Late count as attended: 2 of 4 recent days.
    assert features.recentAttendanceRate == pytest.approx(50.0)
    # (90% + 70%) / 2
    assert features.recentGradeAverage == pytest.approx(80.0)
    assert features.negativeIncidents == 2
    assert features.positiveIncidents == 1
    assert features.totalBehaviorIncidents == 3
    assert features.enrollmentDuration == 10
    assert features.overallGPA == 3.1
    assert features.overallAttendanceRate == 88
    assert features.studentName == "Ada Lovelace"

def test_record_on_the_cutoff_day_is_included(student):
    """The cutoff is the start of the day 30 days before now."""
    records = [AttendanceRecord(id="a1", studentId="stu_1", date="2025-05-31", status="Present")]
    features = assemble_student_features(student, records, [], [], now=NOW)
    assert features.recentAttendanceRate == pytest.approx(100.0)

def test_empty_history_yields_zero_aggregates(student):
    features = assemble_student_features(student, [], [], [], now=NOW)
    assert features.recentAttendanceRate == 0.0
    assert features.recentGradeAverage == 0.0
    assert features.negativeIncidents == 0
    assert features.positiveIncidents == 0
    assert features.totalBehaviorIncidents == 0
