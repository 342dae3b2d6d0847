# /app/services/sample_data.py

"""
Synthetic demo dataset. Students get independently sampled metrics that feed
the same risk formula used everywhere else; their history records are drawn
so they agree with those metrics (e.g. daily attendance is biased by the
student's attendance rate). Only used to seed an empty store.
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from ..models.student_model import Student, RiskLevel
from ..models.record_model import AttendanceRecord, GradeRecord, BehaviorRecord, AttendanceStatus, GradeCategory, BehaviorType
from ..models.alert_model import Alert, AlertType, AlertSeverity
from ..models.prediction_model import RiskPrediction, RiskFactor, ModelMetadata
from ..models.settings_model import RiskThresholds
from .storage_service import StorageService
from .risk_scoring import calculate_risk

# --- Vocabulary ---

FIRST_NAMES = [
    'Aarav', 'Vivaan', 'Aditya', 'Vihaan', 'Arjun', 'Sai', 'Reyansh', 'Ayaan', 'Krishna', 'Ishaan',
    'Shaurya', 'Atharv', 'Advik', 'Pranav', 'Rishabh', 'Aryan', 'Kabir', 'Ansh', 'Kian', 'Rudra',
    'Prisha', 'Ananya', 'Fatima', 'Aanya', 'Diya', 'Pihu', 'Saanvi', 'Inaya', 'Riya', 'Aadhya',
    'Kiara', 'Anika', 'Kavya', 'Navya', 'Aradhya', 'Myra', 'Sara', 'Pari', 'Alisha', 'Kashvi',
    'Rohan', 'Karthik', 'Nikhil', 'Rahul', 'Amit', 'Suresh', 'Vikram', 'Rajesh', 'Deepak',
    'Sneha', 'Pooja', 'Meera', 'Kavitha', 'Sunita', 'Rekha', 'Priya', 'Neha', 'Swati', 'Divya',
    'Harsh', 'Yash', 'Dev', 'Arush', 'Shivansh', 'Dhruv', 'Karan', 'Tanish', 'Veer', 'Arnav',
    'Tara', 'Ira', 'Mira', 'Zara', 'Nisha', 'Rhea', 'Sia', 'Anya', 'Ishika', 'Mahika',
]

LAST_NAMES = [
    'Sharma', 'Verma', 'Gupta', 'Singh', 'Kumar', 'Patel', 'Agarwal', 'Jain', 'Bansal', 'Agrawal',
    'Chopra', 'Malhotra', 'Kapoor', 'Arora', 'Mittal', 'Joshi', 'Saxena', 'Srivastava', 'Tiwari', 'Pandey',
    'Yadav', 'Mishra', 'Chandra', 'Bhatia', 'Khanna', 'Sinha', 'Mehta', 'Shah', 'Thakur', 'Nair',
    'Reddy', 'Rao', 'Krishnan', 'Iyer', 'Menon', 'Pillai', 'Das', 'Ghosh', 'Mukherjee', 'Chatterjee',
    'Dutta', 'Roy', 'Sengupta', 'Bhattacharya', 'Chakraborty', 'Banerjee', 'Bose', 'Mitra', 'Sarkar', 'Paul',
]

SUBJECTS = ['Mathematics', 'English', 'Science', 'History', 'Art', 'Physical Education', 'Music', 'Computer Science']
GRADE_LEVELS = ['6th', '7th', '8th', '9th', '10th', '11th', '12th']
REPORTERS = ['Ms. Johnson', 'Mr. Smith', 'Dr. Williams', 'Mrs. Brown', 'Mr. Davis']

MAX_SCORE_BY_CATEGORY = {
    GradeCategory.TEST: 100,
    GradeCategory.QUIZ: 50,
    GradeCategory.PROJECT: 100,
    GradeCategory.HOMEWORK: 20,
    GradeCategory.PARTICIPATION: 20,
}

BEHAVIOR_DESCRIPTIONS = {
    BehaviorType.POSITIVE: [
        'Helped classmate with assignment',
        'Showed excellent leadership',
        'Demonstrated outstanding effort',
        'Participated actively in class discussion',
        'Showed kindness to new student',
    ],
    BehaviorType.NEGATIVE: [
        'Disrupted class discussion',
        'Late to class repeatedly',
        'Did not complete homework',
        'Inappropriate behavior in hallway',
        'Disrespectful to teacher',
    ],
    BehaviorType.NEUTRAL: [
        'Parent conference scheduled',
        'Requested extra help',
        'Participated in school event',
        'Submitted assignment late',
        'Asked to stay after class',
    ],
}

# Alert generation odds. These are fixed and independent of AppSettings.
HIGH_RISK_ALERT_PROBABILITY = 0.8
MEDIUM_RISK_ALERT_PROBABILITY = 0.4

ATTENDANCE_DAYS = 30
SAMPLE_MODEL_VERSION = "1.0.0"


# --- Helpers ---

def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng or random.Random()

def _generate_id(rng: random.Random) -> str:
    return uuid.UUID(int=rng.getrandbits(128), version=4).hex[:12]

def _date_days_ago(days: int, now: datetime) -> str:
    return (now - timedelta(days=days)).date().isoformat()

def _now() -> datetime:
    return datetime.now(timezone.utc)


# --- Generators ---

def generate_sample_students(count: int = 200, rng: Optional[random.Random] = None) -> List[Student]:
    rng = _rng(rng)
    now = _now()
    students = []
    for _ in range(count):
        first_name = rng.choice(FIRST_NAMES)
        last_name = rng.choice(LAST_NAMES)
        attendance_rate = round(rng.uniform(65, 98), 2)
        gpa = round(rng.uniform(1.5, 4.0), 2)
        behavior_score = round(rng.uniform(1, 5), 2)
        risk_level, risk_score = calculate_risk(attendance_rate, gpa, behavior_score)

        students.append(Student(
            id=f"stu_{_generate_id(rng)}",
            name=f"{first_name} {last_name}",
            email=f"{first_name.lower()}.{last_name.lower()}@school.edu",
            grade=rng.choice(GRADE_LEVELS),
            enrollmentDate=_date_days_ago(rng.randint(30, 365), now),
            attendanceRate=attendance_rate,
            currentGPA=gpa,
            behaviorScore=behavior_score,
            riskLevel=risk_level,
            riskScore=risk_score,
            lastUpdated=now.isoformat(),
        ))
    return students


def generate_attendance_records(students: List[Student], rng: Optional[random.Random] = None) -> List[AttendanceRecord]:
    """One record per student per day for the last 30 days, biased by each attendance rate."""
    rng = _rng(rng)
    now = _now()
    records = []
    for student in students:
        for day in range(ATTENDANCE_DAYS):
            if rng.random() * 100 < student.attendanceRate:
                status = AttendanceStatus.PRESENT if rng.random() < 0.9 else AttendanceStatus.LATE
            else:
                status = AttendanceStatus.ABSENT if rng.random() < 0.7 else AttendanceStatus.EXCUSED

            notes = None
            if status == AttendanceStatus.ABSENT and rng.random() < 0.3:
                notes = 'Unexcused absence'

            records.append(AttendanceRecord(
                id=f"att_{_generate_id(rng)}",
                studentId=student.id,
                date=_date_days_ago(day, now),
                status=status,
                notes=notes,
            ))
    return records


def generate_grade_records(students: List[Student], rng: Optional[random.Random] = None) -> List[GradeRecord]:
    """15-25 graded assignments per student, centered on the student's GPA."""
    rng = _rng(rng)
    now = _now()
    categories = list(GradeCategory)
    records = []
    for student in students:
        for i in range(rng.randint(15, 25)):
            category = rng.choice(categories)
            max_score = MAX_SCORE_BY_CATEGORY[category]
            base_percentage = (student.currentGPA / 4.0) * 100
            percentage = max(0.0, min(100.0, base_percentage + rng.uniform(-15, 15)))

            records.append(GradeRecord(
                id=f"grd_{_generate_id(rng)}",
                studentId=student.id,
                subject=rng.choice(SUBJECTS),
                assignment=f"{category.value} {i + 1}",
                score=round((percentage / 100) * max_score),
                maxScore=max_score,
                date=_date_days_ago(rng.randint(1, 60), now),
                category=category,
            ))
    return records


def _behavior_type_for(behavior_score: float, roll: float) -> BehaviorType:
    # Better-behaved students get a larger share of positive records.
    if behavior_score >= 4:
        positive_cut, neutral_cut = 0.7, 0.9
    elif behavior_score >= 3:
        positive_cut, neutral_cut = 0.4, 0.7
    else:
        positive_cut, neutral_cut = 0.2, 0.4
    if roll < positive_cut:
        return BehaviorType.POSITIVE
    if roll < neutral_cut:
        return BehaviorType.NEUTRAL
    return BehaviorType.NEGATIVE


def generate_behavior_records(students: List[Student], rng: Optional[random.Random] = None) -> List[BehaviorRecord]:
    rng = _rng(rng)
    now = _now()
    records = []
    for student in students:
        for _ in range(rng.randint(3, 8)):
            behavior_type = _behavior_type_for(student.behaviorScore, rng.random())
            if behavior_type == BehaviorType.NEGATIVE:
                severity = rng.randint(2, 5)
            elif behavior_type == BehaviorType.POSITIVE:
                severity = 1
            else:
                severity = rng.randint(1, 3)

            records.append(BehaviorRecord(
                id=f"beh_{_generate_id(rng)}",
                studentId=student.id,
                date=_date_days_ago(rng.randint(1, 30), now),
                type=behavior_type,
                description=rng.choice(BEHAVIOR_DESCRIPTIONS[behavior_type]),
                severity=severity,
                reportedBy=rng.choice(REPORTERS),
            ))
    return records


def generate_alerts(students: List[Student], rng: Optional[random.Random] = None) -> List[Alert]:
    """Probabilistic alerts for High and Medium risk students; Low risk students get none."""
    rng = _rng(rng)
    now = _now()
    alerts = []
    for student in students:
        if student.riskLevel == RiskLevel.HIGH and rng.random() < HIGH_RISK_ALERT_PROBABILITY:
            alerts.append(Alert(
                id=f"alt_{_generate_id(rng)}",
                studentId=student.id,
                type=AlertType.RISK_LEVEL_CHANGE,
                message=f"{student.name} has been classified as High Risk. Immediate intervention recommended.",
                severity=AlertSeverity.HIGH,
                timestamp=(now - timedelta(hours=rng.randint(1, 72))).isoformat(),
                acknowledged=rng.random() < 0.3,
            ))
        elif student.riskLevel == RiskLevel.MEDIUM and rng.random() < MEDIUM_RISK_ALERT_PROBABILITY:
            alerts.append(Alert(
                id=f"alt_{_generate_id(rng)}",
                studentId=student.id,
                type=AlertType.ATTENDANCE_WARNING,
                message=f"{student.name} attendance rate has dropped to {student.attendanceRate}%.",
                severity=AlertSeverity.MEDIUM,
                timestamp=(now - timedelta(hours=rng.randint(1, 48))).isoformat(),
                acknowledged=rng.random() < 0.6,
            ))
    return alerts


def generate_risk_predictions(students: List[Student], rng: Optional[random.Random] = None) -> List[RiskPrediction]:
    rng = _rng(rng)
    now = _now().isoformat()
    predictions = []
    for student in students:
        predictions.append(RiskPrediction(
            studentId=student.id,
            riskScore=student.riskScore,
            riskLevel=student.riskLevel,
            confidence=round(rng.uniform(0.7, 0.95), 2),
            factors=[
                RiskFactor(
                    feature='Attendance Rate',
                    impact=round(rng.uniform(0.3, 0.6) if student.attendanceRate < 80 else rng.uniform(-0.2, 0.1), 2),
                    description=f"Current attendance: {student.attendanceRate}%",
                ),
                RiskFactor(
                    feature='Academic Performance',
                    impact=round(rng.uniform(0.2, 0.5) if student.currentGPA < 2.5 else rng.uniform(-0.3, 0.1), 2),
                    description=f"Current GPA: {student.currentGPA}",
                ),
                RiskFactor(
                    feature='Behavioral Indicators',
                    impact=round(rng.uniform(-0.2, 0.1) if student.behaviorScore > 3 else rng.uniform(0.1, 0.4), 2),
                    description=f"Behavior score: {student.behaviorScore}/5",
                ),
            ],
            modelVersion=SAMPLE_MODEL_VERSION,
            predictedAt=now,
        ))
    return predictions


def generate_model_metadata(sample_size: int = 200) -> ModelMetadata:
    return ModelMetadata(
        version=SAMPLE_MODEL_VERSION,
        trainingDate=_now().isoformat(),
        sampleSize=sample_size,
        accuracy=0.87,
        thresholds=RiskThresholds(),
    )


# --- Seeding ---

def seed_sample_data(db: StorageService, count: int = 200, rng: Optional[random.Random] = None) -> Dict[str, int]:
    """
    Writes a full synthetic dataset, but only into a store without students.
    Returns how many records of each kind were written (all zeros when skipped).
    """
    if db.get_students():
        print("WARNING: Store already has students. Skipping sample data generation.")
        return {"students": 0, "attendance": 0, "grades": 0, "behavior": 0, "alerts": 0, "predictions": 0}

    rng = _rng(rng)
    students = generate_sample_students(count, rng)
    attendance = generate_attendance_records(students, rng)
    grades = generate_grade_records(students, rng)
    behavior = generate_behavior_records(students, rng)
    alerts = generate_alerts(students, rng)
    predictions = generate_risk_predictions(students, rng)

    db.save_students(students)
    db.save_attendance_records(attendance)
    db.save_grade_records(grades)
    db.save_behavior_records(behavior)
    db.save_alerts(alerts)
    db.save_risk_predictions(predictions)
    db.save_model_metadata(generate_model_metadata(sample_size=len(students)))

    print(f"Seeded sample data: {len(students)} students, {len(attendance)} attendance records, {len(alerts)} alerts.")
    return {
        "students": len(students),
        "attendance": len(attendance),
        "grades": len(grades),
        "behavior": len(behavior),
        "alerts": len(alerts),
        "predictions": len(predictions),
    }
