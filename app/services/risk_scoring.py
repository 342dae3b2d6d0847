# /app/services/risk_scoring.py

"""
Rule-based risk scoring shared by the sample data generator, the fallback
prediction path and student metric updates. Stored risk scores and the
dashboard's risk bands depend on this exact formula and these weights.
"""

from typing import Optional, Tuple

from ..models.student_model import RiskLevel
from ..models.settings_model import RiskThresholds

ATTENDANCE_WEIGHT = 0.4
GPA_WEIGHT = 0.4
BEHAVIOR_WEIGHT = 0.2

DEFAULT_THRESHOLDS = RiskThresholds()


def map_score_to_level(score: float, thresholds: Optional[RiskThresholds] = None) -> RiskLevel:
    thresholds = thresholds or DEFAULT_THRESHOLDS
    if score < thresholds.low:
        return RiskLevel.LOW
    if score < thresholds.medium:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def normalized_components(attendance_rate: float, gpa: float, behavior_score: float) -> Tuple[float, float, float]:
    """Returns (attendanceScore, gpaScore, behaviorScoreNorm) as used by the formula."""
    attendance_score = attendance_rate / 100
    gpa_score = gpa / 4.0
    # Inverted: a low behavior score pushes this term up.
    behavior_score_norm = max(0.0, (5 - behavior_score) / 5)
    return attendance_score, gpa_score, behavior_score_norm


def calculate_risk(
    attendance_rate: float,
    gpa: float,
    behavior_score: float,
    thresholds: Optional[RiskThresholds] = None,
) -> Tuple[RiskLevel, float]:
    """
    Maps attendance (%), GPA (0-4) and behavior score (1-5) to a risk level and
    a risk score in [0, 1] rounded to two decimals. The level is derived from
    the rounded score so the stored pair is always consistent.
    """
    attendance_score, gpa_score, behavior_score_norm = normalized_components(attendance_rate, gpa, behavior_score)
    risk_score = 1 - (
        attendance_score * ATTENDANCE_WEIGHT
        + gpa_score * GPA_WEIGHT
        + behavior_score_norm * BEHAVIOR_WEIGHT
    )
    risk_score = round(min(1.0, max(0.0, risk_score)), 2)
    return map_score_to_level(risk_score, thresholds), risk_score
