# /app/models/prediction_model.py

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

from .student_model import RiskLevel
from .settings_model import RiskThresholds

# --- Prediction Models ---

class RiskFactor(BaseModel):
    feature: str
    impact: float = Field(..., ge=-1, le=1, description="Positive values increase risk.")
    description: str = Field(default="")

class RiskPrediction(BaseModel):
    """
    The latest risk assessment for a student. Stored one per student, keyed
    by `studentId`; a new prediction replaces the previous one.
    """
    model_config = ConfigDict(from_attributes=True)

    studentId: str = Field(..., min_length=1)
    riskScore: float = Field(..., ge=0, le=1)
    riskLevel: RiskLevel
    confidence: float = Field(..., ge=0, le=1)
    factors: List[RiskFactor] = Field(default_factory=list)
    modelVersion: str
    predictedAt: str
    reasoning: Optional[str] = Field(default=None)

class ModelMetadata(BaseModel):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    version: str
    trainingDate: str
    sampleSize: int = Field(..., ge=0)
    accuracy: float = Field(..., ge=0, le=1)
    thresholds: RiskThresholds = Field(default_factory=RiskThresholds)

# --- AI Response Models ---

class AIRiskAssessment(BaseModel):
    """The validated content of a Gemini risk analysis, after clamping."""
    riskScore: float = Field(..., ge=0, le=1)
    confidence: float = Field(..., ge=0, le=1)
    factors: List[RiskFactor] = Field(default_factory=list)
    reasoning: Optional[str] = Field(default=None)

class AssessmentParseResult(BaseModel):
    """
    Outcome of parsing a free-text AI reply. Either `success` is true and
    `assessment` is set, or `success` is false and `error` explains why.
    """
    success: bool
    assessment: Optional[AIRiskAssessment] = None
    error: Optional[str] = None

class StudentFeatures(BaseModel):
    """30-day rolling aggregates fed into the analysis prompt."""
    studentName: str
    grade: str
    enrollmentDuration: int
    overallGPA: float
    overallAttendanceRate: float
    recentAttendanceRate: float
    recentGradeAverage: float
    negativeIncidents: int
    positiveIncidents: int
    totalBehaviorIncidents: int

class BatchPredictionSummary(BaseModel):
    predictions: List[RiskPrediction]
    alertsCreated: int
    fallbackCount: int

class RetrainStatus(BaseModel):
    retrainDue: bool
    studentCount: int
    lastSampleSize: Optional[int] = None
    autoRetrainThreshold: int
