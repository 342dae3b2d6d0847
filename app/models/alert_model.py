# /app/models/alert_model.py

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from enum import Enum

# --- Core Enumerations ---
class AlertType(str, Enum):
    RISK_LEVEL_CHANGE = "Risk Level Change"
    ATTENDANCE_WARNING = "Attendance Warning"
    GRADE_DROP = "Grade Drop"
    BEHAVIOR_INCIDENT = "Behavior Incident"
    MANUAL = "Manual"

class AlertSeverity(str, Enum):
    LOW = "Low"; MEDIUM = "Medium"; HIGH = "High"

# --- API Contract Models ---

class AlertCreate(BaseModel):
    """
    The partial alert accepted by the alert service. The id and timestamp are
    assigned on creation, so they are not part of this contract.
    """
    studentId: str = Field(..., min_length=1)
    type: AlertType = Field(default=AlertType.MANUAL)
    message: str = Field(..., min_length=1)
    severity: AlertSeverity = Field(default=AlertSeverity.MEDIUM)
    acknowledged: bool = Field(default=False)

class Alert(AlertCreate):
    """The stored alert. Only the acknowledgment fields change after creation."""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1)
    timestamp: str
    acknowledgedBy: Optional[str] = Field(default=None)
    acknowledgedAt: Optional[str] = Field(default=None)

class ManualAlertRequest(BaseModel):
    studentId: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    severity: AlertSeverity = Field(default=AlertSeverity.MEDIUM)

class AcknowledgeRequest(BaseModel):
    acknowledgedBy: str = Field(..., min_length=1, description="Name of the person reviewing the alert.")
