# /app/models/record_model.py

"""
Data contracts for the per-student history records: daily attendance,
assignment grades and behavior incidents. Records reference their student
by `studentId` only.
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from enum import Enum

# --- Core Enumerations ---
class AttendanceStatus(str, Enum):
    PRESENT = "Present"; ABSENT = "Absent"; LATE = "Late"; EXCUSED = "Excused"

class GradeCategory(str, Enum):
    HOMEWORK = "Homework"; QUIZ = "Quiz"; TEST = "Test"
    PROJECT = "Project"; PARTICIPATION = "Participation"

class BehaviorType(str, Enum):
    POSITIVE = "Positive"; NEGATIVE = "Negative"; NEUTRAL = "Neutral"

# --- Record Models ---

class AttendanceRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str = Field(..., min_length=1)
    studentId: str = Field(..., min_length=1)
    date: str = Field(..., description="Calendar date as YYYY-MM-DD.")
    status: AttendanceStatus
    notes: Optional[str] = Field(default=None)

class GradeRecord(BaseModel):
    """One graded assignment. `score <= maxScore` is expected but not enforced."""
    model_config = ConfigDict(from_attributes=True)
    id: str = Field(..., min_length=1)
    studentId: str = Field(..., min_length=1)
    subject: str
    assignment: str
    score: float
    maxScore: float
    date: str
    category: GradeCategory

class BehaviorRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str = Field(..., min_length=1)
    studentId: str = Field(..., min_length=1)
    date: str
    type: BehaviorType
    description: str = Field(default="")
    severity: int = Field(..., ge=1, le=5)
    reportedBy: str = Field(default="")

# --- Create Models (ids and studentId are assigned by the service) ---

class AttendanceRecordCreate(BaseModel):
    date: str
    status: AttendanceStatus
    notes: Optional[str] = Field(default=None)

class GradeRecordCreate(BaseModel):
    subject: str = Field(..., min_length=1)
    assignment: str = Field(..., min_length=1)
    score: float
    maxScore: float = Field(..., gt=0)
    date: str
    category: GradeCategory

class BehaviorRecordCreate(BaseModel):
    date: str
    type: BehaviorType
    description: str = Field(default="")
    severity: int = Field(..., ge=1, le=5)
    reportedBy: str = Field(default="")
