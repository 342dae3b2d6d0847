# /app/models/student_model.py

# --- Core Imports ---
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from enum import Enum

# --- Core Enumerations ---
class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

# --- Model Definitions ---

class StudentBase(BaseModel):
    """
    The base model for a Student. Contains the identity, academic metadata and
    rolling metrics supplied when a student is enrolled.
    """
    name: str = Field(..., min_length=1, description="The full name of the student.")
    email: str = Field(default="", description="The student's school email address.")
    grade: str = Field(default="", description="The grade level, e.g. '10th'.")
    enrollmentDate: str = Field(default="", description="Enrollment date as YYYY-MM-DD.")
    attendanceRate: float = Field(default=100.0, ge=0, le=100, description="Rolling attendance rate in percent.")
    currentGPA: float = Field(default=4.0, ge=0, le=4.0, description="Current GPA on a 0-4 scale.")
    behaviorScore: float = Field(default=5.0, ge=1, le=5, description="Behavior score on a 1-5 scale.")

class StudentCreate(StudentBase):
    """The model used for enrolling a new student. The server assigns id and risk."""
    pass

class StudentUpdate(BaseModel):
    """
    The model for updating a student. All fields are optional to allow for
    partial updates.
    """
    model_config = ConfigDict(from_attributes=True)

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None)
    grade: Optional[str] = Field(default=None)
    attendanceRate: Optional[float] = Field(default=None, ge=0, le=100)
    currentGPA: Optional[float] = Field(default=None, ge=0, le=4.0)
    behaviorScore: Optional[float] = Field(default=None, ge=1, le=5)

    @field_validator("name", "email", "grade", "attendanceRate", "currentGPA", "behaviorScore", mode="before")
    @classmethod
    def reject_explicit_null(cls, value):
        # Omit a field to leave it unchanged; null is not a valid value.
        if value is None:
            raise ValueError("Field may be omitted but not set to null.")
        return value

class Student(StudentBase):
    """
    The full representation of a Student resource, as it is stored and
    returned by the API.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1, description="The unique identifier for the student.")
    riskLevel: RiskLevel = Field(default=RiskLevel.LOW)
    riskScore: float = Field(default=0.0, ge=0, le=1)
    lastUpdated: str = Field(default="", description="ISO-8601 timestamp of the last change.")
