# /app/models/dashboard_model.py

# --- Core Imports ---
# Import the necessary components from Pydantic for data modeling.
from pydantic import BaseModel, Field
from typing import Dict

# --- Model Definition ---

class DashboardSummary(BaseModel):
    """
    Defines the data contract for the response of the dashboard summary endpoint.
    This model specifies the exact shape of the data used to populate the
    dashboard's overview cards and risk distribution chart.
    """

    studentCount: int = Field(
        ...,  # This field is required.
        description="The total number of monitored students.",
        # The 'example' is used by FastAPI to generate richer API documentation.
        examples=[200]
    )

    riskDistribution: Dict[str, int] = Field(
        ...,
        description="Number of students at each risk level.",
        examples=[{"Low": 120, "Medium": 60, "High": 20}]
    )

    unacknowledgedAlertCount: int = Field(
        ...,
        description="Alerts that nobody has reviewed yet.",
        examples=[7]
    )

    averageAttendanceRate: float = Field(..., description="Mean attendance rate in percent.")
    averageGPA: float = Field(..., description="Mean GPA across all students.")
