# /app/services/dashboard_service.py

# --- Core Imports ---
import pandas as pd

# Import the Pydantic model to ensure our output matches the data contract.
from ..models.dashboard_model import DashboardSummary
from ..models.student_model import RiskLevel
# Import the StorageService to interact with our data layer.
from .storage_service import StorageService

EXPORT_COLUMNS = ['Student ID', 'Name', 'Email', 'Grade', 'Attendance Rate', 'GPA', 'Behavior Score', 'Risk Level', 'Risk Score', 'Last Updated']

# --- Core Public Functions ---

def get_summary_data(db: StorageService) -> DashboardSummary:
    """
    Calculates the dashboard summary statistics by retrieving data from the
    storage service and performing aggregations.

    Args:
        db: An instance of the StorageService, provided by dependency injection.

    Returns:
        A DashboardSummary Pydantic object containing the calculated figures.
    """
    try:
        # 1. DELEGATE DATA RETRIEVAL: Get all raw data from the data access layer.
        all_students = db.get_students()
        all_alerts = db.get_alerts()

        # 2. PERFORM BUSINESS LOGIC: Calculate the required statistics.
        distribution = {level.value: 0 for level in RiskLevel}
        for student in all_students:
            distribution[student.riskLevel.value] += 1

        student_count = len(all_students)
        average_attendance = sum(s.attendanceRate for s in all_students) / student_count if student_count else 0.0
        average_gpa = sum(s.currentGPA for s in all_students) / student_count if student_count else 0.0

        # 3. CONSTRUCT & VALIDATE: Return the data structured according to our
        #    Pydantic model.
        return DashboardSummary(
            studentCount=student_count,
            riskDistribution=distribution,
            unacknowledgedAlertCount=sum(1 for a in all_alerts if not a.acknowledged),
            averageAttendanceRate=round(average_attendance, 2),
            averageGPA=round(average_gpa, 2),
        )
    except Exception as e:
        print(f"ERROR calculating summary data: {e}")
        # Re-raise the exception to be handled as a 500 error in the router layer.
        raise


def export_students_as_csv(db: StorageService) -> str:
    """Builds a CSV of the roster with each student's current risk, highest risk first."""
    export_data = [
        {
            'Student ID': s.id,
            'Name': s.name,
            'Email': s.email,
            'Grade': s.grade,
            'Attendance Rate': s.attendanceRate,
            'GPA': s.currentGPA,
            'Behavior Score': s.behaviorScore,
            'Risk Level': s.riskLevel.value,
            'Risk Score': s.riskScore,
            'Last Updated': s.lastUpdated,
        }
        for s in db.get_students()
    ]
    df = pd.DataFrame(export_data) if export_data else pd.DataFrame(columns=EXPORT_COLUMNS)
    if not df.empty:
        df = df.sort_values(by='Risk Score', ascending=False, kind='stable')
    return df.to_csv(index=False)
