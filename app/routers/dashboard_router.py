# /app/routers/dashboard_router.py

# --- Core FastAPI Imports ---
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

# --- Service and Model Imports ---
# Import the business logic service that this router will use.
from ..services import dashboard_service
# Import the storage service dependency provider.
from ..services.storage_service import StorageService, get_storage_service
# Import the Pydantic model to define the response shape (the API contract).
from ..models.dashboard_model import DashboardSummary

# --- APIRouter Instance ---
router = APIRouter()

# --- Endpoint Definitions ---
@router.get(
    "/summary",
    response_model=DashboardSummary,
    summary="Get Dashboard Summary",
    description="Retrieves the roster size, risk distribution and open alert count for the dashboard."
)
def get_dashboard_summary(
    db: StorageService = Depends(get_storage_service)
):
    """
    This is the "thin" router layer. It delegates the aggregation to the
    dashboard service and lets FastAPI validate the result against the
    response_model.
    """
    try:
        return dashboard_service.get_summary_data(db=db)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected server error occurred: {e}")


@router.get("/export", summary="Export Student Risk Report as CSV", response_class=StreamingResponse)
def export_risk_report_csv(db: StorageService = Depends(get_storage_service)):
    try:
        csv_string = dashboard_service.export_students_as_csv(db=db)
    except Exception as e:
        print(f"ERROR in export_risk_report_csv: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected server error occurred: {e}")
    return StreamingResponse(
        iter([csv_string]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=student_risk_report.csv"},
    )
