# /app/routers/predictions_router.py

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from ..models import prediction_model
from ..services import model_service, student_service
from ..services.storage_service import StorageService, get_storage_service
from ..services.alert_service import AlertService, get_alert_service
from ..services.prediction_service import PredictionService, get_prediction_service, is_fallback

router = APIRouter()

@router.get("", response_model=List[prediction_model.RiskPrediction], summary="Get All Stored Predictions")
def get_all_predictions(db: StorageService = Depends(get_storage_service)):
    return db.get_risk_predictions()


@router.post(
    "/batch",
    response_model=prediction_model.BatchPredictionSummary,
    summary="Predict Risk for Every Student",
    description="Runs predictions in rate-limited batches, stores them and raises alerts for risk-level changes."
)
async def run_batch_prediction(
    db: StorageService = Depends(get_storage_service),
    prediction_service: PredictionService = Depends(get_prediction_service),
    alert_service: AlertService = Depends(get_alert_service),
):
    try:
        predictions = await prediction_service.batch_predict(
            db.get_students(),
            db.get_attendance_records(),
            db.get_grade_records(),
            db.get_behavior_records(),
        )
        alerts = await alert_service.process_risk_predictions(predictions)
        student_service.apply_risk_predictions(db, predictions)
        return prediction_model.BatchPredictionSummary(
            predictions=predictions,
            alertsCreated=len(alerts),
            fallbackCount=sum(1 for p in predictions if is_fallback(p)),
        )
    except Exception as e:
        print(f"ERROR in run_batch_prediction: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected server error occurred: {e}")


# --- MODEL LIFECYCLE ---

@router.get("/retrain-status", response_model=prediction_model.RetrainStatus, summary="Check Whether a Retrain Is Due")
def get_retrain_status(db: StorageService = Depends(get_storage_service)):
    return model_service.get_retrain_status(db)


@router.post("/retrain", response_model=prediction_model.ModelMetadata, summary="Retrain the Risk Model")
async def retrain_model(
    db: StorageService = Depends(get_storage_service),
    prediction_service: PredictionService = Depends(get_prediction_service),
    alert_service: AlertService = Depends(get_alert_service),
):
    try:
        return await model_service.retrain_model(db=db, prediction_service=prediction_service, alert_service=alert_service)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        print(f"ERROR in retrain_model: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected server error occurred: {e}")
