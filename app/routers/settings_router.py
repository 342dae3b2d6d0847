# /app/routers/settings_router.py

from fastapi import APIRouter, Depends, HTTPException, status

from ..models import settings_model, prediction_model
from ..services import student_service
from ..services.storage_service import StorageService, get_storage_service

router = APIRouter()

# --- APPLICATION SETTINGS ---

@router.get("", response_model=settings_model.AppSettings, summary="Get Application Settings")
def get_settings(db: StorageService = Depends(get_storage_service)):
    return db.get_settings()

@router.put("", response_model=settings_model.AppSettings, summary="Replace Application Settings")
def update_settings(settings: settings_model.AppSettings, db: StorageService = Depends(get_storage_service)):
    try:
        previous_thresholds = db.get_settings().riskThresholds
        saved = db.save_settings(settings)
        if saved.riskThresholds != previous_thresholds:
            changed = student_service.reapply_thresholds(db, saved.riskThresholds)
            print(f"Risk thresholds changed; {changed} students moved to a new risk level.")
        return saved
    except Exception as e:
        print(f"ERROR in update_settings: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected server error occurred: {e}")

# --- GEMINI API KEY ---
# The key itself is never returned, only whether one is stored.

@router.get("/api-key", response_model=settings_model.ApiKeyStatus, summary="Check Whether an API Key Is Stored")
def get_api_key_status(db: StorageService = Depends(get_storage_service)):
    return settings_model.ApiKeyStatus(configured=db.get_api_key() is not None)

@router.put("/api-key", response_model=settings_model.ApiKeyStatus, summary="Store the Gemini API Key")
def save_api_key(request: settings_model.ApiKeyUpdate, db: StorageService = Depends(get_storage_service)):
    try:
        db.save_api_key(request.apiKey)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return settings_model.ApiKeyStatus(configured=True)

@router.delete("/api-key", response_model=settings_model.ApiKeyStatus, summary="Remove the Stored API Key")
def clear_api_key(db: StorageService = Depends(get_storage_service)):
    db.clear_api_key()
    return settings_model.ApiKeyStatus(configured=False)

# --- MODEL METADATA ---

@router.get("/model", response_model=prediction_model.ModelMetadata, summary="Get Current Model Metadata")
def get_model_metadata(db: StorageService = Depends(get_storage_service)):
    metadata = db.get_model_metadata()
    if metadata is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No model has been recorded yet.")
    return metadata
