# /app/routers/students_router.py

from fastapi import APIRouter, Depends, HTTPException, status, Response
from typing import List

from ..models import student_model, record_model, alert_model, prediction_model
from ..services import student_service
from ..services.storage_service import StorageService, get_storage_service
from ..services.alert_service import AlertService, get_alert_service
from ..services.prediction_service import PredictionService, get_prediction_service

router = APIRouter()

# --- STUDENT COLLECTION ENDPOINTS (/api/students) ---

@router.get("", response_model=List[student_model.Student], summary="Get All Students")
def get_all_students(db: StorageService = Depends(get_storage_service)):
    return db.get_students()

@router.post("", response_model=student_model.Student, status_code=status.HTTP_201_CREATED, summary="Enroll a New Student")
def create_new_student(student_create: student_model.StudentCreate, db: StorageService = Depends(get_storage_service)):
    try:
        return student_service.create_student(student_data=student_create, db=db, thresholds=db.get_settings().riskThresholds)
    except Exception as e:
        print(f"ERROR in create_new_student: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected server error occurred: {e}")

# --- INDIVIDUAL STUDENT ENDPOINTS (/api/students/{student_id}) ---

@router.get("/{student_id}", response_model=student_model.Student, summary="Get a Single Student")
def get_student_by_id(student_id: str, db: StorageService = Depends(get_storage_service)):
    student = db.get_student(student_id)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {student_id} not found")
    return student

@router.put("/{student_id}", response_model=student_model.Student, summary="Update a Student's Details or Metrics")
async def update_student_details(
    student_id: str,
    student_update: student_model.StudentUpdate,
    db: StorageService = Depends(get_storage_service),
    alert_service: AlertService = Depends(get_alert_service),
):
    try:
        updated_student = await student_service.update_student(
            student_id=student_id, student_update=student_update, db=db, alert_service=alert_service
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if updated_student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {student_id} not found")
    return updated_student

@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove a Student")
def delete_student(student_id: str, db: StorageService = Depends(get_storage_service)):
    was_deleted = student_service.delete_student(student_id=student_id, db=db)
    if not was_deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {student_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- HISTORY RECORD SUB-RESOURCES ---

@router.get("/{student_id}/attendance", response_model=List[record_model.AttendanceRecord], summary="Get Attendance History")
def get_attendance(student_id: str, db: StorageService = Depends(get_storage_service)):
    return db.get_attendance_records(student_id=student_id)

@router.post("/{student_id}/attendance", response_model=record_model.AttendanceRecord, status_code=status.HTTP_201_CREATED, summary="Record Attendance")
def add_attendance(student_id: str, record: record_model.AttendanceRecordCreate, db: StorageService = Depends(get_storage_service)):
    try:
        return student_service.add_attendance_record(student_id=student_id, record_data=record, db=db)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.get("/{student_id}/grades", response_model=List[record_model.GradeRecord], summary="Get Grade History")
def get_grades(student_id: str, db: StorageService = Depends(get_storage_service)):
    return db.get_grade_records(student_id=student_id)

@router.post("/{student_id}/grades", response_model=record_model.GradeRecord, status_code=status.HTTP_201_CREATED, summary="Record a Grade")
def add_grade(student_id: str, record: record_model.GradeRecordCreate, db: StorageService = Depends(get_storage_service)):
    try:
        return student_service.add_grade_record(student_id=student_id, record_data=record, db=db)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.get("/{student_id}/behavior", response_model=List[record_model.BehaviorRecord], summary="Get Behavior History")
def get_behavior(student_id: str, db: StorageService = Depends(get_storage_service)):
    return db.get_behavior_records(student_id=student_id)

@router.post("/{student_id}/behavior", response_model=record_model.BehaviorRecord, status_code=status.HTTP_201_CREATED, summary="Record a Behavior Incident")
def add_behavior(student_id: str, record: record_model.BehaviorRecordCreate, db: StorageService = Depends(get_storage_service)):
    try:
        return student_service.add_behavior_record(student_id=student_id, record_data=record, db=db)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.get("/{student_id}/alerts", response_model=List[alert_model.Alert], summary="Get a Student's Alerts")
def get_student_alerts(student_id: str, alert_service: AlertService = Depends(get_alert_service)):
    return alert_service.get_alerts_for_student(student_id)

# --- PREDICTION SUB-RESOURCES ---

@router.get("/{student_id}/prediction", response_model=prediction_model.RiskPrediction, summary="Get the Latest Risk Prediction")
def get_student_prediction(student_id: str, db: StorageService = Depends(get_storage_service)):
    prediction = db.get_risk_prediction(student_id)
    if prediction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No prediction stored for student {student_id}")
    return prediction

@router.post("/{student_id}/predict", response_model=prediction_model.RiskPrediction, summary="Run a Risk Prediction for One Student")
async def predict_student_risk(
    student_id: str,
    db: StorageService = Depends(get_storage_service),
    prediction_service: PredictionService = Depends(get_prediction_service),
    alert_service: AlertService = Depends(get_alert_service),
):
    student = db.get_student(student_id)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {student_id} not found")
    try:
        prediction = await prediction_service.predict(
            student,
            db.get_attendance_records(student_id=student_id),
            db.get_grade_records(student_id=student_id),
            db.get_behavior_records(student_id=student_id),
        )
        await alert_service.process_risk_predictions([prediction])
        student_service.apply_risk_predictions(db, [prediction])
        return prediction
    except Exception as e:
        print(f"ERROR in predict_student_risk for {student_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected server error occurred: {e}")
