# /app/routers/alerts_router.py

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, HTTPException, status
from typing import List, Optional
from pydantic import ValidationError
import json

from ..models import alert_model
from ..services import notification_service
from ..services.alert_service import AlertService, get_alert_service

router = APIRouter()

# --- ALERT COLLECTION ENDPOINTS (/api/alerts) ---

@router.get("", response_model=List[alert_model.Alert], summary="Get All Alerts")
def get_alerts(
    student_id: Optional[str] = None,
    alert_service: AlertService = Depends(get_alert_service),
):
    if student_id:
        return alert_service.get_alerts_for_student(student_id)
    return alert_service.db.get_alerts()

@router.get("/unacknowledged", response_model=List[alert_model.Alert], summary="Get Open Alerts")
def get_unacknowledged_alerts(alert_service: AlertService = Depends(get_alert_service)):
    return alert_service.get_unacknowledged_alerts()

@router.post("", response_model=alert_model.Alert, status_code=status.HTTP_201_CREATED, summary="Create a Manual Alert")
async def create_manual_alert(request: alert_model.ManualAlertRequest, alert_service: AlertService = Depends(get_alert_service)):
    try:
        return await alert_service.create_manual_alert(
            student_id=request.studentId, message=request.message, severity=request.severity
        )
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except Exception as e:
        print(f"ERROR in create_manual_alert: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected server error occurred: {e}")

@router.post("/auto-acknowledge", response_model=List[alert_model.Alert], summary="Acknowledge Stale Alerts")
def auto_acknowledge_alerts(alert_service: AlertService = Depends(get_alert_service)):
    return alert_service.auto_acknowledge_stale_alerts()

# --- INDIVIDUAL ALERT ENDPOINTS (/api/alerts/{alert_id}) ---

@router.post("/{alert_id}/acknowledge", response_model=alert_model.Alert, summary="Acknowledge an Alert")
def acknowledge_alert(alert_id: str, request: alert_model.AcknowledgeRequest, alert_service: AlertService = Depends(get_alert_service)):
    try:
        alert = alert_service.acknowledge_alert(alert_id, request.acknowledgedBy)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if alert is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Alert with ID {alert_id} not found")
    return alert


# --- REAL-TIME NOTIFICATION WEBSOCKET ---

@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket):
    """
    Dashboards connect here to receive local notifications. Clients report
    their notification permission with
    {"type": "permission", "payload": {"permission": "granted"}}.
    """
    hub = notification_service.hub
    await websocket.accept()
    hub.subscribe(websocket.send_json)
    await websocket.send_json({"type": "permission_state", "payload": {"permission": hub.permission.value}})

    try:
        while True:
            data = await websocket.receive_text()
            message_data = json.loads(data)

            if message_data.get("type") == "permission":
                permission = message_data.get("payload", {}).get("permission")
                try:
                    hub.set_permission(permission)
                except ValueError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": f"Unknown permission value: {permission}"}
                    })

    except WebSocketDisconnect:
        print("Client disconnected from alert notifications.")
    except Exception as e:
        print(f"An unexpected error occurred in the alert notification WebSocket: {e}")
        try:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": "A server error occurred. Please try reconnecting."}
            })
        except Exception:
            pass
    finally:
        hub.unsubscribe(websocket.send_json)
