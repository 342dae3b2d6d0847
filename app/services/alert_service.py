# /app/services/alert_service.py

"""
This service module owns the alert lifecycle: creating alerts (directly or
through the convenience constructors), acknowledging them, and turning new
risk predictions into risk-level-change alerts.

Settings are loaded once when the service is built and passed in explicitly,
so one request works against one consistent snapshot of them.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Set, Union
from fastapi import Depends

from ..models.alert_model import Alert, AlertCreate, AlertType, AlertSeverity
from ..models.student_model import Student, RiskLevel
from ..models.prediction_model import RiskPrediction
from ..models.settings_model import AppSettings
from .storage_service import StorageService, get_storage_service
from .notification_service import NotificationHub
from . import notification_service

# Fixed severity cutoffs for metric alerts. These are independent of the
# configurable risk thresholds in AppSettings.
ATTENDANCE_HIGH_SEVERITY_CUTOFF = 70
GPA_HIGH_SEVERITY_CUTOFF = 2.0

AUTO_ACKNOWLEDGE_ACTOR = "system"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _level_value(level: Union[RiskLevel, str]) -> str:
    return level.value if isinstance(level, RiskLevel) else str(level)


class AlertService:
    def __init__(
        self,
        db: StorageService,
        settings: Optional[AppSettings] = None,
        notifier: Optional[NotificationHub] = None,
    ):
        self.db = db
        self.settings = settings or db.get_settings()
        self.notifier = notifier or notification_service.hub
        self._notification_tasks: Set[asyncio.Task] = set()

    # --- Core Creation ---

    async def create_alert(self, alert_data: Union[AlertCreate, dict]) -> Alert:
        """
        Validates the partial alert, assigns its id and timestamp, persists it
        and then attempts a local notification. Input without a studentId or
        message raises before anything is written.
        """
        if not isinstance(alert_data, AlertCreate):
            alert_data = AlertCreate.model_validate(alert_data)

        new_alert = Alert(
            **alert_data.model_dump(),
            id=f"alt_{uuid.uuid4().hex[:12]}",
            timestamp=_now_iso(),
        )
        self.db.save_alert(new_alert)

        self._dispatch_local_notification(new_alert)

        print(f"Alert Created: {new_alert.model_dump_json()}")
        return new_alert

    def _dispatch_local_notification(self, alert: Alert) -> Optional[asyncio.Task]:
        """Schedules the notification in the background; creation never waits on subscribers."""
        if not self.settings.alertSettings.enableBrowserNotifications:
            return None
        task = asyncio.create_task(self.notifier.notify(
            title=f"Student Risk Alert - {alert.severity.value}",
            body=alert.message,
            data={"alertId": alert.id, "studentId": alert.studentId},
        ))
        self._notification_tasks.add(task)
        task.add_done_callback(self._notification_done)
        return task

    def _notification_done(self, task: asyncio.Task):
        self._notification_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            print(f"ERROR triggering local notification: {error}")

    async def wait_for_notifications(self):
        """Waits until every notification scheduled by this service has finished."""
        if self._notification_tasks:
            await asyncio.gather(*list(self._notification_tasks), return_exceptions=True)

    # --- Convenience Constructors ---

    async def create_risk_level_change_alert(self, student: Student, old_level, new_level) -> Alert:
        new_level_value = _level_value(new_level)
        return await self.create_alert(AlertCreate(
            studentId=student.id,
            type=AlertType.RISK_LEVEL_CHANGE,
            message=f"{student.name}'s risk level changed from {_level_value(old_level)} to {new_level_value}",
            severity=AlertSeverity(new_level_value),
        ))

    async def create_attendance_alert(self, student: Student) -> Alert:
        return await self.create_alert(AlertCreate(
            studentId=student.id,
            type=AlertType.ATTENDANCE_WARNING,
            message=f"{student.name}'s attendance rate has dropped to {student.attendanceRate}%",
            severity=AlertSeverity.HIGH if student.attendanceRate < ATTENDANCE_HIGH_SEVERITY_CUTOFF else AlertSeverity.MEDIUM,
        ))

    async def create_grade_alert(self, student: Student) -> Alert:
        return await self.create_alert(AlertCreate(
            studentId=student.id,
            type=AlertType.GRADE_DROP,
            message=f"{student.name}'s GPA has dropped to {student.currentGPA}",
            severity=AlertSeverity.HIGH if student.currentGPA < GPA_HIGH_SEVERITY_CUTOFF else AlertSeverity.MEDIUM,
        ))

    async def create_behavior_alert(self, student: Student, incident: str) -> Alert:
        return await self.create_alert(AlertCreate(
            studentId=student.id,
            type=AlertType.BEHAVIOR_INCIDENT,
            message=f"{student.name}: {incident}",
            severity=AlertSeverity.MEDIUM,
        ))

    async def create_manual_alert(self, student_id: str, message: str, severity: Union[AlertSeverity, str]) -> Alert:
        return await self.create_alert({
            "studentId": student_id,
            "type": AlertType.MANUAL,
            "message": message,
            "severity": severity,
        })

    # --- Acknowledgment ---

    def acknowledge_alert(self, alert_id: str, acknowledged_by: str) -> Optional[Alert]:
        """Marks the alert as reviewed. Acknowledging again overwrites actor and time."""
        if not acknowledged_by:
            raise ValueError("acknowledged_by is required.")
        return self.db.update_alert(alert_id, {
            "acknowledged": True,
            "acknowledgedBy": acknowledged_by,
            "acknowledgedAt": _now_iso(),
        })

    def auto_acknowledge_stale_alerts(self, now: Optional[datetime] = None) -> List[Alert]:
        """
        Acknowledges every open alert older than `autoAcknowledgeAfterHours`.
        A value of 0 disables the sweep.
        """
        hours = self.settings.alertSettings.autoAcknowledgeAfterHours
        if hours <= 0:
            return []
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=hours)

        acknowledged = []
        for alert in self.get_unacknowledged_alerts():
            try:
                created_at = datetime.fromisoformat(alert.timestamp)
            except ValueError:
                print(f"WARNING: Alert {alert.id} has an unreadable timestamp, skipping auto-acknowledge.")
                continue
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            if created_at <= cutoff:
                updated = self.acknowledge_alert(alert.id, AUTO_ACKNOWLEDGE_ACTOR)
                if updated:
                    acknowledged.append(updated)
        return acknowledged

    # --- Queries ---

    def get_unacknowledged_alerts(self) -> List[Alert]:
        return [alert for alert in self.db.get_alerts() if not alert.acknowledged]

    def get_alerts_for_student(self, student_id: str) -> List[Alert]:
        return self.db.get_alerts(student_id=student_id)

    # --- Prediction Processing ---

    async def process_risk_predictions(self, predictions: List[RiskPrediction]) -> List[Alert]:
        """
        Compares each new prediction with the stored one for the same student.
        A level change raises a Risk Level Change alert; a newly High student
        additionally gets an intervention alert. Every prediction is saved,
        including those for students that are no longer on the roster.
        """
        students_by_id = {s.id: s for s in self.db.get_students()}
        existing_predictions = {p.studentId: p for p in self.db.get_risk_predictions()}
        created: List[Alert] = []

        for prediction in predictions:
            student = students_by_id.get(prediction.studentId)
            existing = existing_predictions.get(prediction.studentId)

            if student is not None:
                if existing and existing.riskLevel != prediction.riskLevel:
                    created.append(await self.create_risk_level_change_alert(student, existing.riskLevel, prediction.riskLevel))

                if prediction.riskLevel == RiskLevel.HIGH and (not existing or existing.riskLevel != RiskLevel.HIGH):
                    created.append(await self.create_alert(AlertCreate(
                        studentId=student.id,
                        type=AlertType.RISK_LEVEL_CHANGE,
                        message=f"{student.name} has been classified as High Risk. Immediate intervention recommended.",
                        severity=AlertSeverity.HIGH,
                    )))
            else:
                print(f"WARNING: Prediction for unknown student {prediction.studentId}; saving without alerts.")

            self.db.save_risk_prediction(prediction)

        return created

    # --- Integration Hooks ---
    # External delivery (Twilio, SendGrid, ...) is not wired up; these only log.

    async def send_sms_alert(self, alert: Alert, phone_number: str):
        payload = {"to": phone_number, "message": alert.message, "severity": alert.severity.value}
        print(f"SMS Alert (Integration Hook): {payload}")

    async def send_email_alert(self, alert: Alert, email: str):
        payload = {"to": email, "subject": f"Student Risk Alert - {alert.severity.value}", "message": alert.message}
        print(f"Email Alert (Integration Hook): {payload}")


# --- DEPENDENCY PROVIDER ---
def get_alert_service(db: StorageService = Depends(get_storage_service)) -> AlertService:
    """FastAPI dependency that builds an AlertService with this request's settings snapshot."""
    return AlertService(db=db)
