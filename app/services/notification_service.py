# /app/services/notification_service.py

"""
Best-effort local notifications for connected dashboard clients.

Dashboards subscribe over a WebSocket and report their notification
permission. Delivery never raises: a subscriber that fails is dropped and
the failure is logged, so the operation that triggered the notification
(e.g. alert creation) is never affected.
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List

Subscriber = Callable[[Dict[str, Any]], Awaitable[None]]


class NotificationPermission(str, Enum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class NotificationHub:
    def __init__(self):
        self.permission = NotificationPermission.DEFAULT
        self._subscribers: List[Subscriber] = []

    # --- Subscription Management ---

    def subscribe(self, subscriber: Subscriber):
        self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: Subscriber):
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def set_permission(self, permission: NotificationPermission):
        self.permission = NotificationPermission(permission)

    # --- Delivery ---

    async def _broadcast(self, message: Dict[str, Any]) -> int:
        delivered = 0
        for subscriber in list(self._subscribers):
            try:
                await subscriber(message)
                delivered += 1
            except Exception as e:
                print(f"ERROR delivering notification to subscriber, dropping it: {e}")
                self.unsubscribe(subscriber)
        return delivered

    async def request_permission(self) -> NotificationPermission:
        """
        Asks connected clients to prompt for permission. The answer arrives
        later through `set_permission`, so the current value is returned.
        """
        if self.permission == NotificationPermission.DEFAULT:
            await self._broadcast({"type": "permission_request", "payload": {}})
        return self.permission

    async def notify(self, title: str, body: str, data: Dict[str, Any] = None) -> bool:
        """Returns True when at least one subscriber received the notification."""
        if self.permission == NotificationPermission.DENIED:
            return False
        if self.permission != NotificationPermission.GRANTED:
            if await self.request_permission() != NotificationPermission.GRANTED:
                return False
        delivered = await self._broadcast({
            "type": "notification",
            "payload": {"title": title, "body": body, "data": data or {}},
        })
        return delivered > 0


# One hub per process; every AlertService shares it unless given its own.
hub = NotificationHub()
