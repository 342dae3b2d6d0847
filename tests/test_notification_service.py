# /tests/test_notification_service.py

import pytest
from unittest.mock import AsyncMock

from app.services.notification_service import NotificationHub, NotificationPermission


@pytest.fixture
def hub():
    return NotificationHub()


@pytest.mark.asyncio
async def test_notify_delivers_when_permission_granted(hub):
    subscriber = AsyncMock()
    hub.subscribe(subscriber)
    hub.set_permission("granted")

    delivered = await hub.notify("Student Risk Alert - High", "Ada needs attention", {"alertId": "alt_1"})

    assert delivered is True
    message = subscriber.await_args.args[0]
    assert message["type"] == "notification"
    assert message["payload"]["title"] == "Student Risk Alert - High"
    assert message["payload"]["data"] == {"alertId": "alt_1"}

@pytest.mark.asyncio
async def test_notify_with_default_permission_asks_instead_of_delivering(hub):
    subscriber = AsyncMock()
    hub.subscribe(subscriber)

    delivered = await hub.notify("title", "body")

    assert delivered is False
    subscriber.assert_awaited_once_with({"type": "permission_request", "payload": {}})

@pytest.mark.asyncio
async def test_notify_with_denied_permission_does_nothing(hub):
    subscriber = AsyncMock()
    hub.subscribe(subscriber)
    hub.set_permission(NotificationPermission.DENIED)

    assert await hub.notify("title", "body") is False
    subscriber.assert_not_awaited()

@pytest.mark.asyncio
async def test_failing_subscriber_is_dropped(hub):
    broken = AsyncMock(side_effect=ConnectionError("socket closed"))
    healthy = AsyncMock()
    hub.subscribe(broken)
    hub.subscribe(healthy)
    hub.set_permission("granted")

    assert await hub.notify("title", "body") is True
    assert hub.subscriber_count == 1
    healthy.assert_awaited_once()

def test_unknown_permission_is_rejected(hub):
    with pytest.raises(ValueError):
        hub.set_permission("maybe")
