"""
Real-time notification delivery via Socket.IO.

Route handlers call these after persisting state. Live delivery is
best-effort: a failed push is logged and never fails the request.
"""
from typing import Any, Iterable, Optional

from app.core.logging import notifications_logger as logger
from app.realtime.relay import NotificationRelay


async def emit_notification_to_user(relay: NotificationRelay, user_id: Any, notification: Any) -> bool:
    delivered = await relay.send_to_user(user_id, notification)
    if not delivered:
        logger.warning("Live notification not delivered", user_id=str(user_id))
    return delivered


async def emit_registration_update(relay: NotificationRelay, user_ids: Iterable[Any], payload: dict) -> bool:
    """
    Tell organizer and volunteer that a registration changed state.
    """
    delivered = await relay.emit_to_users(user_ids, "registrationUpdated", payload)
    if not delivered:
        logger.warning("registrationUpdated not delivered", event_id=payload.get("eventId"))
    return delivered


async def emit_event_deleted(relay: NotificationRelay, event_id: Any, organizer_id: Any,
                             volunteer_ids: Optional[Iterable[Any]] = None) -> bool:
    payload = {"eventId": str(event_id)}
    recipients = [organizer_id, *(volunteer_ids or [])]
    delivered = await relay.emit_to_users(recipients, "eventDeleted", payload)
    if not delivered:
        logger.warning("eventDeleted not delivered", event_id=str(event_id))
    return delivered


async def emit_event_completed(relay: NotificationRelay, event_id: Any, organizer_id: Any,
                               volunteer_ids: Optional[Iterable[Any]] = None) -> bool:
    payload = {"eventId": str(event_id), "status": "completed"}
    recipients = [organizer_id, *(volunteer_ids or [])]
    delivered = await relay.emit_to_users(recipients, "eventCompleted", payload)
    if not delivered:
        logger.warning("eventCompleted not delivered", event_id=str(event_id))
    return delivered
