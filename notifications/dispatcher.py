"""
Notification Dispatcher

The one emission point for lifecycle notifications. emit() never raises:
delivery is deferred until the triggering transaction commits and handed to
Celery, and every failure along the way is logged and swallowed so it can
never roll back or fail the transition that caused it.
"""
import logging

from django.db import transaction

from notifications.models import Notification
from regions.services import get_region_directory

logger = logging.getLogger(__name__)


class NotificationDispatcher:

    def __init__(self, enabled=True, region_directory=None):
        self.enabled = enabled
        self.region_directory = region_directory or get_region_directory()

    def emit(self, event):
        """
        Fire-and-forget. Schedules delivery after the current transaction
        commits (immediately when called outside one).
        """
        if not self.enabled:
            logger.debug(f"Notifications disabled, dropping {event!r}")
            return
        try:
            payload = event.to_payload()
            transaction.on_commit(lambda: self._enqueue(payload))
        except Exception as e:
            logger.warning(f"Failed to schedule notification {event!r}: {e}")

    def _enqueue(self, payload):
        from notifications.tasks import deliver_notification_event
        try:
            deliver_notification_event.delay(payload)
        except Exception as e:
            logger.warning(f"Failed to enqueue {payload.get('type')} notification: {e}")

    def resolve_recipients(self, payload):
        if payload.get('recipient_id'):
            return [payload['recipient_id']]

        excluded = set(payload.get('exclude_user_ids') or [])
        user_ids = self.region_directory.users_in_regions(
            payload.get('region_ids') or [],
            verified_only=True,
            exclude_locked=True,
        )
        return [str(user_id) for user_id in user_ids if str(user_id) not in excluded]

    def deliver(self, payload) -> dict:
        """
        Persist one inbox entry per recipient. Each recipient is isolated:
        a failure for one user does not affect delivery to the others.

        Returns:
            dict with delivered/failed counts
        """
        delivered = 0
        failed = 0
        for user_id in self.resolve_recipients(payload):
            try:
                with transaction.atomic():
                    Notification.objects.create(
                        user_id=user_id,
                        type=payload['type'],
                        title=payload['title'],
                        body=payload['body'],
                        data=payload.get('data') or {},
                    )
                delivered += 1
            except Exception as e:
                failed += 1
                logger.warning(f"Failed to deliver {payload['type']} notification to user {user_id}: {e}")

        logger.info(f"Notification {payload['type']} delivered to {delivered} user(s), {failed} failed")
        return {'delivered': delivered, 'failed': failed}


# Singleton instance
_notification_dispatcher = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Get or create singleton notification dispatcher instance."""
    global _notification_dispatcher
    if _notification_dispatcher is None:
        from core.lifecycle_config import get_lifecycle_config
        _notification_dispatcher = NotificationDispatcher(
            enabled=get_lifecycle_config().notifications_enabled
        )
    return _notification_dispatcher
