"""
Notification Celery tasks.
"""
from celery import shared_task
from django.utils import timezone
from datetime import timedelta
import logging

logger = logging.getLogger(__name__)


@shared_task
def deliver_notification_event(payload: dict):
    """
    Deliver a lifecycle event to its recipients.

    Enqueued by NotificationDispatcher.emit() after the triggering
    transaction commits.
    """
    from notifications.dispatcher import get_notification_dispatcher
    return get_notification_dispatcher().deliver(payload)


@shared_task
def cleanup_old_notifications(days_old: int = 90):
    """
    Remove seen notifications older than days_old.

    Scheduled via Celery Beat to run weekly.
    """
    from notifications.models import Notification

    cutoff = timezone.now() - timedelta(days=days_old)
    deleted, _ = Notification.objects.filter(is_seen=True, created_at__lt=cutoff).delete()

    logger.info(f"Cleaned up {deleted} notification(s) older than {days_old} days")
    return {
        'status': 'success',
        'deleted': deleted,
        'timestamp': timezone.now().isoformat()
    }
