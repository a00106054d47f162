"""
Inbox operations over persisted notifications.
"""
from django.utils import timezone

from core.exceptions import NotFound
from notifications.models import Notification


class NotificationInboxService:

    def list_for_user(self, user, is_seen=None, notification_type=None):
        notifications = Notification.objects.filter(user=user)
        if is_seen is not None:
            notifications = notifications.filter(is_seen=is_seen)
        if notification_type:
            notifications = notifications.filter(type=notification_type)
        return notifications

    def unread_count(self, user) -> int:
        return Notification.objects.filter(user=user, is_seen=False).count()

    def mark_as_seen(self, user, notification_id):
        try:
            notification = Notification.objects.get(id=notification_id, user=user)
        except (Notification.DoesNotExist, ValueError):
            raise NotFound(f"Notification with ID {notification_id} not found")
        notification.mark_seen()
        return notification

    def mark_all_as_seen(self, user) -> int:
        return Notification.objects.filter(user=user, is_seen=False).update(
            is_seen=True,
            seen_at=timezone.now()
        )
