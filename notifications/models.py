"""
In-app notification inbox.
"""
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):

    class Type(models.TextChoices):
        ANNOUNCEMENT_PUBLISHED = 'announcement_published', 'Announcement Published'
        ANNOUNCEMENT_BLOCKED = 'announcement_blocked', 'Announcement Blocked'
        ANNOUNCEMENT_CLOSED = 'announcement_closed', 'Announcement Closed'
        APPLICATION_CREATED = 'application_created', 'Application Created'
        APPLICATION_APPROVED = 'application_approved', 'Application Approved'
        APPLICATION_REJECTED = 'application_rejected', 'Application Rejected'
        APPLICATION_CLOSED = 'application_closed', 'Application Closed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    type = models.CharField(max_length=40, choices=Type.choices, db_index=True)
    title = models.CharField(max_length=255)
    body = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_seen = models.BooleanField(default=False)
    seen_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_seen'], name='notif_user_seen_idx'),
        ]

    def __str__(self):
        return f"{self.type} -> {self.user_id}"

    def mark_seen(self):
        if self.is_seen:
            return False
        self.is_seen = True
        self.seen_at = timezone.now()
        self.save(update_fields=['is_seen', 'seen_at'])
        return True
