"""
Application Models

Offers submitted against published announcements.
"""
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class Application(models.Model):
    """
    An applicant's offer on an announcement.

    count is required for goods announcements and absent otherwise.
    At most one PENDING application may exist per (announcement, applicant).
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'
        CLOSED = 'closed', 'Closed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    announcement = models.ForeignKey(
        'announcements.Announcement',
        on_delete=models.CASCADE,
        related_name='applications'
    )
    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='applications'
    )

    count = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    delivery_dates = models.JSONField(default=list, help_text="ISO dates (YYYY-MM-DD)")
    notes = models.TextField(blank=True, default='')

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    decided_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'applications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['announcement', 'status'], name='app_announcement_status_idx'),
            models.Index(fields=['applicant', 'status'], name='app_applicant_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['announcement', 'applicant'],
                condition=Q(status='pending'),
                name='unique_pending_application_per_applicant',
            ),
        ]

    def __str__(self):
        return f"Application {self.id} on {self.announcement_id} ({self.status})"

    def is_party(self, user):
        """Applicant or announcement owner."""
        return user is not None and user.id in (self.applicant_id, self.announcement.owner_id)
