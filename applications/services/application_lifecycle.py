"""
Application Lifecycle Service

Manages offers on announcements:
- Creation against published announcements (one pending per applicant)
- Owner decisions (approve, reject, close) with ledger updates
- Applicant edits and self-close while pending
- Reopening a rejected application

Lock order is always announcement row first, then application row, so
concurrent operations on the same announcement cannot deadlock and
approvals serialize on the announcement's ledger.
"""
from datetime import date
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounts.services import get_user_directory
from announcements.models import Announcement
from announcements.services.quantity_ledger import get_quantity_ledger
from applications.models import Application
from applications.state_machine import ensure_editable, validate_application_transition
from core.exceptions import Conflict, Forbidden, InvalidTransition, NotFound, ValidationError
from notifications.dispatcher import get_notification_dispatcher
from notifications.events import (
    ApplicationApproved,
    ApplicationClosed,
    ApplicationCreated,
    ApplicationRejected,
)

logger = logging.getLogger(__name__)

Status = Application.Status

DUPLICATE_PENDING_MESSAGE = 'You already have a pending application for this announcement'

APPROVAL_BLOCKING_STATUSES = (Announcement.Status.BLOCKED, Announcement.Status.CANCELED)


class ApplicationLifecycleService:
    """Service for the application lifecycle"""

    def __init__(self, ledger=None, user_directory=None, dispatcher=None):
        self.ledger = ledger or get_quantity_ledger()
        self.user_directory = user_directory or get_user_directory()
        self.dispatcher = dispatcher or get_notification_dispatcher()

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def validate_delivery_dates(self, delivery_dates):
        """
        At least one date, none before today.

        Returns:
            sorted, de-duplicated list of ISO date strings
        """
        if not delivery_dates:
            raise ValidationError('At least one delivery date is required', field='delivery_dates')

        parsed = []
        for value in delivery_dates:
            day = value if isinstance(value, date) else parse_date(str(value))
            if day is None:
                raise ValidationError(f'Invalid delivery date: {value}', field='delivery_dates')
            parsed.append(day)

        today = timezone.localdate()
        past = sorted({day for day in parsed if day < today})
        if past:
            raise ValidationError(
                f"The following delivery dates cannot be in the past: "
                f"{', '.join(day.isoformat() for day in past)}",
                field='delivery_dates',
            )
        return [day.isoformat() for day in sorted(set(parsed))]

    def validate_count(self, announcement, count):
        if announcement.is_goods:
            if count is None or count <= 0:
                raise ValidationError(
                    'Count is required and must be greater than 0 for goods announcements',
                    field='count',
                )
            return count
        if count is not None:
            raise ValidationError('Count is only applicable for goods announcements', field='count')
        return None

    def _ensure_quantity(self, announcement, count, exclude_application_id=None):
        if not announcement.is_goods:
            return
        self.ledger.ensure_available(announcement, count)
        self.ledger.ensure_within_count(announcement, count, exclude_application_id)

    def _ensure_accepting(self, announcement, action='apply to'):
        if announcement.status != Announcement.Status.PUBLISHED:
            raise Conflict(
                f'You can only {action} published announcements '
                f'(announcement is {announcement.status})'
            )

    def _has_other_pending(self, announcement, applicant, exclude_application_id=None):
        pending = Application.objects.filter(
            announcement=announcement,
            applicant=applicant,
            status=Status.PENDING,
        )
        if exclude_application_id is not None:
            pending = pending.exclude(pk=exclude_application_id)
        return pending.exists()

    def _lock(self, application_id):
        """Lock the parent announcement, then the application."""
        try:
            announcement_id = Application.objects.values_list('announcement_id', flat=True).get(
                pk=application_id
            )
        except (Application.DoesNotExist, ValueError):
            raise NotFound(f'Application with ID {application_id} not found')

        announcement = self.ledger.lock(announcement_id)
        application = Application.objects.select_for_update().get(pk=application_id)
        application.announcement = announcement
        return announcement, application

    # ------------------------------------------------------------------
    # Create / reopen
    # ------------------------------------------------------------------

    def create(self, applicant, announcement_id, data):
        """
        Apply to a published announcement.

        Args:
            applicant: User submitting the offer
            announcement_id: target announcement
            data: count (goods only), delivery_dates, notes

        Returns:
            Application instance
        """
        self.user_directory.ensure_can_apply(applicant)
        delivery_dates = self.validate_delivery_dates(data.get('delivery_dates'))

        try:
            with transaction.atomic():
                announcement = self.ledger.lock(announcement_id)
                self._ensure_accepting(announcement)
                if announcement.is_owned_by(applicant):
                    raise Forbidden('You cannot apply to your own announcement')

                count = self.validate_count(announcement, data.get('count'))
                if self._has_other_pending(announcement, applicant):
                    raise Conflict(DUPLICATE_PENDING_MESSAGE)
                self._ensure_quantity(announcement, count)

                application = Application.objects.create(
                    announcement=announcement,
                    applicant=applicant,
                    count=count,
                    delivery_dates=delivery_dates,
                    notes=data.get('notes') or '',
                )

                self.dispatcher.emit(ApplicationCreated.for_owner(application))
        except IntegrityError:
            raise Conflict(DUPLICATE_PENDING_MESSAGE)

        logger.info(
            f"Application {application.id} created by {applicant.id} "
            f"on announcement {announcement.id} (count={count})"
        )
        return application

    def reopen(self, application_id, actor, data=None):
        """
        Move a rejected application back to pending (applicant only).

        The create-time rules apply again: announcement still published, no
        other pending application, quantity available, delivery dates not in
        the past. New count/delivery_dates/notes may be supplied.
        """
        data = data or {}
        try:
            with transaction.atomic():
                announcement, application = self._lock(application_id)
                if application.applicant_id != actor.id:
                    raise Forbidden('Only the applicant can reopen an application')

                validate_application_transition(application.status, Status.PENDING)
                self.user_directory.ensure_can_apply(actor)
                self._ensure_accepting(announcement, action='reopen applications on')

                if self._has_other_pending(announcement, actor, exclude_application_id=application.id):
                    raise Conflict(DUPLICATE_PENDING_MESSAGE)

                count = self.validate_count(announcement, data.get('count', application.count))
                delivery_dates = self.validate_delivery_dates(
                    data.get('delivery_dates', application.delivery_dates)
                )
                self._ensure_quantity(announcement, count, exclude_application_id=application.id)

                application.status = Status.PENDING
                application.count = count
                application.delivery_dates = delivery_dates
                if 'notes' in data:
                    application.notes = data['notes'] or ''
                application.decided_at = None
                application.save()

                self.dispatcher.emit(ApplicationCreated.for_owner(application))
        except IntegrityError:
            raise Conflict(DUPLICATE_PENDING_MESSAGE)

        logger.info(f"Application {application.id} reopened by {actor.id}")
        return application

    # ------------------------------------------------------------------
    # Owner decisions
    # ------------------------------------------------------------------

    @transaction.atomic
    def approve(self, application_id, actor):
        """
        Approve a pending application (announcement owner only).

        Availability is checked again here: other approvals may have consumed
        quantity since the application was created.

        Announcements closed by their owner or the expiry sweep still accept
        decisions on offers made while they were published; blocked and
        canceled ones do not.
        """
        announcement, application = self._lock(application_id)
        if not announcement.is_owned_by(actor):
            raise Forbidden('You can only approve applications for your own announcements')

        validate_application_transition(application.status, Status.APPROVED)
        if announcement.status in APPROVAL_BLOCKING_STATUSES:
            raise Conflict(
                f'Cannot approve applications on a {announcement.status} announcement'
            )
        if announcement.is_goods:
            self.ledger.ensure_available(announcement, application.count)

        application.status = Status.APPROVED
        application.decided_at = timezone.now()
        application.save(update_fields=['status', 'decided_at', 'updated_at'])

        self.ledger.recompute(announcement)
        self.dispatcher.emit(ApplicationApproved.for_applicant(application))

        logger.info(
            f"Application {application.id} approved by {actor.id}; "
            f"available quantity now {announcement.available_quantity}"
        )
        return application

    @transaction.atomic
    def reject(self, application_id, actor):
        """Reject a pending application (announcement owner only). The ledger is untouched."""
        announcement, application = self._lock(application_id)
        if not announcement.is_owned_by(actor):
            raise Forbidden('You can only reject applications for your own announcements')

        validate_application_transition(application.status, Status.REJECTED)

        application.status = Status.REJECTED
        application.decided_at = timezone.now()
        application.save(update_fields=['status', 'decided_at', 'updated_at'])

        self.dispatcher.emit(ApplicationRejected.for_applicant(application))

        logger.info(f"Application {application.id} rejected by {actor.id}")
        return application

    @transaction.atomic
    def close(self, application_id, actor):
        """
        Close an application.

        - Announcement owner: from pending or approved. Closing an approved
          application releases its quantity. The applicant is notified.
        - Applicant: only while pending, without notification.
        """
        announcement, application = self._lock(application_id)
        current_status = application.status

        if announcement.is_owned_by(actor):
            validate_application_transition(current_status, Status.CLOSED)
        elif application.applicant_id == actor.id:
            if current_status != Status.PENDING:
                raise InvalidTransition(
                    current_status,
                    Status.CLOSED,
                    [],
                    resource_type='application',
                    detail=(
                        f"Applicants can only close pending applications "
                        f"(current status: {current_status})"
                    ),
                )
        else:
            raise Forbidden('Only the announcement owner or the applicant can close this application')

        application.status = Status.CLOSED
        application.closed_at = timezone.now()
        application.save(update_fields=['status', 'closed_at', 'updated_at'])

        if current_status == Status.APPROVED:
            self.ledger.recompute(announcement)

        if announcement.is_owned_by(actor):
            self.dispatcher.emit(ApplicationClosed.for_applicant(application))

        logger.info(f"Application {application.id} closed by {actor.id} (was {current_status})")
        return application

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    @transaction.atomic
    def edit(self, application_id, actor, data):
        """
        Change count, delivery_dates or notes of a pending application
        (applicant or announcement owner).
        """
        announcement, application = self._lock(application_id)
        if not application.is_party(actor):
            raise Forbidden(
                'Only the announcement owner or the applicant can edit this application'
            )
        ensure_editable(application.status)

        update_fields = []
        if 'count' in data:
            count = self.validate_count(announcement, data['count'])
            self._ensure_quantity(announcement, count, exclude_application_id=application.id)
            application.count = count
            update_fields.append('count')
        if 'delivery_dates' in data:
            application.delivery_dates = self.validate_delivery_dates(data['delivery_dates'])
            update_fields.append('delivery_dates')
        if 'notes' in data:
            application.notes = data['notes'] or ''
            update_fields.append('notes')

        if update_fields:
            application.save(update_fields=update_fields + ['updated_at'])
            logger.info(f"Application {application.id} edited by {actor.id}: {', '.join(update_fields)}")
        return application

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, application_id, user):
        try:
            application = Application.objects.select_related(
                'announcement', 'announcement__owner', 'applicant'
            ).get(pk=application_id)
        except (Application.DoesNotExist, ValueError):
            raise NotFound(f'Application with ID {application_id} not found')

        if not user.is_admin and not application.is_party(user):
            raise Forbidden('You do not have access to this application')
        return application

    def list_for_announcement(self, announcement_id, user):
        """Owner and admins see every application; anyone else only their own."""
        try:
            announcement = Announcement.objects.get(pk=announcement_id)
        except (Announcement.DoesNotExist, ValueError):
            raise NotFound(f'Announcement with ID {announcement_id} not found')

        applications = Application.objects.filter(announcement=announcement).select_related('applicant')
        if not (user.is_admin or announcement.is_owned_by(user)):
            applications = applications.filter(applicant=user)
        return applications

    def list_mine(self, user):
        return Application.objects.filter(applicant=user).select_related(
            'announcement', 'announcement__owner', 'announcement__item', 'applicant'
        )


# Singleton instance
_application_service = None


def get_application_service() -> ApplicationLifecycleService:
    """Get or create singleton application lifecycle service instance."""
    global _application_service
    if _application_service is None:
        _application_service = ApplicationLifecycleService()
    return _application_service
