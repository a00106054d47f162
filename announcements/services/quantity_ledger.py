"""
Quantity Ledger

Single source of truth for how much of a goods announcement is still
allocatable:

    available_quantity = count - sum(count of APPROVED applications)

Every mutation runs under the announcement row lock taken by lock(), so two
concurrent approvals on the same announcement serialize and the second one
sees the first one's write. Callers must already be inside transaction.atomic.
"""
from decimal import Decimal
import logging

from django.db.models import Sum

from announcements.models import Announcement
from core.exceptions import Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


class QuantityLedger:

    def lock(self, announcement_id):
        """
        Re-read the announcement with SELECT ... FOR UPDATE.

        Returns:
            the locked Announcement instance
        """
        try:
            return Announcement.objects.select_for_update().get(pk=announcement_id)
        except (Announcement.DoesNotExist, ValueError):
            raise NotFound(f"Announcement with ID {announcement_id} not found")

    def _application_total(self, announcement, statuses, exclude_application_id=None):
        from applications.models import Application

        applications = Application.objects.filter(
            announcement_id=announcement.pk,
            status__in=statuses,
        )
        if exclude_application_id is not None:
            applications = applications.exclude(pk=exclude_application_id)
        return applications.aggregate(total=Sum('count'))['total'] or ZERO

    def approved_total(self, announcement, exclude_application_id=None):
        from applications.models import Application
        return self._application_total(
            announcement, [Application.Status.APPROVED], exclude_application_id
        )

    def committed_total(self, announcement, exclude_application_id=None):
        """Sum over non-terminal (pending or approved) applications."""
        from applications.models import Application
        return self._application_total(
            announcement,
            [Application.Status.PENDING, Application.Status.APPROVED],
            exclude_application_id,
        )

    def ensure_available(self, announcement, requested):
        """
        Raise Conflict when requested exceeds what is currently allocatable.
        No-op for non-goods announcements.
        """
        if not announcement.is_goods:
            return
        available = announcement.available_quantity or ZERO
        if requested > available:
            raise Conflict(
                f"Requested quantity ({requested}) exceeds available quantity ({available})",
                requested=str(requested),
                available_quantity=str(available),
            )

    def ensure_within_count(self, announcement, requested, exclude_application_id=None):
        """
        Raise Conflict when this request plus every other pending/approved
        application would exceed the announcement's count.
        """
        if not announcement.is_goods:
            return
        committed = self.committed_total(announcement, exclude_application_id)
        if committed + requested > announcement.count:
            remaining = max(announcement.count - committed, ZERO)
            raise Conflict(
                f"Requested quantity ({requested}) together with other open applications "
                f"exceeds the announced count ({announcement.count}). "
                f"Uncommitted quantity: {remaining}",
                requested=str(requested),
                uncommitted_quantity=str(remaining),
            )

    def recompute(self, announcement, save=True):
        """
        Recalculate available_quantity from approved applications.

        Returns:
            the new available_quantity (None for non-goods)
        """
        if not announcement.is_goods:
            if announcement.available_quantity is not None:
                announcement.available_quantity = None
                if save:
                    announcement.save(update_fields=['available_quantity', 'updated_at'])
            return None

        approved = self.approved_total(announcement)
        available = announcement.count - approved
        if available < ZERO:
            raise Conflict(
                f"Approved applications ({approved}) exceed the announced count ({announcement.count})"
            )

        if announcement.available_quantity != available:
            logger.info(
                f"Ledger recompute for announcement {announcement.pk}: "
                f"{announcement.available_quantity} -> {available}"
            )
        announcement.available_quantity = available
        if save:
            announcement.save(update_fields=['available_quantity', 'updated_at'])
        return available

    def resize(self, announcement, new_count):
        """
        Apply a new goods count (admin/owner edit) and rebalance the ledger.
        The count may not drop below what has already been approved. Pending
        applications are not counted here; approve() re-checks each of them
        against the new availability.
        """
        approved = self.approved_total(announcement)
        if new_count < approved:
            raise ValidationError(
                f"Count cannot be lower than the already approved quantity ({approved})"
            )
        announcement.count = new_count
        announcement.available_quantity = new_count - approved
        return announcement.available_quantity


# Singleton instance
_quantity_ledger = None


def get_quantity_ledger() -> QuantityLedger:
    """Get or create singleton quantity ledger instance."""
    global _quantity_ledger
    if _quantity_ledger is None:
        _quantity_ledger = QuantityLedger()
    return _quantity_ledger
