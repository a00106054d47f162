"""
Expiry Sweeper

Daily pass that closes published announcements whose end date has passed:
(a) rent announcements with date_to before today;
(b) any announcement with expiry_date before today.

Each match goes through AnnouncementLifecycleService.close with no actor,
the same path interactive closes use. Only PUBLISHED rows are selected, so a
second pass over the same data closes nothing.
"""
from django.core.cache import cache
from django.db.models import Q
from django.utils import timezone
import logging
import uuid

from announcements.models import Announcement
from core.exceptions import LifecycleError

logger = logging.getLogger(__name__)

SWEEP_LOCK_KEY = 'announcement_expiry_sweep_lock'


def acquire_sweep_lock(ttl_seconds: int = 3600):
    """
    Take the cross-process sweep lock.

    Returns:
        the lock token, or None if another pass holds the lock
    """
    token = str(uuid.uuid4())
    if cache.add(SWEEP_LOCK_KEY, token, ttl_seconds):
        logger.debug("Acquired expiry sweep lock")
        return token
    return None


def release_sweep_lock(token) -> bool:
    """
    Release the lock if this pass still owns it.

    The cache API has no compare-and-delete, so the get and the delete are two
    calls. They can only race once this pass has outlived the lock TTL and a
    newer pass has taken the lock.
    """
    if token is None:
        return False
    if cache.get(SWEEP_LOCK_KEY) != token:
        logger.warning("Expiry sweep lock expired or was taken over; leaving it in place")
        return False
    cache.delete(SWEEP_LOCK_KEY)
    logger.debug("Released expiry sweep lock")
    return True


class ExpirySweeper:

    def __init__(self, lifecycle=None, config=None):
        if lifecycle is None:
            from announcements.services.announcement_lifecycle import get_announcement_service
            lifecycle = get_announcement_service()
        self.lifecycle = lifecycle
        self.config = config or lifecycle.config

    def expired_queryset(self, today=None):
        today = today or timezone.localdate()
        return Announcement.objects.filter(
            Q(category=Announcement.Category.RENT, date_to__lt=today) |
            Q(expiry_date__isnull=False, expiry_date__lt=today),
            status=Announcement.Status.PUBLISHED,
        )

    def sweep(self, today=None) -> dict:
        """
        Run one pass. Per-announcement failures are logged and counted;
        they never stop the pass.

        Returns:
            dict summary (checked, closed, errors, skipped)
        """
        token = acquire_sweep_lock(self.config.sweep_lock_ttl)
        if token is None:
            logger.warning("Expiry sweep skipped: previous pass still running")
            return {
                'status': 'skipped',
                'checked': 0,
                'closed': 0,
                'errors': 0,
                'skipped': True,
                'timestamp': timezone.now().isoformat()
            }

        try:
            return self._sweep(today or timezone.localdate())
        finally:
            release_sweep_lock(token)

    def _sweep(self, today):
        logger.info(f"Starting announcement expiry sweep for {today}...")

        expired_ids = list(self.expired_queryset(today).values_list('id', flat=True))
        closed_count = 0
        error_count = 0

        for announcement_id in expired_ids:
            try:
                self.lifecycle.close(announcement_id, actor=None)
                closed_count += 1
            except LifecycleError as e:
                # Changed state between the query and the lock (e.g. owner closed it)
                error_count += 1
                logger.warning(f"Expiry sweep could not close announcement {announcement_id}: {e}")
            except Exception as e:
                error_count += 1
                logger.error(f"Expiry sweep failed for announcement {announcement_id}: {e}")

        logger.info(
            f"Expiry sweep complete. Checked: {len(expired_ids)}, "
            f"Closed: {closed_count}, Errors: {error_count}"
        )
        return {
            'status': 'success',
            'checked': len(expired_ids),
            'closed': closed_count,
            'errors': error_count,
            'skipped': False,
            'timestamp': timezone.now().isoformat()
        }


def get_expiry_sweeper() -> ExpirySweeper:
    return ExpirySweeper()
