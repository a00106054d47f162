"""
Announcement Celery tasks.
"""
from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def run_expiry_sweep():
    """
    Close published announcements past their end/expiry date.

    Scheduled via Celery Beat to run daily at midnight. Overlapping runs are
    skipped by the sweeper's cache lock.
    """
    from announcements.services.expiry_sweeper import get_expiry_sweeper
    return get_expiry_sweeper().sweep()
