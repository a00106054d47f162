"""
Core Celery tasks.

I/O that should never block an API request or a lifecycle transaction.
"""
from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def delete_images_async(self, keys: list):
    """
    Remove replaced announcement images from storage.

    Scheduled after the announcement update commits. Deletion is best-effort:
    per-key failures are logged by the store, only a store-level crash retries.

    Usage:
        from core.tasks import delete_images_async
        delete_images_async.delay(['announcements/abc.jpg'])
    """
    try:
        from core.storage_service import get_image_store
        deleted = get_image_store().delete(keys)
        logger.info(f"Deleted {deleted}/{len(keys)} replaced image(s)")
        return {'status': 'success', 'deleted': deleted}
    except Exception as exc:
        logger.error(f"Image cleanup failed: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))
