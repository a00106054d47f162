"""
Image storage for announcement photos.

The lifecycle code only ever handles opaque storage keys; this service is
the one place that touches file bytes. Backed by Django's default storage
(filesystem in development, whatever STORAGES configures in production).
"""
import logging
import os
import uuid

from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


class ImageStore:
    """Upload, delete and resolve announcement images by storage key."""

    ALLOWED_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp')

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def upload(self, files, prefix='announcements'):
        """
        Save uploaded files and return their storage keys.

        Args:
            files: iterable of Django UploadedFile objects
            prefix: key prefix (directory) for the stored files

        Returns:
            list of storage keys, in upload order
        """
        keys = []
        for upload in files:
            ext = os.path.splitext(upload.name)[1].lower()
            if ext not in self.ALLOWED_EXTENSIONS:
                ext = '.jpg'
            key = self.storage.save(f"{prefix}/{uuid.uuid4().hex}{ext}", upload)
            keys.append(key)
            logger.info(f"Stored image {key}")
        return keys

    def delete(self, keys):
        """
        Best-effort removal. Returns the number of keys actually deleted;
        failures are logged and skipped.
        """
        deleted = 0
        for key in keys:
            try:
                if self.storage.exists(key):
                    self.storage.delete(key)
                    deleted += 1
            except Exception as e:
                logger.warning(f"Failed to delete image {key}: {e}")
        return deleted

    def resolve(self, keys):
        """Map storage keys to display URLs."""
        urls = []
        for key in keys or []:
            try:
                urls.append(self.storage.url(key))
            except Exception as e:
                logger.warning(f"Failed to resolve image {key}: {e}")
        return urls


# Singleton instance
_image_store = None


def get_image_store() -> ImageStore:
    """Get or create singleton image store instance."""
    global _image_store
    if _image_store is None:
        _image_store = ImageStore()
    return _image_store
