"""
Marketplace lifecycle configuration.

Values are read from Django settings once and handed to the lifecycle
services, so nothing in the services reaches for settings directly.
"""
from django.conf import settings


class LifecycleConfig:
    """Knobs consumed by the announcement/application services and the sweeper"""

    def __init__(self, default_expiry_days=30, max_images=3, image_prefix='announcements',
                 sweep_lock_ttl=3600, notifications_enabled=True):
        if default_expiry_days < 0:
            raise ValueError("default_expiry_days must be non-negative")
        if max_images < 0:
            raise ValueError("max_images must be non-negative")

        self.default_expiry_days = default_expiry_days
        self.max_images = max_images
        self.image_prefix = image_prefix
        self.sweep_lock_ttl = sweep_lock_ttl
        self.notifications_enabled = notifications_enabled

    @classmethod
    def from_settings(cls):
        return cls(
            default_expiry_days=getattr(settings, 'ANNOUNCEMENT_DEFAULT_EXPIRY_DAYS', 30),
            max_images=getattr(settings, 'ANNOUNCEMENT_MAX_IMAGES', 3),
            image_prefix=getattr(settings, 'ANNOUNCEMENT_IMAGE_PREFIX', 'announcements'),
            sweep_lock_ttl=getattr(settings, 'EXPIRY_SWEEP_LOCK_TTL', 3600),
            notifications_enabled=getattr(settings, 'NOTIFICATIONS_ENABLED', True),
        )

    def __repr__(self):
        return (
            f"LifecycleConfig(default_expiry_days={self.default_expiry_days}, "
            f"max_images={self.max_images}, sweep_lock_ttl={self.sweep_lock_ttl})"
        )


# Singleton instance
_lifecycle_config = None


def get_lifecycle_config() -> LifecycleConfig:
    """Get or create the process-wide lifecycle configuration."""
    global _lifecycle_config
    if _lifecycle_config is None:
        _lifecycle_config = LifecycleConfig.from_settings()
    return _lifecycle_config
