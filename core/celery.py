"""
Celery configuration for the Agro Marketplace backend.

Background work handled here:
- Notification delivery (after the triggering transaction commits)
- Removal of replaced announcement images
- The daily announcement expiry sweep
"""
import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings')

app = Celery('core')

# Load config from Django settings with CELERY_ prefix
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks in all installed apps
app.autodiscover_tasks()


# =============================================================================
# CELERY BEAT SCHEDULE - Periodic Tasks
# =============================================================================
app.conf.beat_schedule = {
    # Close published announcements past their end/expiry date (midnight daily)
    'announcement-expiry-sweep': {
        'task': 'announcements.tasks.run_expiry_sweep',
        'schedule': crontab(hour=0, minute=0),
    },

    # Drop old seen notifications (run weekly on Sunday 2 AM)
    'cleanup-old-notifications': {
        'task': 'notifications.tasks.cleanup_old_notifications',
        'schedule': crontab(hour=2, minute=0, day_of_week=0),
    },
}

app.conf.update(
    result_expires=3600,  # 1 hour

    task_time_limit=300,  # 5 minutes hard limit
    task_soft_time_limit=240,  # 4 minutes soft limit

    task_acks_late=True,
    task_reject_on_worker_lost=True,

    worker_prefetch_multiplier=1,

    task_serializer='json',
    result_serializer='json',
    accept_content=['json'],

    timezone='Asia/Yerevan',
    enable_utc=True,
)
