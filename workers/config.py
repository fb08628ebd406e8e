# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers.
# =============================================================================

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete (not before)
    task_acks_late = True

    # Only prefetch one task at a time
    worker_prefetch_multiplier = 1

    # Task results expire after 1 hour
    result_expires = 3600

    # A sweep touches the media store once per story
    task_time_limit = 600
    task_soft_time_limit = 540

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "media": {
            "exchange": "media",
            "routing_key": "media",
        },
    }

    task_routes = {
        "workers.tasks.purge_expired_stories": {"queue": "media"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Schedule (celery beat)
    # -------------------------------------------------------------------------

    beat_schedule = {
        "purge-expired-stories": {
            "task": "workers.tasks.purge_expired_stories",
            "schedule": float(settings.STORY_PURGE_INTERVAL_SECONDS),
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
