# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# background media housekeeping.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (expired story sweep)
# - config.py: Worker settings and the beat schedule
#
# Usage:
#   celery -A workers.celery_app worker --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
