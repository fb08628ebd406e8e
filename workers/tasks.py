# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background media housekeeping.
#
# Tasks:
# - purge_expired_stories: Delete expired stories and release their media
# =============================================================================

import asyncio
import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


async def _purge(ttl_hours: int) -> int:
    from app.config import get_settings
    from app.dependencies import build_coordinator
    from core.services.story_service import StoryService

    coordinator = build_coordinator(get_settings())
    try:
        return await StoryService(coordinator, ttl_hours=ttl_hours).purge_expired_stories()
    finally:
        await coordinator.asset_store.close()


# =============================================================================
# Story Expiry Sweep
# =============================================================================

@shared_task(bind=True, name="workers.tasks.purge_expired_stories")
def purge_expired_stories(self) -> dict[str, Any]:
    """
    Remove every story past its expiry time.

    Each story's media is released before its record is deleted. A media
    failure is logged and does not keep the story around.

    Returns:
        Dict with:
        - success: bool
        - purged: Number of stories deleted
        - error: Error message (on failure)
    """
    from app.config import get_settings

    logger.info("Sweeping expired stories")

    try:
        purged = asyncio.run(_purge(get_settings().STORY_TTL_HOURS))
    except Exception as e:
        logger.exception(f"Story sweep failed: {e}")
        return {"success": False, "purged": 0, "error": str(e)}

    return {"success": True, "purged": purged}
