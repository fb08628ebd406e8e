# =============================================================================
# core/services/story_service.py - Story Media Operations
# =============================================================================
# Stories are a single image or video that expires after a fixed time.
# Expired stories are removed by purge_expired_stories (run from Celery),
# which also releases their remote media.
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from app.auth.models import AuthUser
from app.exceptions import MissingMediaError
from core.models.entities import EntityKind, StoryCreate
from core.models.media import PendingUpload
from core.services.entity_service import EntityService
from core.services.media_lifecycle import MediaLifecycleCoordinator

logger = logging.getLogger(__name__)

STORY_MEDIA_FIELD = "storyMedia"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StoryService(EntityService):
    """Ephemeral media posts."""

    kind = EntityKind.STORY
    # Only the author may delete a story.
    admin_can_modify = False

    def __init__(
        self,
        coordinator: MediaLifecycleCoordinator,
        ttl_hours: int = 24,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(coordinator)
        self.ttl = timedelta(hours=ttl_hours)
        self._clock = clock

    async def create_story(
        self,
        user: AuthUser,
        story: StoryCreate,
        media: PendingUpload | None,
    ) -> dict[str, Any]:
        """
        Create a story from an uploaded image or video.

        Raises:
            MissingMediaError: If no media file was sent
        """
        if media is None:
            raise MissingMediaError(STORY_MEDIA_FIELD)

        expires_at = self._clock() + self.ttl
        return await self.coordinator.create_with_media(
            self.kind,
            {
                "user_id": str(user.id),
                "caption": story.caption.strip(),
                "expires_at": expires_at.isoformat(),
            },
            media,
        )

    async def purge_expired_stories(self, now: datetime | None = None) -> int:
        """
        Delete every story whose expiry has passed.

        Media is released best effort; a story is removed even when its media
        cannot be. Returns the number of stories deleted.
        """
        cutoff = now or self._clock()
        expired = await self.store.list_before(self.kind, "expires_at", cutoff)

        for row in expired:
            await self.coordinator.delete_entity_with_media(self.kind, row)

        if expired:
            logger.info(f"Purged {len(expired)} expired stories")
        return len(expired)
