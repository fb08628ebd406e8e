# =============================================================================
# core/services/post_service.py - Post Media Operations
# =============================================================================
# Creating and deleting posts that carry an image or a video.
# =============================================================================

import logging
from typing import Any

from app.auth.models import AuthUser
from app.exceptions import InvalidRequestError
from core.models.entities import EntityKind, PostCreate
from core.models.media import PendingUpload
from core.services.entity_service import EntityService

logger = logging.getLogger(__name__)


class PostService(EntityService):
    """Posts: text plus at most one image or video."""

    kind = EntityKind.POST

    async def create_post(
        self,
        user: AuthUser,
        post: PostCreate,
        image: PendingUpload | None = None,
        video: PendingUpload | None = None,
    ) -> dict[str, Any]:
        """
        Create a post, uploading its media first.

        When both an image and a video are sent, the image is used.

        Raises:
            InvalidRequestError: If there is neither content nor media
        """
        content = post.content.strip()
        media = image or video
        if not content and media is None:
            raise InvalidRequestError(
                "Post must contain text content or media",
                suggestion="Add some text, an 'image' file or a 'video' file",
            )
        if image is not None and video is not None:
            logger.info(f"Post from {user.id} has both image and video; using the image")

        return await self.coordinator.create_with_media(
            self.kind,
            {"user_id": str(user.id), "content": content},
            media,
        )
