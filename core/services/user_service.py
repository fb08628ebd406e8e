# =============================================================================
# core/services/user_service.py - Profile Picture Operations
# =============================================================================
# Users keep only the URL of their profile picture; the deletion handle is
# derived from it when the picture is replaced or the user is removed.
# New users start with the locally served default avatar, which is never
# deleted remotely.
# =============================================================================

import logging
from typing import Any

from app.auth.models import AuthUser
from app.exceptions import ForbiddenError, InvalidRequestError
from core.models.entities import EntityKind, ProfileUpdate
from core.models.media import PendingUpload
from core.services.entity_service import EntityService
from core.services.media_lifecycle import MediaLifecycleCoordinator

logger = logging.getLogger(__name__)


class UserService(EntityService):
    """User profiles and their pictures."""

    kind = EntityKind.USER
    owner_field = "id"

    def __init__(self, coordinator: MediaLifecycleCoordinator, default_avatar_path: str):
        super().__init__(coordinator)
        self.default_avatar_path = default_avatar_path

    async def create_profile(
        self,
        data: dict[str, Any],
        profile_pic: PendingUpload | None = None,
    ) -> dict[str, Any]:
        """
        Create a pending (unverified) user profile.

        Called by the signup flow once the auth account exists; no route here
        exposes it. Without a picture the profile gets the default avatar.
        """
        fields = {"verified": False, "is_admin": False, **data}
        if profile_pic is None:
            fields["profile_pic"] = self.default_avatar_path
        return await self.coordinator.create_with_media(self.kind, fields, profile_pic)

    async def update_profile(
        self,
        user: AuthUser,
        changes: ProfileUpdate,
        profile_pic: PendingUpload | None = None,
    ) -> dict[str, Any]:
        """
        Update the caller's own profile, replacing the picture if one is sent.

        The previous picture is deleted after the profile has been saved with
        the new one; failures there are logged only.
        """
        row = await self.get(str(user.id))
        fields = changes.model_dump(exclude_unset=True)
        return await self.coordinator.replace_entity_media(self.kind, row, profile_pic, fields)

    async def reject_pending_user(self, user_id: str, admin: AuthUser) -> str:
        """
        Reject a signup: release the profile picture and delete the record.

        Returns the rejected username.

        Raises:
            ForbiddenError: If the caller is not an admin
            InvalidRequestError: If the user is already verified
        """
        if not admin.is_admin:
            raise ForbiddenError(self.kind.value, str(user_id))

        row = await self.get(user_id)
        if row.get("verified"):
            raise InvalidRequestError(
                "Cannot reject an already verified user",
                suggestion="Only pending registrations can be rejected",
            )

        await self.coordinator.delete_entity_with_media(self.kind, row)
        logger.info(f"Rejected registration for {row.get('username', user_id)}")
        return row.get("username", str(user_id))
