# =============================================================================
# core/services/entity_service.py - Shared Entity Service Logic
# =============================================================================
# Fetch and ownership checks shared by the per-entity services.
# =============================================================================

from typing import Any

from app.auth.models import AuthUser
from app.exceptions import EntityNotFoundError, ForbiddenError
from core.models.entities import EntityKind
from core.services.entity_store import EntityStore
from core.services.media_lifecycle import MediaLifecycleCoordinator


class EntityService:
    """
    Base class for services whose entities own media.

    Subclasses set `kind` and `owner_field`.
    """

    kind: EntityKind
    owner_field: str = "user_id"
    admin_can_modify: bool = True

    def __init__(self, coordinator: MediaLifecycleCoordinator):
        self.coordinator = coordinator

    @property
    def store(self) -> EntityStore:
        return self.coordinator.entity_store

    async def get(self, entity_id: str) -> dict[str, Any]:
        """
        Get an entity by ID.

        Raises:
            EntityNotFoundError: If it doesn't exist
        """
        row = await self.store.get(self.kind, str(entity_id))
        if row is None:
            raise EntityNotFoundError(self.kind.value, str(entity_id))
        return row

    async def get_for_update(self, entity_id: str, user: AuthUser) -> dict[str, Any]:
        """
        Get an entity the user is allowed to modify.

        Raises:
            EntityNotFoundError: If it doesn't exist
            ForbiddenError: If the user neither owns it nor (where allowed) is an admin
        """
        row = await self.get(entity_id)
        is_owner = str(row.get(self.owner_field)) == str(user.id)
        if not is_owner and not (self.admin_can_modify and user.is_admin):
            raise ForbiddenError(self.kind.value, str(entity_id))
        return row

    async def delete(self, entity_id: str, user: AuthUser) -> None:
        """Delete an entity and release its media."""
        row = await self.get_for_update(entity_id, user)
        await self.coordinator.delete_entity_with_media(self.kind, row)
