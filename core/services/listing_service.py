# =============================================================================
# core/services/listing_service.py - Event and Business Listings
# =============================================================================
# Events and businesses share one shape: a listing owned by a user with an
# optional image that can be replaced on update.
# =============================================================================

from typing import Any

from pydantic import BaseModel

from app.auth.models import AuthUser
from core.models.entities import (
    BusinessCreate,
    BusinessUpdate,
    EntityKind,
    EventCreate,
    EventUpdate,
)
from core.models.media import PendingUpload
from core.services.entity_service import EntityService


def _document_fields(model: BaseModel, exclude_unset: bool = False) -> dict[str, Any]:
    """Model fields as JSON-compatible values (enums/datetimes as strings)."""
    return model.model_dump(mode="json", exclude_unset=exclude_unset)


class ListingService(EntityService):
    """Owner-or-admin editable listing with one optional image."""

    async def create_listing(
        self,
        user: AuthUser,
        listing: BaseModel,
        image: PendingUpload | None = None,
    ) -> dict[str, Any]:
        data = {**_document_fields(listing), self.owner_field: str(user.id)}
        return await self.coordinator.create_with_media(self.kind, data, image)

    async def update_listing(
        self,
        entity_id: str,
        user: AuthUser,
        changes: BaseModel,
        image: PendingUpload | None = None,
    ) -> dict[str, Any]:
        """
        Apply field changes and, if an image is given, replace the current one.

        The old image is removed only after the listing points at the new one.
        """
        row = await self.get_for_update(entity_id, user)
        fields = _document_fields(changes, exclude_unset=True)
        return await self.coordinator.replace_entity_media(self.kind, row, image, fields)


class EventService(ListingService):
    kind = EntityKind.EVENT
    owner_field = "organizer_id"

    async def create_event(
        self,
        user: AuthUser,
        event: EventCreate,
        image: PendingUpload | None = None,
    ) -> dict[str, Any]:
        return await self.create_listing(user, event, image)

    async def update_event(
        self,
        event_id: str,
        user: AuthUser,
        changes: EventUpdate,
        image: PendingUpload | None = None,
    ) -> dict[str, Any]:
        return await self.update_listing(event_id, user, changes, image)


class BusinessService(ListingService):
    kind = EntityKind.BUSINESS
    owner_field = "owner_id"

    async def create_business(
        self,
        user: AuthUser,
        business: BusinessCreate,
        image: PendingUpload | None = None,
    ) -> dict[str, Any]:
        return await self.create_listing(user, business, image)

    async def update_business(
        self,
        business_id: str,
        user: AuthUser,
        changes: BusinessUpdate,
        image: PendingUpload | None = None,
    ) -> dict[str, Any]:
        return await self.update_listing(business_id, user, changes, image)
