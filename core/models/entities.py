# =============================================================================
# core/models/entities.py - Domain Entity Schemas and Media Bindings
# =============================================================================
# Entities that embed media:
# - user:     profile_pic (URL only; handle derived from the URL)
# - post:     image | video, media_public_id, media_resource_type
# - story:    media_url, public_id, media_type, expires_at
# - event:    image, image_public_id
# - business: image, image_public_id
#
# A MediaBinding tells the lifecycle coordinator which fields of an entity
# row hold its Asset Reference and where its uploads go.
# =============================================================================

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from core.models.media import AssetClass, AssetReference, ResourceType
from lib.asset_urls import infer_resource_type


class EntityKind(str, Enum):
    """Domain entities that own media."""
    USER = "user"
    POST = "post"
    STORY = "story"
    EVENT = "event"
    BUSINESS = "business"

    @property
    def table(self) -> str:
        return _TABLES[self]


_TABLES = {
    EntityKind.USER: "users",
    EntityKind.POST: "posts",
    EntityKind.STORY: "stories",
    EntityKind.EVENT: "events",
    EntityKind.BUSINESS: "businesses",
}


# =============================================================================
# Media Bindings
# =============================================================================

@dataclass(frozen=True)
class MediaBinding:
    """
    Where an entity keeps its Asset Reference.

    `video_url_field` is set only for entities that store images and videos
    in separate columns (posts).
    """
    kind: EntityKind
    asset_class: AssetClass
    folder: str
    url_field: str
    handle_field: str | None = None
    resource_type_field: str | None = None
    video_url_field: str | None = None

    def reference_of(self, row: dict[str, Any]) -> AssetReference | None:
        """Read the entity's current Asset Reference, or None if it has no media."""
        url = row.get(self.url_field)
        from_video_field = False
        if not url and self.video_url_field:
            url = row.get(self.video_url_field)
            from_video_field = bool(url)
        if not url:
            return None

        handle = row.get(self.handle_field) if self.handle_field else None

        resource_type = None
        stored_type = row.get(self.resource_type_field) if self.resource_type_field else None
        if stored_type:
            resource_type = ResourceType(stored_type)
        elif from_video_field:
            resource_type = ResourceType.VIDEO
        else:
            resource_type = infer_resource_type(url)

        return AssetReference(url=url, handle=handle or None, resource_type=resource_type)

    def fields_for(
        self,
        ref: AssetReference,
        media_kind: ResourceType | None = None,
    ) -> dict[str, Any]:
        """Entity fields that attach `ref`, replacing whatever was there."""
        resource_type = ref.resource_type or media_kind

        fields: dict[str, Any] = {}
        if self.video_url_field:
            is_video = resource_type is ResourceType.VIDEO
            fields[self.url_field] = None if is_video else ref.url
            fields[self.video_url_field] = ref.url if is_video else None
        else:
            fields[self.url_field] = ref.url

        if self.handle_field:
            fields[self.handle_field] = ref.handle
        if self.resource_type_field:
            fields[self.resource_type_field] = resource_type.value if resource_type else None
        return fields


MEDIA_BINDINGS: dict[EntityKind, MediaBinding] = {
    EntityKind.USER: MediaBinding(
        kind=EntityKind.USER,
        asset_class=AssetClass.PROFILE_PIC,
        folder="profile-pics",
        url_field="profile_pic",
    ),
    EntityKind.POST: MediaBinding(
        kind=EntityKind.POST,
        asset_class=AssetClass.POST_MEDIA,
        folder="posts",
        url_field="image",
        video_url_field="video",
        handle_field="media_public_id",
        resource_type_field="media_resource_type",
    ),
    EntityKind.STORY: MediaBinding(
        kind=EntityKind.STORY,
        asset_class=AssetClass.STORY_MEDIA,
        folder="stories",
        url_field="media_url",
        handle_field="public_id",
        resource_type_field="media_type",
    ),
    EntityKind.EVENT: MediaBinding(
        kind=EntityKind.EVENT,
        asset_class=AssetClass.EVENT_IMAGE,
        folder="events",
        url_field="image",
        handle_field="image_public_id",
    ),
    EntityKind.BUSINESS: MediaBinding(
        kind=EntityKind.BUSINESS,
        asset_class=AssetClass.BUSINESS_IMAGE,
        folder="businesses",
        url_field="image",
        handle_field="image_public_id",
    ),
}

ASSET_CLASS_FOLDERS: dict[AssetClass, str] = {
    binding.asset_class: binding.folder for binding in MEDIA_BINDINGS.values()
}


# =============================================================================
# Request Schemas
# =============================================================================

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class EventCategory(str, Enum):
    COMMUNITY_GATHERING = "Community Gathering"
    CULTURAL = "Cultural"
    WORKSHOP = "Workshop"
    SOCIAL = "Social"
    BUSINESS = "Business"
    CHARITY = "Charity"
    ONLINE = "Online"
    OTHER = "Other"


class BusinessCategory(str, Enum):
    RETAIL = "Retail"
    FOOD_AND_BEVERAGE = "Food & Beverage"
    SERVICES = "Services"
    HEALTH_AND_WELLNESS = "Health & Wellness"
    ARTS_AND_CRAFTS = "Arts & Crafts"
    PROFESSIONAL = "Professional"
    ONLINE = "Online"
    OTHER = "Other"


class ProfileUpdate(BaseModel):
    """Editable profile fields. Omitted fields are left unchanged."""
    fullname: str | None = Field(default=None, min_length=1, max_length=100)
    fathername: str | None = Field(default=None, min_length=1, max_length=100)
    address: str | None = Field(default=None, max_length=300)
    phone: str | None = Field(default=None, max_length=30)
    bio: str | None = Field(default=None, max_length=250)


class PostCreate(BaseModel):
    content: str = Field(default="", max_length=2000)


class StoryCreate(BaseModel):
    caption: str = Field(default="", max_length=200)


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    category: EventCategory = EventCategory.COMMUNITY_GATHERING
    event_date: datetime
    location: str = Field(..., min_length=1)


class EventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    category: EventCategory | None = None
    event_date: datetime | None = None
    location: str | None = Field(default=None, min_length=1)


class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    category: BusinessCategory
    address: str = Field(..., min_length=1)
    phone: str | None = None
    website: str | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)


class BusinessUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    category: BusinessCategory | None = None
    address: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    website: str | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
