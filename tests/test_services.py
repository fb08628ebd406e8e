# =============================================================================
# tests/test_services.py - Entity Service Tests
# =============================================================================
# This module contains tests for:
# - PostService: content/media rules
# - StoryService: required media, expiry and the expired-story sweep
# - EventService / BusinessService: ownership checks and image replacement
# - UserService: default avatar, profile picture replacement, signup rejection
# =============================================================================

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from app.exceptions import (
    EntityNotFoundError,
    ForbiddenError,
    InvalidRequestError,
    MissingMediaError,
)
from core.models.entities import (
    BusinessCategory,
    BusinessCreate,
    BusinessUpdate,
    EntityKind,
    EventCreate,
    EventUpdate,
    PostCreate,
    ProfileUpdate,
    StoryCreate,
)
from core.services.listing_service import BusinessService, EventService
from core.services.post_service import PostService
from core.services.story_service import StoryService
from core.services.user_service import UserService
from tests.conftest import DEFAULT_AVATAR, make_upload

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def ops(journal):
    return [entry[0] for entry in journal]


# =============================================================================
# PostService Tests
# =============================================================================

class TestPostService:
    """Test PostService."""

    def test_text_post(self, coordinator, owner):
        post = asyncio.run(PostService(coordinator).create_post(owner, PostCreate(content="  salaam  ")))

        assert post["content"] == "salaam"
        assert post["user_id"] == str(owner.id)

    def test_empty_post_rejected(self, coordinator, journal, owner):
        with pytest.raises(InvalidRequestError):
            asyncio.run(PostService(coordinator).create_post(owner, PostCreate(content="   ")))

        assert journal == []

    def test_media_only_post(self, coordinator, owner, video_upload):
        post = asyncio.run(PostService(coordinator).create_post(owner, PostCreate(), video=video_upload))

        assert post["content"] == ""
        assert post["video"].endswith(".mp4")

    def test_image_preferred_over_video(self, coordinator, asset_store, owner, image_upload, video_upload):
        post = asyncio.run(PostService(coordinator).create_post(
            owner, PostCreate(content="both"), image=image_upload, video=video_upload
        ))

        assert post["image"] is not None
        assert post["video"] is None
        assert len(asset_store.uploads) == 1

    def test_delete_by_owner(self, coordinator, asset_store, entity_store, owner, image_upload):
        service = PostService(coordinator)
        post = asyncio.run(service.create_post(owner, PostCreate(content="x"), image=image_upload))

        asyncio.run(service.delete(post["id"], owner))

        assert asyncio.run(entity_store.get(EntityKind.POST, post["id"])) is None
        assert asset_store.objects == {}

    def test_delete_by_admin(self, coordinator, entity_store, owner, admin):
        service = PostService(coordinator)
        post = asyncio.run(service.create_post(owner, PostCreate(content="x")))

        asyncio.run(service.delete(post["id"], admin))

        assert asyncio.run(entity_store.get(EntityKind.POST, post["id"])) is None

    def test_delete_by_stranger(self, coordinator, journal, owner, other_user, image_upload):
        service = PostService(coordinator)
        post = asyncio.run(service.create_post(owner, PostCreate(content="x"), image=image_upload))
        journal.clear()

        with pytest.raises(ForbiddenError):
            asyncio.run(service.delete(post["id"], other_user))

        assert journal == []

    def test_delete_missing(self, coordinator, owner):
        with pytest.raises(EntityNotFoundError) as exc_info:
            asyncio.run(PostService(coordinator).delete("missing", owner))

        assert exc_info.value.code == "POST_NOT_FOUND"


# =============================================================================
# StoryService Tests
# =============================================================================

class TestStoryService:
    """Test StoryService."""

    def make_service(self, coordinator):
        return StoryService(coordinator, ttl_hours=24, clock=lambda: NOW)

    def test_story_requires_media(self, coordinator, owner):
        with pytest.raises(MissingMediaError) as exc_info:
            asyncio.run(self.make_service(coordinator).create_story(owner, StoryCreate(caption="hi"), None))

        assert exc_info.value.details["field"] == "storyMedia"

    def test_story_expires_after_ttl(self, coordinator, owner, video_upload):
        story = asyncio.run(self.make_service(coordinator).create_story(
            owner, StoryCreate(caption=" hi "), video_upload
        ))

        assert story["caption"] == "hi"
        assert story["media_type"] == "video"
        assert story["public_id"].startswith("patwa_toli/stories/")
        assert datetime.fromisoformat(story["expires_at"]) == NOW + timedelta(hours=24)

    def test_admin_cannot_delete_story(self, coordinator, owner, admin, image_upload):
        service = self.make_service(coordinator)
        story = asyncio.run(service.create_story(owner, StoryCreate(), image_upload))

        with pytest.raises(ForbiddenError):
            asyncio.run(service.delete(story["id"], admin))

    def test_purge_expired_stories(self, coordinator, asset_store, entity_store, owner, image_upload):
        service = self.make_service(coordinator)
        old = asyncio.run(service.create_story(owner, StoryCreate(), image_upload))
        later = StoryService(coordinator, ttl_hours=24, clock=lambda: NOW + timedelta(hours=12))
        fresh = asyncio.run(later.create_story(owner, StoryCreate(), make_upload("b.png", "image/png")))

        purged = asyncio.run(service.purge_expired_stories(now=NOW + timedelta(hours=25)))

        assert purged == 1
        assert asyncio.run(entity_store.get(EntityKind.STORY, old["id"])) is None
        assert asyncio.run(entity_store.get(EntityKind.STORY, fresh["id"])) is not None
        assert old["public_id"] not in asset_store.objects
        assert fresh["public_id"] in asset_store.objects

    def test_purge_survives_media_failures(self, coordinator, asset_store, entity_store, owner, image_upload):
        service = self.make_service(coordinator)
        story = asyncio.run(service.create_story(owner, StoryCreate(), image_upload))
        asset_store.fail_deletions = True

        purged = asyncio.run(service.purge_expired_stories(now=NOW + timedelta(days=2)))

        assert purged == 1
        assert asyncio.run(entity_store.get(EntityKind.STORY, story["id"])) is None

    def test_purge_with_nothing_expired(self, coordinator):
        assert asyncio.run(self.make_service(coordinator).purge_expired_stories()) == 0


# =============================================================================
# Listing Service Tests
# =============================================================================

def make_event():
    return EventCreate(
        title="Community Mela",
        description="Food and music",
        event_date=datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc),
        location="Town Hall",
    )


def make_business():
    return BusinessCreate(
        name="Toli Tailors",
        description="Alterations",
        category=BusinessCategory.SERVICES,
        address="1 High St",
        email="shop@example.com",
    )


class TestEventService:
    """Test EventService."""

    def test_create_event(self, coordinator, owner, image_upload):
        event = asyncio.run(EventService(coordinator).create_event(owner, make_event(), image_upload))

        assert event["organizer_id"] == str(owner.id)
        assert event["category"] == "Community Gathering"
        assert event["event_date"].startswith("2026-05-01T18:00:00")
        assert event["image_public_id"].startswith("patwa_toli/events/")

    def test_update_replaces_image(self, coordinator, asset_store, journal, owner, image_upload):
        """Scenario: updating an event with a new image removes the old one after saving."""
        service = EventService(coordinator)
        event = asyncio.run(service.create_event(owner, make_event(), image_upload))
        journal.clear()

        updated = asyncio.run(service.update_event(
            event["id"], owner, EventUpdate(title="Renamed"), make_upload("new.png", "image/png")
        ))

        assert ops(journal) == ["asset.upload", "entity.update", "asset.delete"]
        assert updated["title"] == "Renamed"
        assert updated["description"] == "Food and music"
        assert event["image_public_id"] not in asset_store.objects

    def test_update_by_admin(self, coordinator, owner, admin):
        service = EventService(coordinator)
        event = asyncio.run(service.create_event(owner, make_event()))

        updated = asyncio.run(service.update_event(event["id"], admin, EventUpdate(location="Park")))

        assert updated["location"] == "Park"

    def test_update_by_stranger(self, coordinator, journal, owner, other_user, image_upload):
        service = EventService(coordinator)
        event = asyncio.run(service.create_event(owner, make_event()))
        journal.clear()

        with pytest.raises(ForbiddenError):
            asyncio.run(service.update_event(event["id"], other_user, EventUpdate(), image_upload))

        assert journal == []


class TestBusinessService:
    """Test BusinessService."""

    def test_create_business(self, coordinator, owner):
        business = asyncio.run(BusinessService(coordinator).create_business(owner, make_business()))

        assert business["owner_id"] == str(owner.id)
        assert business["category"] == "Services"
        assert business["email"] == "shop@example.com"

    def test_update_only_sent_fields(self, coordinator, owner):
        service = BusinessService(coordinator)
        business = asyncio.run(service.create_business(owner, make_business()))

        updated = asyncio.run(service.update_business(business["id"], owner, BusinessUpdate(phone="0123")))

        assert updated["phone"] == "0123"
        assert updated["name"] == "Toli Tailors"

    def test_delete_releases_image(self, coordinator, asset_store, owner, image_upload):
        service = BusinessService(coordinator)
        business = asyncio.run(service.create_business(owner, make_business(), image_upload))

        asyncio.run(service.delete(business["id"], owner))

        assert asset_store.objects == {}


# =============================================================================
# UserService Tests
# =============================================================================

class TestUserService:
    """Test UserService."""

    def make_service(self, coordinator):
        return UserService(coordinator, default_avatar_path=DEFAULT_AVATAR)

    def seed_user(self, coordinator, user, **extra):
        data = {"id": str(user.id), "username": "sam", **extra}
        return asyncio.run(self.make_service(coordinator).create_profile(data))

    def test_new_profile_gets_default_avatar(self, coordinator, journal, owner):
        profile = self.seed_user(coordinator, owner)

        assert profile["profile_pic"] == DEFAULT_AVATAR
        assert profile["verified"] is False
        assert ops(journal) == ["entity.insert"]

    def test_profile_with_picture(self, coordinator, image_upload):
        profile = asyncio.run(self.make_service(coordinator).create_profile({"username": "amy"}, image_upload))

        assert "/patwa_toli/profile-pics/" in profile["profile_pic"]

    def test_first_picture_replaces_default_without_deletion(self, coordinator, journal, owner, image_upload):
        self.seed_user(coordinator, owner)
        journal.clear()

        updated = asyncio.run(self.make_service(coordinator).update_profile(
            owner, ProfileUpdate(bio="hello"), image_upload
        ))

        assert ops(journal) == ["asset.upload", "entity.update"]
        assert updated["bio"] == "hello"
        assert updated["profile_pic"] != DEFAULT_AVATAR

    def test_second_picture_deletes_first(self, coordinator, asset_store, journal, owner, image_upload):
        service = self.make_service(coordinator)
        self.seed_user(coordinator, owner)
        first = asyncio.run(service.update_profile(owner, ProfileUpdate(), image_upload))
        journal.clear()

        asyncio.run(service.update_profile(owner, ProfileUpdate(), make_upload("two.png", "image/png")))

        assert ops(journal) == ["asset.upload", "entity.update", "asset.delete"]
        assert all(obj.url != first["profile_pic"] for obj in asset_store.objects.values())

    def test_update_unknown_user(self, coordinator, owner):
        with pytest.raises(EntityNotFoundError):
            asyncio.run(self.make_service(coordinator).update_profile(owner, ProfileUpdate(bio="x")))

    def test_reject_pending_user(self, coordinator, asset_store, entity_store, owner, admin, image_upload):
        service = self.make_service(coordinator)
        self.seed_user(coordinator, owner)
        asyncio.run(service.update_profile(owner, ProfileUpdate(), image_upload))

        username = asyncio.run(service.reject_pending_user(str(owner.id), admin))

        assert username == "sam"
        assert asyncio.run(entity_store.get(EntityKind.USER, str(owner.id))) is None
        assert asset_store.objects == {}

    def test_reject_keeps_default_avatar(self, coordinator, journal, owner, admin):
        self.seed_user(coordinator, owner)
        journal.clear()

        asyncio.run(self.make_service(coordinator).reject_pending_user(str(owner.id), admin))

        assert ops(journal) == ["entity.delete"]

    def test_reject_requires_admin(self, coordinator, owner, other_user):
        self.seed_user(coordinator, owner)

        with pytest.raises(ForbiddenError):
            asyncio.run(self.make_service(coordinator).reject_pending_user(str(owner.id), other_user))

    def test_cannot_reject_verified_user(self, coordinator, owner, admin):
        self.seed_user(coordinator, owner, verified=True)

        with pytest.raises(InvalidRequestError):
            asyncio.run(self.make_service(coordinator).reject_pending_user(str(owner.id), admin))
