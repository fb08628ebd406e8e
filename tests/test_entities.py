# =============================================================================
# tests/test_entities.py - Entity Binding and Schema Tests
# =============================================================================
# This module contains tests for:
# - MediaBinding.reference_of / fields_for
# - Request schema validation
# =============================================================================

from datetime import datetime

import pytest
from pydantic import ValidationError

from core.models.entities import (
    MEDIA_BINDINGS,
    BusinessCreate,
    EntityKind,
    EventCreate,
    PostCreate,
    StoryCreate,
)
from core.models.media import AssetReference, ResourceType

IMAGE_URL = "https://res.cloudinary.com/demo/image/upload/v1/patwa_toli/posts/a.jpg"
VIDEO_URL = "https://res.cloudinary.com/demo/video/upload/v1/patwa_toli/posts/b.mp4"


class TestReferenceOf:
    """Test reading Asset References out of entity rows."""

    def test_no_media(self):
        assert MEDIA_BINDINGS[EntityKind.EVENT].reference_of({"id": "1", "image": None}) is None

    def test_post_image(self):
        ref = MEDIA_BINDINGS[EntityKind.POST].reference_of({
            "image": IMAGE_URL,
            "media_public_id": "patwa_toli/posts/a",
            "media_resource_type": "image",
        })

        assert ref == AssetReference(url=IMAGE_URL, handle="patwa_toli/posts/a", resource_type=ResourceType.IMAGE)

    def test_post_video_without_stored_type(self):
        """Older posts without a stored kind are treated as video when the video field is set."""
        ref = MEDIA_BINDINGS[EntityKind.POST].reference_of({"image": None, "video": VIDEO_URL})

        assert ref.url == VIDEO_URL
        assert ref.handle is None
        assert ref.resource_type is ResourceType.VIDEO

    def test_kind_inferred_from_url(self):
        ref = MEDIA_BINDINGS[EntityKind.BUSINESS].reference_of({"image": IMAGE_URL})
        assert ref.resource_type is ResourceType.IMAGE

    def test_user_has_url_only(self):
        ref = MEDIA_BINDINGS[EntityKind.USER].reference_of({"profile_pic": IMAGE_URL})

        assert ref.handle is None
        assert ref.url == IMAGE_URL


class TestFieldsFor:
    """Test writing Asset References into entity fields."""

    def test_post_video(self):
        ref = AssetReference(url=VIDEO_URL, handle="patwa_toli/posts/b", resource_type=ResourceType.VIDEO)

        assert MEDIA_BINDINGS[EntityKind.POST].fields_for(ref) == {
            "image": None,
            "video": VIDEO_URL,
            "media_public_id": "patwa_toli/posts/b",
            "media_resource_type": "video",
        }

    def test_media_kind_used_when_store_reports_none(self):
        ref = AssetReference(url=VIDEO_URL, handle="h")

        fields = MEDIA_BINDINGS[EntityKind.STORY].fields_for(ref, ResourceType.VIDEO)

        assert fields == {"media_url": VIDEO_URL, "public_id": "h", "media_type": "video"}

    def test_user(self):
        ref = AssetReference(url=IMAGE_URL, handle="h", resource_type=ResourceType.IMAGE)
        assert MEDIA_BINDINGS[EntityKind.USER].fields_for(ref) == {"profile_pic": IMAGE_URL}

    def test_tables(self):
        assert EntityKind.BUSINESS.table == "businesses"
        assert EntityKind.STORY.table == "stories"


class TestRequestSchemas:
    """Test request schema limits."""

    def test_post_content_limit(self):
        with pytest.raises(ValidationError):
            PostCreate(content="x" * 2001)

    def test_story_caption_limit(self):
        with pytest.raises(ValidationError):
            StoryCreate(caption="x" * 201)

    def test_event_requires_title(self):
        with pytest.raises(ValidationError):
            EventCreate(title="", description="d", event_date=datetime(2026, 1, 1), location="here")

    def test_business_email_format(self):
        with pytest.raises(ValidationError):
            BusinessCreate(name="n", description="d", category="Retail", address="a", email="not-an-email")

    def test_business_category(self):
        with pytest.raises(ValidationError):
            BusinessCreate(name="n", description="d", category="Casino", address="a")
