# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides in-memory stores sharing one call journal, so tests can assert
#   on the order of entity writes and remote deletions
# =============================================================================

import os
from uuid import UUID

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("ASSET_STORE_BACKEND", "memory")
os.environ.setdefault("ENTITY_STORE_BACKEND", "memory")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from app.auth.models import AuthUser
from core.models.media import PendingUpload
from core.services.asset_store import InMemoryAssetStore
from core.services.entity_store import InMemoryEntityStore
from core.services.media_lifecycle import MediaLifecycleCoordinator

DEFAULT_AVATAR = "/uploads/profile-pics/default_avatar.png"

OWNER_ID = UUID("11111111-1111-4111-8111-111111111111")
OTHER_ID = UUID("22222222-2222-4222-8222-222222222222")
ADMIN_ID = UUID("33333333-3333-4333-8333-333333333333")


def make_upload(
    name: str = "photo.jpg",
    mime_type: str = "image/jpeg",
    size: int = 1024,
) -> PendingUpload:
    """Build a PendingUpload with `size` bytes of filler."""
    return PendingUpload(buffer=b"x" * size, original_name=name, mime_type=mime_type)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def journal():
    """Call log shared by the in-memory stores."""
    return []


@pytest.fixture
def asset_store(journal):
    return InMemoryAssetStore(journal=journal)


@pytest.fixture
def entity_store(journal):
    return InMemoryEntityStore(journal=journal)


@pytest.fixture
def coordinator(asset_store, entity_store):
    return MediaLifecycleCoordinator(
        asset_store=asset_store,
        entity_store=entity_store,
        namespace="patwa_toli",
        placeholder_urls=[DEFAULT_AVATAR],
    )


@pytest.fixture
def owner():
    return AuthUser(id=OWNER_ID, email="owner@example.com")


@pytest.fixture
def other_user():
    return AuthUser(id=OTHER_ID, email="other@example.com")


@pytest.fixture
def admin():
    return AuthUser(id=ADMIN_ID, email="admin@example.com", is_admin=True)


@pytest.fixture
def image_upload():
    return make_upload()


@pytest.fixture
def video_upload():
    return make_upload(name="clip.mp4", mime_type="video/mp4", size=4096)
