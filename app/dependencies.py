# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# Builds the media stack once at process start from Settings and exposes it
# to route handlers through Depends().
#
# Settings are read here and nowhere below: the coordinator and stores get
# explicit policy/credential objects in their constructors.
# =============================================================================

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import Settings, get_settings
from core.services.asset_store import AssetStore, InMemoryAssetStore
from core.services.cloudinary_store import CloudinaryAssetStore, CloudinaryCredentials
from core.services.entity_store import EntityStore, InMemoryEntityStore, SupabaseEntityStore
from core.services.listing_service import BusinessService, EventService
from core.services.media_lifecycle import MediaLifecycleCoordinator
from core.services.post_service import PostService
from core.services.story_service import StoryService
from core.services.upload_gateway import build_upload_policies
from core.services.user_service import UserService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def build_asset_store(settings: Settings) -> AssetStore:
    """Create the configured remote asset store."""
    if settings.ASSET_STORE_BACKEND == "memory":
        logger.warning("Using in-memory asset store; uploads are not persisted")
        return InMemoryAssetStore()

    credentials = CloudinaryCredentials(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        api_base=settings.CLOUDINARY_API_BASE,
    )
    if not credentials.is_complete:
        raise RuntimeError(
            "Cloudinary credentials missing: set CLOUDINARY_CLOUD_NAME, "
            "CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET (or ASSET_STORE_BACKEND=memory)"
        )
    logger.info(f"Cloudinary configured for cloud: {credentials.cloud_name}")
    return CloudinaryAssetStore(credentials, timeout=settings.ASSET_STORE_TIMEOUT_SECONDS)


def build_entity_store(settings: Settings) -> EntityStore:
    """Create the configured document store."""
    if settings.ENTITY_STORE_BACKEND == "memory":
        logger.warning("Using in-memory entity store; records are not persisted")
        return InMemoryEntityStore()
    return SupabaseEntityStore(SupabaseClient.get_client)


def build_coordinator(
    settings: Settings,
    asset_store: AssetStore | None = None,
    entity_store: EntityStore | None = None,
) -> MediaLifecycleCoordinator:
    """Wire the media lifecycle coordinator from settings."""
    policies = build_upload_policies(
        profile_pic_mb=settings.PROFILE_PIC_MAX_MB,
        post_media_mb=settings.POST_MEDIA_MAX_MB,
        story_media_mb=settings.STORY_MEDIA_MAX_MB,
        event_image_mb=settings.EVENT_IMAGE_MAX_MB,
        business_image_mb=settings.BUSINESS_IMAGE_MAX_MB,
    )
    return MediaLifecycleCoordinator(
        asset_store=asset_store or build_asset_store(settings),
        entity_store=entity_store or build_entity_store(settings),
        policies=policies,
        namespace=settings.ASSET_NAMESPACE,
        placeholder_urls=[settings.DEFAULT_AVATAR_PATH],
    )


@lru_cache
def get_coordinator() -> MediaLifecycleCoordinator:
    """Process-wide coordinator, built on first use."""
    return build_coordinator(get_settings())


CoordinatorDep = Annotated[MediaLifecycleCoordinator, Depends(get_coordinator)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_user_service(coordinator: CoordinatorDep, settings: SettingsDep) -> UserService:
    return UserService(coordinator, default_avatar_path=settings.DEFAULT_AVATAR_PATH)


def get_post_service(coordinator: CoordinatorDep) -> PostService:
    return PostService(coordinator)


def get_story_service(coordinator: CoordinatorDep, settings: SettingsDep) -> StoryService:
    return StoryService(coordinator, ttl_hours=settings.STORY_TTL_HOURS)


def get_event_service(coordinator: CoordinatorDep) -> EventService:
    return EventService(coordinator)


def get_business_service(coordinator: CoordinatorDep) -> BusinessService:
    return BusinessService(coordinator)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
PostServiceDep = Annotated[PostService, Depends(get_post_service)]
StoryServiceDep = Annotated[StoryService, Depends(get_story_service)]
EventServiceDep = Annotated[EventService, Depends(get_event_service)]
BusinessServiceDep = Annotated[BusinessService, Depends(get_business_service)]
