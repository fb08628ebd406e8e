# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .asset_store import AssetStore, InMemoryAssetStore
from .cloudinary_store import CloudinaryAssetStore, CloudinaryCredentials
from .entity_store import EntityStore, InMemoryEntityStore, SupabaseEntityStore
from .media_lifecycle import MediaLifecycleCoordinator
from .upload_gateway import DEFAULT_UPLOAD_POLICIES, build_upload_policies, validate

__all__ = [
    "AssetStore",
    "InMemoryAssetStore",
    "CloudinaryAssetStore",
    "CloudinaryCredentials",
    "EntityStore",
    "InMemoryEntityStore",
    "SupabaseEntityStore",
    "MediaLifecycleCoordinator",
    "DEFAULT_UPLOAD_POLICIES",
    "build_upload_policies",
    "validate",
]
