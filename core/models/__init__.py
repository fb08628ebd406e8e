# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# - media.py: Asset references, upload policies, lifecycle states
# - entities.py: Entity kinds, media bindings and request schemas
#
# Only media.py is re-exported here; entities.py depends on lib/ and is
# imported directly.
# =============================================================================

from .media import (
    ALLOWED_TRANSITIONS,
    AssetClass,
    AssetLifecycle,
    AssetReference,
    AssetState,
    DeletionOutcome,
    InvalidTransitionError,
    PendingUpload,
    ResourceType,
    UploadPolicy,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AssetClass",
    "AssetLifecycle",
    "AssetReference",
    "AssetState",
    "DeletionOutcome",
    "InvalidTransitionError",
    "PendingUpload",
    "ResourceType",
    "UploadPolicy",
]
