# =============================================================================
# core/models/media.py - Media Asset Schemas
# =============================================================================
# These models describe uploaded media and the rules applied to it:
# - AssetReference: servable URL + deletion handle embedded in an entity
# - UploadPolicy: allowed MIME prefixes and size limit per asset class
# - PendingUpload: an in-memory upload that lives for one request
# - AssetLifecycle: state tracking for one reference (uploading/attached/...)
# =============================================================================

from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field


class ResourceType(str, Enum):
    """Kind of object held by the remote store."""
    IMAGE = "image"
    VIDEO = "video"
    RAW = "raw"
    AUTO = "auto"


class AssetClass(str, Enum):
    """Named upload category with its own size/type policy."""
    PROFILE_PIC = "profile_pic"
    POST_MEDIA = "post_media"
    STORY_MEDIA = "story_media"
    EVENT_IMAGE = "event_image"
    BUSINESS_IMAGE = "business_image"


class DeletionOutcome(str, Enum):
    """
    Result of a remote deletion attempt.

    - deleted: the store removed the object
    - not_found: the store had no such object (treated as success)
    - skipped: nothing was sent (no handle, or a local placeholder)
    - failed: the store reported an error; only ever returned by the
      coordinator, which swallows the failure
    """
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def succeeded(self) -> bool:
        return self is not DeletionOutcome.FAILED


class AssetReference(BaseModel):
    """
    Durable pair of servable URL and deletion handle.

    `handle` may be None for records that only persisted the URL; it is then
    re-derived from the URL when the asset has to be deleted.

    Example:
        {
            "url": "https://res.cloudinary.com/demo/image/upload/v17/patwa_toli/posts/abc.jpg",
            "handle": "patwa_toli/posts/abc",
            "resource_type": "image"
        }
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="Externally servable location")
    handle: str | None = Field(default=None, description="Store identifier used for deletion")
    resource_type: ResourceType | None = Field(
        default=None,
        description="Resource kind reported by the store at upload time"
    )


class UploadPolicy(BaseModel):
    """Immutable type/size rules for one asset class."""

    model_config = ConfigDict(frozen=True)

    asset_class: AssetClass
    allowed_mime_prefixes: frozenset[str]
    max_bytes: int = Field(..., gt=0)

    @property
    def allowed_list(self) -> list[str]:
        return sorted(f"{prefix}*" for prefix in self.allowed_mime_prefixes)


class PendingUpload(BaseModel):
    """
    A file buffered in memory by the multipart layer.

    Never persisted; discarded when the request ends.
    """

    model_config = ConfigDict(frozen=True)

    buffer: bytes
    original_name: str = ""
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.buffer)

    @property
    def extension(self) -> str:
        """Lower-cased extension of the original filename, including the dot."""
        return PurePosixPath(self.original_name).suffix.lower()

    @property
    def media_kind(self) -> ResourceType | None:
        """Image/video classification from the MIME type."""
        mime = self.mime_type.lower()
        if mime.startswith("image/"):
            return ResourceType.IMAGE
        if mime.startswith("video/"):
            return ResourceType.VIDEO
        return None


# =============================================================================
# Lifecycle State Machine
# =============================================================================

class AssetState(str, Enum):
    """
    States of one Asset Reference.

    Flow: none -> uploading -> attached -> (replacing -> attached)*
          -> detaching -> gone
    """
    NONE = "none"
    UPLOADING = "uploading"
    ATTACHED = "attached"
    REPLACING = "replacing"
    DETACHING = "detaching"
    GONE = "gone"


ALLOWED_TRANSITIONS: dict[AssetState, frozenset[AssetState]] = {
    AssetState.NONE: frozenset({AssetState.UPLOADING}),
    AssetState.UPLOADING: frozenset({AssetState.ATTACHED, AssetState.GONE}),
    AssetState.ATTACHED: frozenset({AssetState.REPLACING, AssetState.DETACHING}),
    AssetState.REPLACING: frozenset({AssetState.ATTACHED, AssetState.DETACHING}),
    AssetState.DETACHING: frozenset({AssetState.GONE}),
    AssetState.GONE: frozenset(),
}


class InvalidTransitionError(Exception):
    """Raised when a lifecycle is moved along an edge that doesn't exist."""

    def __init__(self, current: AssetState, target: AssetState):
        super().__init__(f"Cannot move asset from {current.value} to {target.value}")
        self.current = current
        self.target = target


class AssetLifecycle:
    """Tracks the state of one Asset Reference through a request."""

    def __init__(self, state: AssetState = AssetState.NONE):
        self.state = state
        self.history: list[AssetState] = [state]

    def advance(self, target: AssetState) -> AssetState:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state, target)
        self.state = target
        self.history.append(target)
        return target

    @property
    def is_terminal(self) -> bool:
        return self.state is AssetState.GONE
