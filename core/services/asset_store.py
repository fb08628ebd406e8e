# =============================================================================
# core/services/asset_store.py - Remote Asset Store Interface
# =============================================================================
# Capability interface for the remote media store plus an in-memory
# implementation used in development and tests.
#
# Implementations:
# - CloudinaryAssetStore (core/services/cloudinary_store.py): real HTTPS client
# - InMemoryAssetStore (this module): records calls, no network
# =============================================================================

import base64
import logging
import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass
from itertools import count
from typing import Any
from uuid import uuid4

from app.exceptions import DeletionFailedError, UploadFailedError
from core.models.media import AssetReference, DeletionOutcome, ResourceType

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(file_extension: str | None) -> str:
    """MIME type for a file extension such as ".jpg" (with or without the dot)."""
    if not file_extension:
        return DEFAULT_MIME_TYPE
    extension = file_extension if file_extension.startswith(".") else f".{file_extension}"
    mime_type, _ = mimetypes.guess_type(f"upload{extension.lower()}")
    return mime_type or DEFAULT_MIME_TYPE


def to_data_uri(buffer: bytes, file_extension: str | None) -> str:
    """
    Encode a raw buffer as a base64 data URI tagged with its extension's MIME type.

    Example:
        to_data_uri(b"...", ".png") -> "data:image/png;base64,iVBORw0..."
    """
    encoded = base64.b64encode(buffer).decode("ascii")
    return f"data:{guess_mime_type(file_extension)};base64,{encoded}"


def deletable_resource_type(resource_type: ResourceType | None) -> ResourceType:
    """
    Resource type to send with a deletion.

    The destroy endpoint needs a concrete kind, so unknown and "auto" fall
    back to image.
    """
    if resource_type is None or resource_type is ResourceType.AUTO:
        return ResourceType.IMAGE
    return resource_type


class AssetStore(ABC):
    """
    Remote store for uploaded media.

    `upload` must finish (or fail) before the owning entity is written.
    `delete` is idempotent: a missing object is reported as NOT_FOUND, an
    empty handle as SKIPPED, and only other failures raise.
    """

    @abstractmethod
    async def upload(
        self,
        buffer: bytes,
        file_extension: str | None,
        folder: str,
    ) -> AssetReference:
        """
        Push a buffer into `folder` and return its reference.

        Raises:
            UploadFailedError: If the store is unreachable or rejects the payload
        """

    @abstractmethod
    async def delete(
        self,
        handle: str | None,
        resource_type: ResourceType | None = None,
    ) -> DeletionOutcome:
        """
        Remove an object by handle.

        Raises:
            DeletionFailedError: For any failure other than "not found"
        """

    async def close(self) -> None:
        """Release network resources held by the store."""
        return None


# =============================================================================
# In-Memory Implementation
# =============================================================================

@dataclass
class StoredObject:
    """An object held by InMemoryAssetStore."""
    handle: str
    folder: str
    url: str
    resource_type: ResourceType
    size: int


class InMemoryAssetStore(AssetStore):
    """
    Asset store kept in a dict.

    Serves URLs in the same delivery shape as the real store, so handles can
    be derived back from them. Every call is appended to `journal` as a tuple,
    which lets tests assert on call ordering across collaborators.
    """

    def __init__(
        self,
        base_url: str = "https://res.cloudinary.com/local",
        journal: list[tuple[Any, ...]] | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, StoredObject] = {}
        self.journal = journal if journal is not None else []
        self.fail_uploads = False
        self.fail_deletions = False
        self._versions = count(1_700_000_000)

    @property
    def uploads(self) -> list[tuple[Any, ...]]:
        return [call for call in self.journal if call[0] == "asset.upload"]

    @property
    def deletions(self) -> list[tuple[Any, ...]]:
        return [call for call in self.journal if call[0] == "asset.delete"]

    async def upload(
        self,
        buffer: bytes,
        file_extension: str | None,
        folder: str,
    ) -> AssetReference:
        self.journal.append(("asset.upload", folder, len(buffer)))
        if self.fail_uploads:
            raise UploadFailedError("in-memory store configured to fail uploads", folder)

        mime_type = guess_mime_type(file_extension)
        if mime_type.startswith("video/"):
            resource_type = ResourceType.VIDEO
        elif mime_type.startswith("image/"):
            resource_type = ResourceType.IMAGE
        else:
            resource_type = ResourceType.RAW

        handle = f"{folder}/{uuid4().hex}"
        extension = (file_extension or "").lstrip(".").lower()
        url = f"{self.base_url}/{resource_type.value}/upload/v{next(self._versions)}/{handle}"
        if extension:
            url = f"{url}.{extension}"

        self.objects[handle] = StoredObject(
            handle=handle,
            folder=folder,
            url=url,
            resource_type=resource_type,
            size=len(buffer),
        )
        logger.info(f"Stored {resource_type.value} in memory: {handle}")
        return AssetReference(url=url, handle=handle, resource_type=resource_type)

    async def delete(
        self,
        handle: str | None,
        resource_type: ResourceType | None = None,
    ) -> DeletionOutcome:
        if not handle:
            return DeletionOutcome.SKIPPED

        kind = deletable_resource_type(resource_type)
        self.journal.append(("asset.delete", handle, kind))
        if self.fail_deletions:
            raise DeletionFailedError(handle, "in-memory store configured to fail deletions")

        stored = self.objects.get(handle)
        # Like the real store, a wrong resource kind looks like a missing object.
        if stored is None or stored.resource_type is not kind:
            return DeletionOutcome.NOT_FOUND

        del self.objects[handle]
        return DeletionOutcome.DELETED
