# =============================================================================
# core/services/cloudinary_store.py - Cloudinary Upload API Client
# =============================================================================
# Talks to the Cloudinary REST upload API over HTTPS:
# - POST {base}/{cloud}/auto/upload            (signed, data URI payload)
# - POST {base}/{cloud}/{resource_type}/destroy (signed, by public_id)
#
# The public_id returned on upload is the deletion handle.
# =============================================================================

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from app.exceptions import DeletionFailedError, UploadFailedError
from core.models.media import AssetReference, DeletionOutcome, ResourceType
from core.services.asset_store import AssetStore, deletable_resource_type, to_data_uri

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloudinaryCredentials:
    """Account credentials, built once from Settings at startup."""
    cloud_name: str
    api_key: str
    api_secret: str
    api_base: str = "https://api.cloudinary.com/v1_1"

    @property
    def is_complete(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """
    Compute the request signature.

    Parameters are sorted by name, joined as "k=v&k=v", suffixed with the
    API secret and SHA-1 hashed. Empty values are left out.

    Example:
        sign_params({"timestamp": 1315060510, "public_id": "sample"}, "abcd")
        -> sha1("public_id=sample&timestamp=1315060510abcd")
    """
    to_sign = "&".join(
        f"{key}={value}"
        for key, value in sorted(params.items())
        if value is not None and value != ""
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def _error_message(response: httpx.Response) -> str:
    """Extract Cloudinary's error message from a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return f"HTTP {response.status_code}: {error['message']}"
    return f"HTTP {response.status_code}"


class CloudinaryAssetStore(AssetStore):
    """
    AssetStore backed by Cloudinary.

    Example:
        store = CloudinaryAssetStore(CloudinaryCredentials("demo", "key", "secret"))
        ref = await store.upload(buffer, ".jpg", "patwa_toli/posts")
        await store.delete(ref.handle, ref.resource_type)
    """

    def __init__(
        self,
        credentials: CloudinaryCredentials,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.credentials = credentials
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._clock = clock

    def _endpoint(self, resource_type: ResourceType, action: str) -> str:
        base = self.credentials.api_base.rstrip("/")
        return f"{base}/{self.credentials.cloud_name}/{resource_type.value}/{action}"

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(self._clock())}
        return {
            **params,
            "api_key": self.credentials.api_key,
            "signature": sign_params(params, self.credentials.api_secret),
        }

    async def upload(
        self,
        buffer: bytes,
        file_extension: str | None,
        folder: str,
    ) -> AssetReference:
        form = self._signed({"folder": folder})
        form["file"] = to_data_uri(buffer, file_extension)

        logger.info(f"Uploading {len(buffer)} bytes to Cloudinary folder: {folder}")

        try:
            response = await self._client.post(self._endpoint(ResourceType.AUTO, "upload"), data=form)
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload request failed: {e}")
            raise UploadFailedError(str(e) or e.__class__.__name__, folder)

        if response.is_error:
            message = _error_message(response)
            logger.error(f"Cloudinary upload rejected: {message}")
            raise UploadFailedError(message, folder)

        try:
            payload = response.json()
        except ValueError:
            raise UploadFailedError("invalid JSON in upload response", folder)

        secure_url = payload.get("secure_url")
        public_id = payload.get("public_id")
        if not secure_url or not public_id:
            raise UploadFailedError("upload response missing secure_url or public_id", folder)

        try:
            resource_type = ResourceType(payload.get("resource_type", ""))
        except ValueError:
            resource_type = None

        logger.info(f"Cloudinary upload success: {public_id}")
        return AssetReference(url=secure_url, handle=public_id, resource_type=resource_type)

    async def delete(
        self,
        handle: str | None,
        resource_type: ResourceType | None = None,
    ) -> DeletionOutcome:
        if not handle:
            return DeletionOutcome.SKIPPED

        kind = deletable_resource_type(resource_type)
        form = self._signed({"public_id": handle, "invalidate": "true"})

        logger.info(f"Deleting from Cloudinary: {handle} (type: {kind.value})")

        try:
            response = await self._client.post(self._endpoint(kind, "destroy"), data=form)
        except httpx.HTTPError as e:
            raise DeletionFailedError(handle, str(e) or e.__class__.__name__)

        if response.status_code == 404:
            return DeletionOutcome.NOT_FOUND
        if response.is_error:
            raise DeletionFailedError(handle, _error_message(response))

        try:
            result = response.json().get("result")
        except (ValueError, AttributeError):
            raise DeletionFailedError(handle, "invalid JSON in destroy response")

        if result == "ok":
            return DeletionOutcome.DELETED
        if result == "not found":
            logger.debug(f"Cloudinary reports {handle} already gone")
            return DeletionOutcome.NOT_FOUND
        raise DeletionFailedError(handle, f"unexpected result: {result!r}")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
