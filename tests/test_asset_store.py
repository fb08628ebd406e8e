# =============================================================================
# tests/test_asset_store.py - Asset Store Tests
# =============================================================================
# This module contains tests for:
# - InMemoryAssetStore upload/delete semantics
# - CloudinaryAssetStore request signing and response handling
#
# Cloudinary is exercised through httpx.MockTransport; no network calls.
# =============================================================================

import asyncio
import hashlib
from urllib.parse import parse_qs

import httpx
import pytest

from app.exceptions import DeletionFailedError, UploadFailedError
from core.models.media import DeletionOutcome, ResourceType
from core.services.asset_store import (
    InMemoryAssetStore,
    deletable_resource_type,
    guess_mime_type,
    to_data_uri,
)
from core.services.cloudinary_store import (
    CloudinaryAssetStore,
    CloudinaryCredentials,
    sign_params,
)

CREDENTIALS = CloudinaryCredentials(cloud_name="demo", api_key="key-123", api_secret="s3cret")
FIXED_TIME = 1315060510


def make_store(handler) -> CloudinaryAssetStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CloudinaryAssetStore(CREDENTIALS, client=client, clock=lambda: FIXED_TIME)


def form_of(request: httpx.Request) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


# =============================================================================
# Helper Tests
# =============================================================================

class TestHelpers:
    """Test encoding and resource type helpers."""

    def test_guess_mime_type(self):
        assert guess_mime_type(".png") == "image/png"
        assert guess_mime_type("mp4") == "video/mp4"
        assert guess_mime_type(None) == "application/octet-stream"
        assert guess_mime_type(".unknownext") == "application/octet-stream"

    def test_to_data_uri(self):
        assert to_data_uri(b"hi", ".png") == "data:image/png;base64,aGk="

    def test_deletable_resource_type(self):
        assert deletable_resource_type(None) is ResourceType.IMAGE
        assert deletable_resource_type(ResourceType.AUTO) is ResourceType.IMAGE
        assert deletable_resource_type(ResourceType.VIDEO) is ResourceType.VIDEO

    def test_sign_params(self):
        expected = hashlib.sha1(b"public_id=sample&timestamp=1315060510s3cret").hexdigest()
        assert sign_params({"timestamp": FIXED_TIME, "public_id": "sample"}, "s3cret") == expected

    def test_sign_params_skips_empty_values(self):
        assert sign_params({"a": "1", "b": ""}, "x") == sign_params({"a": "1"}, "x")

    def test_credentials_completeness(self):
        assert CREDENTIALS.is_complete
        assert not CloudinaryCredentials(cloud_name="demo", api_key="", api_secret="s").is_complete


# =============================================================================
# InMemoryAssetStore Tests
# =============================================================================

class TestInMemoryAssetStore:
    """Test the dict-backed asset store."""

    def test_upload_returns_reference(self):
        store = InMemoryAssetStore()

        ref = asyncio.run(store.upload(b"data", ".JPG", "patwa_toli/posts"))

        assert ref.handle.startswith("patwa_toli/posts/")
        assert ref.url.endswith(".jpg")
        assert "/image/upload/v" in ref.url
        assert ref.resource_type is ResourceType.IMAGE
        assert ref.handle in store.objects

    def test_video_upload(self):
        store = InMemoryAssetStore()

        ref = asyncio.run(store.upload(b"data", ".mp4", "patwa_toli/stories"))

        assert ref.resource_type is ResourceType.VIDEO
        assert "/video/upload/" in ref.url

    def test_delete_existing(self):
        store = InMemoryAssetStore()
        ref = asyncio.run(store.upload(b"data", ".jpg", "patwa_toli/posts"))

        assert asyncio.run(store.delete(ref.handle, ResourceType.IMAGE)) is DeletionOutcome.DELETED
        assert ref.handle not in store.objects

    def test_delete_is_idempotent(self):
        store = InMemoryAssetStore()
        ref = asyncio.run(store.upload(b"data", ".jpg", "patwa_toli/posts"))

        asyncio.run(store.delete(ref.handle))
        assert asyncio.run(store.delete(ref.handle)) is DeletionOutcome.NOT_FOUND

    def test_delete_with_wrong_kind_is_not_found(self):
        store = InMemoryAssetStore()
        ref = asyncio.run(store.upload(b"data", ".mp4", "patwa_toli/posts"))

        assert asyncio.run(store.delete(ref.handle, ResourceType.IMAGE)) is DeletionOutcome.NOT_FOUND
        assert ref.handle in store.objects

    def test_delete_without_handle_is_skipped(self):
        store = InMemoryAssetStore()

        assert asyncio.run(store.delete(None)) is DeletionOutcome.SKIPPED
        assert store.deletions == []

    def test_failures(self):
        store = InMemoryAssetStore()
        store.fail_uploads = True
        store.fail_deletions = True

        with pytest.raises(UploadFailedError):
            asyncio.run(store.upload(b"data", ".jpg", "patwa_toli/posts"))
        with pytest.raises(DeletionFailedError):
            asyncio.run(store.delete("patwa_toli/posts/abc"))

    def test_journal(self):
        journal = []
        store = InMemoryAssetStore(journal=journal)

        ref = asyncio.run(store.upload(b"data", ".jpg", "patwa_toli/posts"))
        asyncio.run(store.delete(ref.handle, ResourceType.AUTO))

        assert journal == [
            ("asset.upload", "patwa_toli/posts", 4),
            ("asset.delete", ref.handle, ResourceType.IMAGE),
        ]


# =============================================================================
# CloudinaryAssetStore Tests
# =============================================================================

class TestCloudinaryUpload:
    """Test CloudinaryAssetStore.upload()."""

    def test_signed_upload(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["form"] = form_of(request)
            return httpx.Response(200, json={
                "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/patwa_toli/posts/abc.png",
                "public_id": "patwa_toli/posts/abc",
                "resource_type": "image",
            })

        ref = asyncio.run(make_store(handler).upload(b"hi", ".png", "patwa_toli/posts"))

        assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/auto/upload"
        form = seen["form"]
        assert form["file"] == "data:image/png;base64,aGk="
        assert form["folder"] == "patwa_toli/posts"
        assert form["api_key"] == "key-123"
        assert form["timestamp"] == str(FIXED_TIME)
        assert form["signature"] == sign_params(
            {"folder": "patwa_toli/posts", "timestamp": FIXED_TIME}, "s3cret"
        )
        assert ref.handle == "patwa_toli/posts/abc"
        assert ref.resource_type is ResourceType.IMAGE

    def test_unknown_resource_type_is_left_empty(self):
        def handler(request):
            return httpx.Response(200, json={
                "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/a.png",
                "public_id": "a",
            })

        ref = asyncio.run(make_store(handler).upload(b"hi", ".png", "f"))
        assert ref.resource_type is None

    def test_rejected_upload(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "Invalid image file"}})

        with pytest.raises(UploadFailedError) as exc_info:
            asyncio.run(make_store(handler).upload(b"hi", ".png", "f"))

        assert "Invalid image file" in exc_info.value.message
        assert exc_info.value.status_code == 502

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(UploadFailedError):
            asyncio.run(make_store(handler).upload(b"hi", ".png", "f"))

    def test_incomplete_response(self):
        def handler(request):
            return httpx.Response(200, json={"public_id": "a"})

        with pytest.raises(UploadFailedError):
            asyncio.run(make_store(handler).upload(b"hi", ".png", "f"))


class TestCloudinaryDelete:
    """Test CloudinaryAssetStore.delete()."""

    def test_destroy_request(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["form"] = form_of(request)
            return httpx.Response(200, json={"result": "ok"})

        outcome = asyncio.run(make_store(handler).delete("patwa_toli/stories/x", ResourceType.VIDEO))

        assert outcome is DeletionOutcome.DELETED
        assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/video/destroy"
        assert seen["form"]["public_id"] == "patwa_toli/stories/x"
        assert seen["form"]["invalidate"] == "true"
        assert seen["form"]["signature"] == sign_params(
            {"public_id": "patwa_toli/stories/x", "invalidate": "true", "timestamp": FIXED_TIME},
            "s3cret",
        )

    def test_unknown_kind_is_sent_as_image(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={"result": "ok"})

        asyncio.run(make_store(handler).delete("a", None))
        asyncio.run(make_store(handler).delete("b", ResourceType.AUTO))

        assert all(url.endswith("/image/destroy") for url in urls)

    def test_not_found_result(self):
        def handler(request):
            return httpx.Response(200, json={"result": "not found"})

        assert asyncio.run(make_store(handler).delete("a")) is DeletionOutcome.NOT_FOUND

    def test_not_found_status(self):
        def handler(request):
            return httpx.Response(404, json={"error": {"message": "Resource not found"}})

        assert asyncio.run(make_store(handler).delete("a")) is DeletionOutcome.NOT_FOUND

    def test_empty_handle_makes_no_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert asyncio.run(make_store(handler).delete("")) is DeletionOutcome.SKIPPED

    def test_server_error(self):
        def handler(request):
            return httpx.Response(500, text="boom")

        with pytest.raises(DeletionFailedError):
            asyncio.run(make_store(handler).delete("a"))

    def test_unexpected_result(self):
        def handler(request):
            return httpx.Response(200, json={"result": "error"})

        with pytest.raises(DeletionFailedError):
            asyncio.run(make_store(handler).delete("a"))
