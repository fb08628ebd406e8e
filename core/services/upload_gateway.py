# =============================================================================
# core/services/upload_gateway.py - Upload Policy Enforcement
# =============================================================================
# Validates a buffered upload against the policy of its asset class before
# anything is sent to the remote store. The multipart layer already applies a
# coarse filter; this check runs again independently.
# =============================================================================

import logging
from typing import Mapping

from app.exceptions import PayloadTooLargeError, UnsupportedMediaTypeError
from core.models.media import AssetClass, PendingUpload, UploadPolicy

logger = logging.getLogger(__name__)

MB = 1024 * 1024

IMAGE_ONLY = frozenset({"image/"})
IMAGE_OR_VIDEO = frozenset({"image/", "video/"})


def build_upload_policies(
    profile_pic_mb: int = 5,
    post_media_mb: int = 50,
    story_media_mb: int = 25,
    event_image_mb: int = 10,
    business_image_mb: int = 10,
) -> dict[AssetClass, UploadPolicy]:
    """
    Build the policy table for every asset class.

    Called once at process start; the resulting policies are immutable.
    """
    return {
        AssetClass.PROFILE_PIC: UploadPolicy(
            asset_class=AssetClass.PROFILE_PIC,
            allowed_mime_prefixes=IMAGE_ONLY,
            max_bytes=profile_pic_mb * MB,
        ),
        AssetClass.POST_MEDIA: UploadPolicy(
            asset_class=AssetClass.POST_MEDIA,
            allowed_mime_prefixes=IMAGE_OR_VIDEO,
            max_bytes=post_media_mb * MB,
        ),
        AssetClass.STORY_MEDIA: UploadPolicy(
            asset_class=AssetClass.STORY_MEDIA,
            allowed_mime_prefixes=IMAGE_OR_VIDEO,
            max_bytes=story_media_mb * MB,
        ),
        AssetClass.EVENT_IMAGE: UploadPolicy(
            asset_class=AssetClass.EVENT_IMAGE,
            allowed_mime_prefixes=IMAGE_ONLY,
            max_bytes=event_image_mb * MB,
        ),
        AssetClass.BUSINESS_IMAGE: UploadPolicy(
            asset_class=AssetClass.BUSINESS_IMAGE,
            allowed_mime_prefixes=IMAGE_ONLY,
            max_bytes=business_image_mb * MB,
        ),
    }


DEFAULT_UPLOAD_POLICIES: Mapping[AssetClass, UploadPolicy] = build_upload_policies()


def validate(upload: PendingUpload, policy: UploadPolicy) -> None:
    """
    Check an upload against a policy.

    Returns None when the upload is accepted.

    Raises:
        PayloadTooLargeError: If the buffer exceeds the class limit
        UnsupportedMediaTypeError: If the MIME type matches no allowed prefix
    """
    asset_class = policy.asset_class.value

    if upload.size > policy.max_bytes:
        logger.info(
            f"Rejected {asset_class} upload {upload.original_name!r}: "
            f"{upload.size} bytes > {policy.max_bytes}"
        )
        raise PayloadTooLargeError(upload.size, policy.max_bytes, asset_class)

    mime_type = upload.mime_type.lower()
    if not any(mime_type.startswith(prefix) for prefix in policy.allowed_mime_prefixes):
        logger.info(f"Rejected {asset_class} upload {upload.original_name!r}: type {upload.mime_type!r}")
        raise UnsupportedMediaTypeError(upload.mime_type, asset_class, policy.allowed_list)
