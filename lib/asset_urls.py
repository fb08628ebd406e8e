# =============================================================================
# lib/asset_urls.py - Delivery URL Parsing
# =============================================================================
# Derives the deletion handle of a remote asset from its delivery URL, for
# records that only persisted the URL.
#
# Expected shape:
#   https://<host>/<cloud>/<resource_type>/upload/[<transformations>/]v<version>/<folder>/<name>.<ext>
#
#   https://res.cloudinary.com/demo/image/upload/v1712/patwa_toli/posts/abc.jpg
#     -> handle "patwa_toli/posts/abc", resource type "image"
#
# Pure functions, no I/O.
# =============================================================================

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from core.models.media import ResourceType

UPLOAD_SEGMENT = "upload"

_VERSION_PATTERN = re.compile(r"^v\d+$")
_KNOWN_RESOURCE_TYPES = {
    ResourceType.IMAGE.value: ResourceType.IMAGE,
    ResourceType.VIDEO.value: ResourceType.VIDEO,
    ResourceType.RAW.value: ResourceType.RAW,
}


class HandleDerivationError(ValueError):
    """Raised when a URL does not have the structure of a delivery URL."""

    def __init__(self, url: str | None, reason: str):
        super().__init__(f"Cannot derive handle from {url!r}: {reason}")
        self.url = url
        self.reason = reason


@dataclass(frozen=True)
class DeliveryUrl:
    """Structural parts of a delivery URL."""
    handle: str
    version: str
    extension: str | None
    resource_type: ResourceType | None


def parse_delivery_url(url: str | None) -> DeliveryUrl:
    """
    Split a delivery URL into handle, version, extension and resource type.

    Raises:
        HandleDerivationError: If the URL lacks an `upload` segment, a
            version segment after it, or anything after the version.
    """
    if not url:
        raise HandleDerivationError(url, "empty url")

    try:
        path = urlsplit(url).path
    except ValueError:
        raise HandleDerivationError(url, "malformed url")
    parts = [unquote(part) for part in path.split("/")]

    try:
        upload_index = parts.index(UPLOAD_SEGMENT)
    except ValueError:
        raise HandleDerivationError(url, "no 'upload' segment")

    # Transformation segments (e.g. "c_fill,w_200") may sit between
    # "upload" and the version.
    version_index = next(
        (
            index
            for index in range(upload_index + 1, len(parts))
            if _VERSION_PATTERN.match(parts[index])
        ),
        None,
    )
    if version_index is None:
        raise HandleDerivationError(url, "no version segment after 'upload'")

    tail = [part for part in parts[version_index + 1:] if part]
    if not tail:
        raise HandleDerivationError(url, "nothing after the version segment")

    # Only the file name carries an extension; folders may contain dots.
    stem, dot, extension = tail[-1].rpartition(".")
    if dot and stem:
        tail[-1] = stem
    else:
        extension = ""

    resource_segment = parts[upload_index - 1] if upload_index > 0 else ""

    return DeliveryUrl(
        handle="/".join(tail),
        version=parts[version_index],
        extension=extension.lower() or None,
        resource_type=_KNOWN_RESOURCE_TYPES.get(resource_segment),
    )


def derive_handle(url: str | None) -> str | None:
    """
    Return the deletion handle encoded in a delivery URL.

    Returns None when the URL does not match the delivery shape (for example
    a locally served placeholder); callers treat that as "nothing to delete
    remotely".
    """
    try:
        return parse_delivery_url(url).handle
    except HandleDerivationError:
        return None


def infer_resource_type(url: str | None) -> ResourceType | None:
    """Resource kind encoded in a delivery URL, if it has one."""
    try:
        return parse_delivery_url(url).resource_type
    except HandleDerivationError:
        return None
