# =============================================================================
# app/uploads.py - Multipart Upload Conversion
# =============================================================================
# Turns FastAPI UploadFile objects into PendingUpload buffers.
#
# Reading stops one byte past the class limit, which is enough for the
# upload gateway to reject the file without holding an unbounded body.
# =============================================================================

from fastapi import UploadFile

from core.models.media import PendingUpload

READ_CHUNK_BYTES = 1024 * 1024


async def to_pending_upload(
    file: UploadFile | None,
    max_bytes: int | None = None,
) -> PendingUpload | None:
    """
    Buffer an uploaded file in memory.

    Returns None when the field was not sent (or sent empty without a name).
    """
    if file is None or (not file.filename and not file.size):
        return None

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        chunks.append(chunk)
        total += len(chunk)
        if max_bytes is not None and total > max_bytes:
            break

    return PendingUpload(
        buffer=b"".join(chunks),
        original_name=file.filename or "",
        mime_type=file.content_type or "",
    )
