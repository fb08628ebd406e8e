# =============================================================================
# app/routers/posts.py - Post Endpoints
# =============================================================================
# Post creation with an optional image or video (multipart fields "image" and
# "video") and post deletion.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile

from app.auth import get_current_user, AuthUser
from app.dependencies import CoordinatorDep, PostServiceDep
from app.uploads import to_pending_upload
from core.models.entities import PostCreate
from core.models.media import AssetClass

router = APIRouter()


@router.post("", status_code=201)
async def create_post(
    service: PostServiceDep,
    coordinator: CoordinatorDep,
    content: Annotated[str, Form()] = "",
    image: Annotated[UploadFile | None, File()] = None,
    video: Annotated[UploadFile | None, File()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Create a post. Media is uploaded before the post is saved."""
    max_bytes = coordinator.policies[AssetClass.POST_MEDIA].max_bytes
    post = await service.create_post(
        user,
        PostCreate(content=content),
        image=await to_pending_upload(image, max_bytes),
        video=await to_pending_upload(video, max_bytes),
    )
    return {"success": True, "message": "Post created successfully.", "post": post}


@router.delete("/{post_id}")
async def delete_post(
    service: PostServiceDep,
    post_id: Annotated[str, Path(description="Post id")],
    user: AuthUser = Depends(get_current_user),
):
    """Delete a post (owner or admin). Its media is removed best effort."""
    await service.delete(post_id, user)
    return {"success": True, "message": "Post deleted successfully."}
