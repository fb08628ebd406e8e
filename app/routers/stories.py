# =============================================================================
# app/routers/stories.py - Story Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile

from app.auth import get_current_user, AuthUser
from app.dependencies import CoordinatorDep, StoryServiceDep
from app.uploads import to_pending_upload
from core.models.entities import StoryCreate
from core.models.media import AssetClass

router = APIRouter()


@router.post("", status_code=201)
async def create_story(
    service: StoryServiceDep,
    coordinator: CoordinatorDep,
    caption: Annotated[str, Form()] = "",
    storyMedia: Annotated[UploadFile | None, File()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Create a story from one image or video; it expires after the configured TTL."""
    media = await to_pending_upload(
        storyMedia, coordinator.policies[AssetClass.STORY_MEDIA].max_bytes
    )
    story = await service.create_story(user, StoryCreate(caption=caption), media)
    return {"success": True, "message": "Story created.", "story": story}


@router.delete("/{story_id}")
async def delete_story(
    service: StoryServiceDep,
    story_id: Annotated[str, Path(description="Story id")],
    user: AuthUser = Depends(get_current_user),
):
    """Delete one of your stories. Its media is removed best effort."""
    await service.delete(story_id, user)
    return {"success": True, "message": "Story deleted."}
