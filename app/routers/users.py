# =============================================================================
# app/routers/users.py - Profile Endpoints
# =============================================================================
# Profile updates with an optional new profile picture (multipart field
# "profilePic"), plus admin rejection of pending signups.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile

from app.auth import get_current_user, AuthUser
from app.dependencies import CoordinatorDep, UserServiceDep
from app.uploads import to_pending_upload
from core.models.entities import ProfileUpdate
from core.models.media import AssetClass

router = APIRouter()


@router.put("/users/me")
async def update_my_profile(
    service: UserServiceDep,
    coordinator: CoordinatorDep,
    fullname: Annotated[str | None, Form()] = None,
    fathername: Annotated[str | None, Form()] = None,
    address: Annotated[str | None, Form()] = None,
    phone: Annotated[str | None, Form()] = None,
    bio: Annotated[str | None, Form()] = None,
    profilePic: Annotated[UploadFile | None, File(description="New profile picture")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update the current user's profile.

    When a picture is sent it is uploaded first; the old picture is removed
    only after the profile has been saved (never the default avatar).
    """
    submitted = {
        "fullname": fullname,
        "fathername": fathername,
        "address": address,
        "phone": phone,
        "bio": bio,
    }
    changes = ProfileUpdate(**{key: value for key, value in submitted.items() if value is not None})
    upload = await to_pending_upload(
        profilePic, coordinator.policies[AssetClass.PROFILE_PIC].max_bytes
    )

    profile = await service.update_profile(user, changes, upload)
    return {"success": True, "message": "Profile updated successfully", "user": profile}


@router.delete("/admin/users/{user_id}/reject")
async def reject_user(
    service: UserServiceDep,
    user_id: Annotated[str, Path(description="Pending user id")],
    admin: AuthUser = Depends(get_current_user),
):
    """Reject a pending registration and delete the record and its picture."""
    username = await service.reject_pending_user(user_id, admin)
    return {
        "success": True,
        "message": f"User registration for {username} rejected and record deleted.",
    }
