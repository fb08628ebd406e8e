# =============================================================================
# app/routers/listings.py - Event and Business Endpoints
# =============================================================================
# Create / update / delete for events ("eventImage") and businesses
# ("businessImage"). Updating with a new image replaces the old one after the
# listing has been saved.
# =============================================================================

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile

from app.auth import get_current_user, AuthUser
from app.dependencies import BusinessServiceDep, CoordinatorDep, EventServiceDep
from app.uploads import to_pending_upload
from core.models.entities import (
    BusinessCategory,
    BusinessCreate,
    BusinessUpdate,
    EventCategory,
    EventCreate,
    EventUpdate,
)
from core.models.media import AssetClass

events_router = APIRouter()
businesses_router = APIRouter()


def _provided(**values) -> dict:
    return {key: value for key, value in values.items() if value is not None}


# =============================================================================
# Events
# =============================================================================

@events_router.post("", status_code=201)
async def create_event(
    service: EventServiceDep,
    coordinator: CoordinatorDep,
    title: Annotated[str, Form()],
    description: Annotated[str, Form()],
    eventDate: Annotated[datetime, Form()],
    location: Annotated[str, Form()],
    category: Annotated[EventCategory, Form()] = EventCategory.COMMUNITY_GATHERING,
    eventImage: Annotated[UploadFile | None, File()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Create an event with an optional image."""
    event = EventCreate(
        title=title.strip(),
        description=description.strip(),
        category=category,
        event_date=eventDate,
        location=location.strip(),
    )
    image = await to_pending_upload(eventImage, coordinator.policies[AssetClass.EVENT_IMAGE].max_bytes)
    created = await service.create_event(user, event, image)
    return {"success": True, "message": "Event created.", "event": created}


@events_router.put("/{event_id}")
async def update_event(
    service: EventServiceDep,
    coordinator: CoordinatorDep,
    event_id: Annotated[str, Path(description="Event id")],
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    eventDate: Annotated[datetime | None, Form()] = None,
    location: Annotated[str | None, Form()] = None,
    category: Annotated[EventCategory | None, Form()] = None,
    eventImage: Annotated[UploadFile | None, File()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Update an event (organizer or admin), optionally replacing its image."""
    changes = EventUpdate(**_provided(
        title=title,
        description=description,
        event_date=eventDate,
        location=location,
        category=category,
    ))
    image = await to_pending_upload(eventImage, coordinator.policies[AssetClass.EVENT_IMAGE].max_bytes)
    updated = await service.update_event(event_id, user, changes, image)
    return {"success": True, "message": "Event updated.", "event": updated}


@events_router.delete("/{event_id}")
async def delete_event(
    service: EventServiceDep,
    event_id: Annotated[str, Path(description="Event id")],
    user: AuthUser = Depends(get_current_user),
):
    await service.delete(event_id, user)
    return {"success": True, "message": "Event deleted successfully."}


# =============================================================================
# Businesses
# =============================================================================

@businesses_router.post("", status_code=201)
async def create_business(
    service: BusinessServiceDep,
    coordinator: CoordinatorDep,
    name: Annotated[str, Form()],
    description: Annotated[str, Form()],
    category: Annotated[BusinessCategory, Form()],
    address: Annotated[str, Form()],
    phone: Annotated[str | None, Form()] = None,
    website: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    businessImage: Annotated[UploadFile | None, File()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Create a business listing with an optional image."""
    business = BusinessCreate(**_provided(
        name=name.strip(),
        description=description.strip(),
        category=category,
        address=address.strip(),
        phone=phone,
        website=website,
        email=email.lower().strip() if email else None,
    ))
    image = await to_pending_upload(
        businessImage, coordinator.policies[AssetClass.BUSINESS_IMAGE].max_bytes
    )
    created = await service.create_business(user, business, image)
    return {"success": True, "message": "Business listing created.", "business": created}


@businesses_router.put("/{business_id}")
async def update_business(
    service: BusinessServiceDep,
    coordinator: CoordinatorDep,
    business_id: Annotated[str, Path(description="Business id")],
    name: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    category: Annotated[BusinessCategory | None, Form()] = None,
    address: Annotated[str | None, Form()] = None,
    phone: Annotated[str | None, Form()] = None,
    website: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    businessImage: Annotated[UploadFile | None, File()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Update a business listing (owner or admin), optionally replacing its image."""
    changes = BusinessUpdate(**_provided(
        name=name,
        description=description,
        category=category,
        address=address,
        phone=phone,
        website=website,
        email=email.lower().strip() if email else None,
    ))
    image = await to_pending_upload(
        businessImage, coordinator.policies[AssetClass.BUSINESS_IMAGE].max_bytes
    )
    updated = await service.update_business(business_id, user, changes, image)
    return {"success": True, "message": "Business listing updated.", "business": updated}


@businesses_router.delete("/{business_id}")
async def delete_business(
    service: BusinessServiceDep,
    business_id: Annotated[str, Path(description="Business id")],
    user: AuthUser = Depends(get_current_user),
):
    await service.delete(business_id, user)
    return {"success": True, "message": "Business listing deleted successfully."}
