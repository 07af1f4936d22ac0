"""
Venue management endpoints
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from venue_booking.api.deps import get_venue_service
from venue_booking.config import settings
from venue_booking.schemas.response import MessageResponse
from venue_booking.schemas.venue import VenueDetail, VenueInput, VenueResponse, VenueUpdate
from venue_booking.services.asset_manager import ImageUpload
from venue_booking.services.venue_service import VenueService

router = APIRouter()


async def read_image(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    """
    Read at most one byte past the size limit; anything longer is rejected
    by validation anyway.
    """
    if image is None:
        return None
    data = await image.read(settings.ASSET_MAX_BYTES + 1)
    return ImageUpload(
        filename=image.filename or "",
        content_type=image.content_type or "",
        data=data
    )


@router.get("/", response_model=List[VenueResponse])
async def get_venues(
    search: Optional[str] = None,
    service: VenueService = Depends(get_venue_service)
) -> Any:
    """
    List venues, optionally filtered by id, name or location
    """
    return await service.list_venues(search)


@router.get("/{venue_id}", response_model=VenueDetail)
async def get_venue(
    venue_id: int,
    service: VenueService = Depends(get_venue_service)
) -> Any:
    """
    Get a venue with its events and bookings
    """
    return await service.get_venue_detail(venue_id)


@router.post("/", response_model=VenueResponse, status_code=status.HTTP_201_CREATED)
async def create_venue(
    name: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    capacity: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: VenueService = Depends(get_venue_service)
) -> Any:
    """
    Create a venue, uploading its image first when one is supplied
    """
    data = VenueInput(name=name, location=location, capacity=capacity)
    return await service.create_venue(data, await read_image(image))


@router.put("/{venue_id}", response_model=VenueResponse)
async def update_venue(
    venue_id: int,
    id: int = Form(...),
    version: int = Form(...),
    name: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    capacity: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: VenueService = Depends(get_venue_service)
) -> Any:
    """
    Update a venue. Without a new image the current one is kept.
    """
    data = VenueUpdate(id=id, version=version, name=name, location=location, capacity=capacity)
    return await service.update_venue(venue_id, data, await read_image(image))


@router.delete("/{venue_id}", response_model=MessageResponse)
async def delete_venue(
    venue_id: int,
    service: VenueService = Depends(get_venue_service)
) -> Any:
    """
    Delete a venue that no event or booking references
    """
    await service.delete_venue(venue_id)
    return MessageResponse(message="Venue deleted successfully.")
