"""
Event management endpoints
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, status

from venue_booking.api.deps import get_event_service
from venue_booking.schemas.event import EventCreate, EventDetail, EventResponse, EventUpdate
from venue_booking.schemas.response import MessageResponse
from venue_booking.services.event_service import EventService

router = APIRouter()


@router.get("/", response_model=List[EventResponse])
async def get_events(
    search: Optional[str] = None,
    service: EventService = Depends(get_event_service)
) -> Any:
    """
    List events, optionally filtered by id, name, description or venue name
    """
    return await service.list_events(search)


@router.get("/{event_id}", response_model=EventDetail)
async def get_event(
    event_id: int,
    service: EventService = Depends(get_event_service)
) -> Any:
    return await service.get_event_detail(event_id)


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    service: EventService = Depends(get_event_service)
) -> Any:
    event = await service.create_event(event_data)
    return await service.get_event_detail(event.id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    service: EventService = Depends(get_event_service)
) -> Any:
    """
    Update an event; `version` must match the stored stamp
    """
    event = await service.update_event(event_id, event_data)
    return await service.get_event_detail(event.id)


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: int,
    service: EventService = Depends(get_event_service)
) -> Any:
    await service.delete_event(event_id)
    return MessageResponse(message="Event deleted successfully.")
