"""
Booking management endpoints
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, status

from venue_booking.api.deps import get_booking_service
from venue_booking.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingSummaryResponse,
    BookingUpdate,
)
from venue_booking.schemas.response import MessageResponse
from venue_booking.services.booking_service import BookingService

router = APIRouter()


@router.get("/", response_model=List[BookingSummaryResponse])
async def get_bookings(
    search: Optional[str] = None,
    service: BookingService = Depends(get_booking_service)
) -> Any:
    """
    List booking summaries. A numeric search also matches the booking id.
    """
    return await service.list_summaries(search)


@router.get("/{booking_id}", response_model=BookingSummaryResponse)
async def get_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service)
) -> Any:
    return await service.get_summary(booking_id)


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    service: BookingService = Depends(get_booking_service)
) -> Any:
    """
    Reserve a venue for an event on a date.
    Returns 409 with reason double_booked when the venue is taken that day.
    """
    return await service.create_booking(booking_data)


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    booking_data: BookingUpdate,
    service: BookingService = Depends(get_booking_service)
) -> Any:
    return await service.update_booking(booking_id, booking_data)


@router.delete("/{booking_id}", response_model=MessageResponse)
async def delete_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service)
) -> Any:
    await service.delete_booking(booking_id)
    return MessageResponse(message="Booking deleted successfully.")
