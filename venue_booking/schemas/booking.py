"""
Booking schemas
"""

from typing import Optional
from datetime import date

from venue_booking.schemas.base import BaseSchema, IDSchema, TimestampSchema


class BookingCreate(BaseSchema):
    """Booking creation schema"""
    event_id: Optional[int] = None
    venue_id: Optional[int] = None
    booking_date: Optional[date] = None


class BookingUpdate(BookingCreate):
    """Booking update schema"""
    id: int
    version: int


class BookingResponse(IDSchema, TimestampSchema):
    """Booking response schema"""
    event_id: int
    venue_id: int
    booking_date: date


class BookingSummaryResponse(BaseSchema):
    """Flattened booking, event and venue row"""
    booking_id: int
    event_id: int
    venue_id: int
    booking_date: date
    event_name: str
    event_date: date
    description: Optional[str] = None
    venue_name: str
    location: Optional[str] = None
    capacity: Optional[int] = None
    image_url: Optional[str] = None
