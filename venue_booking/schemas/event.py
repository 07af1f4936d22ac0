"""
Event schemas
"""

from typing import Optional, List
from datetime import date

from venue_booking.schemas.base import BaseSchema, IDSchema, TimestampSchema
from venue_booking.schemas.venue import VenueBrief


class EventCreate(BaseSchema):
    """Event creation schema"""
    name: Optional[str] = None
    event_date: Optional[date] = None
    description: Optional[str] = None
    venue_id: Optional[int] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Jazz Night",
                "event_date": "2030-10-15",
                "description": "An evening of smooth jazz featuring local artists",
                "venue_id": 1
            }
        }
    }


class EventUpdate(EventCreate):
    """Event update schema; version is the stamp read with the event"""
    id: int
    version: int


class EventResponse(IDSchema, TimestampSchema):
    """Event response schema"""
    name: str
    event_date: date
    description: Optional[str] = None
    venue_id: int
    venue: Optional[VenueBrief] = None


class EventBookingItem(BaseSchema):
    id: int
    venue_id: int
    booking_date: date


class EventDetail(EventResponse):
    bookings: List[EventBookingItem] = []
