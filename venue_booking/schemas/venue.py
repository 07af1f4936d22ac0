"""
Venue schemas for request/response models
"""

from typing import Optional, List
from datetime import date

from venue_booking.schemas.base import BaseSchema, IDSchema, TimestampSchema


class VenueInput(BaseSchema):
    """
    Submitted venue fields. Limits are enforced by the venue service so
    every offending field is reported together.
    """
    name: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None


class VenueUpdate(VenueInput):
    id: int
    version: int


class VenueBrief(BaseSchema):
    id: int
    name: str
    location: Optional[str] = None


class VenueResponse(IDSchema, TimestampSchema):
    name: str
    location: Optional[str] = None
    capacity: Optional[int] = None
    image_url: Optional[str] = None


class VenueEventItem(BaseSchema):
    id: int
    name: str
    event_date: date


class VenueBookingItem(BaseSchema):
    id: int
    event_id: int
    booking_date: date


class VenueDetail(VenueResponse):
    events: List[VenueEventItem] = []
    bookings: List[VenueBookingItem] = []
