"""
Pydantic schemas for request and response validation
"""

from venue_booking.schemas.venue import (
    VenueInput,
    VenueUpdate,
    VenueResponse,
    VenueDetail
)
from venue_booking.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventDetail
)
from venue_booking.schemas.booking import (
    BookingCreate,
    BookingUpdate,
    BookingResponse,
    BookingSummaryResponse
)
from venue_booking.schemas.response import (
    ErrorResponse,
    MessageResponse
)

__all__ = [
    "VenueInput",
    "VenueUpdate",
    "VenueResponse",
    "VenueDetail",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "EventDetail",
    "BookingCreate",
    "BookingUpdate",
    "BookingResponse",
    "BookingSummaryResponse",
    "ErrorResponse",
    "MessageResponse"
]
