"""
Database models
"""

from venue_booking.models.venue import Venue
from venue_booking.models.event import Event
from venue_booking.models.booking import Booking
from venue_booking.models.booking_summary import booking_summary_query

__all__ = [
    "Venue",
    "Event",
    "Booking",
    "booking_summary_query"
]
