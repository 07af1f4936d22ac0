"""
Booking summary projection: Booking joined with its Event and Venue
"""

from sqlalchemy import Select, select

from venue_booking.models.booking import Booking
from venue_booking.models.event import Event
from venue_booking.models.venue import Venue


def booking_summary_query() -> Select:
    """
    Build the summary select. It is evaluated on every read and never
    materialized, so it always reflects the current base tables.
    """
    return (
        select(
            Booking.id.label("booking_id"),
            Booking.event_id,
            Booking.venue_id,
            Booking.booking_date,
            Event.name.label("event_name"),
            Event.event_date,
            Event.description,
            Venue.name.label("venue_name"),
            Venue.location,
            Venue.capacity,
            Venue.image_url,
        )
        .join(Event, Booking.event_id == Event.id)
        .join(Venue, Booking.venue_id == Venue.id)
    )
