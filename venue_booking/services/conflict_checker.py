"""
Double-booking detection for a (venue, date) pair
"""

from datetime import date
from typing import Optional

from venue_booking.models.booking import Booking
from venue_booking.services.entity_store import EntityStore


async def is_double_booked(
    store: EntityStore,
    venue_id: int,
    booking_date: date,
    exclude_booking_id: Optional[int] = None
) -> bool:
    """
    True if another booking already holds the venue on that date.

    Pass exclude_booking_id when re-saving an existing booking so it does not
    collide with itself. The check and the following write are separate
    statements; the uq_booking_venue_date constraint still rejects a racing
    insert that slips between them.
    """
    criteria = [Booking.venue_id == venue_id, Booking.booking_date == booking_date]
    if exclude_booking_id is not None:
        criteria.append(Booking.id != exclude_booking_id)
    return await store.exists(Booking, *criteria)
