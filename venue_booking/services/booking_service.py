"""
Booking mutations with double-booking and optimistic concurrency control
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.database import transaction
from venue_booking.core.exceptions import (
    ConflictError,
    ConflictReason,
    NotFoundError,
    StoreError,
    ValidationFailedError,
)
from venue_booking.core.metrics import metrics_collector
from venue_booking.models.booking import Booking
from venue_booking.models.event import Event
from venue_booking.models.venue import Venue
from venue_booking.schemas.booking import BookingCreate, BookingUpdate
from venue_booking.services.conflict_checker import is_double_booked
from venue_booking.services.entity_store import (
    EntityStore,
    ForeignKeyViolationError,
    MissingRowError,
    StaleRowError,
    StoreOperationError,
    UniqueViolationError,
)
from venue_booking.services.validators import FieldErrors

DOUBLE_BOOKED_MESSAGE = "This venue is already booked for the selected date."


class BookingService:
    """
    Creates, edits and removes bookings.

    A booking is checked for field errors and double booking in one pass,
    then written. The uq_booking_venue_date constraint backs the check: a
    racing insert that passes the check still fails with DOUBLE_BOOKED.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = EntityStore(session)
        self.logger = logging.getLogger(__name__)

    async def _validate(
        self,
        data: BookingCreate,
        booking_id: Optional[int] = None,
        current_date: Optional[date] = None
    ) -> None:
        """
        Collect field errors and the double-booking check in one pass.
        A double booking alone is a conflict; alongside other field errors
        it is reported with them on venue_id.
        """
        errors = FieldErrors()

        if errors.selected("event_id", data.event_id, "an event"):
            if not await self.store.exists(Event, Event.id == data.event_id):
                errors.add("event_id", "Selected event does not exist.")
        if errors.selected("venue_id", data.venue_id, "a venue"):
            if not await self.store.exists(Venue, Venue.id == data.venue_id):
                errors.add("venue_id", "Selected venue does not exist.")

        if data.booking_date is None:
            errors.add("booking_date", "Booking date is required.")
        elif data.booking_date != current_date:
            # An existing booking may keep a date that has since passed
            errors.not_in_past("booking_date", data.booking_date, "Booking date")

        submitted = data.model_dump(mode="json")
        if not errors.has("venue_id") and not errors.has("booking_date"):
            if await is_double_booked(
                self.store, data.venue_id, data.booking_date, exclude_booking_id=booking_id
            ):
                if not errors:
                    raise self._double_booked(booking_id, submitted)
                errors.add("venue_id", DOUBLE_BOOKED_MESSAGE)

        errors.raise_if_any(submitted=submitted)

    def _double_booked(self, booking_id: Any, submitted: Dict[str, Any]) -> ConflictError:
        return ConflictError(
            kind="Booking",
            identifier=booking_id,
            reason=ConflictReason.DOUBLE_BOOKED,
            message=DOUBLE_BOOKED_MESSAGE,
            field="venue_id",
            submitted=submitted
        )

    async def create_booking(self, data: BookingCreate) -> Booking:
        """
        Validate, check for a double booking and insert
        """
        submitted = data.model_dump(mode="json")

        async with metrics_collector.track_mutation("booking", "create"):
            try:
                async with transaction(self.session):
                    await self._validate(data)
                    booking = await self.store.insert(Booking(
                        event_id=data.event_id,
                        venue_id=data.venue_id,
                        booking_date=data.booking_date
                    ))
            except UniqueViolationError as e:
                self.logger.warning(
                    f"Double booking rejected by constraint: venue {data.venue_id} on {data.booking_date}"
                )
                raise self._double_booked(None, submitted) from e
            except ForeignKeyViolationError as e:
                raise ValidationFailedError.single(
                    "venue_id", "Selected venue or event no longer exists.", submitted
                ) from e
            except StoreOperationError as e:
                self.logger.error(f"Error creating booking: {e}")
                raise StoreError(e.operation, f"Error creating booking: {e}") from e

        self.logger.info(
            f"Booking created: {booking.id} (venue {booking.venue_id}, event {booking.event_id}, {booking.booking_date})"
        )
        return booking

    async def update_booking(self, booking_id: int, data: BookingUpdate) -> Booking:
        """
        Re-validate against every booking except this one and write with a
        version check. A stale write is reported as not found if the row was
        deleted meanwhile, otherwise as a concurrent modification.
        """
        if booking_id != data.id:
            raise NotFoundError("Booking", booking_id)

        submitted = data.model_dump(mode="json")

        async with metrics_collector.track_mutation("booking", "update"):
            try:
                async with transaction(self.session):
                    current = await self.store.get(Booking, booking_id, refresh=True)
                    if current is None:
                        raise NotFoundError("Booking", booking_id)

                    await self._validate(
                        data, booking_id=booking_id, current_date=current.booking_date
                    )
                    booking = await self.store.update(
                        Booking,
                        booking_id,
                        {
                            "event_id": data.event_id,
                            "venue_id": data.venue_id,
                            "booking_date": data.booking_date,
                        },
                        expected_version=data.version
                    )
            except StaleRowError as e:
                raise await self._stale_write(booking_id, submitted) from e
            except UniqueViolationError as e:
                raise self._double_booked(booking_id, submitted) from e
            except ForeignKeyViolationError as e:
                raise ValidationFailedError.single(
                    "venue_id", "Selected venue or event no longer exists.", submitted
                ) from e
            except StoreOperationError as e:
                self.logger.error(f"Error updating booking {booking_id}: {e}")
                raise StoreError(e.operation, f"Error updating booking: {e}") from e

        self.logger.info(f"Booking updated: {booking.id} (version {booking.version})")
        return booking

    async def _stale_write(self, booking_id: int, submitted: Dict[str, Any]) -> Exception:
        try:
            still_exists = await self.store.exists(Booking, Booking.id == booking_id)
        except StoreOperationError as e:
            return StoreError(e.operation, str(e))

        if not still_exists:
            self.logger.info(f"Booking {booking_id} was deleted during an update")
            return NotFoundError("Booking", booking_id)

        self.logger.warning(f"Booking {booking_id} was modified concurrently")
        return ConflictError(
            kind="Booking",
            identifier=booking_id,
            reason=ConflictReason.CONCURRENT_MODIFICATION,
            message="The booking was modified by another user. Please refresh and try again.",
            submitted=submitted
        )

    async def delete_booking(self, booking_id: int) -> None:
        """
        Nothing references a booking, so deletion is unconditional
        """
        async with metrics_collector.track_mutation("booking", "delete"):
            try:
                async with transaction(self.session):
                    await self.store.delete(Booking, booking_id)
            except MissingRowError as e:
                raise NotFoundError("Booking", booking_id) from e
            except StoreOperationError as e:
                self.logger.error(f"Error deleting booking {booking_id}: {e}")
                raise StoreError(e.operation, f"Error deleting booking: {e}") from e

        self.logger.info(f"Booking deleted: {booking_id}")

    async def get_booking(self, booking_id: int) -> Booking:
        booking = await self.store.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        return booking

    async def list_summaries(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self.store.list_booking_summaries(search)

    async def get_summary(self, booking_id: int) -> Dict[str, Any]:
        summary = await self.store.get_booking_summary(booking_id)
        if summary is None:
            raise NotFoundError("Booking", booking_id)
        return summary
