"""
Event mutations
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.database import transaction
from venue_booking.core.exceptions import (
    ConflictError,
    ConflictReason,
    NotFoundError,
    ReferentialIntegrityError,
    StoreError,
    ValidationFailedError,
)
from venue_booking.core.metrics import metrics_collector
from venue_booking.models.booking import Booking
from venue_booking.models.event import Event
from venue_booking.models.venue import Venue
from venue_booking.schemas.event import EventCreate, EventUpdate
from venue_booking.services.entity_store import (
    EntityStore,
    ForeignKeyViolationError,
    MissingRowError,
    StaleRowError,
    StoreOperationError,
)
from venue_booking.services.validators import FieldErrors


class EventService:
    """Creates, edits and removes events"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = EntityStore(session)
        self.logger = logging.getLogger(__name__)

    async def _validate(self, data: EventCreate) -> None:
        errors = FieldErrors()
        errors.require_text("name", data.name, "Event name", 100)
        errors.not_in_past("event_date", data.event_date, "Event date")

        if errors.selected("venue_id", data.venue_id, "a venue"):
            if not await self.store.exists(Venue, Venue.id == data.venue_id):
                errors.add("venue_id", "Selected venue does not exist.")

        errors.optional_text("description", data.description, "Description", 500)
        errors.raise_if_any(submitted=data.model_dump(mode="json"))

    async def create_event(self, data: EventCreate) -> Event:
        submitted = data.model_dump(mode="json")

        async with metrics_collector.track_mutation("event", "create"):
            try:
                async with transaction(self.session):
                    await self._validate(data)
                    event = await self.store.insert(Event(
                        name=data.name,
                        event_date=data.event_date,
                        description=data.description,
                        venue_id=data.venue_id
                    ))
            except ForeignKeyViolationError as e:
                raise ValidationFailedError.single(
                    "venue_id", "Selected venue does not exist.", submitted
                ) from e
            except StoreOperationError as e:
                self.logger.error(f"Error creating event: {e}")
                raise StoreError(e.operation, f"Error creating event: {e}") from e

        self.logger.info(f"Event created: {event.id} ({event.name} on {event.event_date})")
        return event

    async def update_event(self, event_id: int, data: EventUpdate) -> Event:
        """
        Version-checked update. On a concurrent modification the submitted
        values travel back with the error so the caller can redisplay them.
        """
        if event_id != data.id:
            raise NotFoundError("Event", event_id)

        submitted = data.model_dump(mode="json")

        async with metrics_collector.track_mutation("event", "update"):
            try:
                async with transaction(self.session):
                    await self._validate(data)
                    event = await self.store.update(
                        Event,
                        event_id,
                        {
                            "name": data.name,
                            "event_date": data.event_date,
                            "description": data.description,
                            "venue_id": data.venue_id,
                        },
                        expected_version=data.version
                    )
            except StaleRowError as e:
                raise await self._stale_write(event_id, submitted) from e
            except ForeignKeyViolationError as e:
                raise ValidationFailedError.single(
                    "venue_id", "Selected venue does not exist.", submitted
                ) from e
            except StoreOperationError as e:
                self.logger.error(f"Error updating event {event_id}: {e}")
                raise StoreError(e.operation, f"Error updating event: {e}") from e

        self.logger.info(f"Event updated: {event.id} (version {event.version})")
        return event

    async def _stale_write(self, event_id: int, submitted: Dict[str, Any]) -> Exception:
        try:
            still_exists = await self.store.exists(Event, Event.id == event_id)
        except StoreOperationError as e:
            return StoreError(e.operation, str(e))

        if not still_exists:
            return NotFoundError("Event", event_id)

        self.logger.warning(f"Event {event_id} was modified concurrently")
        return ConflictError(
            kind="Event",
            identifier=event_id,
            reason=ConflictReason.CONCURRENT_MODIFICATION,
            message="The event was modified by another user. Please refresh and try again.",
            submitted=submitted
        )

    async def delete_event(self, event_id: int) -> None:
        """
        Refuse to delete an event that bookings still reference
        """
        async with metrics_collector.track_mutation("event", "delete"):
            try:
                async with transaction(self.session):
                    if not await self.store.exists(Event, Event.id == event_id):
                        raise NotFoundError("Event", event_id)

                    booking_count = await self.store.count(Booking, Booking.event_id == event_id)
                    if booking_count:
                        raise ReferentialIntegrityError("Event", event_id, {"bookings": booking_count})

                    await self.store.delete(Event, event_id)
            except ForeignKeyViolationError as e:
                # A booking was added after the dependents check
                raise ReferentialIntegrityError("Event", event_id) from e
            except MissingRowError as e:
                raise NotFoundError("Event", event_id) from e
            except StoreOperationError as e:
                self.logger.error(f"Error deleting event {event_id}: {e}")
                raise StoreError(e.operation, f"Error deleting event: {e}") from e

        self.logger.info(f"Event deleted: {event_id}")

    async def list_events(self, search: Optional[str] = None) -> List[Event]:
        return await self.store.list_events(search)

    async def get_event_detail(self, event_id: int) -> Event:
        event = await self.store.event_with_children(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event
