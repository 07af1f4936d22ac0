"""
Venue mutations, including the venue image lifecycle
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
)
from venue_booking.core.metrics import metrics_collector
from venue_booking.models.booking import Booking
from venue_booking.models.event import Event
from venue_booking.models.venue import Venue
from venue_booking.schemas.venue import VenueInput, VenueUpdate
from venue_booking.services.asset_manager import AssetLifecycleManager, ImageUpload
from venue_booking.services.entity_store import (
    EntityStore,
    ForeignKeyViolationError,
    MissingRowError,
    StaleRowError,
    StoreOperationError,
)
from venue_booking.services.validators import FieldErrors

MAX_CAPACITY = 100_000


class VenueService:
    """
    Creates, edits and removes venues.

    The image is validated with the other fields before anything is written,
    uploaded before the row so the stored reference always points at a
    persisted asset, and removed best-effort when replaced or when the
    venue is deleted.
    """

    def __init__(self, session: AsyncSession, assets: AssetLifecycleManager):
        self.session = session
        self.store = EntityStore(session)
        self.assets = assets
        self.logger = logging.getLogger(__name__)

    def _validate(self, data: VenueInput, image: Optional[ImageUpload]) -> None:
        errors = FieldErrors()
        errors.require_text("name", data.name, "Venue name", 100)
        errors.optional_text("location", data.location, "Location", 200)
        if data.capacity is not None and not 0 < data.capacity <= MAX_CAPACITY:
            errors.add("capacity", f"Capacity must be between 1 and {MAX_CAPACITY:,}.")
        self.assets.validate(image, errors)
        errors.raise_if_any(submitted=data.model_dump(mode="json"))

    async def create_venue(self, data: VenueInput, image: Optional[ImageUpload] = None) -> Venue:
        async with metrics_collector.track_mutation("venue", "create"):
            self._validate(data, image)

            image_url = None
            upload = self.assets.present(image)
            if upload is not None:
                image_url = await self.assets.upload(upload)

            try:
                async with transaction(self.session):
                    venue = await self.store.insert(Venue(
                        name=data.name,
                        location=data.location,
                        capacity=data.capacity,
                        image_url=image_url
                    ))
            except StoreOperationError as e:
                await self.assets.discard(image_url, "venue insert failed")
                self.logger.error(f"Error creating venue: {e}")
                raise StoreError(e.operation, f"Error creating venue: {e}") from e

        self.logger.info(f"Venue created: {venue.id} ({venue.name})")
        return venue

    async def update_venue(
        self,
        venue_id: int,
        data: VenueUpdate,
        image: Optional[ImageUpload] = None
    ) -> Venue:
        """
        Without a new image the stored image reference is kept as is.
        With one, the old asset is released before the new reference is
        written; failing to release it does not stop the update.
        """
        if venue_id != data.id:
            raise NotFoundError("Venue", venue_id)

        submitted = data.model_dump(mode="json")

        async with metrics_collector.track_mutation("venue", "update"):
            self._validate(data, image)

            try:
                current = await self.store.get(Venue, venue_id, refresh=True)
            except StoreOperationError as e:
                raise StoreError(e.operation, str(e)) from e
            if current is None:
                raise NotFoundError("Venue", venue_id)
            if current.version != data.version:
                raise self._concurrent_modification(venue_id, submitted)

            image_url = current.image_url
            new_image_url = None
            upload = self.assets.present(image)
            if upload is not None:
                new_image_url = await self.assets.upload(upload)
                await self.assets.discard(current.image_url, "replaced by new image")
                image_url = new_image_url

            try:
                async with transaction(self.session):
                    venue = await self.store.update(
                        Venue,
                        venue_id,
                        {
                            "name": data.name,
                            "location": data.location,
                            "capacity": data.capacity,
                            "image_url": image_url,
                        },
                        expected_version=data.version
                    )
            except StaleRowError as e:
                await self.assets.discard(new_image_url, "venue update rejected")
                raise await self._stale_write(venue_id, submitted) from e
            except StoreOperationError as e:
                await self.assets.discard(new_image_url, "venue update failed")
                self.logger.error(f"Error updating venue {venue_id}: {e}")
                raise StoreError(e.operation, f"Error updating venue: {e}") from e

        self.logger.info(f"Venue updated: {venue.id} (version {venue.version})")
        return venue

    def _concurrent_modification(self, venue_id: int, submitted: Dict[str, Any]) -> ConflictError:
        self.logger.warning(f"Venue {venue_id} was modified concurrently")
        return ConflictError(
            kind="Venue",
            identifier=venue_id,
            reason=ConflictReason.CONCURRENT_MODIFICATION,
            message="The venue was modified by another user. Please refresh and try again.",
            submitted=submitted
        )

    async def _stale_write(self, venue_id: int, submitted: Dict[str, Any]) -> Exception:
        try:
            still_exists = await self.store.exists(Venue, Venue.id == venue_id)
        except StoreOperationError as e:
            return StoreError(e.operation, str(e))

        if not still_exists:
            return NotFoundError("Venue", venue_id)
        return self._concurrent_modification(venue_id, submitted)

    async def delete_venue(self, venue_id: int) -> None:
        """
        Refuse to delete a venue that events or bookings still reference.
        The image is released only after the row is gone.
        """
        async with metrics_collector.track_mutation("venue", "delete"):
            try:
                async with transaction(self.session):
                    venue = await self.store.get(Venue, venue_id, refresh=True)
                    if venue is None:
                        raise NotFoundError("Venue", venue_id)

                    dependents = {
                        "events": await self.store.count(Event, Event.venue_id == venue_id),
                        "bookings": await self.store.count(Booking, Booking.venue_id == venue_id),
                    }
                    dependents = {kind: count for kind, count in dependents.items() if count}
                    if dependents:
                        raise ReferentialIntegrityError("Venue", venue_id, dependents)

                    image_url = venue.image_url
                    await self.store.delete(Venue, venue_id)
            except ForeignKeyViolationError as e:
                # An event or booking was added after the dependents check
                raise ReferentialIntegrityError("Venue", venue_id) from e
            except MissingRowError as e:
                raise NotFoundError("Venue", venue_id) from e
            except StoreOperationError as e:
                self.logger.error(f"Error deleting venue {venue_id}: {e}")
                raise StoreError(e.operation, f"Error deleting venue: {e}") from e

        self.logger.info(f"Venue deleted: {venue_id}")
        await self.assets.discard(image_url, "venue deleted")

    async def list_venues(self, search: Optional[str] = None) -> List[Venue]:
        return await self.store.list_venues(search)

    async def get_venue_detail(self, venue_id: int) -> Venue:
        venue = await self.store.venue_with_children(venue_id)
        if venue is None:
            raise NotFoundError("Venue", venue_id)
        return venue
