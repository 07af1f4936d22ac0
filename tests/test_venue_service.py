"""
Tests for venue mutations and the venue image lifecycle
"""

import pytest

from venue_booking.core.exceptions import (
    AssetStoreError,
    ConflictError,
    ConflictReason,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationFailedError,
)
from venue_booking.models.venue import Venue
from venue_booking.schemas.venue import VenueInput, VenueUpdate
from venue_booking.services.asset_manager import AssetLifecycleManager
from venue_booking.services.entity_store import EntityStore
from venue_booking.services.venue_service import VenueService

SIX_MB = 6 * 1024 * 1024


def update_for(venue, **changes) -> VenueUpdate:
    fields = dict(
        id=venue.id,
        version=venue.version,
        name=venue.name,
        location=venue.location,
        capacity=venue.capacity
    )
    fields.update(changes)
    return VenueUpdate(**fields)


class TestCreateVenue:

    @pytest.mark.asyncio
    async def test_create_without_image(self, venue_service):
        venue = await venue_service.create_venue(VenueInput(name="Loft", capacity=80))

        assert venue.id is not None
        assert venue.image_url is None
        assert venue.location is None

    @pytest.mark.asyncio
    async def test_create_with_image_stores_asset(self, venue_service, asset_store, image_factory):
        venue = await venue_service.create_venue(
            VenueInput(name="Loft", location="Dock 4", capacity=80),
            image_factory()
        )

        assert venue.image_url in asset_store.assets
        content_type, data = asset_store.assets[venue.image_url]
        assert content_type == "image/png"
        assert len(data) == 1024

    @pytest.mark.asyncio
    async def test_empty_upload_counts_as_no_image(self, venue_service, asset_store, image_factory):
        venue = await venue_service.create_venue(VenueInput(name="Loft"), image_factory(size=0))

        assert venue.image_url is None
        assert asset_store.assets == {}

    @pytest.mark.asyncio
    async def test_oversized_image_rejected_before_any_write(
        self, db_session, venue_service, asset_store, image_factory
    ):
        with pytest.raises(ValidationFailedError) as exc_info:
            await venue_service.create_venue(VenueInput(name="Loft"), image_factory(size=SIX_MB))

        assert exc_info.value.errors == {"image": ["Image cannot be larger than 5 MB."]}
        assert asset_store.assets == {}
        assert await EntityStore(db_session).count(Venue) == 0

    @pytest.mark.asyncio
    async def test_unsupported_content_type_rejected(self, venue_service, asset_store, image_factory):
        with pytest.raises(ValidationFailedError) as exc_info:
            await venue_service.create_venue(
                VenueInput(name="Loft"),
                image_factory(content_type="application/pdf", filename="plan.pdf")
            )

        assert exc_info.value.field == "image"
        assert asset_store.assets == {}

    @pytest.mark.asyncio
    async def test_jpg_alias_is_accepted(self, venue_service, asset_store, image_factory):
        venue = await venue_service.create_venue(
            VenueInput(name="Loft"),
            image_factory(content_type="image/jpg", filename="hall.jpg")
        )
        assert asset_store.assets[venue.image_url][0] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_field_errors_reported_together(self, venue_service):
        with pytest.raises(ValidationFailedError) as exc_info:
            await venue_service.create_venue(VenueInput(
                name="", location="l" * 201, capacity=0
            ))

        errors = exc_info.value.errors
        assert errors["name"] == ["Venue name is required."]
        assert errors["location"] == ["Location cannot exceed 200 characters."]
        assert errors["capacity"] == ["Capacity must be between 1 and 100,000."]

    @pytest.mark.asyncio
    async def test_upload_failure_aborts_create(
        self, db_session, failing_upload_store, image_factory
    ):
        service = VenueService(db_session, AssetLifecycleManager(failing_upload_store))

        with pytest.raises(AssetStoreError):
            await service.create_venue(VenueInput(name="Loft"), image_factory())

        assert await EntityStore(db_session).count(Venue) == 0


class TestUpdateVenue:

    @pytest.mark.asyncio
    async def test_update_without_image_keeps_current_image(
        self, venue_service, asset_store, image_factory
    ):
        venue = await venue_service.create_venue(VenueInput(name="Loft"), image_factory())
        original_url = venue.image_url

        updated = await venue_service.update_venue(venue.id, update_for(venue, capacity=90))

        assert updated.image_url == original_url
        assert updated.capacity == 90
        assert original_url in asset_store.assets

    @pytest.mark.asyncio
    async def test_new_image_replaces_and_releases_old(
        self, venue_service, asset_store, image_factory
    ):
        venue = await venue_service.create_venue(VenueInput(name="Loft"), image_factory())
        old_url = venue.image_url

        updated = await venue_service.update_venue(
            venue.id, update_for(venue), image_factory(filename="new.png")
        )

        assert updated.image_url != old_url
        assert updated.image_url in asset_store.assets
        assert old_url not in asset_store.assets
        assert updated.image_url.endswith("-new.png")

    @pytest.mark.asyncio
    async def test_failed_release_of_old_image_does_not_block_update(
        self, db_session, failing_delete_store, image_factory
    ):
        service = VenueService(db_session, AssetLifecycleManager(failing_delete_store))
        venue = await service.create_venue(VenueInput(name="Loft"), image_factory())
        old_url = venue.image_url

        updated = await service.update_venue(
            venue.id, update_for(venue), image_factory(filename="new.png")
        )

        assert failing_delete_store.delete_attempts == [old_url]
        assert updated.image_url != old_url
        assert updated.version == 2

    @pytest.mark.asyncio
    async def test_stale_version_rejected_before_upload(
        self, venue_service, asset_store, test_venue, image_factory
    ):
        await venue_service.update_venue(test_venue.id, update_for(test_venue, name="First"))

        with pytest.raises(ConflictError) as exc_info:
            await venue_service.update_venue(
                test_venue.id,
                update_for(test_venue, version=1, name="Second"),
                image_factory()
            )

        assert exc_info.value.reason == ConflictReason.CONCURRENT_MODIFICATION
        assert exc_info.value.submitted["name"] == "Second"
        assert asset_store.assets == {}

    @pytest.mark.asyncio
    async def test_update_missing_venue(self, venue_service, test_venue):
        with pytest.raises(NotFoundError):
            await venue_service.update_venue(
                test_venue.id + 100, update_for(test_venue, id=test_venue.id + 100)
            )

    @pytest.mark.asyncio
    async def test_invalid_update_leaves_venue_unchanged(self, venue_service, test_venue):
        with pytest.raises(ValidationFailedError):
            await venue_service.update_venue(test_venue.id, update_for(test_venue, capacity=100_001))

        detail = await venue_service.get_venue_detail(test_venue.id)
        assert detail.capacity == 500
        assert detail.version == 1


class TestDeleteVenue:

    @pytest.mark.asyncio
    async def test_delete_releases_image(self, venue_service, asset_store, image_factory):
        venue = await venue_service.create_venue(VenueInput(name="Loft"), image_factory())

        await venue_service.delete_venue(venue.id)

        assert asset_store.assets == {}
        with pytest.raises(NotFoundError):
            await venue_service.get_venue_detail(venue.id)

    @pytest.mark.asyncio
    async def test_delete_with_failing_store_still_deletes_row(
        self, db_session, failing_delete_store, image_factory
    ):
        service = VenueService(db_session, AssetLifecycleManager(failing_delete_store))
        venue = await service.create_venue(VenueInput(name="Loft"), image_factory())

        await service.delete_venue(venue.id)

        assert failing_delete_store.delete_attempts == [venue.image_url]
        assert await EntityStore(db_session).count(Venue) == 0

    @pytest.mark.asyncio
    async def test_delete_referenced_venue_is_blocked(self, venue_service, test_booking):
        venue_id = test_booking.venue_id

        with pytest.raises(ReferentialIntegrityError) as exc_info:
            await venue_service.delete_venue(venue_id)

        assert exc_info.value.dependents == {"events": 1, "bookings": 1}
        assert (await venue_service.get_venue_detail(venue_id)).id == venue_id

    @pytest.mark.asyncio
    async def test_delete_venue_with_only_events_is_blocked(self, venue_service, test_event):
        with pytest.raises(ReferentialIntegrityError) as exc_info:
            await venue_service.delete_venue(test_event.venue_id)
        assert exc_info.value.dependents == {"events": 1}

    @pytest.mark.asyncio
    async def test_delete_missing_venue(self, venue_service):
        with pytest.raises(NotFoundError):
            await venue_service.delete_venue(4242)

    @pytest.mark.asyncio
    async def test_detail_lists_events_and_bookings(self, venue_service, test_booking):
        detail = await venue_service.get_venue_detail(test_booking.venue_id)

        assert [e.name for e in detail.events] == ["Jazz Night"]
        assert [b.id for b in detail.bookings] == [test_booking.id]
