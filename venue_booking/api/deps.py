"""
Request-scoped service wiring
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.database import get_session
from venue_booking.services.asset_manager import AssetLifecycleManager
from venue_booking.services.asset_store import AssetStore, create_asset_store
from venue_booking.services.booking_service import BookingService
from venue_booking.services.event_service import EventService
from venue_booking.services.venue_service import VenueService


@lru_cache
def get_asset_store() -> AssetStore:
    """One asset store client per process"""
    return create_asset_store()


def get_asset_manager(store: AssetStore = Depends(get_asset_store)) -> AssetLifecycleManager:
    return AssetLifecycleManager(store)


def get_venue_service(
    db: AsyncSession = Depends(get_session),
    assets: AssetLifecycleManager = Depends(get_asset_manager)
) -> VenueService:
    return VenueService(db, assets)


def get_event_service(db: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(db)


def get_booking_service(db: AsyncSession = Depends(get_session)) -> BookingService:
    return BookingService(db)
