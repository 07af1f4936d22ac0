"""
Test configuration and fixtures
Each test gets its own SQLite database file with foreign keys enforced
"""

import os
from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Set test environment before the application modules read settings
os.environ["APP_ENV"] = "testing"
os.environ["ASSET_STORE_BACKEND"] = "memory"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_venue_booking.db")

# Import all models BEFORE creating fixtures (create_all needs them registered)
import venue_booking.models  # noqa: F401,E402
from venue_booking.core.database import Base, build_engine  # noqa: E402
from venue_booking.models.venue import Venue  # noqa: E402
from venue_booking.models.event import Event  # noqa: E402
from venue_booking.schemas.booking import BookingCreate  # noqa: E402
from venue_booking.schemas.event import EventCreate  # noqa: E402
from venue_booking.schemas.venue import VenueInput  # noqa: E402
from venue_booking.services.asset_manager import AssetLifecycleManager, ImageUpload  # noqa: E402
from venue_booking.services.asset_store import InMemoryAssetStore  # noqa: E402
from venue_booking.services.booking_service import BookingService  # noqa: E402
from venue_booking.services.event_service import EventService  # noqa: E402
from venue_booking.services.venue_service import VenueService  # noqa: E402

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


class FailingDeleteAssetStore(InMemoryAssetStore):
    """Uploads work, deletes always fail"""

    def __init__(self):
        super().__init__()
        self.delete_attempts = []

    async def delete(self, handle: str) -> bool:
        self.delete_attempts.append(handle)
        raise ConnectionError("blob endpoint unreachable")


class FailingUploadAssetStore(InMemoryAssetStore):
    """Every upload fails"""

    async def put(self, name: str, data: bytes, content_type: str) -> str:
        raise ConnectionError("blob endpoint unreachable")


def make_image(size: int = 1024, content_type: str = "image/png", filename: str = "hall.png") -> ImageUpload:
    data = (PNG_HEADER + b"\x00" * size)[:size]
    return ImageUpload(filename=filename, content_type=content_type, data=data)


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def next_week(today) -> date:
    return today + timedelta(days=7)


@pytest_asyncio.fixture(scope="function")
async def test_db(tmp_path):
    """Create a fresh async engine and schema for each test"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'venue_booking_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_db):
    return async_sessionmaker(
        test_db,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest.fixture
def asset_store() -> InMemoryAssetStore:
    return InMemoryAssetStore()


@pytest.fixture
def asset_manager(asset_store) -> AssetLifecycleManager:
    return AssetLifecycleManager(asset_store, timeout_seconds=2)


@pytest.fixture
def venue_service(db_session, asset_manager) -> VenueService:
    return VenueService(db_session, asset_manager)


@pytest.fixture
def event_service(db_session) -> EventService:
    return EventService(db_session)


@pytest.fixture
def booking_service(db_session) -> BookingService:
    return BookingService(db_session)


@pytest_asyncio.fixture
async def test_venue(venue_service) -> Venue:
    """Venue with capacity 500 and no events"""
    return await venue_service.create_venue(
        VenueInput(name="Grand Hall", location="12 Harbour Street", capacity=500)
    )


@pytest_asyncio.fixture
async def other_venue(venue_service) -> Venue:
    return await venue_service.create_venue(
        VenueInput(name="Riverside Pavilion", location="3 Quay Road", capacity=120)
    )


@pytest_asyncio.fixture
async def test_event(event_service, test_venue, next_week) -> Event:
    return await event_service.create_event(EventCreate(
        name="Jazz Night",
        event_date=next_week,
        description="An evening of smooth jazz",
        venue_id=test_venue.id
    ))


@pytest_asyncio.fixture
async def test_booking(booking_service, test_event, test_venue, next_week):
    return await booking_service.create_booking(BookingCreate(
        event_id=test_event.id,
        venue_id=test_venue.id,
        booking_date=next_week
    ))


@pytest_asyncio.fixture
async def client(session_factory, asset_manager):
    """Create test client with dependency overrides; one session per request"""
    from venue_booking.main import app
    from venue_booking.core.database import get_session
    from venue_booking.api.deps import get_asset_manager

    async def override_get_session():
        async with session_factory() as session:
            yield session

    def override_get_asset_manager():
        return asset_manager

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_asset_manager] = override_get_asset_manager

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def failing_delete_store() -> FailingDeleteAssetStore:
    return FailingDeleteAssetStore()


@pytest.fixture
def failing_upload_store() -> FailingUploadAssetStore:
    return FailingUploadAssetStore()
