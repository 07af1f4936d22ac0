"""
Entity store: row access for venues, events and bookings

Storage-level failures surface as StoreOperationError subclasses so the
mutation services can tell a version mismatch from a missing row or a
constraint violation without parsing driver messages themselves.
"""

import re
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, exists, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.util import identity_key

from venue_booking.models.base import BaseModel
from venue_booking.models.booking import Booking
from venue_booking.models.booking_summary import booking_summary_query
from venue_booking.models.event import Event
from venue_booking.models.venue import Venue

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_INTEGER_TOKEN = re.compile(r"^[+-]?\d+$")
_ID_MIN, _ID_MAX = -2 ** 31, 2 ** 31 - 1


class StoreOperationError(Exception):
    """A store call failed"""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(message or f"{operation} failed")


class StaleRowError(StoreOperationError):
    """Update matched no row: the version changed or the row is gone"""


class MissingRowError(StoreOperationError):
    """Delete matched no row"""


class ForeignKeyViolationError(StoreOperationError):
    """Write or delete rejected by a foreign key constraint"""


class UniqueViolationError(StoreOperationError):
    """Write rejected by a unique constraint"""


def _classify_integrity_error(operation: str, error: IntegrityError) -> StoreOperationError:
    text = str(error.orig).lower()
    if "foreign key" in text:
        return ForeignKeyViolationError(operation, str(error.orig))
    if "unique" in text or "duplicate key" in text:
        return UniqueViolationError(operation, str(error.orig))
    return StoreOperationError(operation, str(error.orig))


def _id_token(token: str) -> Optional[int]:
    if len(token) > 11 or not _INTEGER_TOKEN.match(token):
        return None
    value = int(token)
    return value if _ID_MIN <= value <= _ID_MAX else None


def search_filter(token: Optional[str], id_column, text_columns: Sequence):
    """
    Build the free-text search predicate.
    An integer token that fits a 32-bit id also matches the id column
    exactly; larger numbers are searched as text only.
    """
    token = (token or "").strip()
    if not token:
        return None

    predicates = [column.contains(token, autoescape=True) for column in text_columns]
    entity_id = _id_token(token)
    if entity_id is not None:
        predicates.insert(0, id_column == entity_id)
    return or_(*predicates)


class EntityStore:
    """
    Request-scoped access to the base tables.
    All calls share the caller's session, so reads that back a conflict
    check run in the same transaction as the following write.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _guard(self, operation: str):
        try:
            yield
        except IntegrityError as e:
            raise _classify_integrity_error(operation, e) from e
        except SQLAlchemyError as e:
            logger.error(f"Store operation {operation} failed: {type(e).__name__}: {e}")
            raise StoreOperationError(operation, str(e)) from e

    async def get(self, model: Type[ModelT], entity_id: int, refresh: bool = False) -> Optional[ModelT]:
        async with self._guard(f"get {model.__name__}"):
            return await self.session.get(model, entity_id, populate_existing=refresh)

    async def exists(self, model: Type[BaseModel], *criteria) -> bool:
        async with self._guard(f"exists {model.__name__}"):
            stmt = select(exists().where(*criteria).select_from(model))
            return bool(await self.session.scalar(stmt))

    async def count(self, model: Type[BaseModel], *criteria) -> int:
        async with self._guard(f"count {model.__name__}"):
            stmt = select(func.count()).select_from(model).where(*criteria)
            return int(await self.session.scalar(stmt) or 0)

    async def insert(self, row: ModelT) -> ModelT:
        async with self._guard(f"insert {type(row).__name__}"):
            self.session.add(row)
            await self.session.flush()
            # Load server-generated timestamps while still inside the transaction
            await self.session.refresh(row)
            return row

    async def update(
        self,
        model: Type[ModelT],
        entity_id: int,
        values: Dict[str, Any],
        expected_version: int
    ) -> ModelT:
        """
        Compare-and-swap on the version column; a stale or missing row
        raises StaleRowError and nothing is written.
        """
        operation = f"update {model.__name__}"
        async with self._guard(operation):
            stmt = (
                update(model)
                .where(model.id == entity_id, model.version == expected_version)
                .values(**values, version=model.version + 1)
                .execution_options(synchronize_session=False)
            )
            result = await self.session.execute(stmt)
            if result.rowcount != 1:
                raise StaleRowError(
                    operation,
                    f"{model.__name__} {entity_id} no longer matches version {expected_version}"
                )
            return await self.session.get(model, entity_id, populate_existing=True)

    async def delete(self, model: Type[BaseModel], entity_id: int) -> None:
        operation = f"delete {model.__name__}"
        async with self._guard(operation):
            stmt = (
                delete(model)
                .where(model.id == entity_id)
                .execution_options(synchronize_session=False)
            )
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                raise MissingRowError(operation, f"{model.__name__} {entity_id} does not exist")

            # The bulk delete bypasses the unit of work; drop the loaded copy too
            stale = self.session.identity_map.get(identity_key(model, entity_id))
            if stale is not None:
                self.session.expunge(stale)

    async def list_venues(self, search: Optional[str] = None) -> List[Venue]:
        async with self._guard("list Venue"):
            stmt = select(Venue).order_by(Venue.id)
            criterion = search_filter(search, Venue.id, [Venue.name, Venue.location])
            if criterion is not None:
                stmt = stmt.where(criterion)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def list_events(self, search: Optional[str] = None) -> List[Event]:
        async with self._guard("list Event"):
            stmt = (
                select(Event)
                .join(Venue, Event.venue_id == Venue.id)
                .options(selectinload(Event.venue))
                .order_by(Event.id)
            )
            criterion = search_filter(
                search, Event.id, [Event.name, Event.description, Venue.name]
            )
            if criterion is not None:
                stmt = stmt.where(criterion)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def list_booking_summaries(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        async with self._guard("list BookingSummary"):
            stmt = booking_summary_query().order_by(Booking.id)
            criterion = search_filter(search, Booking.id, [Event.name, Venue.name])
            if criterion is not None:
                stmt = stmt.where(criterion)
            result = await self.session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

    async def get_booking_summary(self, booking_id: int) -> Optional[Dict[str, Any]]:
        async with self._guard("get BookingSummary"):
            stmt = booking_summary_query().where(Booking.id == booking_id)
            row = (await self.session.execute(stmt)).mappings().one_or_none()
            return dict(row) if row is not None else None

    async def venue_with_children(self, venue_id: int) -> Optional[Venue]:
        async with self._guard("get Venue"):
            stmt = (
                select(Venue)
                .options(selectinload(Venue.events), selectinload(Venue.bookings))
                .where(Venue.id == venue_id)
                .execution_options(populate_existing=True)
            )
            return (await self.session.execute(stmt)).scalar_one_or_none()

    async def event_with_children(self, event_id: int) -> Optional[Event]:
        async with self._guard("get Event"):
            stmt = (
                select(Event)
                .options(selectinload(Event.venue), selectinload(Event.bookings))
                .where(Event.id == event_id)
                .execution_options(populate_existing=True)
            )
            return (await self.session.execute(stmt)).scalar_one_or_none()
