"""
Base model class with common fields
"""

from sqlalchemy import Column, DateTime, Integer, func

from venue_booking.core.database import Base


class BaseModel(Base):
    """
    Abstract base model with common fields.
    `version` is the optimistic concurrency stamp; every update bumps it.
    """
    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
