"""
Event model
"""

from sqlalchemy import Column, String, Date, Integer, ForeignKey
from sqlalchemy.orm import relationship

from venue_booking.models.base import BaseModel


class Event(BaseModel):
    """
    Event held at exactly one venue
    """
    __tablename__ = "events"
    __table_args__ = {"sqlite_autoincrement": True}

    name = Column(String(100), nullable=False, index=True)
    event_date = Column(Date, nullable=False, index=True)
    description = Column(String(500))
    venue_id = Column(
        Integer,
        ForeignKey("venues.id", name="fk_events_venue_id", ondelete="NO ACTION"),
        nullable=False,
        index=True
    )

    venue = relationship("Venue", back_populates="events")
    bookings = relationship("Booking", back_populates="event", passive_deletes="all")

    def __repr__(self):
        return f"<Event(id={self.id}, name={self.name}, date={self.event_date}, venue_id={self.venue_id})>"
