"""
Booking model
"""

from sqlalchemy import Column, Date, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from venue_booking.models.base import BaseModel


class Booking(BaseModel):
    """
    Reservation of a venue for an event on a date.
    A venue can only be booked once per date; (event, date) is unconstrained.
    """
    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint("venue_id", "booking_date", name="uq_booking_venue_date"),
        {"sqlite_autoincrement": True},
    )

    event_id = Column(
        Integer,
        ForeignKey("events.id", name="fk_bookings_event_id", ondelete="NO ACTION"),
        nullable=False,
        index=True
    )
    venue_id = Column(
        Integer,
        ForeignKey("venues.id", name="fk_bookings_venue_id", ondelete="NO ACTION"),
        nullable=False,
        index=True
    )
    booking_date = Column(Date, nullable=False)

    event = relationship("Event", back_populates="bookings")
    venue = relationship("Venue", back_populates="bookings")

    def __repr__(self):
        return f"<Booking(id={self.id}, event_id={self.event_id}, venue_id={self.venue_id}, date={self.booking_date})>"
