"""
Venue model
"""

from sqlalchemy import Column, String, Integer
from sqlalchemy.orm import relationship

from venue_booking.models.base import BaseModel


class Venue(BaseModel):
    """
    Venue that events are held at and bookings reserve
    """
    __tablename__ = "venues"
    __table_args__ = {"sqlite_autoincrement": True}

    name = Column(String(100), nullable=False, index=True)
    location = Column(String(200))
    capacity = Column(Integer)
    image_url = Column(String(255))

    # Children are never deleted through the venue
    events = relationship("Event", back_populates="venue", passive_deletes="all")
    bookings = relationship("Booking", back_populates="venue", passive_deletes="all")

    def __repr__(self):
        return f"<Venue(id={self.id}, name={self.name}, capacity={self.capacity})>"
