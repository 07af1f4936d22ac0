"""
API endpoints module
"""

from . import venues, events, bookings, health

__all__ = [
    "venues",
    "events",
    "bookings",
    "health"
]
