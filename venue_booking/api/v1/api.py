"""
Main API Router
Aggregates all API endpoints for v1
"""

from fastapi import APIRouter
from venue_booking.api.v1.endpoints import (
    venues,
    events,
    bookings,
    health
)

api_router = APIRouter()

api_router.include_router(venues.router, prefix="/venues", tags=["Venues"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])
