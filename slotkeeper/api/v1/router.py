from fastapi import APIRouter
from slotkeeper.api.v1.endpoints import reservations, bookings

api_router = APIRouter()
api_router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
