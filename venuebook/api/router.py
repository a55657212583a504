from __future__ import annotations

from fastapi import APIRouter

from venuebook.api.routes import admin_bookings, admin_calendar, admin_packages, public

api_router = APIRouter()

api_router.include_router(public.router, prefix="/public", tags=["public"])

# Admin
api_router.include_router(admin_bookings.router, prefix="/admin/bookings", tags=["admin-bookings"])
api_router.include_router(admin_calendar.router, prefix="/admin/calendar", tags=["admin-calendar"])
api_router.include_router(admin_packages.router, prefix="/admin/packages", tags=["admin-packages"])
