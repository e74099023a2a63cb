# backend/tuitiontime/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import (
    admin,
    auth,
    availability,
    bookings,
    catalog,
    enquiries,
    health,
    notifications,
    payments,
    regular_classes,
    sessions,
    students,
    subscriptions,
    tutor_switch,
    tutors,
    users,
    wallet,
)

__all__ = [
    "admin",
    "auth",
    "availability",
    "bookings",
    "catalog",
    "enquiries",
    "health",
    "notifications",
    "payments",
    "regular_classes",
    "sessions",
    "students",
    "subscriptions",
    "tutor_switch",
    "tutors",
    "users",
    "wallet",
]
