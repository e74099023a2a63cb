"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from ...database import get_db
from .auth import (
    get_current_active_user,
    get_current_user,
    get_optional_user,
    require_admin,
    require_role,
    require_student,
    require_tutor,
)
from .services import get_payment_gateway

__all__ = [
    # Auth
    "get_current_user",
    "get_current_active_user",
    "get_optional_user",
    "require_role",
    "require_student",
    "require_tutor",
    "require_admin",
    # Database
    "get_db",
    # Services
    "get_payment_gateway",
]
