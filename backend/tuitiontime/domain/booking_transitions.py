# backend/tuitiontime/domain/booking_transitions.py
"""
Booking status state machine.

    pending ──► confirmed ──► completed
       │            │
       └────────────┴──► cancelled

``completed`` and ``cancelled`` are terminal. Each edge also lists the
roles allowed to take it; admins may take any edge.
"""

from typing import Dict, FrozenSet

from ..core.enums import BookingStatus, UserRole
from ..core.exceptions import ForbiddenException, InvalidStateTransitionException

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

ACTOR_PERMISSIONS: Dict[UserRole, FrozenSet[BookingStatus]] = {
    UserRole.TUTOR: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.COMPLETED, BookingStatus.CANCELLED}
    ),
    UserRole.STUDENT: frozenset({BookingStatus.CANCELLED}),
    UserRole.ADMIN: frozenset(BookingStatus),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: str, target: str, actor_role: str) -> BookingStatus:
    """
    Validate a status change and return the target as an enum.

    Raises:
        InvalidStateTransitionException: edge not in the state machine
        ForbiddenException: actor's role may not take this edge
    """
    current_status = BookingStatus(current)
    target_status = BookingStatus(target)
    if not can_transition(current_status, target_status):
        raise InvalidStateTransitionException("booking", current_status.value, target_status.value)
    if target_status not in ACTOR_PERMISSIONS[UserRole(actor_role)]:
        raise ForbiddenException(
            f"A {actor_role} cannot mark a booking as {target_status.value}",
            code="BOOKING_TRANSITION_FORBIDDEN",
        )
    return target_status
