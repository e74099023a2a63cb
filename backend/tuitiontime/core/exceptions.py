# backend/tuitiontime/core/exceptions.py
"""
Domain-specific exceptions for the TuitionTime platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class TooManyAttemptsException(DomainException):
    """Raised when a rate-limited action has been retried too often."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking conflicts with an existing calendar entry."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class SlotUnavailableException(ConflictException):
    """Raised when a slot is missing or already claimed."""

    def __init__(self, slot_id: Optional[str] = None, message: Optional[str] = None):
        super().__init__(
            message=message or "Selected slot is not available",
            code="SLOT_UNAVAILABLE",
            details={"slot_id": slot_id} if slot_id else {},
        )


class AvailabilityOverlapException(ConflictException):
    """Raised when an availability slot overlaps with an existing slot."""

    def __init__(self, new_range: str, conflicting_range: str):
        super().__init__(
            message=f"Overlapping slot: {new_range} conflicts with {conflicting_range}",
            code="AVAILABILITY_OVERLAP",
            details={
                "new_slot": new_range,
                "conflicting_slot": conflicting_range,
            },
        )


class InvalidStateTransitionException(BusinessRuleException):
    """Raised when a status change is not allowed from the current state."""

    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(
            message=f"Cannot move {entity} from {current} to {requested}",
            code="INVALID_STATE_TRANSITION",
            details={"current": current, "requested": requested},
        )


class InsufficientBalanceException(BusinessRuleException):
    """Raised when a wallet debit exceeds the available balance."""

    def __init__(self, wallet_id: str, requested: str):
        super().__init__(
            message="Insufficient wallet balance",
            code="INSUFFICIENT_BALANCE",
            details={"wallet_id": wallet_id, "requested": requested},
        )


class UnbalancedLedgerEntryException(ServiceException):
    """Raised when ledger postings do not sum to zero."""


class PaymentVerificationException(BusinessRuleException):
    """Raised when a gateway signature or order reference does not match."""

    def __init__(self, message: str = "Payment verification failed"):
        super().__init__(message=message, code="PAYMENT_VERIFICATION_FAILED")


class PaymentGatewayException(ServiceException):
    """Raised when the payment gateway rejects or fails a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(
            message=message,
            code="PAYMENT_GATEWAY_ERROR",
            details={"gateway_status": status_code} if status_code else {},
        )

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": self.message, "code": self.code, "details": self.details},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
