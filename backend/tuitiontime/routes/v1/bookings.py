# backend/tuitiontime/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET / - Bookings of the current user (admins see all, paginated)
    POST / - Book a free slot of a tutor
    GET /tutor - Tutor's bookings filtered by status and type
    GET /{booking_id} - Booking details
    PATCH /{booking_id}/status - Move a booking through its lifecycle
    POST /{booking_id}/cancel - Cancel a booking (student)
    POST /{booking_id}/convert - Create a gateway order for a demo
    POST /{booking_id}/verify-payment - Confirm the gateway payment
    POST /{booking_id}/rate - Rate a completed class
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import (
    get_current_active_user,
    get_payment_gateway,
    require_student,
    require_tutor,
)
from ...api.dependencies.services import get_booking_service
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.enums import BookingStatus, BookingType
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...integrations.razorpay_client import RazorpayClient
from ...models.user import User
from ...schemas.base import PaginatedResponse, PaymentVerifyRequest
from ...schemas.booking import (
    BookingCreate,
    BookingOrderResponse,
    BookingRatingRequest,
    BookingResponse,
    BookingStatusUpdate,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings-v1"])


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("", response_model=PaginatedResponse[BookingResponse])
async def get_bookings(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingResponse]:
    bookings, total = await asyncio.to_thread(
        booking_service.list_my_bookings, current_user, page, per_page
    )
    return PaginatedResponse[BookingResponse].from_page(
        items=[BookingResponse.model_validate(booking) for booking in bookings],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: User = Depends(require_student),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Book a tutor's slot.

    The requested range must match a free published slot exactly. Demo
    bookings are confirmed immediately.
    """
    try:
        booking = await asyncio.to_thread(booking_service.create_booking, current_user, booking_data)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/tutor", response_model=List[BookingResponse])
async def get_tutor_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    booking_type: Optional[BookingType] = Query(None),
    current_user: User = Depends(require_tutor),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    bookings = await asyncio.to_thread(
        booking_service.list_tutor_bookings, current_user, status_filter, booking_type
    )
    return [BookingResponse.model_validate(booking) for booking in bookings]


# ============================================================================
# SECTION 2: Dynamic routes (/{booking_id})
# ============================================================================


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking_details(
    booking_id: str,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, current_user, booking_id)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.update_status, current_user, booking_id, payload.status
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    current_user: User = Depends(require_student),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.cancel_booking, current_user, booking_id)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/convert", response_model=BookingOrderResponse)
async def convert_demo_to_paid(
    booking_id: str,
    current_user: User = Depends(require_student),
    booking_service: BookingService = Depends(get_booking_service),
    gateway: RazorpayClient = Depends(get_payment_gateway),
) -> BookingOrderResponse:
    """Open (or reuse) a Razorpay order for a demo booking."""
    try:
        order = await asyncio.to_thread(
            booking_service.convert_demo_to_paid, current_user, booking_id, gateway
        )
        return BookingOrderResponse(**order)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/verify-payment", response_model=BookingResponse)
async def verify_booking_payment(
    booking_id: str,
    payload: PaymentVerifyRequest,
    current_user: User = Depends(require_student),
    booking_service: BookingService = Depends(get_booking_service),
    gateway: RazorpayClient = Depends(get_payment_gateway),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.verify_booking_payment,
            current_user,
            booking_id,
            payload.order_id,
            payload.payment_id,
            payload.signature,
            gateway,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/rate", response_model=BookingResponse)
async def rate_booking(
    booking_id: str,
    payload: BookingRatingRequest,
    current_user: User = Depends(require_student),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.rate_booking,
            current_user,
            booking_id,
            payload.rating,
            payload.feedback,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
