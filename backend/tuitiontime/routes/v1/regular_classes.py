# backend/tuitiontime/routes/v1/regular_classes.py
"""
Regular class routes - API v1

Endpoints:
    POST /start - Upgrade a demo into a paid regular class
    POST /{class_id}/verify-payment - Confirm the class payment
    GET / - Classes of the current user
    GET /{class_id} - Class details
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies import get_current_active_user, get_payment_gateway, require_student
from ...api.dependencies.services import get_regular_class_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...integrations.razorpay_client import RazorpayClient
from ...models.user import User
from ...schemas.base import PaymentVerifyRequest
from ...schemas.regular_class import (
    RegularClassOrderResponse,
    RegularClassResponse,
    StartRegularClassRequest,
)
from ...services.regular_class_service import RegularClassService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["regular-classes-v1"])


@router.post("/start", response_model=RegularClassOrderResponse)
async def start_regular_class(
    payload: StartRegularClassRequest,
    current_user: User = Depends(require_student),
    regular_class_service: RegularClassService = Depends(get_regular_class_service),
    gateway: RazorpayClient = Depends(get_payment_gateway),
) -> RegularClassOrderResponse:
    try:
        order = await asyncio.to_thread(
            regular_class_service.start_regular_from_demo, current_user, payload, gateway
        )
        return RegularClassOrderResponse.model_validate(order)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[RegularClassResponse])
async def list_my_classes(
    current_user: User = Depends(get_current_active_user),
    regular_class_service: RegularClassService = Depends(get_regular_class_service),
) -> List[RegularClassResponse]:
    classes = await asyncio.to_thread(regular_class_service.list_my_classes, current_user)
    return [RegularClassResponse.model_validate(regular_class) for regular_class in classes]


@router.get("/{class_id}", response_model=RegularClassResponse)
async def get_regular_class(
    class_id: str,
    current_user: User = Depends(get_current_active_user),
    regular_class_service: RegularClassService = Depends(get_regular_class_service),
) -> RegularClassResponse:
    try:
        regular_class = await asyncio.to_thread(
            regular_class_service.get_class, current_user, class_id
        )
        return RegularClassResponse.model_validate(regular_class)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{class_id}/verify-payment", response_model=RegularClassResponse)
async def verify_class_payment(
    class_id: str,
    payload: PaymentVerifyRequest,
    current_user: User = Depends(require_student),
    regular_class_service: RegularClassService = Depends(get_regular_class_service),
    gateway: RazorpayClient = Depends(get_payment_gateway),
) -> RegularClassResponse:
    try:
        regular_class = await asyncio.to_thread(
            regular_class_service.verify_class_payment,
            current_user,
            class_id,
            payload.order_id,
            payload.payment_id,
            payload.signature,
            gateway,
        )
        return RegularClassResponse.model_validate(regular_class)
    except DomainException as e:
        handle_domain_exception(e)
