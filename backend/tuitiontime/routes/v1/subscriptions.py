# backend/tuitiontime/routes/v1/subscriptions.py
"""
Monthly subscription routes - API v1

Endpoints:
    POST /checkout - Open a Razorpay order for a tutor's monthly plan
    POST /verify - Activate the subscription once the payment checks out
    GET /mine - Subscriptions of the current student
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_payment_gateway, require_student
from ...api.dependencies.services import get_subscription_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...integrations.razorpay_client import RazorpayClient
from ...models.user import User
from ...schemas.base import PaymentVerifyRequest
from ...schemas.subscription import (
    SubscriptionCheckoutRequest,
    SubscriptionCheckoutResponse,
    SubscriptionResponse,
)
from ...services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subscriptions-v1"])


@router.post("/checkout", response_model=SubscriptionCheckoutResponse)
async def checkout(
    payload: SubscriptionCheckoutRequest,
    current_user: User = Depends(require_student),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
    gateway: RazorpayClient = Depends(get_payment_gateway),
) -> SubscriptionCheckoutResponse:
    try:
        order = await asyncio.to_thread(
            subscription_service.checkout,
            current_user,
            payload.tutor_id,
            gateway,
            payload.sessions_per_week,
            payload.subject,
        )
        return SubscriptionCheckoutResponse(**order)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/verify", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def verify(
    payload: PaymentVerifyRequest,
    current_user: User = Depends(require_student),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
    gateway: RazorpayClient = Depends(get_payment_gateway),
) -> SubscriptionResponse:
    """
    Activate the plan and generate its bookings.

    Replaying a verified order returns the subscription created the first time.
    """
    try:
        subscription = await asyncio.to_thread(
            subscription_service.verify,
            current_user,
            payload.order_id,
            payload.payment_id,
            payload.signature,
            gateway,
        )
        return SubscriptionResponse.model_validate(subscription)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/mine", response_model=List[SubscriptionResponse])
async def my_subscriptions(
    current_user: User = Depends(require_student),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> List[SubscriptionResponse]:
    subscriptions = await asyncio.to_thread(subscription_service.my_subscriptions, current_user)
    return [SubscriptionResponse.model_validate(subscription) for subscription in subscriptions]
