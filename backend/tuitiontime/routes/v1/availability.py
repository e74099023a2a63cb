# backend/tuitiontime/routes/v1/availability.py
"""
Tutor availability routes - API v1

Endpoints:
    GET /me - All slots of the current tutor
    POST / - Create or update a batch of slots
    DELETE /{slot_id} - Delete an unbooked slot
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ...api.dependencies import require_tutor
from ...api.dependencies.services import get_availability_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.availability import SetSlotsRequest, SetSlotsResponse, SlotResponse
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


@router.get("/me", response_model=List[SlotResponse])
async def get_my_slots(
    current_user: User = Depends(require_tutor),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[SlotResponse]:
    slots = await asyncio.to_thread(availability_service.get_my_slots, current_user)
    return [SlotResponse.model_validate(slot) for slot in slots]


@router.post("", response_model=SetSlotsResponse)
async def set_slots(
    payload: SetSlotsRequest,
    current_user: User = Depends(require_tutor),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SetSlotsResponse:
    """
    Upsert slots by start time.

    Booked slots in the batch are reported under ``skipped`` and left as they are.
    """
    try:
        result = await asyncio.to_thread(availability_service.set_slots, current_user, payload.slots)
        return SetSlotsResponse(
            created=[SlotResponse.model_validate(slot) for slot in result["created"]],
            updated=[SlotResponse.model_validate(slot) for slot in result["updated"]],
            skipped=[SlotResponse.model_validate(slot) for slot in result["skipped"]],
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slot(
    slot_id: str,
    current_user: User = Depends(require_tutor),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Response:
    try:
        await asyncio.to_thread(availability_service.delete_slot, current_user, slot_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)
