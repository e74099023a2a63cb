# backend/tuitiontime/routes/v1/tutor_switch.py
"""
Tutor switch request routes - API v1

Endpoints:
    POST / - Student asks to move a regular class to another tutor
    GET /mine - Requests of the current student
    GET / - All requests, optionally by status (admin)
    PATCH /{request_id} - Resolve a request (admin)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import require_admin, require_student
from ...api.dependencies.services import get_tutor_switch_service
from ...core.enums import SwitchRequestStatus
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.tutor_switch import TutorSwitchCreate, TutorSwitchResponse, TutorSwitchUpdate
from ...services.tutor_switch_service import TutorSwitchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tutor-switch-v1"])


@router.post("", response_model=TutorSwitchResponse, status_code=status.HTTP_201_CREATED)
async def create_switch_request(
    payload: TutorSwitchCreate,
    current_user: User = Depends(require_student),
    switch_service: TutorSwitchService = Depends(get_tutor_switch_service),
) -> TutorSwitchResponse:
    try:
        request = await asyncio.to_thread(switch_service.create_request, current_user, payload)
        return TutorSwitchResponse.model_validate(request)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/mine", response_model=List[TutorSwitchResponse])
async def my_switch_requests(
    current_user: User = Depends(require_student),
    switch_service: TutorSwitchService = Depends(get_tutor_switch_service),
) -> List[TutorSwitchResponse]:
    requests = await asyncio.to_thread(switch_service.list_for_student, current_user)
    return [TutorSwitchResponse.model_validate(request) for request in requests]


@router.get("", response_model=List[TutorSwitchResponse])
async def list_switch_requests(
    status_filter: Optional[SwitchRequestStatus] = Query(None, alias="status"),
    _: User = Depends(require_admin),
    switch_service: TutorSwitchService = Depends(get_tutor_switch_service),
) -> List[TutorSwitchResponse]:
    requests = await asyncio.to_thread(
        switch_service.list_all, status_filter.value if status_filter else None
    )
    return [TutorSwitchResponse.model_validate(request) for request in requests]


@router.patch("/{request_id}", response_model=TutorSwitchResponse)
async def update_switch_request(
    request_id: str,
    payload: TutorSwitchUpdate,
    _: User = Depends(require_admin),
    switch_service: TutorSwitchService = Depends(get_tutor_switch_service),
) -> TutorSwitchResponse:
    try:
        request = await asyncio.to_thread(switch_service.update_request, request_id, payload)
        return TutorSwitchResponse.model_validate(request)
    except DomainException as e:
        handle_domain_exception(e)
