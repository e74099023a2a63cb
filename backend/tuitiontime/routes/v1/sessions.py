# backend/tuitiontime/routes/v1/sessions.py
"""
Class session routes - API v1

Endpoints:
    POST / - Schedule one session of a regular class (tutor)
    POST /bulk - Schedule many sessions, reporting skipped rows
    GET /mine - Sessions of the current student or tutor
    PATCH /{session_id}/attendance - Mark attendance (tutor)
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import get_current_active_user, require_tutor
from ...api.dependencies.services import get_class_session_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.regular_class import (
    AttendanceRequest,
    BulkSessionCreate,
    BulkSessionResponse,
    ClassSessionCreate,
    ClassSessionResponse,
    SessionSlot,
)
from ...services.class_session_service import ClassSessionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions-v1"])


@router.post("", response_model=ClassSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: ClassSessionCreate,
    current_user: User = Depends(require_tutor),
    session_service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    slot = SessionSlot(date=payload.date, start_time=payload.start_time, end_time=payload.end_time)
    try:
        session = await asyncio.to_thread(
            session_service.create_session, current_user, payload.regular_class_id, slot
        )
        return ClassSessionResponse.model_validate(session)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/bulk", response_model=BulkSessionResponse)
async def bulk_create_sessions(
    payload: BulkSessionCreate,
    current_user: User = Depends(require_tutor),
    session_service: ClassSessionService = Depends(get_class_session_service),
) -> BulkSessionResponse:
    try:
        result = await asyncio.to_thread(
            session_service.bulk_create, current_user, payload.regular_class_id, payload.sessions
        )
        return BulkSessionResponse.model_validate(
            {
                "created": [ClassSessionResponse.model_validate(s) for s in result["created"]],
                "skipped": result["skipped"],
            }
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/mine", response_model=List[ClassSessionResponse])
async def my_sessions(
    regular_class_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    session_service: ClassSessionService = Depends(get_class_session_service),
) -> List[ClassSessionResponse]:
    if current_user.is_tutor:
        sessions = await asyncio.to_thread(
            session_service.tutor_sessions, current_user, regular_class_id
        )
    else:
        sessions = await asyncio.to_thread(session_service.student_sessions, current_user)
    return [ClassSessionResponse.model_validate(session) for session in sessions]


@router.patch("/{session_id}/attendance", response_model=ClassSessionResponse)
async def mark_attendance(
    session_id: str,
    payload: AttendanceRequest,
    current_user: User = Depends(require_tutor),
    session_service: ClassSessionService = Depends(get_class_session_service),
) -> ClassSessionResponse:
    try:
        session = await asyncio.to_thread(
            session_service.mark_attendance,
            current_user,
            session_id,
            payload.attendance,
            payload.tutor_notes,
        )
        return ClassSessionResponse.model_validate(session)
    except DomainException as e:
        handle_domain_exception(e)
