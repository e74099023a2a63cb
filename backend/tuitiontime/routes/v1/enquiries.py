# backend/tuitiontime/routes/v1/enquiries.py
"""
Enquiry routes - API v1

Endpoints:
    POST / - Student sends an enquiry to a tutor
    GET /mine - Enquiries sent (student) or received (tutor)
    POST /{enquiry_id}/reply - Tutor replies
    POST /{enquiry_id}/close - Either party closes the enquiry
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import get_current_active_user, require_student, require_tutor
from ...api.dependencies.services import get_enquiry_service
from ...core.enums import EnquiryStatus
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.enquiry import EnquiryCreate, EnquiryReply, EnquiryResponse
from ...services.enquiry_service import EnquiryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["enquiries-v1"])


@router.post("", response_model=EnquiryResponse, status_code=status.HTTP_201_CREATED)
async def create_enquiry(
    payload: EnquiryCreate,
    current_user: User = Depends(require_student),
    enquiry_service: EnquiryService = Depends(get_enquiry_service),
) -> EnquiryResponse:
    try:
        enquiry = await asyncio.to_thread(enquiry_service.create_enquiry, current_user, payload)
        return EnquiryResponse.model_validate(enquiry)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/mine", response_model=List[EnquiryResponse])
async def my_enquiries(
    status_filter: Optional[EnquiryStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_active_user),
    enquiry_service: EnquiryService = Depends(get_enquiry_service),
) -> List[EnquiryResponse]:
    if current_user.is_tutor:
        enquiries = await asyncio.to_thread(
            enquiry_service.list_for_tutor,
            current_user,
            status_filter.value if status_filter else None,
        )
    else:
        enquiries = await asyncio.to_thread(enquiry_service.list_for_student, current_user)
    return [EnquiryResponse.model_validate(enquiry) for enquiry in enquiries]


@router.post("/{enquiry_id}/reply", response_model=EnquiryResponse)
async def reply_to_enquiry(
    enquiry_id: str,
    payload: EnquiryReply,
    current_user: User = Depends(require_tutor),
    enquiry_service: EnquiryService = Depends(get_enquiry_service),
) -> EnquiryResponse:
    try:
        enquiry = await asyncio.to_thread(
            enquiry_service.reply, current_user, enquiry_id, payload.reply
        )
        return EnquiryResponse.model_validate(enquiry)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{enquiry_id}/close", response_model=EnquiryResponse)
async def close_enquiry(
    enquiry_id: str,
    current_user: User = Depends(get_current_active_user),
    enquiry_service: EnquiryService = Depends(get_enquiry_service),
) -> EnquiryResponse:
    try:
        enquiry = await asyncio.to_thread(enquiry_service.close, current_user, enquiry_id)
        return EnquiryResponse.model_validate(enquiry)
    except DomainException as e:
        handle_domain_exception(e)
