# backend/tuitiontime/routes/v1/tutors.py
"""
Tutor discovery routes - API v1

Endpoints:
    GET /search - Filtered tutor search, or recommendations for a student
        who sends no filters
    GET /{tutor_id} - Public tutor profile
    GET /{tutor_id}/slots - Free upcoming slots of a tutor
"""

import asyncio
from datetime import datetime
from decimal import Decimal
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_optional_user
from ...api.dependencies.services import (
    get_availability_service,
    get_profile_service,
    get_search_service,
)
from ...core.constants import DEFAULT_PAGE_SIZE
from ...core.enums import Gender, SlotType, TeachingMode
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...repositories.profile_repository import TutorSearchFilters
from ...schemas.availability import SlotResponse
from ...schemas.profile import TutorPublicResponse
from ...schemas.search import TutorSearchResponse
from ...services.availability_service import AvailabilityService
from ...services.profile_service import ProfileService
from ...services.search_service import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tutors-v1"])


@router.get("/search", response_model=TutorSearchResponse)
async def search_tutors(
    city: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    class_level: Optional[str] = Query(None),
    board: Optional[str] = Query(None),
    gender: Optional[Gender] = Query(None),
    teaching_mode: Optional[TeachingMode] = Query(None),
    min_experience: Optional[int] = Query(None, ge=0),
    max_experience: Optional[int] = Query(None, ge=0),
    min_rate: Optional[Decimal] = Query(None, ge=0),
    max_rate: Optional[Decimal] = Query(None, ge=0),
    sort: Optional[str] = Query(None, description="field_asc or field_desc"),
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    current_user: Optional[User] = Depends(get_optional_user),
    search_service: SearchService = Depends(get_search_service),
) -> TutorSearchResponse:
    """
    Search verified tutors.

    Students who send no filters get personalised recommendations and the
    response carries ``mode="ai"``.
    """
    filters = TutorSearchFilters(
        city=city,
        subject=subject,
        class_level=class_level,
        board=board,
        gender=gender.value if gender else None,
        teaching_mode=teaching_mode.value if teaching_mode else None,
        min_experience=min_experience,
        max_experience=max_experience,
        min_rate=min_rate,
        max_rate=max_rate,
    )
    result = await asyncio.to_thread(
        search_service.search_tutors,
        filters,
        caller=current_user,
        sort=sort,
        page=page,
        limit=limit,
    )
    response = TutorSearchResponse.from_page(
        items=[TutorPublicResponse.model_validate(item) for item in result["items"]],
        total=result["total"],
        page=result["page"],
        per_page=result["per_page"],
    )
    response.mode = result["mode"]
    return response


@router.get("/{tutor_id}", response_model=TutorPublicResponse)
async def get_tutor(
    tutor_id: str,
    profile_service: ProfileService = Depends(get_profile_service),
) -> TutorPublicResponse:
    try:
        profile = await asyncio.to_thread(profile_service.get_public_tutor, tutor_id)
        return TutorPublicResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{tutor_id}/slots", response_model=List[SlotResponse])
async def get_tutor_slots(
    tutor_id: str,
    slot_type: Optional[SlotType] = Query(SlotType.DEMO),
    start_from: Optional[datetime] = Query(None),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[SlotResponse]:
    try:
        slots = await asyncio.to_thread(
            availability_service.get_tutor_slots, tutor_id, slot_type, start_from
        )
        return [SlotResponse.model_validate(slot) for slot in slots]
    except DomainException as e:
        handle_domain_exception(e)
