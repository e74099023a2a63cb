# backend/tuitiontime/routes/v1/students.py
"""Student discovery for tutors - API v1."""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import require_tutor
from ...api.dependencies.services import get_search_service
from ...core.constants import DEFAULT_PAGE_SIZE
from ...core.enums import Gender
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...repositories.profile_repository import StudentSearchFilters
from ...schemas.profile import StudentProfileResponse
from ...schemas.search import StudentSearchResponse
from ...services.search_service import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["students-v1"])


@router.get("/search", response_model=StudentSearchResponse)
async def search_students(
    city: Optional[str] = Query(None),
    pincode: Optional[str] = Query(None),
    board: Optional[str] = Query(None),
    class_level: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    gender: Optional[Gender] = Query(None),
    availability: Optional[List[str]] = Query(None),
    sort: Optional[str] = Query(None),
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    current_user: User = Depends(require_tutor),
    search_service: SearchService = Depends(get_search_service),
) -> StudentSearchResponse:
    filters = StudentSearchFilters(
        city=city,
        pincode=pincode,
        board=board,
        class_level=class_level,
        subject=subject,
        gender=gender.value if gender else None,
        availability=availability or [],
    )
    try:
        result = await asyncio.to_thread(
            search_service.search_students,
            current_user,
            filters,
            sort=sort,
            page=page,
            limit=limit,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return StudentSearchResponse.from_page(
        items=[StudentProfileResponse.model_validate(item) for item in result["items"]],
        total=result["total"],
        page=result["page"],
        per_page=result["per_page"],
    )
