# backend/tuitiontime/schemas/search.py
from typing import Literal

from .base import PaginatedResponse
from .profile import StudentProfileResponse, TutorPublicResponse


class TutorSearchResponse(PaginatedResponse[TutorPublicResponse]):
    """Search results; ``mode`` is ``ai`` when recommendations were served."""

    mode: Literal["filter", "ai"] = "filter"


class StudentSearchResponse(PaginatedResponse[StudentProfileResponse]):
    pass
