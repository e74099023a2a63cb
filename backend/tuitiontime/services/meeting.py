# backend/tuitiontime/services/meeting.py
"""Meeting links for online classes, generated locally from a room name."""

from ..core.config import settings


def meeting_link(entity_id: str) -> str:
    return f"{settings.meeting_base_url.rstrip('/')}/tuitiontime-{entity_id}"
