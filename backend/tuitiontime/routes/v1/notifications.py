# backend/tuitiontime/routes/v1/notifications.py
"""
Notification routes - API v1

Endpoints:
    GET / - In-app notifications of the current user
    POST /{notification_id}/read - Mark one as read
    GET /admin - Admin notification feed (admin)
    POST /admin/read-all - Mark the whole admin feed as read (admin)
    POST /admin/{notification_id}/read - Mark one admin notification read (admin)
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_current_active_user, require_admin
from ...api.dependencies.services import (
    get_admin_notification_service,
    get_notification_service,
)
from ...core.constants import MAX_PAGE_SIZE
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.admin import MarkedReadResponse
from ...schemas.base import PaginatedResponse
from ...schemas.notification import AdminNotificationResponse, NotificationResponse
from ...services.admin_notification_service import AdminNotificationService
from ...services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications-v1"])


# ============================================================================
# SECTION 1: Admin feed (static paths first)
# ============================================================================


@router.get("/admin", response_model=PaginatedResponse[AdminNotificationResponse])
async def list_admin_notifications(
    unread_only: bool = Query(False),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    _: User = Depends(require_admin),
    admin_notifications: AdminNotificationService = Depends(get_admin_notification_service),
) -> PaginatedResponse[AdminNotificationResponse]:
    items, total = await asyncio.to_thread(
        admin_notifications.list_notifications,
        unread_only=unread_only,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse[AdminNotificationResponse].from_page(
        items=[AdminNotificationResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.post("/admin/read-all", response_model=MarkedReadResponse)
async def mark_all_admin_notifications_read(
    _: User = Depends(require_admin),
    admin_notifications: AdminNotificationService = Depends(get_admin_notification_service),
) -> MarkedReadResponse:
    updated = await asyncio.to_thread(admin_notifications.mark_all_read)
    return MarkedReadResponse(updated=updated)


@router.post("/admin/{notification_id}/read", response_model=AdminNotificationResponse)
async def mark_admin_notification_read(
    notification_id: str,
    _: User = Depends(require_admin),
    admin_notifications: AdminNotificationService = Depends(get_admin_notification_service),
) -> AdminNotificationResponse:
    try:
        notification = await asyncio.to_thread(admin_notifications.mark_read, notification_id)
        return AdminNotificationResponse.model_validate(notification)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: User inbox
# ============================================================================


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_active_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> List[NotificationResponse]:
    notifications = await asyncio.to_thread(
        notification_service.list_for_user, current_user, unread_only
    )
    return [NotificationResponse.model_validate(item) for item in notifications]


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_active_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    try:
        notification = await asyncio.to_thread(
            notification_service.mark_read, current_user, notification_id
        )
        return NotificationResponse.model_validate(notification)
    except DomainException as e:
        handle_domain_exception(e)
