"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...database import get_db
from ...integrations.razorpay_client import FakeRazorpayClient, RazorpayClient
from ...services.admin_notification_service import AdminNotificationService
from ...services.admin_service import AdminService
from ...services.auth_service import AuthService
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.catalog_service import CatalogService
from ...services.class_session_service import ClassSessionService
from ...services.enquiry_service import EnquiryService
from ...services.notification_service import NotificationService
from ...services.payment_service import PaymentService
from ...services.profile_service import ProfileService
from ...services.regular_class_service import RegularClassService
from ...services.search_service import SearchService
from ...services.subscription_service import SubscriptionService
from ...services.template_service import TemplateService
from ...services.tutor_switch_service import TutorSwitchService
from ...services.wallet_service import WalletService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_template_service_singleton() -> TemplateService:
    return TemplateService()


@lru_cache(maxsize=1)
def _build_payment_gateway() -> RazorpayClient:
    if settings.razorpay_configured:
        return RazorpayClient(
            key_id=settings.razorpay_key_id,
            key_secret=settings.razorpay_key_secret,
            base_url=settings.razorpay_api_base,
            timeout=settings.razorpay_timeout_seconds,
        )
    if settings.is_production:
        raise RuntimeError("Razorpay credentials are required in production")
    logger.warning("Razorpay keys not configured; using the fake gateway client")
    return FakeRazorpayClient()


def get_payment_gateway() -> RazorpayClient:
    """Razorpay client, or the in-memory fake outside production without keys."""
    return _build_payment_gateway()


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db, get_template_service_singleton())


def get_admin_notification_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> AdminNotificationService:
    return AdminNotificationService(db, notification_service)


def get_wallet_service(db: Session = Depends(get_db)) -> WalletService:
    return WalletService(db)


def get_auth_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> AuthService:
    return AuthService(db, notification_service)


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    return SearchService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        notification_service: Notification service for sending emails
        wallet_service: Ledger used for escrow and refunds

    Returns:
        BookingService instance
    """
    return BookingService(db, notification_service, wallet_service)


def get_subscription_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> SubscriptionService:
    return SubscriptionService(db, notification_service, wallet_service)


def get_regular_class_service(
    db: Session = Depends(get_db),
    wallet_service: WalletService = Depends(get_wallet_service),
    admin_notification_service: AdminNotificationService = Depends(get_admin_notification_service),
) -> RegularClassService:
    return RegularClassService(db, wallet_service, admin_notification_service)


def get_class_session_service(
    db: Session = Depends(get_db),
    admin_notification_service: AdminNotificationService = Depends(get_admin_notification_service),
) -> ClassSessionService:
    return ClassSessionService(db, admin_notification_service)


def get_payment_service(
    db: Session = Depends(get_db),
    wallet_service: WalletService = Depends(get_wallet_service),
    admin_notification_service: AdminNotificationService = Depends(get_admin_notification_service),
) -> PaymentService:
    return PaymentService(db, wallet_service, admin_notification_service)


def get_enquiry_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> EnquiryService:
    return EnquiryService(db, notification_service)


def get_tutor_switch_service(
    db: Session = Depends(get_db),
    admin_notification_service: AdminNotificationService = Depends(get_admin_notification_service),
) -> TutorSwitchService:
    return TutorSwitchService(db, admin_notification_service)


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    return AdminService(db)
