# backend/tuitiontime/repositories/factory.py
"""
Repository Factory for the TuitionTime platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository
    from .booking_repository import BookingRepository
    from .catalog_repository import (
        OptionCategoryRepository,
        SubjectMappingRepository,
        SubjectRepository,
    )
    from .enquiry_repository import EnquiryRepository
    from .notification_repository import AdminNotificationRepository, NotificationRepository
    from .otp_repository import OtpRepository
    from .payment_repository import PaymentRepository
    from .profile_repository import StudentProfileRepository, TutorProfileRepository
    from .regular_class_repository import ClassSessionRepository, RegularClassRepository
    from .subscription_repository import SubscriptionIntentRepository, SubscriptionRepository
    from .tutor_switch_repository import TutorSwitchRepository
    from .user_repository import UserRepository
    from .wallet_repository import (
        LedgerEntryRepository,
        WalletRepository,
        WalletTransactionRepository,
    )


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        return BaseRepository(db, model)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_otp_repository(db: Session) -> "OtpRepository":
        from .otp_repository import OtpRepository

        return OtpRepository(db)

    @staticmethod
    def create_student_profile_repository(db: Session) -> "StudentProfileRepository":
        from .profile_repository import StudentProfileRepository

        return StudentProfileRepository(db)

    @staticmethod
    def create_tutor_profile_repository(db: Session) -> "TutorProfileRepository":
        from .profile_repository import TutorProfileRepository

        return TutorProfileRepository(db)

    @staticmethod
    def create_subject_repository(db: Session) -> "SubjectRepository":
        from .catalog_repository import SubjectRepository

        return SubjectRepository(db)

    @staticmethod
    def create_option_category_repository(db: Session) -> "OptionCategoryRepository":
        from .catalog_repository import OptionCategoryRepository

        return OptionCategoryRepository(db)

    @staticmethod
    def create_subject_mapping_repository(db: Session) -> "SubjectMappingRepository":
        from .catalog_repository import SubjectMappingRepository

        return SubjectMappingRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Create repository for availability slot operations."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_subscription_repository(db: Session) -> "SubscriptionRepository":
        from .subscription_repository import SubscriptionRepository

        return SubscriptionRepository(db)

    @staticmethod
    def create_subscription_intent_repository(db: Session) -> "SubscriptionIntentRepository":
        from .subscription_repository import SubscriptionIntentRepository

        return SubscriptionIntentRepository(db)

    @staticmethod
    def create_regular_class_repository(db: Session) -> "RegularClassRepository":
        from .regular_class_repository import RegularClassRepository

        return RegularClassRepository(db)

    @staticmethod
    def create_class_session_repository(db: Session) -> "ClassSessionRepository":
        from .regular_class_repository import ClassSessionRepository

        return ClassSessionRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> "PaymentRepository":
        from .payment_repository import PaymentRepository

        return PaymentRepository(db)

    @staticmethod
    def create_wallet_repository(db: Session) -> "WalletRepository":
        from .wallet_repository import WalletRepository

        return WalletRepository(db)

    @staticmethod
    def create_ledger_entry_repository(db: Session) -> "LedgerEntryRepository":
        from .wallet_repository import LedgerEntryRepository

        return LedgerEntryRepository(db)

    @staticmethod
    def create_wallet_transaction_repository(db: Session) -> "WalletTransactionRepository":
        from .wallet_repository import WalletTransactionRepository

        return WalletTransactionRepository(db)

    @staticmethod
    def create_enquiry_repository(db: Session) -> "EnquiryRepository":
        from .enquiry_repository import EnquiryRepository

        return EnquiryRepository(db)

    @staticmethod
    def create_admin_notification_repository(db: Session) -> "AdminNotificationRepository":
        from .notification_repository import AdminNotificationRepository

        return AdminNotificationRepository(db)

    @staticmethod
    def create_notification_repository(db: Session) -> "NotificationRepository":
        from .notification_repository import NotificationRepository

        return NotificationRepository(db)

    @staticmethod
    def create_tutor_switch_repository(db: Session) -> "TutorSwitchRepository":
        from .tutor_switch_repository import TutorSwitchRepository

        return TutorSwitchRepository(db)
