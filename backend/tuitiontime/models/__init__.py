# backend/tuitiontime/models/__init__.py
"""
SQLAlchemy models for the TuitionTime platform.

Importing this package registers every table on ``Base.metadata``.
"""

from ..database import Base
from .availability import AvailabilitySlot
from .booking import Booking
from .catalog import OptionCategory, Subject, SubjectMapping
from .enquiry import Enquiry
from .notification import AdminNotification, Notification
from .otp import OtpRequest
from .payment import Payment
from .profiles import StudentProfile, TutorProfile
from .regular_class import ClassSession, RegularClass
from .subscription import Subscription, SubscriptionIntent
from .tutor_switch import TutorSwitchRequest
from .user import User
from .wallet import LedgerEntry, Wallet, WalletTransaction

__all__ = [
    "AdminNotification",
    "AvailabilitySlot",
    "Base",
    "Booking",
    "ClassSession",
    "Enquiry",
    "LedgerEntry",
    "Notification",
    "OptionCategory",
    "OtpRequest",
    "Payment",
    "RegularClass",
    "StudentProfile",
    "Subject",
    "SubjectMapping",
    "Subscription",
    "SubscriptionIntent",
    "TutorProfile",
    "TutorSwitchRequest",
    "User",
    "Wallet",
    "WalletTransaction",
]
