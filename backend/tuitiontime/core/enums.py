# backend/tuitiontime/core/enums.py
"""
Enumerations shared by models, schemas and services.

All enums subclass ``str`` so they serialize naturally in JSON responses
and compare equal to their stored column values.
"""

from enum import Enum


class UserRole(str, Enum):
    STUDENT = "student"
    TUTOR = "tutor"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class OtpPurpose(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Track(str, Enum):
    SCHOOL = "school"
    COLLEGE = "college"
    COMPETITIVE = "competitive"


class TeachingMode(str, Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"
    BOTH = "Both"


class KycStatus(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class TutorStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MappingCategory(str, Enum):
    BOARD = "board"
    DISCIPLINE = "discipline"
    EXAM = "exam"
    OTHER = "other"


class SlotType(str, Enum):
    DEMO = "demo"
    REGULAR = "regular"


class BookingType(str, Enum):
    DEMO = "demo"
    REGULAR = "regular"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    """Payment state of a booking or subscription."""

    PENDING = "pending"
    INITIATED = "initiated"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class IntentStatus(str, Enum):
    PENDING = "pending"
    CONSUMED = "consumed"
    CANCELLED = "cancelled"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PlanType(str, Enum):
    HOURLY = "hourly"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class ClassPaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class RegularClassStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Attendance(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    NOT_MARKED = "not-marked"


class GatewayPaymentType(str, Enum):
    SUBSCRIPTION = "subscription"
    PAYOUT = "payout"
    BOOKING = "booking"
    WALLET_TOPUP = "wallet_topup"


class GatewayPaymentStatus(str, Enum):
    CREATED = "created"
    PAID = "paid"
    FAILED = "failed"
    SETTLED = "settled"


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class LedgerEntryKind(str, Enum):
    GATEWAY_RECEIPT = "gateway_receipt"
    WALLET_TOPUP = "wallet_topup"
    SUBSCRIPTION_SETTLEMENT = "subscription_settlement"
    BOOKING_ESCROW = "booking_escrow"
    BOOKING_RELEASE = "booking_release"
    BOOKING_REFUND = "booking_refund"
    CLASS_ESCROW = "class_escrow"
    PAYOUT_SETTLEMENT = "payout_settlement"


class EnquiryStatus(str, Enum):
    OPEN = "open"
    REPLIED = "replied"
    CLOSED = "closed"


class SwitchRequestStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"
