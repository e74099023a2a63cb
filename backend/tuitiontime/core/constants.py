# backend/tuitiontime/core/constants.py
"""Application-wide constants."""

BRAND_NAME = "TuitionTime"

API_V1_PREFIX = "/api/v1"

PHONE_PATTERN = r"^\d{10}$"
TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

MAX_RATING = 5
MIN_RATING = 1

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
WALLET_TRANSACTIONS_PAGE_SIZE = 10

RECOMMENDATION_LIMIT = 15
RECENT_TUTORS_LIMIT = 10

MIN_ORDER_AMOUNT_PAISE = 100

# System ledger accounts
GATEWAY_CLEARING_ACCOUNT = "gateway_clearing"
PLATFORM_ESCROW_ACCOUNT = "platform_escrow"
PLATFORM_REVENUE_ACCOUNT = "platform_revenue"
SYSTEM_ACCOUNTS = (
    GATEWAY_CLEARING_ACCOUNT,
    PLATFORM_ESCROW_ACCOUNT,
    PLATFORM_REVENUE_ACCOUNT,
)
