# backend/tuitiontime/models/wallet.py
"""
Double-entry wallet ledger.

``Wallet`` rows are accounts: one per user plus the system accounts
(gateway clearing, platform escrow, platform revenue). Every movement of
money is a ``LedgerEntry`` whose ``WalletTransaction`` postings sum to
zero, with credits positive and debits negative. User wallet balances are
never negative; the gateway clearing account mirrors money received from
outside the platform and is the only account expected to run negative.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import TimestampMixin


class Wallet(TimestampMixin, Base):
    __tablename__ = "wallets"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), unique=True, nullable=True)
    system_account = Column(String(32), unique=True, nullable=True)
    role = Column(String(20), nullable=False)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="INR")

    __table_args__ = (
        CheckConstraint(
            "(user_id IS NOT NULL AND system_account IS NULL)"
            " OR (user_id IS NULL AND system_account IS NOT NULL)",
            name="ck_wallets_owner",
        ),
    )

    @property
    def is_system(self) -> bool:
        return self.system_account is not None


class LedgerEntry(TimestampMixin, Base):
    __tablename__ = "ledger_entries"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    kind = Column(String(32), nullable=False, index=True)
    idempotency_key = Column(String(128), nullable=False, unique=True)
    description = Column(String(255), nullable=True)
    reference_type = Column(String(32), nullable=True)
    reference_id = Column(String(64), nullable=True, index=True)

    postings = relationship(
        "WalletTransaction", back_populates="entry", order_by="WalletTransaction.created_at"
    )


class WalletTransaction(TimestampMixin, Base):
    """One posting of a ledger entry against a single wallet."""

    __tablename__ = "wallet_transactions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    entry_id = Column(String(26), ForeignKey("ledger_entries.id"), nullable=False, index=True)
    wallet_id = Column(String(26), ForeignKey("wallets.id"), nullable=False, index=True)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    transaction_type = Column(String(10), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    balance_after = Column(Numeric(14, 2), nullable=False)
    description = Column(String(255), nullable=True)
    reference_type = Column(String(32), nullable=True)
    reference_id = Column(String(64), nullable=True)
    status = Column(String(12), nullable=False, default="completed")

    entry = relationship("LedgerEntry", back_populates="postings")
    wallet = relationship("Wallet")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_wallet_transactions_amount"),
        CheckConstraint(
            "transaction_type IN ('credit', 'debit')", name="ck_wallet_transactions_type"
        ),
    )
