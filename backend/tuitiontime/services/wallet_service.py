# backend/tuitiontime/services/wallet_service.py
"""
Wallet Service for the TuitionTime platform

Double-entry ledger over user wallets and the platform's system accounts.

Every movement of money is posted as one ``LedgerEntry`` whose postings
sum to zero. Entries carry a unique idempotency key: posting the same key
twice returns the entry recorded the first time without touching any
balance, which makes gateway callbacks and client retries safe to replay.

Only the gateway clearing account may run negative. It mirrors money that
arrived from outside the platform, so the sum of all balances is always
zero.
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    GATEWAY_CLEARING_ACCOUNT,
    PLATFORM_ESCROW_ACCOUNT,
    PLATFORM_REVENUE_ACCOUNT,
    WALLET_TRANSACTIONS_PAGE_SIZE,
)
from ..core.enums import (
    GatewayPaymentStatus,
    GatewayPaymentType,
    LedgerEntryKind,
    TransactionType,
)
from ..core.exceptions import (
    InsufficientBalanceException,
    NotFoundException,
    PaymentVerificationException,
    UnbalancedLedgerEntryException,
    ValidationException,
)
from ..core.money import ZERO, to_money
from ..core.timezone_utils import utcnow
from ..integrations.razorpay_client import RazorpayClient
from ..models.payment import Payment
from ..models.user import User
from ..models.wallet import LedgerEntry, Wallet, WalletTransaction
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .payment_gateway import build_receipt, create_gateway_order, verify_checkout_signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Posting:
    """One leg of a ledger entry. Positive amounts credit, negative debit."""

    wallet: Wallet
    amount: Decimal
    description: Optional[str] = None


class WalletService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.wallet_repository = RepositoryFactory.create_wallet_repository(db)
        self.entry_repository = RepositoryFactory.create_ledger_entry_repository(db)
        self.transaction_repository = RepositoryFactory.create_wallet_transaction_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def ensure_wallet(self, user: User) -> Wallet:
        wallet = self.wallet_repository.get_by_user_id(user.id)
        if wallet is not None:
            return wallet
        with self.transaction():
            wallet = self.wallet_repository.create(
                user_id=user.id, role=user.role, balance=ZERO, currency=settings.currency
            )
        self.logger.info(f"Created wallet {wallet.id} for user {user.id}")
        return wallet

    def system_account(self, name: str) -> Wallet:
        wallet = self.wallet_repository.get_system_account(name)
        if wallet is not None:
            return wallet
        with self.transaction():
            wallet = self.wallet_repository.create(
                system_account=name, role="system", balance=ZERO, currency=settings.currency
            )
        return wallet

    def clearing_account(self) -> Wallet:
        return self.system_account(GATEWAY_CLEARING_ACCOUNT)

    def escrow_account(self) -> Wallet:
        return self.system_account(PLATFORM_ESCROW_ACCOUNT)

    def revenue_account(self) -> Wallet:
        return self.system_account(PLATFORM_REVENUE_ACCOUNT)

    # ------------------------------------------------------------------
    # Posting
    # ------------------------------------------------------------------

    @BaseService.measure_operation("post_ledger_entry")
    def post_entry(
        self,
        kind: LedgerEntryKind,
        idempotency_key: str,
        postings: Sequence[Posting],
        *,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        """
        Post a balanced journal entry.

        Raises:
            ValidationException: no postings or a zero-amount posting
            UnbalancedLedgerEntryException: postings do not sum to zero
            InsufficientBalanceException: a guarded wallet cannot cover its debit
        """
        legs = [(posting, to_money(posting.amount)) for posting in postings]
        if len(legs) < 2:
            raise ValidationException("A ledger entry needs at least two postings")
        if any(amount == ZERO for _, amount in legs):
            raise ValidationException("Ledger postings must have a non-zero amount")
        total = sum((amount for _, amount in legs), ZERO)
        if total != ZERO:
            raise UnbalancedLedgerEntryException(
                f"Ledger entry {idempotency_key} is unbalanced by {total}",
                details={"imbalance": str(total)},
            )

        existing = self.entry_repository.get_by_key(idempotency_key)
        if existing is not None:
            self.logger.info(f"Ledger entry {idempotency_key} already posted, replaying")
            prometheus_metrics.record_ledger_entry(kind.value, replayed=True)
            return existing

        with self.transaction():
            entry = self.entry_repository.create(
                kind=kind.value,
                idempotency_key=idempotency_key,
                description=description,
                reference_type=reference_type,
                reference_id=reference_id,
            )
            for posting, amount in legs:
                self._apply_posting(entry, posting, amount, reference_type, reference_id)

        prometheus_metrics.record_ledger_entry(kind.value, replayed=False)
        self.log_operation(
            "ledger_entry_posted", kind=kind.value, idempotency_key=idempotency_key
        )
        return entry

    def _apply_posting(
        self,
        entry: LedgerEntry,
        posting: Posting,
        amount: Decimal,
        reference_type: Optional[str],
        reference_id: Optional[str],
    ) -> WalletTransaction:
        wallet = posting.wallet
        allow_negative = wallet.system_account == GATEWAY_CLEARING_ACCOUNT
        balance_after = self.wallet_repository.apply_delta(
            wallet, amount, allow_negative=allow_negative
        )
        if balance_after is None:
            raise InsufficientBalanceException(wallet.id, str(-amount))
        return self.transaction_repository.create(
            entry_id=entry.id,
            wallet_id=wallet.id,
            user_id=wallet.user_id,
            transaction_type=(
                TransactionType.CREDIT.value if amount > 0 else TransactionType.DEBIT.value
            ),
            amount=abs(amount),
            balance_after=balance_after,
            description=posting.description or entry.description,
            reference_type=reference_type,
            reference_id=reference_id,
        )

    # ------------------------------------------------------------------
    # Common movements
    # ------------------------------------------------------------------

    def receive_from_gateway(
        self,
        user: User,
        amount: Decimal,
        idempotency_key: str,
        *,
        reference_type: str,
        reference_id: str,
        description: str,
    ) -> LedgerEntry:
        """Money captured by the gateway lands in the payer's wallet."""
        amount = to_money(amount)
        return self.post_entry(
            LedgerEntryKind.GATEWAY_RECEIPT,
            idempotency_key,
            [
                Posting(self.clearing_account(), -amount),
                Posting(self.ensure_wallet(user), amount),
            ],
            reference_type=reference_type,
            reference_id=reference_id,
            description=description,
        )

    def distribute(
        self,
        kind: LedgerEntryKind,
        idempotency_key: str,
        source: Wallet,
        splits: Sequence[Tuple[Wallet, Decimal]],
        *,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        """Debit ``source`` by the sum of ``splits`` and credit each target."""
        legs = [(wallet, to_money(amount)) for wallet, amount in splits if to_money(amount) > ZERO]
        total = sum((amount for _, amount in legs), ZERO)
        postings = [Posting(source, -total)] + [Posting(wallet, amount) for wallet, amount in legs]
        return self.post_entry(
            kind,
            idempotency_key,
            postings,
            reference_type=reference_type,
            reference_id=reference_id,
            description=description,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_balance(self, user: User) -> Wallet:
        return self.ensure_wallet(user)

    def list_transactions(
        self, user: User, page: int = 1, limit: int = WALLET_TRANSACTIONS_PAGE_SIZE
    ) -> Tuple[Wallet, List[WalletTransaction], int]:
        wallet = self.ensure_wallet(user)
        items, total = self.transaction_repository.page_for_wallet(
            wallet.id, page=page, per_page=limit
        )
        return wallet, items, total

    def get_entry(self, idempotency_key: str) -> Optional[LedgerEntry]:
        return self.entry_repository.get_by_key(idempotency_key)

    def check_invariant(self) -> Dict[str, Any]:
        """The ledger is consistent when all balances sum to zero."""
        total = to_money(self.wallet_repository.total_balance())
        balanced = total == ZERO
        if not balanced:
            self.logger.error(f"Ledger invariant violated: balances sum to {total}")
        return {"total": total, "balanced": balanced}

    # ------------------------------------------------------------------
    # Top-ups
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_topup_order")
    def create_topup_order(
        self, user: User, amount: Decimal, gateway: RazorpayClient
    ) -> Tuple[Payment, Dict[str, Any]]:
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationException("Top-up amount must be greater than zero")

        order = create_gateway_order(
            gateway,
            amount,
            build_receipt("TOPUP", user.id),
            notes={"user_id": user.id, "purpose": GatewayPaymentType.WALLET_TOPUP.value},
        )
        with self.transaction():
            payment = self.payment_repository.create(
                payment_type=GatewayPaymentType.WALLET_TOPUP.value,
                user_id=user.id,
                gateway_order_id=order["id"],
                amount=amount,
                currency=settings.currency,
                status=GatewayPaymentStatus.CREATED.value,
            )
        return payment, order

    @BaseService.measure_operation("verify_topup")
    def verify_topup(
        self,
        user: User,
        order_id: str,
        payment_id: str,
        signature: str,
        gateway: RazorpayClient,
    ) -> Wallet:
        payment = self.payment_repository.get_by_order_id(order_id)
        if (
            payment is None
            or payment.payment_type != GatewayPaymentType.WALLET_TOPUP.value
            or payment.user_id != user.id
        ):
            raise NotFoundException("Top-up order not found")

        verify_checkout_signature(gateway, order_id, payment_id, signature)

        if payment.status == GatewayPaymentStatus.PAID.value:
            if payment.gateway_payment_id != payment_id:
                raise PaymentVerificationException("Order was already paid by another payment")
            return self.ensure_wallet(user)

        with self.transaction():
            payment.status = GatewayPaymentStatus.PAID.value
            payment.gateway_payment_id = payment_id
            payment.paid_at = utcnow()
            self.post_entry(
                LedgerEntryKind.WALLET_TOPUP,
                f"topup:{order_id}",
                [
                    Posting(self.clearing_account(), -to_money(payment.amount)),
                    Posting(self.ensure_wallet(user), to_money(payment.amount)),
                ],
                reference_type="payment",
                reference_id=payment.id,
                description="Wallet top-up",
            )
        self.logger.info(f"Wallet top-up {order_id} credited {payment.amount} to {user.id}")
        return self.ensure_wallet(user)
