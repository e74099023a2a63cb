# backend/tuitiontime/repositories/wallet_repository.py
"""
Wallet ledger data access.

Balance changes are issued as single UPDATE statements so concurrent
postings never lose an update. Debits of user wallets carry the
``balance >= amount`` guard in the WHERE clause; a zero row count means
the wallet could not cover the debit.
"""

from decimal import Decimal
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.wallet import LedgerEntry, Wallet, WalletTransaction
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class WalletRepository(BaseRepository[Wallet]):
    def __init__(self, db: Session):
        super().__init__(db, Wallet)

    def get_by_user_id(self, user_id: str) -> Optional[Wallet]:
        return self.find_one_by(user_id=user_id)

    def get_system_account(self, name: str) -> Optional[Wallet]:
        return self.find_one_by(system_account=name)

    def apply_delta(self, wallet: Wallet, delta: Decimal, *, allow_negative: bool) -> Optional[Decimal]:
        """
        Add ``delta`` to a wallet balance and return the new balance.

        Returns None when the guard rejects a debit.
        """
        try:
            statement = update(Wallet).where(Wallet.id == wallet.id)
            if delta < 0 and not allow_negative:
                statement = statement.where(Wallet.balance >= -delta)
            result = self.db.execute(
                statement.values(balance=Wallet.balance + delta).execution_options(
                    synchronize_session=False
                )
            )
            if result.rowcount != 1:
                return None
            # the in-memory balance is stale after a bulk UPDATE
            self.db.expire(wallet, ["balance"])
            balance = self.db.execute(select(Wallet.balance).where(Wallet.id == wallet.id)).scalar_one()
            return Decimal(balance)
        except SQLAlchemyError as e:
            self.logger.error(f"Error applying balance change to wallet {wallet.id}: {str(e)}")
            raise RepositoryException(f"Failed to update wallet balance: {str(e)}")

    def total_balance(self) -> Decimal:
        total = self.db.query(func.coalesce(func.sum(Wallet.balance), 0)).scalar()
        return Decimal(str(total))


class LedgerEntryRepository(BaseRepository[LedgerEntry]):
    def __init__(self, db: Session):
        super().__init__(db, LedgerEntry)

    def get_by_key(self, idempotency_key: str) -> Optional[LedgerEntry]:
        return self.find_one_by(idempotency_key=idempotency_key)

    def postings_for(self, entry_id: str) -> List[WalletTransaction]:
        query = (
            self.db.query(WalletTransaction)
            .filter(WalletTransaction.entry_id == entry_id)
            .order_by(WalletTransaction.created_at.asc(), WalletTransaction.id.asc())
        )
        return self._execute(query)


class WalletTransactionRepository(BaseRepository[WalletTransaction]):
    def __init__(self, db: Session):
        super().__init__(db, WalletTransaction)

    def page_for_wallet(
        self, wallet_id: str, *, page: int, per_page: int
    ) -> Tuple[List[WalletTransaction], int]:
        query = (
            self.db.query(WalletTransaction)
            .filter(WalletTransaction.wallet_id == wallet_id)
            .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
        )
        return self._paginate(query, page, per_page)
