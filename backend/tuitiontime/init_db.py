# backend/tuitiontime/init_db.py
"""
Create tables and the system ledger accounts.

Run directly (``python -m tuitiontime.init_db``) to initialise a fresh
database; the app also calls ``init_db`` on startup outside production.
"""

import logging

from . import models  # noqa: F401
from .core.constants import SYSTEM_ACCOUNTS
from .database import Base, SessionLocal, engine
from .services.wallet_service import WalletService

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        wallet_service = WalletService(db)
        for name in SYSTEM_ACCOUNTS:
            wallet_service.system_account(name)
        db.commit()
    finally:
        db.close()
    logger.info("Database initialised")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
