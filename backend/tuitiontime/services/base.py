# backend/tuitiontime/services/base.py
"""
Base Service Pattern for the TuitionTime platform

Provides common functionality for all service classes including:
- Transaction management (re-entrant, with after-commit hooks)
- Logging
- Error handling
- Performance monitoring
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, List, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

_TX_DEPTH_KEY = "service_tx_depth"
_AFTER_COMMIT_KEY = "service_after_commit"
SLOW_OPERATION_SECONDS = 1.0

F = TypeVar("F", bound=Callable[..., Any])


class BaseService:
    """Shared session handling, logging and timing for service classes."""

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Transactions nest: only the outermost block commits, so a service
        can call another service's transactional method and both changes
        land in one atomic unit. Callbacks registered with
        ``after_commit`` run once the outermost commit succeeds.

        Usage:
            with self.transaction():
                # Do multiple operations
                self.db.add(entity)
                # Note: commit is handled automatically
        """
        depth = self.db.info.get(_TX_DEPTH_KEY, 0)
        self.db.info[_TX_DEPTH_KEY] = depth + 1
        outermost = depth == 0
        try:
            yield self.db
            if outermost:
                self.db.commit()
                self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            if not outermost:
                raise
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            self.db.info.pop(_AFTER_COMMIT_KEY, None)
            raise ServiceException(f"Database operation failed: {str(e)}")
        except Exception as e:
            if outermost:
                self.logger.error(f"Error in transaction, rolling back: {str(e)}")
                self.db.rollback()
                self.db.info.pop(_AFTER_COMMIT_KEY, None)
            raise
        finally:
            self.db.info[_TX_DEPTH_KEY] = depth

        if outermost:
            self._run_after_commit()

    def after_commit(self, callback: Callable[[], Any]) -> None:
        """
        Defer a side effect (email, SMS) until the current transaction commits.

        Outside a transaction the callback runs immediately. Failures are
        logged and never propagate to the caller.
        """
        if self.db.info.get(_TX_DEPTH_KEY, 0) == 0:
            self._invoke_hook(callback)
            return
        hooks: List[Callable[[], Any]] = self.db.info.setdefault(_AFTER_COMMIT_KEY, [])
        hooks.append(callback)

    def _run_after_commit(self) -> None:
        hooks = self.db.info.pop(_AFTER_COMMIT_KEY, [])
        for hook in hooks:
            self._invoke_hook(hook)

    def _invoke_hook(self, hook: Callable[[], Any]) -> None:
        try:
            hook()
        except Exception as e:
            self.logger.error(f"After-commit hook failed: {str(e)}", exc_info=True)

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, data):
                # Method implementation

        Args:
            operation_name: Name of the operation for metrics
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                start_time = time.time()
                success = False
                error_type = None

                try:
                    result = func(self, *args, **kwargs)
                    success = True
                    return result
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    elapsed = time.time() - start_time

                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )

                    prometheus_metrics.record_service_operation(
                        service=self.__class__.__name__,
                        operation=operation_name,
                        duration=elapsed,
                        status="success" if success else "error",
                        error_type=error_type,
                    )

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log an operation with context.

        Args:
            operation: Operation name
            **context: Additional context to log
        """
        self.logger.info(
            f"Operation: {operation}", extra={"operation": operation, "context": context}
        )

