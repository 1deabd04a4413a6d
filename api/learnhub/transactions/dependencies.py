"""FastAPI dependencies for transactions."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from learnhub.transactions.service import TransactionService


_transaction_service_getter: Callable[[], TransactionService] | None = None


def set_transaction_service_getter(getter: Callable[[], TransactionService]) -> None:
    """Set the transaction service getter function."""
    global _transaction_service_getter
    _transaction_service_getter = getter


def get_transaction_service() -> TransactionService:
    """Get TransactionService instance from app state."""
    if _transaction_service_getter is None:
        msg = "TransactionService not configured"
        raise RuntimeError(msg)
    return _transaction_service_getter()


TransactionServiceDep = Annotated[TransactionService, Depends(get_transaction_service)]
