"""Database models for purchase transactions.

Transactions are append-only: rows are written once and never updated.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from learnhub.courses.models import ensure_utc_aware, new_id


class PaymentProvider(str, Enum):
    """Supported payment processors."""

    STRIPE = "stripe"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partition key: user_id for "transactions of this user"
TRANSACTIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.transactions (
    user_id TEXT,
    transaction_id TEXT,
    course_id TEXT,
    payment_provider TEXT,
    amount BIGINT,
    date_time TIMESTAMP,
    PRIMARY KEY (user_id, transaction_id)
)
"""

TRANSACTIONS_TABLES_CQL = [
    TRANSACTIONS_TABLE_CQL,
]


class Transaction:
    """A completed course purchase.

    Attributes:
        amount: Charged amount in minor currency units
    """

    def __init__(
        self,
        user_id: str,
        course_id: str,
        transaction_id: str | None = None,
        payment_provider: str = PaymentProvider.STRIPE.value,
        amount: int = 0,
        date_time: datetime | None = None,
    ):
        self.user_id = user_id
        self.course_id = course_id
        self.transaction_id = transaction_id or new_id()
        self.payment_provider = payment_provider
        self.amount = amount
        self.date_time = ensure_utc_aware(date_time) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "Transaction":
        """Create Transaction instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            course_id=row.course_id,
            transaction_id=row.transaction_id,
            payment_provider=row.payment_provider,
            amount=row.amount or 0,
            date_time=row.date_time,
        )

    def to_row(self) -> list[Any]:
        return [
            self.user_id,
            self.transaction_id,
            self.course_id,
            self.payment_provider,
            self.amount,
            self.date_time,
        ]

    def to_document(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "transactionId": self.transaction_id,
            "courseId": self.course_id,
            "paymentProvider": self.payment_provider,
            "amount": self.amount,
            "dateTime": self.date_time.isoformat(),
        }

    def __repr__(self) -> str:
        return f"<Transaction {self.transaction_id} {self.user_id}/{self.course_id}>"
