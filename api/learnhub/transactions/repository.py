"""Cassandra accessor for the `transactions` table."""

from typing import TYPE_CHECKING

from learnhub.core.database import execute
from learnhub.transactions.models import Transaction


if TYPE_CHECKING:
    from cassandra.cluster import Session


class TransactionRepository:
    """Append and list transactions."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._list_by_user = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.transactions WHERE user_id = ?"
        )
        self._scan_transactions = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.transactions"
        )
        self._insert_transaction = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.transactions
            (user_id, transaction_id, course_id, payment_provider, amount, date_time)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

    async def query(self, user_id: str | None = None) -> list[Transaction]:
        """Transactions of `user_id`, or every transaction when omitted."""
        if user_id is None:
            rows = await execute(self.session, self._scan_transactions)
        else:
            rows = await execute(self.session, self._list_by_user, [user_id])
        return [Transaction.from_row(row) for row in rows]

    async def add(self, transaction: Transaction) -> bool:
        """Insert a transaction; False if its (user, transaction id) key is taken."""
        rows = await execute(
            self.session, self._insert_transaction, transaction.to_row()
        )
        return rows.was_applied
