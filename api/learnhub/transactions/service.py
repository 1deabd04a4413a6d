"""Transaction service layer.

Business logic for:
- Listing transactions
- Recording a purchase, which enrolls the buyer and seeds their progress
- Creating payment intents
"""

from typing import TYPE_CHECKING, Any

import structlog

from learnhub.core.errors import ValidationError
from learnhub.courses.service import CourseService
from learnhub.progress.service import ProgressService
from learnhub.transactions.models import Transaction
from learnhub.transactions.schemas import CreateTransactionRequest


if TYPE_CHECKING:
    from learnhub.transactions.payments import PaymentGateway
    from learnhub.transactions.repository import TransactionRepository

logger = structlog.get_logger(__name__)

# Fallback charge when no positive amount is given (minor units)
DEFAULT_INTENT_AMOUNT = 50


class DuplicateTransactionError(ValidationError):
    """A transaction with this id is already recorded for the user."""

    def __init__(self, message: str = "Transaction already recorded"):
        super().__init__(message, "Transaction id must be unique per user")


class TransactionService:
    """Service for course purchases."""

    def __init__(
        self,
        repository: "TransactionRepository",
        course_service: CourseService,
        progress_service: ProgressService,
        gateway: "PaymentGateway",
    ):
        self.repository = repository
        self.course_service = course_service
        self.progress_service = progress_service
        self.gateway = gateway

    async def list_transactions(self, user_id: str | None = None) -> list[Transaction]:
        return await self.repository.query(user_id)

    async def create_transaction(self, data: CreateTransactionRequest) -> dict[str, Any]:
        """Record a purchase and enroll the buyer.

        Returns:
            Dict with the stored `transaction` and the seeded `courseProgress`.

        Raises:
            CourseNotFoundError: If the course doesn't exist
            DuplicateTransactionError: If the transaction id was already recorded
        """
        course = await self.course_service.get_course(data.course_id)

        transaction = Transaction(
            user_id=data.user_id,
            course_id=course.course_id,
            transaction_id=data.transaction_id,
            payment_provider=data.payment_provider.value,
            amount=data.amount,
        )
        if not await self.repository.add(transaction):
            raise DuplicateTransactionError

        progress = await self.progress_service.start_course(data.user_id, course)
        await self.course_service.enroll(course, data.user_id)

        logger.info(
            "transaction_created",
            transaction_id=transaction.transaction_id,
            user_id=data.user_id,
            course_id=course.course_id,
            amount=transaction.amount,
        )
        return {
            "transaction": transaction.to_document(),
            "courseProgress": progress.to_document(),
        }

    async def create_payment_intent(self, amount: int | None = None) -> dict[str, str]:
        """Create a payment intent; missing or non-positive amounts use the default."""
        if not amount or amount <= 0:
            amount = DEFAULT_INTENT_AMOUNT
        client_secret = await self.gateway.create_payment_intent(amount)
        return {"clientSecret": client_secret}
