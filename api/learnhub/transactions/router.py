"""Transaction API endpoints.

Provides routes for:
- Listing transactions, optionally by user
- Recording a purchase (enrolls the buyer)
- Creating a payment intent
"""

from typing import Annotated, Any

from fastapi import APIRouter, Query

from learnhub.auth.dependencies import CurrentUser
from learnhub.core.errors import envelope
from learnhub.transactions.dependencies import TransactionServiceDep
from learnhub.transactions.schemas import CreateTransactionRequest, PaymentIntentRequest


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", summary="List transactions")
async def list_transactions(
    transaction_service: TransactionServiceDep,
    _user: CurrentUser,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> dict[str, Any]:
    transactions = await transaction_service.list_transactions(user_id)
    return envelope(
        "Transactions retrieved successfully",
        [t.to_document() for t in transactions],
    )


@router.post("", summary="Create transaction")
async def create_transaction(
    data: CreateTransactionRequest,
    transaction_service: TransactionServiceDep,
    _user: CurrentUser,
) -> dict[str, Any]:
    """Record a purchase, enroll the buyer and seed their course progress."""
    result = await transaction_service.create_transaction(data)
    return envelope("Purchased Course successfully", result)


@router.post("/stripe/payment-intent", summary="Create payment intent")
async def create_stripe_payment_intent(
    data: PaymentIntentRequest,
    transaction_service: TransactionServiceDep,
    _user: CurrentUser,
) -> dict[str, Any]:
    intent = await transaction_service.create_payment_intent(data.amount)
    return envelope("Payment intent created successfully", intent)
