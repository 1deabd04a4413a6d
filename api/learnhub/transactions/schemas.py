"""Pydantic schemas for transactions."""

from pydantic import BaseModel, ConfigDict, Field

from learnhub.transactions.models import PaymentProvider


class CreateTransactionRequest(BaseModel):
    """Record of a completed payment for a course."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    course_id: str = Field(..., alias="courseId", min_length=1)
    transaction_id: str | None = Field(None, alias="transactionId")
    amount: int = Field(0, ge=0)
    payment_provider: PaymentProvider = Field(
        PaymentProvider.STRIPE, alias="paymentProvider"
    )


class PaymentIntentRequest(BaseModel):
    amount: int | None = None
