"""
Pydantic schemas for transaction operations.

These define the API contract. Money is Decimal end to end and
is only turned into a JSON number (rounded to cents) when a
response is serialized.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer

from banking_service.models.enums import TransactionType


Money = Annotated[
    Decimal,
    PlainSerializer(
        lambda v: float(round(v, 2)), return_type=float, when_used="json"
    ),
]


# --- Request Schemas ---

class TransactionRequest(BaseModel):
    """Body of a deposit or withdrawal."""
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    description: str = Field(max_length=255)


# --- Response Schemas ---

class TransactionResponse(BaseModel):
    id: uuid.UUID
    account_id: uuid.UUID
    user_id: str
    type: TransactionType
    amount: Money
    balance_before: Money
    balance_after: Money
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TransactionEnvelope(BaseModel):
    message: str
    transaction: TransactionResponse


class Pagination(BaseModel):
    limit: int
    offset: int
    count: int
    total: int | None = None


class TransactionListResponse(BaseModel):
    message: str
    transactions: list[TransactionResponse]
    pagination: Pagination
