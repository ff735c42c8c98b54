"""
Pydantic schemas for account operations.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel

from banking_service.schemas.transaction import Money


class AccountResponse(BaseModel):
    id: uuid.UUID
    user_id: str
    balance: Money
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccountEnvelope(BaseModel):
    message: str
    account: AccountResponse


class AccountListResponse(BaseModel):
    message: str
    accounts: list[AccountResponse]


class BalanceResponse(BaseModel):
    message: str
    balance: Money
    currency: str
