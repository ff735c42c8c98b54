"""
Transaction API endpoints.

The API layer is thin. It authenticates the caller, hands the
request to the LedgerService, and maps ledger exceptions to
status codes. The service commits; endpoints never do.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from banking_service.api.auth import Principal, get_principal
from banking_service.api.errors import ApiError
from banking_service.config import Settings, get_settings
from banking_service.exceptions import (
    LedgerError,
    InvalidAmount,
    AccountNotFound,
    InsufficientFunds,
    TransactionNotFound,
)
from banking_service.models.base import get_db
from banking_service.schemas.transaction import (
    TransactionRequest,
    TransactionResponse,
    TransactionEnvelope,
)
from banking_service.services.ledger_service import LedgerService

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("/deposit", response_model=TransactionEnvelope, status_code=201)
def deposit(
    request: TransactionRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Deposit money, opening the caller's account on first use."""
    service = LedgerService(db, settings)
    try:
        txn = service.deposit(
            principal.user_id, request.amount, request.description
        )
    except InvalidAmount as e:
        raise ApiError(400, "VALIDATION_ERROR", "Invalid request data", str(e))
    except LedgerError as e:
        raise ApiError(
            500, "DEPOSIT_FAILED", "Failed to process deposit", str(e)
        )

    return TransactionEnvelope(
        message="Deposit processed successfully",
        transaction=TransactionResponse.model_validate(txn),
    )


@router.post("/withdraw", response_model=TransactionEnvelope, status_code=201)
def withdraw(
    request: TransactionRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Withdraw money from the caller's account."""
    service = LedgerService(db, settings)
    try:
        txn = service.withdraw(
            principal.user_id, request.amount, request.description
        )
    except InvalidAmount as e:
        raise ApiError(400, "VALIDATION_ERROR", "Invalid request data", str(e))
    except InsufficientFunds as e:
        raise ApiError(
            400,
            "INSUFFICIENT_FUNDS",
            "Insufficient funds for withdrawal",
            {
                "requested_amount": float(e.requested),
                "current_balance": float(e.available),
            },
        )
    except AccountNotFound as e:
        raise ApiError(404, "ACCOUNT_NOT_FOUND", "Account not found", str(e))
    except LedgerError as e:
        raise ApiError(
            500, "WITHDRAWAL_FAILED", "Failed to process withdrawal", str(e)
        )

    return TransactionEnvelope(
        message="Withdrawal processed successfully",
        transaction=TransactionResponse.model_validate(txn),
    )


@router.get("/{transaction_id}", response_model=TransactionEnvelope)
def get_transaction(
    transaction_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Get one of the caller's transactions.

    The ledger lookup is not ownership-aware, so the owner check
    happens here.
    """
    try:
        txn_id = uuid.UUID(transaction_id)
    except ValueError:
        raise ApiError(
            400, "INVALID_TRANSACTION_ID", "Invalid transaction ID format"
        )

    service = LedgerService(db, settings)
    try:
        txn = service.get_transaction(txn_id)
    except TransactionNotFound as e:
        raise ApiError(
            404, "TRANSACTION_NOT_FOUND", "Transaction not found", str(e)
        )
    except LedgerError as e:
        raise ApiError(
            500, "FETCH_TRANSACTION_FAILED", "Failed to fetch transaction",
            str(e),
        )

    if txn.user_id != principal.user_id:
        raise ApiError(
            403, "ACCESS_DENIED", "Access denied to this transaction"
        )

    return TransactionEnvelope(
        message="Transaction retrieved successfully",
        transaction=TransactionResponse.model_validate(txn),
    )
