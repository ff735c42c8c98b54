"""
Account API endpoints.

Every route acts on the caller's own account; the identity
comes from the bearer token, never from the URL.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from banking_service.api.auth import Principal, get_principal
from banking_service.api.errors import ApiError
from banking_service.api.pagination import PageParams, page_params
from banking_service.config import Settings, get_settings
from banking_service.exceptions import LedgerError, AccountNotFound
from banking_service.models.base import get_db
from banking_service.schemas.account import (
    AccountEnvelope,
    AccountResponse,
    BalanceResponse,
)
from banking_service.schemas.transaction import (
    Pagination,
    TransactionListResponse,
    TransactionResponse,
)
from banking_service.services.ledger_service import LedgerService

router = APIRouter(prefix="/account", tags=["Account"])


@router.get("", response_model=AccountEnvelope)
def get_account(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Get the caller's account."""
    service = LedgerService(db, settings)
    try:
        account = service.get_account(principal.user_id)
    except AccountNotFound as e:
        raise ApiError(404, "ACCOUNT_NOT_FOUND", "Account not found", str(e))
    except LedgerError as e:
        raise ApiError(
            500, "FETCH_ACCOUNT_FAILED", "Failed to fetch account", str(e)
        )

    return AccountEnvelope(
        message="Account retrieved successfully",
        account=AccountResponse.model_validate(account),
    )


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Get the caller's current balance."""
    service = LedgerService(db, settings)
    try:
        balance = service.get_balance(principal.user_id)
    except AccountNotFound as e:
        raise ApiError(404, "ACCOUNT_NOT_FOUND", "Account not found", str(e))
    except LedgerError as e:
        raise ApiError(
            500, "FETCH_BALANCE_FAILED", "Failed to fetch balance", str(e)
        )

    return BalanceResponse(
        message="Balance retrieved successfully",
        balance=balance,
        currency=settings.CURRENCY,
    )


@router.get("/transactions", response_model=TransactionListResponse)
def get_transactions(
    page: PageParams = Depends(page_params),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Get the caller's transaction history, most recent first.

    A missing or non-positive limit means 50; limits above 200
    are capped. A negative offset means 0.
    """
    service = LedgerService(db, settings)
    limit, offset = service.page_bounds(page.limit, page.offset)
    try:
        transactions = service.list_transactions(
            principal.user_id, limit, offset
        )
        total = service.count_transactions(principal.user_id)
    except LedgerError as e:
        raise ApiError(
            500,
            "FETCH_TRANSACTIONS_FAILED",
            "Failed to fetch transactions",
            str(e),
        )

    return TransactionListResponse(
        message="Transactions retrieved successfully",
        transactions=[
            TransactionResponse.model_validate(t) for t in transactions
        ],
        pagination=Pagination(
            limit=limit,
            offset=offset,
            count=len(transactions),
            total=total,
        ),
    )
