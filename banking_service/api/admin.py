"""
Admin API endpoints.

Read-only views across all users. The caller must carry the
is_admin claim.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from banking_service.api.auth import Principal, require_admin
from banking_service.api.errors import ApiError
from banking_service.api.pagination import PageParams, page_params
from banking_service.config import Settings, get_settings
from banking_service.exceptions import LedgerError, AccountNotFound
from banking_service.models.base import get_db
from banking_service.schemas.account import AccountListResponse, AccountResponse
from banking_service.schemas.transaction import (
    Pagination,
    TransactionListResponse,
    TransactionResponse,
)
from banking_service.services.ledger_service import LedgerService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/accounts", response_model=AccountListResponse)
def list_accounts(
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    service = LedgerService(db, settings)
    try:
        accounts = service.list_accounts()
    except LedgerError as e:
        raise ApiError(
            500, "FETCH_ACCOUNTS_FAILED", "Failed to fetch accounts", str(e)
        )

    return AccountListResponse(
        message="Accounts retrieved successfully",
        accounts=[AccountResponse.model_validate(a) for a in accounts],
    )


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    page: PageParams = Depends(page_params),
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """All transactions, most recent first. Default limit 100."""
    service = LedgerService(db, settings)
    limit, offset = service.page_bounds(
        page.limit, page.offset, settings.ADMIN_TRANSACTIONS_DEFAULT_LIMIT
    )
    try:
        transactions = service.list_all_transactions(limit, offset)
    except LedgerError as e:
        raise ApiError(
            500,
            "FETCH_TRANSACTIONS_FAILED",
            "Failed to fetch transactions",
            str(e),
        )

    return _transaction_page(transactions, limit, offset)


@router.get(
    "/accounts/{account_id}/transactions",
    response_model=TransactionListResponse,
)
def list_account_transactions(
    account_id: uuid.UUID,
    page: PageParams = Depends(page_params),
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    service = LedgerService(db, settings)
    limit, offset = service.page_bounds(
        page.limit, page.offset, settings.ADMIN_TRANSACTIONS_DEFAULT_LIMIT
    )
    try:
        transactions = service.list_account_transactions(
            account_id, limit, offset
        )
    except AccountNotFound as e:
        raise ApiError(404, "ACCOUNT_NOT_FOUND", "Account not found", str(e))
    except LedgerError as e:
        raise ApiError(
            500,
            "FETCH_TRANSACTIONS_FAILED",
            "Failed to fetch transactions",
            str(e),
        )

    return _transaction_page(transactions, limit, offset)


def _transaction_page(transactions, limit: int, offset: int):
    return TransactionListResponse(
        message="Transactions retrieved successfully",
        transactions=[
            TransactionResponse.model_validate(t) for t in transactions
        ],
        pagination=Pagination(
            limit=limit, offset=offset, count=len(transactions)
        ),
    )
