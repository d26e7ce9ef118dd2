"""
거래 라우트

/api/transactions - 지출 거래 생성/조회/수정/삭제
"""

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query, status

from core.engine import LedgerEngine
from core.session import Session
from web.dependencies import get_engine, require_session
from web.models.requests import TransactionCreateRequest, TransactionUpdateRequest

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("")
async def list_transactions(
    bank_id: str | None = Query(default=None),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    owner: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    engine: LedgerEngine = Depends(get_engine),
) -> list[dict[str, Any]]:
    """거래 목록 (날짜 내림차순)"""
    txns = await engine.transactions.list(
        bank_id=bank_id,
        start=start,
        end=end,
        owner_name=owner,
        limit=limit,
        offset=offset,
    )
    return [t.to_dict() for t in txns]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    request: TransactionCreateRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """지출 거래 생성 (타인 지출이면 대출 생성)"""
    txn = await engine.transactions.create(
        txn_date=request.txn_date,
        description=request.description,
        amount=request.amount,
        owner_name=request.expense_owner,
        bank_id=request.bank_id,
    )
    return txn.to_dict()


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    engine: LedgerEngine = Depends(get_engine),
) -> dict[str, Any]:
    txn = await engine.transactions.get(transaction_id)
    return txn.to_dict()


@router.put("/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    request: TransactionUpdateRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """거래 수정 (금액/은행 변경 시 보상 항목 기록)"""
    txn = await engine.transactions.update(
        transaction_id,
        txn_date=request.txn_date,
        description=request.description,
        amount=request.amount,
        owner_name=request.expense_owner,
        bank_id=request.bank_id,
    )
    return txn.to_dict()


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> None:
    """거래 삭제 (reversal credit 기록, 손대지 않은 대출 삭제)"""
    await engine.transactions.delete(transaction_id)
