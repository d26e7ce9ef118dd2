"""
은행 라우트

/api/banks - 은행 CRUD 및 원장 조회
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from core.engine import LedgerEngine
from core.session import Session
from core.types import LedgerOrder
from web.dependencies import get_engine, require_session
from web.models.requests import BankCreateRequest, BankUpdateRequest

router = APIRouter(prefix="/api/banks", tags=["Banks"])


@router.get("")
async def list_banks(engine: LedgerEngine = Depends(get_engine)) -> list[dict[str, Any]]:
    """은행 목록 (각 잔액은 원장에서 계산)"""
    banks = await engine.banks.list_banks()
    return [b.to_dict() for b in banks]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_bank(
    request: BankCreateRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """은행 생성 (개시 잔액이 있으면 원장 credit 1건)"""
    bank = await engine.banks.create_bank(
        name=request.name,
        account_number=request.account_number,
        opening_balance=request.opening_balance,
        opening_date=request.opening_date,
    )
    return bank.to_dict()


@router.get("/{bank_id}")
async def get_bank(bank_id: str, engine: LedgerEngine = Depends(get_engine)) -> dict[str, Any]:
    """은행 조회"""
    bank = await engine.banks.get_bank(bank_id)
    return bank.to_dict()


@router.put("/{bank_id}")
async def update_bank(
    bank_id: str,
    request: BankUpdateRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """은행 수정 (이름/계좌번호)"""
    bank = await engine.banks.update_bank(
        bank_id, name=request.name, account_number=request.account_number
    )
    return bank.to_dict()


@router.delete("/{bank_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bank(
    bank_id: str,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> None:
    """은행 삭제 (원장 연쇄 삭제, 참조 거래/IPO가 있으면 409)"""
    await engine.banks.delete_bank(bank_id)


@router.get("/{bank_id}/ledger")
async def get_ledger(
    bank_id: str,
    order: LedgerOrder = Query(default=LedgerOrder.DATE_DESC),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    engine: LedgerEngine = Depends(get_engine),
) -> dict[str, Any]:
    """은행 원장 조회"""
    entries = await engine.ledger.list_entries(bank_id, order=order, limit=limit, offset=offset)
    balance = await engine.ledger.compute_balance(bank_id)
    return {
        "bank_id": bank_id,
        "balance": str(balance),
        "entries": [e.to_dict() for e in entries],
        "limit": limit,
        "offset": offset,
    }
