"""
대출 라우트

/api/loans - 대출 목록, 상환(repay), 종결(close)
대출 생성은 거래/카드 사용의 부수 효과로만 일어난다.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from core.engine import LedgerEngine
from core.session import Session
from web.dependencies import get_engine, require_session
from web.models.requests import LoanRepayRequest

router = APIRouter(prefix="/api/loans", tags=["Loans"])


@router.get("")
async def list_loans(
    paid: bool | None = Query(default=None),
    borrower: str | None = Query(default=None),
    engine: LedgerEngine = Depends(get_engine),
) -> list[dict[str, Any]]:
    """대출 목록 (최근 생성 우선)"""
    loans = await engine.loans.list_loans(paid=paid, borrower=borrower)
    return [loan.to_dict() for loan in loans]


@router.get("/{loan_id}")
async def get_loan(loan_id: str, engine: LedgerEngine = Depends(get_engine)) -> dict[str, Any]:
    loan = await engine.loans.get_loan(loan_id)
    return loan.to_dict()


@router.post("/{loan_id}/repay")
async def repay_loan(
    loan_id: str,
    request: LoanRepayRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """대출 상환 (은행 원장 credit)"""
    result = await engine.loans.repay(
        loan_id,
        amount=request.amount,
        bank_id=request.bank_id,
        repay_date=request.repay_date,
    )
    return {
        "loan": result.loan.to_dict(),
        "entry": result.entry.to_dict(),
        "applied": str(result.applied),
    }


@router.post("/{loan_id}/close")
async def close_loan(
    loan_id: str,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """대출 종결 (write-off, 원장 항목 없음)"""
    loan = await engine.loans.close(loan_id)
    return loan.to_dict()
