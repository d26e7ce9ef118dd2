"""
IPO 라우트

/api/ipos - 청약(apply), 배정(allot), 환불(refund), 상장가 기록
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from core.engine import LedgerEngine
from core.session import Session
from core.types import IPOStatus
from web.dependencies import get_engine, require_session
from web.models.requests import (
    IPOAllotRequest,
    IPOApplyRequest,
    IPORefundRequest,
    ListingPriceRequest,
)

router = APIRouter(prefix="/api/ipos", tags=["IPO"])


@router.get("")
async def list_ipos(
    status_filter: IPOStatus | None = Query(default=None, alias="status"),
    engine: LedgerEngine = Depends(get_engine),
) -> list[dict[str, Any]]:
    """청약 목록 (청약일 내림차순)"""
    ipos = await engine.ipos.list(status=status_filter)
    return [i.to_dict() for i in ipos]


@router.post("", status_code=status.HTTP_201_CREATED)
async def apply_ipo(
    request: IPOApplyRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """청약 (은행 debit = 보류 금액)"""
    ipo = await engine.ipos.apply(
        company_name=request.company_name,
        application_date=request.application_date,
        amount=request.amount,
        shares_applied=request.shares_applied,
        bank_id=request.bank_id,
        issue_price=request.issue_price,
    )
    return ipo.to_dict()


@router.get("/{ipo_id}")
async def get_ipo(ipo_id: str, engine: LedgerEngine = Depends(get_engine)) -> dict[str, Any]:
    ipo = await engine.ipos.get(ipo_id)
    return ipo.to_dict()


@router.post("/{ipo_id}/allot")
async def allot_ipo(
    ipo_id: str,
    request: IPOAllotRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """배정 (부분 환불액 credit)"""
    ipo = await engine.ipos.allot(
        ipo_id,
        shares_allotted=request.shares_allotted,
        refund_amount=request.refund_amount,
        allotment_date=request.allotment_date,
    )
    return ipo.to_dict()


@router.post("/{ipo_id}/refund")
async def refund_ipo(
    ipo_id: str,
    request: IPORefundRequest | None = None,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """미배정 전액 환불"""
    ipo = await engine.ipos.refund(
        ipo_id, refund_date=request.refund_date if request else None
    )
    return ipo.to_dict()


@router.post("/{ipo_id}/listing-price")
async def set_listing_price(
    ipo_id: str,
    request: ListingPriceRequest,
    engine: LedgerEngine = Depends(get_engine),
    _: Session = Depends(require_session),
) -> dict[str, Any]:
    """상장가 기록 (손익 표시용)"""
    ipo = await engine.ipos.set_listing_price(ipo_id, request.listing_price)
    return ipo.to_dict()
