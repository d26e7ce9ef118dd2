"""
대시보드 라우트

/api/dashboard - 합계 요약, 기간별 지출, 미상환 요약
"""

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query

from core.engine import LedgerEngine
from web.dependencies import get_engine
from web.models.responses import DashboardResponse

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(engine: LedgerEngine = Depends(get_engine)) -> dict[str, Any]:
    """대시보드 요약 (잠금 없는 스냅샷)"""
    stats = await engine.dashboard.get_stats()
    return stats.to_dict()


@router.get("/expenses")
async def get_expenses(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    engine: LedgerEngine = Depends(get_engine),
) -> dict[str, Any]:
    """기간 내 지출 합계 (기본: 이번 달)"""
    summary = await engine.dashboard.expense_summary(start, end)
    return summary.to_dict()


@router.get("/expenses/today")
async def get_today_expenses(engine: LedgerEngine = Depends(get_engine)) -> dict[str, Any]:
    summary = await engine.dashboard.today_expenses()
    return summary.to_dict()


@router.get("/outstanding")
async def get_outstanding(engine: LedgerEngine = Depends(get_engine)) -> dict[str, Any]:
    """미상환 대출/카드 미결제 요약"""
    return await engine.dashboard.outstanding_summary()
