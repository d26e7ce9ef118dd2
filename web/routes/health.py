"""
헬스 체크 엔드포인트

GET /health - 서버 상태 확인
"""

from fastapi import APIRouter, Request

from core.utils.dates import now_utc
from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: status, database, timestamp 정보
    """
    engine = getattr(request.app.state, "engine", None)
    connected = (
        engine is not None
        and engine.db.is_connected
        and await engine.db.table_exists("bank_ledger")
    )

    return HealthResponse(
        status="ok" if connected else "degraded",
        database="connected" if connected else "disconnected",
        timestamp=now_utc(),
    )
