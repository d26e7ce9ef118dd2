"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
"""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    database: str = Field(..., description="DB 연결 상태")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class SessionResponse(BaseModel):
    """세션 발급 응답"""

    session_id: str = Field(..., description="세션 ID (X-Session-Id 헤더로 전달)")
    opened_at: datetime = Field(..., description="발급 시각 (UTC)")
    expires_at: datetime = Field(..., description="만료 시각 (UTC)")


class ErrorResponse(BaseModel):
    """오류 응답"""

    error: str = Field(..., description="오류 종류")
    detail: str = Field(..., description="오류 메시지")


class DashboardResponse(BaseModel):
    """대시보드 요약 응답"""

    total_balance: str = Field(..., description="은행 잔액 합계")
    total_outstanding_loans: str = Field(..., description="미상환 대출 합계")
    total_credit_outstanding: str = Field(..., description="카드 미결제액 합계")
    pending_ipos: int = Field(..., description="배정 대기 IPO 수")
    recent_transactions: list[dict] = Field(default_factory=list, description="최근 거래")
