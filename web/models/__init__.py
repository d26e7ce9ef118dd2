"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    BankCreateRequest,
    BankUpdateRequest,
    CardCreateRequest,
    CardPayRequest,
    CardSpendRequest,
    CardUpdateRequest,
    IPOAllotRequest,
    IPOApplyRequest,
    IPORefundRequest,
    ListingPriceRequest,
    LoanRepayRequest,
    PersonCreateRequest,
    SessionOpenRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from web.models.responses import (
    DashboardResponse,
    ErrorResponse,
    HealthResponse,
    SessionResponse,
)

__all__ = [
    # Requests
    "BankCreateRequest",
    "BankUpdateRequest",
    "CardCreateRequest",
    "CardPayRequest",
    "CardSpendRequest",
    "CardUpdateRequest",
    "IPOAllotRequest",
    "IPOApplyRequest",
    "IPORefundRequest",
    "ListingPriceRequest",
    "LoanRepayRequest",
    "PersonCreateRequest",
    "SessionOpenRequest",
    "TransactionCreateRequest",
    "TransactionUpdateRequest",
    # Responses
    "DashboardResponse",
    "ErrorResponse",
    "HealthResponse",
    "SessionResponse",
]
