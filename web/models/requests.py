"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
금액 범위(양수 등)는 엔진에서 검증하여 InvalidAmountError로 응답한다.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class SessionOpenRequest(BaseModel):
    """세션 발급 요청"""

    pin: str = Field(..., min_length=1, description="PIN")


# =========================================================================
# 은행
# =========================================================================


class BankCreateRequest(BaseModel):
    """은행 생성 요청"""

    name: str = Field(..., min_length=1, description="은행 이름")
    account_number: str = Field(default="", description="계좌번호")
    opening_balance: Decimal | None = Field(default=None, description="개시 잔액")
    opening_date: date | None = Field(default=None, description="개시일 (기본: 오늘)")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"name": "HDFC", "account_number": "XXXX1234", "opening_balance": "1000"},
            ]
        }
    }


class BankUpdateRequest(BaseModel):
    """은행 수정 요청 (잔액은 수정 불가)"""

    name: str | None = Field(default=None, description="은행 이름")
    account_number: str | None = Field(default=None, description="계좌번호")


# =========================================================================
# 신용카드
# =========================================================================


class CardCreateRequest(BaseModel):
    """카드 생성 요청"""

    name: str = Field(..., min_length=1, description="카드 이름")
    credit_limit: Decimal = Field(..., description="한도")
    due_day: int = Field(..., description="결제일 (1~31)")


class CardUpdateRequest(BaseModel):
    """카드 수정 요청"""

    name: str | None = Field(default=None, description="카드 이름")
    credit_limit: Decimal | None = Field(default=None, description="한도")
    due_day: int | None = Field(default=None, description="결제일 (1~31)")


class CardSpendRequest(BaseModel):
    """카드 사용 요청"""

    spend_date: date | None = Field(default=None, description="사용일 (기본: 오늘)")
    description: str = Field(default="", description="설명")
    amount: Decimal = Field(..., description="사용 금액")
    owner_name: str = Field(default="Me", min_length=1, description="사용 주체")


class CardPayRequest(BaseModel):
    """카드 결제 요청"""

    amount: Decimal = Field(..., description="결제 금액")
    bank_id: str = Field(..., description="출금 은행 ID")
    pay_date: date | None = Field(default=None, description="결제일 (기본: 오늘)")


# =========================================================================
# 대출
# =========================================================================


class LoanRepayRequest(BaseModel):
    """대출 상환 요청"""

    amount: Decimal = Field(..., description="상환 금액")
    bank_id: str | None = Field(default=None, description="입금 은행 ID (기본: 대출 출처 은행)")
    repay_date: date | None = Field(default=None, description="상환일 (기본: 오늘)")


# =========================================================================
# 거래
# =========================================================================


class TransactionCreateRequest(BaseModel):
    """지출 거래 생성 요청"""

    txn_date: date | None = Field(default=None, description="거래일 (기본: 오늘)")
    description: str = Field(default="", description="설명")
    amount: Decimal = Field(..., description="금액")
    expense_owner: str = Field(default="Me", min_length=1, description="지출 주체")
    bank_id: str = Field(..., description="출금 은행 ID")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "txn_date": "2026-03-01",
                    "description": "Dinner",
                    "amount": "300",
                    "expense_owner": "Raj",
                    "bank_id": "bnk-3f2a9c0d1e4b",
                },
            ]
        }
    }


class TransactionUpdateRequest(BaseModel):
    """거래 수정 요청 (지정한 필드만 변경)"""

    txn_date: date | None = Field(default=None, description="거래일")
    description: str | None = Field(default=None, description="설명")
    amount: Decimal | None = Field(default=None, description="금액")
    expense_owner: str | None = Field(default=None, description="지출 주체")
    bank_id: str | None = Field(default=None, description="출금 은행 ID")


# =========================================================================
# IPO
# =========================================================================


class IPOApplyRequest(BaseModel):
    """IPO 청약 요청"""

    company_name: str = Field(..., min_length=1, description="회사명")
    application_date: date | None = Field(default=None, description="청약일 (기본: 오늘)")
    amount: Decimal = Field(..., description="청약 금액 (보류 금액)")
    shares_applied: int = Field(..., description="청약 주식 수")
    bank_id: str = Field(..., description="출금 은행 ID")
    issue_price: Decimal | None = Field(default=None, description="공모가")


class IPOAllotRequest(BaseModel):
    """IPO 배정 요청"""

    shares_allotted: int = Field(..., description="배정 주식 수")
    refund_amount: Decimal = Field(default=Decimal("0"), description="부분 환불액")
    allotment_date: date | None = Field(default=None, description="배정일 (기본: 오늘)")


class IPORefundRequest(BaseModel):
    """IPO 미배정 환불 요청"""

    refund_date: date | None = Field(default=None, description="환불일 (기본: 오늘)")


class ListingPriceRequest(BaseModel):
    """상장가 기록 요청"""

    listing_price: Decimal = Field(..., description="상장가")


# =========================================================================
# 인물
# =========================================================================


class PersonCreateRequest(BaseModel):
    """인물 등록 요청"""

    name: str = Field(..., min_length=1, description="이름")
    is_self: bool = Field(default=False, description="본인 여부")
