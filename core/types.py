"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class ReferenceKind(str, Enum):
    """원장 항목을 생성한 오케스트레이터 구분"""

    TRANSACTION = "transaction"
    CC_PAYMENT = "cc_payment"
    IPO_APPLY = "ipo_apply"
    IPO_REFUND = "ipo_refund"
    LOAN_REPAYMENT = "loan_repayment"
    OPENING_BALANCE = "opening_balance"
    REVERSAL = "reversal"  # 거래 수정/삭제 시 보상 항목


class LoanSourceType(str, Enum):
    """대출 자금 출처"""

    BANK_EXPENSE = "bank_expense"
    CREDIT_CARD = "credit_card"
    GENERIC_EXPENSE = "generic_expense"


class IPOStatus(str, Enum):
    """IPO 청약 상태"""

    APPLIED = "APPLIED"
    ALLOTTED = "ALLOTTED"
    REFUNDED = "REFUNDED"


class OverpaymentPolicy(str, Enum):
    """초과 상환 시 원장 반영 금액

    - REQUESTED: 요청 금액 전체를 원장에 기록
    - APPLIED: 실제 잔액에 적용된 금액만 기록
    """

    REQUESTED = "requested"
    APPLIED = "applied"


class LedgerOrder(str, Enum):
    """원장 목록 정렬 순서"""

    DATE_DESC = "date_desc"
    INSERTION = "insertion"
