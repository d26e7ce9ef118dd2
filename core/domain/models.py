"""
도메인 모델

은행/카드/대출/거래/IPO/인물 레코드.
DB 행(dict)에서 생성하고 API 응답용 dict로 변환한다.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from core.types import IPOStatus, LoanSourceType
from core.utils.money import ZERO, from_db


def _opt_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _opt_money(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


def _opt_str(value: Any) -> str | None:
    return str(value) if value is not None else None


@dataclass
class Bank:
    """은행 계좌

    balance는 저장 필드가 아니라 조회 시 원장에서 계산한 값.
    """

    bank_id: str
    name: str
    account_number: str
    balance: Decimal = ZERO
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any], balance: Decimal = ZERO) -> "Bank":
        return cls(
            bank_id=row["bank_id"],
            name=row["name"],
            account_number=row["account_number"],
            balance=balance,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "bank_id": self.bank_id,
            "name": self.name,
            "account_number": self.account_number,
            "balance": str(self.balance),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class CreditCard:
    """신용카드

    outstanding은 직접 갱신되는 누적값 (원장 없음).
    """

    card_id: str
    name: str
    credit_limit: Decimal
    outstanding: Decimal
    due_day: int
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def available_credit(self) -> Decimal:
        """사용 가능 한도 = 한도 - 미결제액 (저장하지 않음)"""
        return self.credit_limit - self.outstanding

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CreditCard":
        return cls(
            card_id=row["card_id"],
            name=row["name"],
            credit_limit=from_db(row["credit_limit"]),
            outstanding=from_db(row["outstanding"]),
            due_day=int(row["due_day"]),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "name": self.name,
            "credit_limit": str(self.credit_limit),
            "outstanding": str(self.outstanding),
            "available_credit": str(self.available_credit),
            "due_day": self.due_day,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Loan:
    """가족 간 대출

    지출 주체가 본인이 아닐 때 자동 생성.
    source_ref는 자금이 나간 은행/카드 ID (상환 계좌 기본값).
    """

    loan_id: str
    borrower_name: str
    principal_amount: Decimal
    outstanding_amount: Decimal
    is_paid: bool
    source_type: LoanSourceType
    source_ref: str | None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_untouched(self) -> bool:
        """상환/종결 이력이 없는지 여부"""
        return not self.is_paid and self.outstanding_amount == self.principal_amount

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Loan":
        return cls(
            loan_id=row["loan_id"],
            borrower_name=row["borrower_name"],
            principal_amount=from_db(row["principal_amount"]),
            outstanding_amount=from_db(row["outstanding_amount"]),
            is_paid=bool(row["is_paid"]),
            source_type=LoanSourceType(row["source_type"]),
            source_ref=row.get("source_ref"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "loan_id": self.loan_id,
            "borrower_name": self.borrower_name,
            "principal_amount": str(self.principal_amount),
            "outstanding_amount": str(self.outstanding_amount),
            "is_paid": self.is_paid,
            "source_type": self.source_type.value,
            "source_ref": self.source_ref,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Transaction:
    """은행 지출 거래

    created_loan_id는 생성 시점에 결정되며 이후 변경되지 않는다
    (연결된 대출이 삭제되는 경우 제외).
    """

    transaction_id: str
    txn_date: date
    description: str
    amount: Decimal
    expense_owner: str
    bank_id: str
    created_loan_id: str | None = None
    bank_name: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Transaction":
        return cls(
            transaction_id=row["transaction_id"],
            txn_date=date.fromisoformat(row["txn_date"]),
            description=row["description"],
            amount=from_db(row["amount"]),
            expense_owner=row["expense_owner"],
            bank_id=row["bank_id"],
            created_loan_id=row.get("created_loan_id"),
            bank_name=row.get("bank_name"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "transaction_id": self.transaction_id,
            "date": self.txn_date.isoformat(),
            "description": self.description,
            "amount": str(self.amount),
            "expense_owner": self.expense_owner,
            "bank_id": self.bank_id,
            "bank_name": self.bank_name,
            "created_loan_id": self.created_loan_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class IPOApplication:
    """IPO 청약

    APPLIED에서 ALLOTTED 또는 REFUNDED로 한 번만 전이.
    listing_price는 손익 표시용이며 잔액과 무관.
    """

    ipo_id: str
    company_name: str
    application_date: date
    amount: Decimal
    shares_applied: int
    bank_id: str
    status: IPOStatus
    allotment_date: date | None = None
    shares_allotted: int | None = None
    issue_price: Decimal | None = None
    listing_price: Decimal | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def listing_gain(self) -> Decimal | None:
        """상장 손익 = (상장가 - 공모가) × 배정 주식 수"""
        if (
            self.listing_price is None
            or self.issue_price is None
            or not self.shares_allotted
        ):
            return None
        return (self.listing_price - self.issue_price) * self.shares_allotted

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "IPOApplication":
        return cls(
            ipo_id=row["ipo_id"],
            company_name=row["company_name"],
            application_date=date.fromisoformat(row["application_date"]),
            amount=from_db(row["amount"]),
            shares_applied=int(row["shares_applied"]),
            bank_id=row["bank_id"],
            status=IPOStatus(row["status"]),
            allotment_date=_opt_date(row.get("allotment_date")),
            shares_allotted=row.get("shares_allotted"),
            issue_price=_opt_money(row.get("issue_price")),
            listing_price=_opt_money(row.get("listing_price")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ipo_id": self.ipo_id,
            "company_name": self.company_name,
            "application_date": self.application_date.isoformat(),
            "allotment_date": self.allotment_date.isoformat() if self.allotment_date else None,
            "amount": str(self.amount),
            "shares_applied": self.shares_applied,
            "shares_allotted": self.shares_allotted,
            "issue_price": _opt_str(self.issue_price),
            "listing_price": _opt_str(self.listing_price),
            "listing_gain": _opt_str(self.listing_gain),
            "bank_id": self.bank_id,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Person:
    """인물 (지출 주체 판별용)"""

    person_id: str
    name: str
    is_self: bool = False
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Person":
        return cls(
            person_id=row["person_id"],
            name=row["name"],
            is_self=bool(row["is_self"]),
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "person_id": self.person_id,
            "name": self.name,
            "is_self": self.is_self,
            "created_at": self.created_at,
        }
