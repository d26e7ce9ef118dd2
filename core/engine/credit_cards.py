"""
신용카드 오케스트레이터

사용(spend): 미결제액 증가, 타인 사용분은 대출 생성. 은행 원장은 건드리지 않는다.
결제(pay): 미결제액 감소(0 하한) + 결제 은행 원장 debit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from core.accounts.persons import PersonRegistry
from core.accounts.registry import AccountRegistry
from core.domain.models import CreditCard, Loan
from core.ledger.store import LedgerStore
from core.ledger.types import LedgerEntry
from core.loans.tracker import LoanTracker
from core.types import LoanSourceType, OverpaymentPolicy, ReferenceKind
from core.utils.dates import to_date
from core.utils.locks import LockSet
from core.utils.money import to_amount

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardSpend:
    """카드 사용 결과"""

    card: CreditCard
    spend_date: date
    description: str
    amount: Decimal
    loan: Loan | None = None


@dataclass(frozen=True)
class CardPayment:
    """카드 결제 결과

    Attributes:
        card: 결제 후 카드
        entry: 결제 은행의 원장 debit 항목
        applied: 미결제액에서 실제로 차감된 금액
    """

    card: CreditCard
    entry: LedgerEntry
    applied: Decimal


class CreditCardOrchestrator:
    """신용카드 오케스트레이터

    Args:
        db: SQLite 어댑터
        registry: 계정 레지스트리
        ledger: 원장 저장소
        loans: 대출 추적기
        persons: 인물 레지스트리
        locks: 공유 잠금 묶음
        overpayment_policy: 초과 결제 시 원장 debit 금액 정책
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        registry: AccountRegistry,
        ledger: LedgerStore,
        loans: LoanTracker,
        persons: PersonRegistry,
        locks: LockSet,
        overpayment_policy: OverpaymentPolicy = OverpaymentPolicy.REQUESTED,
    ):
        self.db = db
        self.registry = registry
        self.ledger = ledger
        self.loans = loans
        self.persons = persons
        self.locks = locks
        self.overpayment_policy = OverpaymentPolicy(overpayment_policy)

    async def spend(
        self,
        card_id: str,
        spend_date: date | str | None,
        description: str,
        amount: Decimal | str | int,
        owner_name: str,
    ) -> CardSpend:
        """카드 사용

        outstanding += amount. 사용 주체가 본인이 아니면
        출처 = credit_card / card_id 인 대출을 만든다.

        Raises:
            NotFoundError: 존재하지 않는 카드
            InvalidAmountError: 0 이하 금액
        """
        value = to_amount(amount)
        owner = " ".join((owner_name or "").split())
        if not owner:
            raise ValueError("Spend owner is required")
        day = to_date(spend_date)

        async with self.locks.cards.hold(card_id):
            async with self.db.transaction():
                card = await self.registry.apply_card_spend(card_id, value)

                loan = None
                if not await self.persons.is_self(owner):
                    loan = await self.loans.create_loan(
                        borrower_name=owner,
                        amount=value,
                        source_type=LoanSourceType.CREDIT_CARD,
                        source_ref=card_id,
                    )

        logger.info(
            f"Credit card spend: {card.name}",
            extra={
                "card_id": card_id,
                "amount": str(value),
                "owner": owner,
                "outstanding": str(card.outstanding),
                "loan_id": loan.loan_id if loan else None,
            },
        )
        return CardSpend(
            card=card,
            spend_date=day,
            description=description or "",
            amount=value,
            loan=loan,
        )

    async def pay(
        self,
        card_id: str,
        amount: Decimal | str | int,
        bank_id: str,
        pay_date: date | str | None = None,
    ) -> CardPayment:
        """카드 결제

        outstanding = max(0, outstanding - amount) 후 결제 은행에 debit 기록.
        REQUESTED 정책이면 요청 금액 전체, APPLIED 정책이면 실제 차감액을 debit.

        Raises:
            NotFoundError: 카드 또는 은행이 없음
            InvalidAmountError: 0 이하 금액
        """
        value = to_amount(amount)

        async with self.locks.cards.hold(card_id), self.locks.banks.hold(bank_id):
            async with self.db.transaction():
                card, applied = await self.registry.apply_card_payment(card_id, value)

                debit = value if self.overpayment_policy is OverpaymentPolicy.REQUESTED else applied
                entry = await self.ledger.append_entry(
                    bank_id=bank_id,
                    entry_date=pay_date,
                    description=f"Credit card payment - {card.name}",
                    debit=debit,
                    reference_kind=ReferenceKind.CC_PAYMENT,
                    reference_id=card_id,
                )

        logger.info(
            f"Credit card paid: {card.name}",
            extra={
                "card_id": card_id,
                "bank_id": bank_id,
                "requested": str(value),
                "applied": str(applied),
                "debited": str(entry.debit),
                "outstanding": str(card.outstanding),
            },
        )
        return CardPayment(card=card, entry=entry, applied=applied)
