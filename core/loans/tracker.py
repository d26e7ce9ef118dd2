"""
대출 추적기

지출 주체가 본인이 아닐 때 자동 생성되는 가족 간 대출 관리.
상환은 은행 원장에 credit 항목을 남기고, 종결(write-off)은 남기지 않는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from core.domain.models import Loan
from core.errors import ConstraintViolationError, InvalidStateError, NotFoundError
from core.ledger.store import LedgerStore
from core.ledger.types import LedgerEntry
from core.types import LoanSourceType, OverpaymentPolicy, ReferenceKind
from core.utils.ids import IdPrefix, make_id
from core.utils.locks import KeyedLock
from core.utils.money import ZERO, to_amount

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Repayment:
    """상환 결과

    Attributes:
        loan: 상환 후 대출
        entry: 은행 원장 credit 항목
        applied: 미상환액에서 실제로 차감된 금액
    """

    loan: Loan
    entry: LedgerEntry
    applied: Decimal


def repayment_bank_for(loan: Loan) -> str | None:
    """상환 계좌 기본값 (은행 지출에서 생긴 대출만)"""
    if loan.source_type is LoanSourceType.BANK_EXPENSE:
        return loan.source_ref
    return None


class LoanTracker:
    """대출 추적기

    repay/close는 대출별(및 은행별) 잠금 안에서 하나의 트랜잭션으로 수행.

    Args:
        db: SQLite 어댑터
        ledger: 원장 저장소
        loan_locks: 대출별 잠금
        bank_locks: 은행별 잠금
        overpayment_policy: 초과 상환 시 원장 반영 금액 정책
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        ledger: LedgerStore,
        loan_locks: KeyedLock,
        bank_locks: KeyedLock,
        overpayment_policy: OverpaymentPolicy = OverpaymentPolicy.REQUESTED,
    ):
        self.db = db
        self.ledger = ledger
        self.loan_locks = loan_locks
        self.bank_locks = bank_locks
        self.overpayment_policy = OverpaymentPolicy(overpayment_policy)

    # -------------------------------------------------------------------------
    # 생성 (오케스트레이터 내부 전용)
    # -------------------------------------------------------------------------

    async def create_loan(
        self,
        borrower_name: str,
        amount: Decimal | str | int,
        source_type: LoanSourceType,
        source_ref: str | None,
    ) -> Loan:
        """대출 생성 (principal = outstanding = amount)

        UI에서 직접 호출되지 않는다. 거래/카드 사용 오케스트레이터가
        자신의 트랜잭션 안에서 호출한다.
        """
        principal = to_amount(amount)
        borrower = " ".join(borrower_name.split())
        if not borrower:
            raise ValueError("Borrower name is required")

        loan_id = make_id(IdPrefix.LOAN)

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO loans (
                    loan_id, borrower_name, principal_amount, outstanding_amount,
                    is_paid, source_type, source_ref
                ) VALUES (?, ?, ?, ?, 0, ?, ?)
                """,
                (
                    loan_id,
                    borrower,
                    str(principal),
                    str(principal),
                    LoanSourceType(source_type).value,
                    source_ref,
                ),
            )
            loan = await self.get_loan(loan_id)

        logger.info(
            f"Loan created for {borrower}",
            extra={
                "loan_id": loan_id,
                "principal": str(principal),
                "source_type": loan.source_type.value,
                "source_ref": source_ref,
            },
        )
        return loan

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_loan(self, loan_id: str) -> Loan:
        row = await self.db.fetchone_dict("SELECT * FROM loans WHERE loan_id = ?", (loan_id,))
        if row is None:
            raise NotFoundError("loan", loan_id)
        return Loan.from_row(row)

    async def list_loans(
        self,
        paid: bool | None = None,
        borrower: str | None = None,
    ) -> list[Loan]:
        """대출 목록 (최근 생성 우선)

        Args:
            paid: True/False로 상환 여부 필터 (None이면 전체)
            borrower: 차용인 이름 필터 (대소문자 무시)
        """
        sql = "SELECT * FROM loans WHERE 1=1"
        params: list[object] = []

        if paid is not None:
            sql += " AND is_paid = ?"
            params.append(1 if paid else 0)
        if borrower:
            sql += " AND borrower_name = ? COLLATE NOCASE"
            params.append(" ".join(borrower.split()))

        sql += " ORDER BY created_at DESC, rowid DESC"
        rows = await self.db.fetchall_dict(sql, tuple(params))
        return [Loan.from_row(r) for r in rows]

    # -------------------------------------------------------------------------
    # 상환 / 종결
    # -------------------------------------------------------------------------

    async def repay(
        self,
        loan_id: str,
        amount: Decimal | str | int,
        bank_id: str | None = None,
        repay_date: date | str | None = None,
    ) -> Repayment:
        """대출 상환

        outstanding = max(0, outstanding - amount), paid = (outstanding ≤ 0).
        bank_id 은행 원장에 credit 항목 하나를 기록한다.
        REQUESTED 정책이면 요청 금액 전체, APPLIED 정책이면 실제 차감액을 기록.

        Args:
            loan_id: 대출 ID
            amount: 상환 금액 (>0)
            bank_id: 입금 은행 (None이면 대출 출처 은행)
            repay_date: 상환일 (None이면 오늘)

        Raises:
            NotFoundError: 대출 또는 은행이 없음
            InvalidAmountError: 0 이하 금액
            InvalidStateError: 이미 상환/종결된 대출
            ConstraintViolationError: 입금 은행을 정할 수 없음
        """
        value = to_amount(amount)
        loan = await self.get_loan(loan_id)
        target_bank = bank_id or repayment_bank_for(loan)
        if target_bank is None:
            raise ConstraintViolationError(
                f"Repayment bank required for loan {loan_id} ({loan.source_type.value})"
            )

        async with self.loan_locks.hold(loan_id), self.bank_locks.hold(target_bank):
            async with self.db.transaction():
                loan = await self.get_loan(loan_id)
                if loan.is_paid:
                    raise InvalidStateError(f"Loan already paid: {loan_id}")

                applied = min(value, loan.outstanding_amount)
                new_outstanding = max(ZERO, loan.outstanding_amount - value)
                await self._set_outstanding(loan_id, new_outstanding)

                credit = value if self.overpayment_policy is OverpaymentPolicy.REQUESTED else applied
                entry = await self.ledger.append_entry(
                    bank_id=target_bank,
                    entry_date=repay_date,
                    description=f"Loan repayment from {loan.borrower_name}",
                    credit=credit,
                    reference_kind=ReferenceKind.LOAN_REPAYMENT,
                    reference_id=loan_id,
                )
                loan = await self.get_loan(loan_id)

        logger.info(
            f"Loan repaid: {loan_id}",
            extra={
                "loan_id": loan_id,
                "bank_id": target_bank,
                "requested": str(value),
                "applied": str(applied),
                "credited": str(entry.credit),
                "outstanding": str(loan.outstanding_amount),
                "is_paid": loan.is_paid,
            },
        )
        return Repayment(loan=loan, entry=entry, applied=applied)

    async def close(self, loan_id: str) -> Loan:
        """대출 종결 (write-off)

        outstanding = 0, paid = True. 원장 항목은 남기지 않는다.
        """
        async with self.loan_locks.hold(loan_id):
            async with self.db.transaction():
                loan = await self.get_loan(loan_id)
                written_off = loan.outstanding_amount
                await self._set_outstanding(loan_id, ZERO)
                loan = await self.get_loan(loan_id)

        logger.info(
            f"Loan closed: {loan_id}",
            extra={"loan_id": loan_id, "written_off": str(written_off)},
        )
        return loan

    # -------------------------------------------------------------------------
    # 거래 수정/삭제 연동 (호출자가 대출 잠금 보유)
    # -------------------------------------------------------------------------

    async def revise_untouched(
        self,
        loan_id: str,
        amount: Decimal,
        borrower_name: str,
        source_ref: str | None,
    ) -> Loan:
        """상환/종결 이력이 없는 대출을 원천 거래에 맞춰 수정

        Raises:
            ConstraintViolationError: 이미 상환/종결된 대출
        """
        async with self.db.transaction():
            loan = await self.get_loan(loan_id)
            if not loan.is_untouched:
                raise ConstraintViolationError(
                    f"Loan {loan_id} has repayments or was closed; its source cannot change"
                )
            await self.db.execute(
                """
                UPDATE loans
                SET borrower_name = ?, principal_amount = ?, outstanding_amount = ?,
                    source_ref = ?, updated_at = datetime('now')
                WHERE loan_id = ?
                """,
                (
                    " ".join(borrower_name.split()),
                    str(amount),
                    str(amount),
                    source_ref,
                    loan_id,
                ),
            )
            return await self.get_loan(loan_id)

    async def delete_untouched(self, loan_id: str) -> None:
        """상환/종결 이력이 없는 대출 삭제

        Raises:
            ConstraintViolationError: 이미 상환/종결된 대출
        """
        async with self.db.transaction():
            loan = await self.get_loan(loan_id)
            if not loan.is_untouched:
                raise ConstraintViolationError(
                    f"Loan {loan_id} has repayments or was closed; it cannot be removed"
                )
            await self.db.execute("DELETE FROM loans WHERE loan_id = ?", (loan_id,))

        logger.info("Loan deleted with its source", extra={"loan_id": loan_id})

    async def _set_outstanding(self, loan_id: str, outstanding: Decimal) -> None:
        await self.db.execute(
            """
            UPDATE loans
            SET outstanding_amount = ?, is_paid = ?, updated_at = datetime('now')
            WHERE loan_id = ?
            """,
            (str(outstanding), 1 if outstanding <= 0 else 0, loan_id),
        )
