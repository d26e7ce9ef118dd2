"""
거래 오케스트레이터

"지출 기록"의 진입점.
지출 주체가 본인이 아니면 대출을 만들고, 거래 행을 저장한 뒤
은행 원장에 debit 항목을 기록한다. 세 단계는 하나의 트랜잭션이다.

수정/삭제는 기존 원장 항목을 고치지 않고 보상(reversal) 항목을 추가한다.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.accounts.persons import PersonRegistry
from core.constants import Defaults
from core.domain.models import Transaction
from core.errors import ConstraintViolationError, NotFoundError
from core.ledger.store import LedgerStore
from core.loans.tracker import LoanTracker
from core.types import LoanSourceType, ReferenceKind
from core.utils.dates import to_date
from core.utils.ids import IdPrefix, make_id
from core.utils.locks import LockSet
from core.utils.money import to_amount

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

_SELECT_TRANSACTION = """
    SELECT t.*, b.name AS bank_name
    FROM transactions t
    LEFT JOIN banks b ON b.bank_id = t.bank_id
"""


def _clean_owner(owner_name: str) -> str:
    owner = " ".join((owner_name or "").split())
    if not owner:
        raise ValueError("Expense owner is required")
    return owner


class TransactionOrchestrator:
    """거래 오케스트레이터

    Args:
        db: SQLite 어댑터
        ledger: 원장 저장소
        loans: 대출 추적기
        persons: 인물 레지스트리 (본인 판별)
        locks: 공유 잠금 묶음
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        ledger: LedgerStore,
        loans: LoanTracker,
        persons: PersonRegistry,
        locks: LockSet,
    ):
        self.db = db
        self.ledger = ledger
        self.loans = loans
        self.persons = persons
        self.locks = locks

    # -------------------------------------------------------------------------
    # 생성
    # -------------------------------------------------------------------------

    async def create(
        self,
        txn_date: date | str | None,
        description: str,
        amount: Decimal | str | int,
        owner_name: str,
        bank_id: str,
    ) -> Transaction:
        """지출 거래 생성

        1. 지출 주체가 본인이 아니면 대출 생성 (출처 = 은행)
        2. 거래 행 저장 (생성된 대출 ID 포함)
        3. 은행 원장 debit 기록

        Raises:
            NotFoundError: 존재하지 않는 은행
            InvalidAmountError: 0 이하 또는 숫자가 아닌 금액
        """
        value = to_amount(amount)
        owner = _clean_owner(owner_name)
        day = to_date(txn_date)
        transaction_id = make_id(IdPrefix.TRANSACTION)

        async with self.locks.banks.hold(bank_id):
            async with self.db.transaction():
                await self.ledger.ensure_bank(bank_id)

                loan_id = None
                if not await self.persons.is_self(owner):
                    loan = await self.loans.create_loan(
                        borrower_name=owner,
                        amount=value,
                        source_type=LoanSourceType.BANK_EXPENSE,
                        source_ref=bank_id,
                    )
                    loan_id = loan.loan_id

                await self.db.execute(
                    """
                    INSERT INTO transactions (
                        transaction_id, txn_date, description, amount,
                        expense_owner, bank_id, created_loan_id
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        transaction_id,
                        day.isoformat(),
                        description or "",
                        str(value),
                        owner,
                        bank_id,
                        loan_id,
                    ),
                )

                entry = await self.ledger.append_entry(
                    bank_id=bank_id,
                    entry_date=day,
                    description=description or "",
                    debit=value,
                    reference_kind=ReferenceKind.TRANSACTION,
                    reference_id=transaction_id,
                )

                txn = await self.get(transaction_id)

        logger.info(
            f"Transaction recorded: {transaction_id}",
            extra={
                "transaction_id": transaction_id,
                "bank_id": bank_id,
                "amount": str(value),
                "owner": owner,
                "loan_id": loan_id,
                "balance_after": str(entry.balance_after),
            },
        )
        return txn

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get(self, transaction_id: str) -> Transaction:
        row = await self.db.fetchone_dict(
            _SELECT_TRANSACTION + " WHERE t.transaction_id = ?", (transaction_id,)
        )
        if row is None:
            raise NotFoundError("transaction", transaction_id)
        return Transaction.from_row(row)

    async def list(
        self,
        bank_id: str | None = None,
        start: date | str | None = None,
        end: date | str | None = None,
        owner_name: str | None = None,
        limit: int = Defaults.PAGE_LIMIT,
        offset: int = 0,
    ) -> list[Transaction]:
        """거래 목록 (날짜 내림차순)

        Args:
            bank_id: 은행 필터
            start: 시작일 (포함)
            end: 종료일 (포함)
            owner_name: 지출 주체 필터 (대소문자 무시)
        """
        sql = _SELECT_TRANSACTION + " WHERE 1=1"
        params: list[Any] = []

        if bank_id:
            sql += " AND t.bank_id = ?"
            params.append(bank_id)
        if start is not None:
            sql += " AND t.txn_date >= ?"
            params.append(to_date(start).isoformat())
        if end is not None:
            sql += " AND t.txn_date <= ?"
            params.append(to_date(end).isoformat())
        if owner_name:
            sql += " AND t.expense_owner = ? COLLATE NOCASE"
            params.append(" ".join(owner_name.split()))

        sql += " ORDER BY t.txn_date DESC, t.created_at DESC, t.rowid DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        rows = await self.db.fetchall_dict(sql, tuple(params))
        return [Transaction.from_row(r) for r in rows]

    # -------------------------------------------------------------------------
    # 수정 / 삭제
    # -------------------------------------------------------------------------

    async def update(
        self,
        transaction_id: str,
        txn_date: date | str | None = None,
        description: str | None = None,
        amount: Decimal | str | int | None = None,
        owner_name: str | None = None,
        bank_id: str | None = None,
    ) -> Transaction:
        """거래 수정

        금액이나 은행이 바뀌면 기존 debit을 되돌리는 credit 항목과
        새 debit 항목을 추가한다. 날짜/설명만 바뀌면 원장은 그대로 둔다.
        연결된 대출은 상환/종결 이력이 없을 때만 새 값을 따른다.

        Raises:
            NotFoundError: 거래 또는 새 은행이 없음
            InvalidAmountError: 0 이하 금액
            ConstraintViolationError: 본인/타인 전환, 이력 있는 대출의 변경
        """
        current = await self.get(transaction_id)

        new_amount = to_amount(amount) if amount is not None else current.amount
        new_owner = _clean_owner(owner_name) if owner_name is not None else current.expense_owner
        new_bank = bank_id or current.bank_id
        new_date = to_date(txn_date) if txn_date is not None else current.txn_date
        new_description = description if description is not None else current.description

        loan_id = current.created_loan_id

        async with self.locks.transactions.hold(transaction_id), \
                self.locks.loans.hold(loan_id), \
                self.locks.banks.hold(current.bank_id, new_bank):
            async with self.db.transaction():
                current = await self.get(transaction_id)
                await self.ledger.ensure_bank(new_bank)

                amount_changed = new_amount != current.amount
                bank_changed = new_bank != current.bank_id
                owner_changed = new_owner.casefold() != current.expense_owner.casefold()

                if owner_changed:
                    was_self = current.created_loan_id is None
                    if was_self != await self.persons.is_self(new_owner):
                        raise ConstraintViolationError(
                            "Expense owner cannot switch between self and another person; "
                            "delete and re-create the transaction instead"
                        )

                if loan_id is not None and (amount_changed or bank_changed or owner_changed):
                    loan = await self.loans.get_loan(loan_id)
                    if loan.is_untouched:
                        await self.loans.revise_untouched(
                            loan_id,
                            amount=new_amount,
                            borrower_name=new_owner,
                            source_ref=new_bank,
                        )
                    elif amount_changed or owner_changed:
                        raise ConstraintViolationError(
                            f"Loan {loan_id} has repayments or was closed; "
                            "amount and owner of its transaction are fixed"
                        )

                if amount_changed or bank_changed:
                    await self.ledger.append_entry(
                        bank_id=current.bank_id,
                        entry_date=None,
                        description=f"Reversal - {current.description}",
                        credit=current.amount,
                        reference_kind=ReferenceKind.REVERSAL,
                        reference_id=transaction_id,
                    )
                    await self.ledger.append_entry(
                        bank_id=new_bank,
                        entry_date=new_date,
                        description=new_description,
                        debit=new_amount,
                        reference_kind=ReferenceKind.TRANSACTION,
                        reference_id=transaction_id,
                    )

                await self.db.execute(
                    """
                    UPDATE transactions
                    SET txn_date = ?, description = ?, amount = ?, expense_owner = ?,
                        bank_id = ?, updated_at = datetime('now')
                    WHERE transaction_id = ?
                    """,
                    (
                        new_date.isoformat(),
                        new_description,
                        str(new_amount),
                        new_owner,
                        new_bank,
                        transaction_id,
                    ),
                )
                txn = await self.get(transaction_id)

        logger.info(
            f"Transaction updated: {transaction_id}",
            extra={
                "transaction_id": transaction_id,
                "amount": str(new_amount),
                "bank_id": new_bank,
                "reposted": amount_changed or bank_changed,
            },
        )
        return txn

    async def delete(self, transaction_id: str) -> None:
        """거래 삭제

        은행 원장에 금액만큼 reversal credit 항목을 추가하고,
        연결된 대출이 손대지 않은 상태면 함께 삭제한다.

        Raises:
            NotFoundError: 존재하지 않는 거래
            ConstraintViolationError: 연결 대출에 상환/종결 이력이 있음
        """
        current = await self.get(transaction_id)
        loan_id = current.created_loan_id

        async with self.locks.transactions.hold(transaction_id), \
                self.locks.loans.hold(loan_id), \
                self.locks.banks.hold(current.bank_id):
            async with self.db.transaction():
                current = await self.get(transaction_id)

                if loan_id is not None:
                    loan = await self.loans.get_loan(loan_id)
                    if not loan.is_untouched:
                        raise ConstraintViolationError(
                            f"Loan {loan_id} has repayments or was closed; "
                            "its transaction cannot be deleted"
                        )

                await self.db.execute(
                    "DELETE FROM transactions WHERE transaction_id = ?", (transaction_id,)
                )
                if loan_id is not None:
                    await self.loans.delete_untouched(loan_id)

                entry = await self.ledger.append_entry(
                    bank_id=current.bank_id,
                    entry_date=None,
                    description=f"Reversal - {current.description}",
                    credit=current.amount,
                    reference_kind=ReferenceKind.REVERSAL,
                    reference_id=transaction_id,
                )

        logger.info(
            f"Transaction deleted: {transaction_id}",
            extra={
                "transaction_id": transaction_id,
                "bank_id": current.bank_id,
                "reversed": str(current.amount),
                "loan_id": loan_id,
                "balance_after": str(entry.balance_after),
            },
        )
