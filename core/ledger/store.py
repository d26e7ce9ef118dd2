"""
Ledger 저장소

은행별 추가 전용 원장 저장 및 잔액 계산
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import Defaults
from core.errors import InvalidAmountError, NotFoundError
from core.ledger.types import LedgerEntry
from core.types import LedgerOrder, ReferenceKind
from core.utils.dates import to_date
from core.utils.ids import IdPrefix, make_id
from core.utils.money import ZERO, from_db, money

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


class LedgerStore:
    """Ledger 저장소

    은행 잔액은 저장하지 않고 항상 원장 항목에서 계산한다.
    append_entry는 잔액 계산과 삽입을 하나의 트랜잭션에서 수행하므로
    같은 은행에 대한 동시 추가도 올바르게 연쇄된다.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def ensure_bank(self, bank_id: str) -> None:
        """은행 존재 확인 (없으면 NotFoundError)"""
        row = await self.db.fetchone("SELECT 1 FROM banks WHERE bank_id = ?", (bank_id,))
        if row is None:
            raise NotFoundError("bank", bank_id)

    # -------------------------------------------------------------------------
    # 잔액 계산
    # -------------------------------------------------------------------------

    async def compute_balance(self, bank_id: str) -> Decimal:
        """은행 현재 잔액 계산

        삽입 순서(seq)로 모든 항목의 credit - debit을 0부터 누적.
        날짜 순서와 무관하다.

        Args:
            bank_id: 은행 ID

        Returns:
            현재 잔액

        Raises:
            NotFoundError: 존재하지 않는 은행
        """
        await self.ensure_bank(bank_id)

        rows = await self.db.fetchall(
            "SELECT debit, credit FROM bank_ledger WHERE bank_id = ? ORDER BY seq",
            (bank_id,),
        )

        balance = ZERO
        for debit, credit in rows:
            balance += from_db(credit) - from_db(debit)
        return balance

    # -------------------------------------------------------------------------
    # 항목 추가
    # -------------------------------------------------------------------------

    async def append_entry(
        self,
        bank_id: str,
        entry_date: date | str | None,
        description: str,
        debit: Decimal | str | int = ZERO,
        credit: Decimal | str | int = ZERO,
        reference_kind: ReferenceKind = ReferenceKind.TRANSACTION,
        reference_id: str | None = None,
    ) -> LedgerEntry:
        """원장 항목 추가

        balance_after = 현재 잔액 + credit - debit 을 삽입 시점에 계산.

        Args:
            bank_id: 은행 ID
            entry_date: 달력 날짜 (None이면 오늘)
            description: 설명
            debit: 출금액 (≥0)
            credit: 입금액 (≥0)
            reference_kind: 생성 주체 구분
            reference_id: 원천 레코드 ID

        Returns:
            저장된 LedgerEntry

        Raises:
            NotFoundError: 존재하지 않는 은행
            InvalidAmountError: 음수 금액
        """
        debit_amount = money(debit)
        credit_amount = money(credit)
        if debit_amount < 0 or credit_amount < 0:
            raise InvalidAmountError(
                f"Ledger amounts must be non-negative: debit={debit}, credit={credit}"
            )

        day = to_date(entry_date)
        entry_id = make_id(IdPrefix.LEDGER_ENTRY)

        async with self.db.transaction():
            balance = await self.compute_balance(bank_id)
            balance_after = balance + credit_amount - debit_amount

            await self.db.execute(
                """
                INSERT INTO bank_ledger (
                    entry_id, bank_id, entry_date, description,
                    debit, credit, balance_after,
                    reference_kind, reference_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry_id,
                    bank_id,
                    day.isoformat(),
                    description,
                    str(debit_amount),
                    str(credit_amount),
                    str(balance_after),
                    ReferenceKind(reference_kind).value,
                    reference_id,
                ),
            )

            row = await self.db.fetchone_dict(
                "SELECT * FROM bank_ledger WHERE entry_id = ?", (entry_id,)
            )

        assert row is not None
        entry = LedgerEntry.from_row(row)

        logger.debug(
            f"Ledger entry appended: {entry_id}",
            extra={
                "bank_id": bank_id,
                "debit": str(debit_amount),
                "credit": str(credit_amount),
                "balance_after": str(balance_after),
                "reference_kind": entry.reference_kind.value,
            },
        )
        return entry

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def list_entries(
        self,
        bank_id: str,
        order: LedgerOrder = LedgerOrder.DATE_DESC,
        limit: int = Defaults.PAGE_LIMIT,
        offset: int = 0,
    ) -> list[LedgerEntry]:
        """원장 항목 목록

        DATE_DESC: 날짜 내림차순, 같은 날짜는 최근 삽입 우선 (화면 표시용)
        INSERTION: 삽입 순서 (잔액 연쇄 확인용)

        limit/offset으로 이어서 조회 가능.

        Raises:
            NotFoundError: 존재하지 않는 은행
        """
        await self.ensure_bank(bank_id)

        if LedgerOrder(order) is LedgerOrder.INSERTION:
            order_by = "seq ASC"
        else:
            order_by = "entry_date DESC, seq DESC"

        rows = await self.db.fetchall_dict(
            f"""
            SELECT * FROM bank_ledger
            WHERE bank_id = ?
            ORDER BY {order_by}
            LIMIT ? OFFSET ?
            """,
            (bank_id, limit, offset),
        )
        return [LedgerEntry.from_row(row) for row in rows]

    async def entries_for_reference(
        self,
        reference_kind: ReferenceKind,
        reference_id: str,
    ) -> list[LedgerEntry]:
        """원천 레코드가 만든 항목 조회 (삽입 순서)"""
        rows = await self.db.fetchall_dict(
            """
            SELECT * FROM bank_ledger
            WHERE reference_kind = ? AND reference_id = ?
            ORDER BY seq
            """,
            (ReferenceKind(reference_kind).value, reference_id),
        )
        return [LedgerEntry.from_row(row) for row in rows]

    async def count_entries(self, bank_id: str) -> int:
        """은행의 원장 항목 수"""
        row = await self.db.fetchone(
            "SELECT COUNT(*) FROM bank_ledger WHERE bank_id = ?", (bank_id,)
        )
        return int(row[0]) if row else 0

    async def latest_balances(self) -> list[dict[str, Any]]:
        """은행별 마지막 balance_after 스냅샷 (대시보드용, 잠금 없음)"""
        rows = await self.db.fetchall_dict(
            "SELECT bank_id, name, balance FROM v_bank_latest_balance ORDER BY name"
        )
        return [
            {"bank_id": r["bank_id"], "name": r["name"], "balance": from_db(r["balance"])}
            for r in rows
        ]
