"""
Dashboard 집계

은행/대출/카드/IPO 전체 합계를 잠금 없이 조회.
동시에 진행 중인 쓰기와 어긋날 수 있는 최선 노력(best-effort) 스냅샷이다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import Defaults
from core.domain.models import Transaction
from core.ledger.store import LedgerStore
from core.types import IPOStatus
from core.utils.dates import month_start, to_date, today
from core.utils.money import ZERO, from_db

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    """대시보드 요약"""

    total_balance: Decimal
    total_outstanding_loans: Decimal
    total_credit_outstanding: Decimal
    pending_ipos: int
    recent_transactions: list[Transaction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_balance": str(self.total_balance),
            "total_outstanding_loans": str(self.total_outstanding_loans),
            "total_credit_outstanding": str(self.total_credit_outstanding),
            "pending_ipos": self.pending_ipos,
            "recent_transactions": [t.to_dict() for t in self.recent_transactions],
        }


@dataclass(frozen=True)
class ExpenseSummary:
    """기간별 지출 합계"""

    start: date
    end: date
    total: Decimal
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "total": str(self.total),
            "count": self.count,
        }


class DashboardService:
    """Dashboard 집계 서비스

    쓰기 경로의 잠금/트랜잭션을 사용하지 않는다.

    Args:
        db: SQLite 어댑터
        ledger: 원장 저장소 (은행별 최신 잔액 View)
    """

    def __init__(self, db: SQLiteAdapter, ledger: LedgerStore):
        self.db = db
        self.ledger = ledger

    async def get_stats(self, recent: int = Defaults.RECENT_TRANSACTIONS) -> DashboardStats:
        """대시보드 요약 조회

        - total_balance: 은행별 마지막 balance_after 합계
        - total_outstanding_loans: 미상환 대출 잔액 합계
        - total_credit_outstanding: 카드 미결제액 합계
        - pending_ipos: APPLIED 상태 청약 수
        - recent_transactions: 최근 거래
        """
        balances = await self.ledger.latest_balances()
        total_balance = sum((b["balance"] for b in balances), ZERO)

        total_loans = await self._sum_column(
            "SELECT outstanding_amount FROM loans WHERE is_paid = 0"
        )
        total_credit = await self._sum_column("SELECT outstanding FROM credit_cards")

        row = await self.db.fetchone(
            "SELECT COUNT(*) FROM ipo_applications WHERE status = ?",
            (IPOStatus.APPLIED.value,),
        )
        pending = int(row[0]) if row else 0

        rows = await self.db.fetchall_dict(
            """
            SELECT t.*, b.name AS bank_name
            FROM transactions t
            LEFT JOIN banks b ON b.bank_id = t.bank_id
            ORDER BY t.txn_date DESC, t.created_at DESC, t.rowid DESC
            LIMIT ?
            """,
            (recent,),
        )

        return DashboardStats(
            total_balance=total_balance,
            total_outstanding_loans=total_loans,
            total_credit_outstanding=total_credit,
            pending_ipos=pending,
            recent_transactions=[Transaction.from_row(r) for r in rows],
        )

    async def expense_summary(
        self,
        start: date | str | None = None,
        end: date | str | None = None,
    ) -> ExpenseSummary:
        """기간 내 거래 합계 (양 끝 포함, 기본: 이번 달)"""
        end_day = to_date(end)
        start_day = to_date(start) if start is not None else month_start(end_day)

        rows = await self.db.fetchall(
            "SELECT amount FROM transactions WHERE txn_date >= ? AND txn_date <= ?",
            (start_day.isoformat(), end_day.isoformat()),
        )
        total = sum((from_db(r[0]) for r in rows), ZERO)
        return ExpenseSummary(start=start_day, end=end_day, total=total, count=len(rows))

    async def today_expenses(self) -> ExpenseSummary:
        day = today()
        return await self.expense_summary(day, day)

    async def outstanding_summary(self) -> dict[str, Any]:
        """미상환 대출/카드 미결제 요약 (차용인별 합계 포함)"""
        rows = await self.db.fetchall(
            """
            SELECT borrower_name, outstanding_amount
            FROM loans WHERE is_paid = 0
            ORDER BY borrower_name
            """
        )
        by_borrower: dict[str, Decimal] = {}
        for borrower, outstanding in rows:
            by_borrower[borrower] = by_borrower.get(borrower, ZERO) + from_db(outstanding)

        cards = await self.db.fetchall(
            "SELECT card_id, name, outstanding FROM credit_cards ORDER BY name, card_id"
        )

        return {
            "loans_total": str(sum(by_borrower.values(), ZERO)),
            "open_loans": len(rows),
            "by_borrower": {k: str(v) for k, v in by_borrower.items()},
            "cards_total": str(sum((from_db(c[2]) for c in cards), ZERO)),
            "cards": [
                {"card_id": card_id, "name": name, "outstanding": str(from_db(outstanding))}
                for card_id, name, outstanding in cards
            ],
        }

    async def _sum_column(self, sql: str) -> Decimal:
        rows = await self.db.fetchall(sql)
        return sum((from_db(r[0]) for r in rows), ZERO)
