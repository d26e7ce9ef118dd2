"""
IPO 오케스트레이터

청약(apply) 시 은행에서 금액을 보류(debit)하고,
배정(allot) 시 부분 환불분을, 미배정 환불(refund) 시 전액을 credit으로 되돌린다.

상태: APPLIED → ALLOTTED | REFUNDED (둘 다 종료 상태)
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import Defaults
from core.domain.models import IPOApplication
from core.domain.state_machines import IPOStateMachine
from core.errors import InvalidAmountError, NotFoundError
from core.ledger.store import LedgerStore
from core.types import IPOStatus, ReferenceKind
from core.utils.dates import to_date
from core.utils.ids import IdPrefix, make_id
from core.utils.locks import LockSet
from core.utils.money import ZERO, money, to_amount

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


def _to_shares(value: Any, field_name: str, allow_zero: bool = False) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidAmountError(f"{field_name} must be a whole number: {value!r}")
    try:
        shares = int(value)
    except (TypeError, ValueError) as e:
        raise InvalidAmountError(f"{field_name} must be a whole number: {value!r}") from e
    if shares < 0 or (shares == 0 and not allow_zero):
        raise InvalidAmountError(f"{field_name} out of range: {value!r}")
    return shares


class IPOOrchestrator:
    """IPO 오케스트레이터

    Args:
        db: SQLite 어댑터
        ledger: 원장 저장소
        locks: 공유 잠금 묶음
    """

    def __init__(self, db: SQLiteAdapter, ledger: LedgerStore, locks: LockSet):
        self.db = db
        self.ledger = ledger
        self.locks = locks

    # -------------------------------------------------------------------------
    # 상태 전이
    # -------------------------------------------------------------------------

    async def apply(
        self,
        company_name: str,
        application_date: date | str | None,
        amount: Decimal | str | int,
        shares_applied: int,
        bank_id: str,
        issue_price: Decimal | str | int | None = None,
    ) -> IPOApplication:
        """IPO 청약 (APPLIED로 생성, 은행 debit = 보류 금액)

        잔액 하한을 두지 않는다 (마이너스 잔액 허용).

        Raises:
            NotFoundError: 존재하지 않는 은행
            InvalidAmountError: 0 이하 금액/주식 수
        """
        company = " ".join((company_name or "").split())
        if not company:
            raise ValueError("Company name is required")

        value = to_amount(amount)
        shares = _to_shares(shares_applied, "shares_applied")
        price = to_amount(issue_price) if issue_price is not None else None
        day = to_date(application_date)
        ipo_id = make_id(IdPrefix.IPO)

        async with self.locks.banks.hold(bank_id):
            async with self.db.transaction():
                await self.ledger.ensure_bank(bank_id)
                await self.db.execute(
                    """
                    INSERT INTO ipo_applications (
                        ipo_id, company_name, application_date, amount,
                        shares_applied, issue_price, bank_id, status
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        ipo_id,
                        company,
                        day.isoformat(),
                        str(value),
                        shares,
                        str(price) if price is not None else None,
                        bank_id,
                        IPOStatus.APPLIED.value,
                    ),
                )
                entry = await self.ledger.append_entry(
                    bank_id=bank_id,
                    entry_date=day,
                    description=f"IPO Application - {company}",
                    debit=value,
                    reference_kind=ReferenceKind.IPO_APPLY,
                    reference_id=ipo_id,
                )
                ipo = await self.get(ipo_id)

        logger.info(
            f"IPO applied: {company}",
            extra={
                "ipo_id": ipo_id,
                "bank_id": bank_id,
                "amount": str(value),
                "balance_after": str(entry.balance_after),
            },
        )
        return ipo

    async def allot(
        self,
        ipo_id: str,
        shares_allotted: int,
        refund_amount: Decimal | str | int = ZERO,
        allotment_date: date | str | None = None,
    ) -> IPOApplication:
        """배정 (APPLIED → ALLOTTED)

        refund_amount > 0이면 청약 은행에 credit 기록 (부분 환불).

        Raises:
            NotFoundError: 존재하지 않는 IPO
            InvalidStateError: APPLIED가 아닌 상태
            InvalidAmountError: 0 ≤ shares_allotted ≤ shares_applied,
                0 ≤ refund_amount ≤ amount 위반
        """
        shares = _to_shares(shares_allotted, "shares_allotted", allow_zero=True)
        refund = money(refund_amount)
        day = to_date(allotment_date)

        async with self.locks.ipos.hold(ipo_id):
            ipo = await self.get(ipo_id)
            async with self.locks.banks.hold(ipo.bank_id):
                async with self.db.transaction():
                    ipo = await self.get(ipo_id)
                    machine = IPOStateMachine(ipo.status, name=f"IPO[{ipo_id}]")
                    machine.transition(IPOStatus.ALLOTTED)

                    if shares > ipo.shares_applied:
                        raise InvalidAmountError(
                            f"shares_allotted {shares} exceeds shares_applied {ipo.shares_applied}"
                        )
                    if refund < 0 or refund > ipo.amount:
                        raise InvalidAmountError(
                            f"refund_amount must be between 0 and {ipo.amount}: {refund_amount!r}"
                        )

                    await self.db.execute(
                        """
                        UPDATE ipo_applications
                        SET status = ?, shares_allotted = ?, allotment_date = ?,
                            updated_at = datetime('now')
                        WHERE ipo_id = ?
                        """,
                        (machine.state, shares, day.isoformat(), ipo_id),
                    )

                    if refund > 0:
                        await self.ledger.append_entry(
                            bank_id=ipo.bank_id,
                            entry_date=day,
                            description=f"IPO Refund - {ipo.company_name}",
                            credit=refund,
                            reference_kind=ReferenceKind.IPO_REFUND,
                            reference_id=ipo_id,
                        )
                    ipo = await self.get(ipo_id)

        logger.info(
            f"IPO allotted: {ipo.company_name}",
            extra={"ipo_id": ipo_id, "shares_allotted": shares, "refund": str(refund)},
        )
        return ipo

    async def refund(
        self,
        ipo_id: str,
        refund_date: date | str | None = None,
    ) -> IPOApplication:
        """미배정 전액 환불 (APPLIED → REFUNDED)

        청약 은행에 원래 청약 금액 전체를 credit 기록.

        Raises:
            NotFoundError: 존재하지 않는 IPO
            InvalidStateError: APPLIED가 아닌 상태
        """
        day = to_date(refund_date)

        async with self.locks.ipos.hold(ipo_id):
            ipo = await self.get(ipo_id)
            async with self.locks.banks.hold(ipo.bank_id):
                async with self.db.transaction():
                    ipo = await self.get(ipo_id)
                    machine = IPOStateMachine(ipo.status, name=f"IPO[{ipo_id}]")
                    machine.transition(IPOStatus.REFUNDED)

                    await self.db.execute(
                        """
                        UPDATE ipo_applications
                        SET status = ?, shares_allotted = 0, updated_at = datetime('now')
                        WHERE ipo_id = ?
                        """,
                        (machine.state, ipo_id),
                    )
                    await self.ledger.append_entry(
                        bank_id=ipo.bank_id,
                        entry_date=day,
                        description=f"IPO Full Refund - {ipo.company_name}",
                        credit=ipo.amount,
                        reference_kind=ReferenceKind.IPO_REFUND,
                        reference_id=ipo_id,
                    )
                    ipo = await self.get(ipo_id)

        logger.info(
            f"IPO refunded: {ipo.company_name}",
            extra={"ipo_id": ipo_id, "amount": str(ipo.amount)},
        )
        return ipo

    async def set_listing_price(
        self,
        ipo_id: str,
        listing_price: Decimal | str | int,
    ) -> IPOApplication:
        """상장가 기록 (손익 표시용, 원장과 무관)"""
        price = to_amount(listing_price)

        async with self.locks.ipos.hold(ipo_id):
            async with self.db.transaction():
                await self.get(ipo_id)
                await self.db.execute(
                    """
                    UPDATE ipo_applications SET listing_price = ?, updated_at = datetime('now')
                    WHERE ipo_id = ?
                    """,
                    (str(price), ipo_id),
                )
                ipo = await self.get(ipo_id)

        logger.info("IPO listing price set", extra={"ipo_id": ipo_id, "listing_price": str(price)})
        return ipo

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get(self, ipo_id: str) -> IPOApplication:
        row = await self.db.fetchone_dict(
            "SELECT * FROM ipo_applications WHERE ipo_id = ?", (ipo_id,)
        )
        if row is None:
            raise NotFoundError("IPO application", ipo_id)
        return IPOApplication.from_row(row)

    async def list(
        self,
        status: IPOStatus | str | None = None,
        limit: int = Defaults.PAGE_LIMIT,
        offset: int = 0,
    ) -> list[IPOApplication]:
        """청약 목록 (청약일 내림차순)"""
        if status is not None:
            rows = await self.db.fetchall_dict(
                """
                SELECT * FROM ipo_applications WHERE status = ?
                ORDER BY application_date DESC, rowid DESC LIMIT ? OFFSET ?
                """,
                (IPOStatus(status).value, limit, offset),
            )
        else:
            rows = await self.db.fetchall_dict(
                """
                SELECT * FROM ipo_applications
                ORDER BY application_date DESC, rowid DESC LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
        return [IPOApplication.from_row(r) for r in rows]
