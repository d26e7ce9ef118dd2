"""
계정 레지스트리

은행 계좌와 신용카드 CRUD.
은행 잔액은 저장하지 않고 조회 시마다 원장에서 계산한다.
카드 미결제액(outstanding)은 직접 갱신되는 저장 필드이다.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.domain.models import Bank, CreditCard
from core.errors import ConstraintViolationError, InvalidAmountError, NotFoundError
from core.ledger.store import LedgerStore
from core.types import ReferenceKind
from core.utils.ids import IdPrefix, make_id
from core.utils.money import ZERO, money, to_amount

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

OPENING_BALANCE_DESCRIPTION = "Opening balance"


def _validate_due_day(due_day: Any) -> int:
    try:
        day = int(due_day)
    except (TypeError, ValueError) as e:
        raise InvalidAmountError(f"due_day must be an integer: {due_day!r}") from e
    if not 1 <= day <= 31:
        raise InvalidAmountError(f"due_day must be between 1 and 31: {day}")
    return day


class AccountRegistry:
    """은행/신용카드 레지스트리

    카드 미결제액을 바꾸는 apply_card_spend / apply_card_payment는
    호출자가 해당 카드 잠금을 보유한 상태에서 호출해야 한다.

    Args:
        db: SQLite 어댑터
        ledger: 원장 저장소 (잔액 계산, 개시 잔액 기록)
    """

    def __init__(self, db: SQLiteAdapter, ledger: LedgerStore):
        self.db = db
        self.ledger = ledger

    # =========================================================================
    # 은행
    # =========================================================================

    async def create_bank(
        self,
        name: str,
        account_number: str = "",
        opening_balance: Decimal | str | int | None = None,
        opening_date: date | str | None = None,
    ) -> Bank:
        """은행 계좌 생성

        opening_balance > 0이면 개시 잔액 credit 항목 하나를 기록.

        Raises:
            InvalidAmountError: 음수 개시 잔액
        """
        if not name or not name.strip():
            raise ValueError("Bank name is required")

        opening = money(opening_balance)
        if opening < 0:
            raise InvalidAmountError(f"Opening balance must not be negative: {opening_balance!r}")

        bank_id = make_id(IdPrefix.BANK)

        async with self.db.transaction():
            await self.db.execute(
                "INSERT INTO banks (bank_id, name, account_number) VALUES (?, ?, ?)",
                (bank_id, name.strip(), account_number or ""),
            )
            if opening > 0:
                await self.ledger.append_entry(
                    bank_id=bank_id,
                    entry_date=opening_date,
                    description=OPENING_BALANCE_DESCRIPTION,
                    credit=opening,
                    reference_kind=ReferenceKind.OPENING_BALANCE,
                    reference_id=bank_id,
                )

        logger.info(
            f"Bank created: {name}",
            extra={"bank_id": bank_id, "opening_balance": str(opening)},
        )
        return await self.get_bank(bank_id)

    async def _bank_row(self, bank_id: str) -> dict[str, Any]:
        row = await self.db.fetchone_dict("SELECT * FROM banks WHERE bank_id = ?", (bank_id,))
        if row is None:
            raise NotFoundError("bank", bank_id)
        return row

    async def get_bank(self, bank_id: str) -> Bank:
        """은행 조회 (잔액은 매번 원장에서 계산)"""
        row = await self._bank_row(bank_id)
        balance = await self.ledger.compute_balance(bank_id)
        return Bank.from_row(row, balance=balance)

    async def list_banks(self) -> list[Bank]:
        """전체 은행 목록 (이름순, 각 잔액 계산)"""
        rows = await self.db.fetchall_dict("SELECT * FROM banks ORDER BY name")
        banks = []
        for row in rows:
            balance = await self.ledger.compute_balance(row["bank_id"])
            banks.append(Bank.from_row(row, balance=balance))
        return banks

    async def update_bank(
        self,
        bank_id: str,
        name: str | None = None,
        account_number: str | None = None,
    ) -> Bank:
        """은행 정보 수정 (이름/계좌번호만, 잔액은 수정 불가)"""
        row = await self._bank_row(bank_id)

        new_name = name.strip() if name is not None and name.strip() else row["name"]
        new_account = account_number if account_number is not None else row["account_number"]

        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE banks SET name = ?, account_number = ?, updated_at = datetime('now')
                WHERE bank_id = ?
                """,
                (new_name, new_account, bank_id),
            )

        logger.info("Bank updated", extra={"bank_id": bank_id})
        return await self.get_bank(bank_id)

    async def delete_bank(self, bank_id: str) -> None:
        """은행 삭제

        원장 항목은 함께 삭제(CASCADE)된다.
        거래나 IPO 청약이 참조 중이면 삭제할 수 없다.

        Raises:
            NotFoundError: 존재하지 않는 은행
            ConstraintViolationError: 참조 중인 거래/IPO 청약 존재
        """
        await self._bank_row(bank_id)

        try:
            async with self.db.transaction():
                refs = await self.db.fetchone(
                    """
                    SELECT
                        (SELECT COUNT(*) FROM transactions WHERE bank_id = ?),
                        (SELECT COUNT(*) FROM ipo_applications WHERE bank_id = ?)
                    """,
                    (bank_id, bank_id),
                )
                if refs and (refs[0] or refs[1]):
                    raise ConstraintViolationError(
                        f"Bank {bank_id} is referenced by {refs[0]} transaction(s) "
                        f"and {refs[1]} IPO application(s)"
                    )
                await self.db.execute("DELETE FROM banks WHERE bank_id = ?", (bank_id,))
        except sqlite3.IntegrityError as e:
            raise ConstraintViolationError(f"Bank {bank_id} is still referenced") from e

        logger.info("Bank deleted (ledger cascaded)", extra={"bank_id": bank_id})

    # =========================================================================
    # 신용카드
    # =========================================================================

    async def create_card(
        self,
        name: str,
        credit_limit: Decimal | str | int,
        due_day: int,
    ) -> CreditCard:
        """신용카드 생성 (미결제액 0으로 시작)

        Raises:
            InvalidAmountError: 음수 한도, 1~31 범위 밖의 결제일
        """
        if not name or not name.strip():
            raise ValueError("Card name is required")

        limit = to_amount(credit_limit, allow_zero=True)
        day = _validate_due_day(due_day)
        card_id = make_id(IdPrefix.CARD)

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO credit_cards (card_id, name, credit_limit, outstanding, due_day)
                VALUES (?, ?, ?, ?, ?)
                """,
                (card_id, name.strip(), str(limit), str(ZERO), day),
            )

        logger.info(
            f"Credit card created: {name}",
            extra={"card_id": card_id, "credit_limit": str(limit)},
        )
        return await self.get_card(card_id)

    async def get_card(self, card_id: str) -> CreditCard:
        row = await self.db.fetchone_dict(
            "SELECT * FROM credit_cards WHERE card_id = ?", (card_id,)
        )
        if row is None:
            raise NotFoundError("credit card", card_id)
        return CreditCard.from_row(row)

    async def list_cards(self) -> list[CreditCard]:
        """전체 카드 목록 (이름순, available_credit 포함)"""
        rows = await self.db.fetchall_dict("SELECT * FROM credit_cards ORDER BY name")
        return [CreditCard.from_row(r) for r in rows]

    async def update_card(
        self,
        card_id: str,
        name: str | None = None,
        credit_limit: Decimal | str | int | None = None,
        due_day: int | None = None,
    ) -> CreditCard:
        """카드 정보 수정 (이름/한도/결제일, 미결제액은 수정 불가)"""
        card = await self.get_card(card_id)

        new_name = name.strip() if name is not None and name.strip() else card.name
        new_limit = to_amount(credit_limit, allow_zero=True) if credit_limit is not None else card.credit_limit
        new_day = _validate_due_day(due_day) if due_day is not None else card.due_day

        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE credit_cards
                SET name = ?, credit_limit = ?, due_day = ?, updated_at = datetime('now')
                WHERE card_id = ?
                """,
                (new_name, str(new_limit), new_day, card_id),
            )

        logger.info("Credit card updated", extra={"card_id": card_id})
        return await self.get_card(card_id)

    async def delete_card(self, card_id: str) -> None:
        """카드 삭제 (원장 항목이 없으므로 연쇄 삭제 없음)"""
        await self.get_card(card_id)
        async with self.db.transaction():
            await self.db.execute("DELETE FROM credit_cards WHERE card_id = ?", (card_id,))
        logger.info("Credit card deleted", extra={"card_id": card_id})

    async def _set_outstanding(self, card_id: str, outstanding: Decimal) -> None:
        await self.db.execute(
            """
            UPDATE credit_cards SET outstanding = ?, updated_at = datetime('now')
            WHERE card_id = ?
            """,
            (str(outstanding), card_id),
        )

    async def apply_card_spend(self, card_id: str, amount: Decimal | str | int) -> CreditCard:
        """사용액 반영: outstanding += amount

        한도 초과를 막지 않는다.
        """
        value = to_amount(amount)
        async with self.db.transaction():
            card = await self.get_card(card_id)
            await self._set_outstanding(card_id, card.outstanding + value)
            updated = await self.get_card(card_id)

        if updated.outstanding > updated.credit_limit:
            logger.warning(
                "Credit card outstanding exceeds limit",
                extra={"card_id": card_id, "outstanding": str(updated.outstanding)},
            )
        return updated

    async def apply_card_payment(
        self,
        card_id: str,
        amount: Decimal | str | int,
    ) -> tuple[CreditCard, Decimal]:
        """결제액 반영: outstanding = max(0, outstanding - amount)

        Returns:
            (갱신된 카드, 실제로 미결제액에서 차감된 금액)
        """
        value = to_amount(amount)
        async with self.db.transaction():
            card = await self.get_card(card_id)
            applied = min(value, card.outstanding)
            await self._set_outstanding(card_id, max(ZERO, card.outstanding - value))
            updated = await self.get_card(card_id)

        return updated, applied
