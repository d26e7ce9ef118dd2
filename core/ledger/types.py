"""
원장 타입 정의

원장 항목(LedgerEntry) 데이터 구조
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from core.types import ReferenceKind
from core.utils.money import from_db


@dataclass(frozen=True)
class LedgerEntry:
    """은행 원장 항목

    한 은행 계좌에 대한 불변 입출금 기록.
    debit/credit 중 하나만 0이 아닌 것이 관례이나 강제하지 않는다.

    Attributes:
        entry_id: 항목 ID
        seq: 삽입 순서 (잔액 연쇄 기준)
        bank_id: 소속 은행 ID
        entry_date: 달력 날짜
        description: 설명
        debit: 출금액 (≥0)
        credit: 입금액 (≥0)
        balance_after: 삽입 시점의 잔액 스냅샷
        reference_kind: 생성한 오케스트레이터 구분
        reference_id: 원천 레코드 ID
    """

    entry_id: str
    seq: int
    bank_id: str
    entry_date: date
    description: str
    debit: Decimal
    credit: Decimal
    balance_after: Decimal
    reference_kind: ReferenceKind
    reference_id: str | None
    created_at: str | None = None

    @property
    def net(self) -> Decimal:
        """항목의 순변동 (credit - debit)"""
        return self.credit - self.debit

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "LedgerEntry":
        """DB 행에서 생성"""
        return cls(
            entry_id=row["entry_id"],
            seq=row["seq"],
            bank_id=row["bank_id"],
            entry_date=date.fromisoformat(row["entry_date"]),
            description=row["description"],
            debit=from_db(row["debit"]),
            credit=from_db(row["credit"]),
            balance_after=from_db(row["balance_after"]),
            reference_kind=ReferenceKind(row["reference_kind"]),
            reference_id=row.get("reference_id"),
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        """API 응답용 dict 변환"""
        return {
            "entry_id": self.entry_id,
            "seq": self.seq,
            "bank_id": self.bank_id,
            "date": self.entry_date.isoformat(),
            "description": self.description,
            "debit": str(self.debit),
            "credit": str(self.credit),
            "balance_after": str(self.balance_after),
            "reference_kind": self.reference_kind.value,
            "reference_id": self.reference_id,
            "created_at": self.created_at,
        }
