"""
은행 원장 (Bank Ledger)

은행 계좌별 추가 전용 원장과 파생 잔액.
잔액은 저장되지 않고 항상 원장 항목의 누적으로 계산된다.

사용 예시:
```python
from core.ledger import LedgerStore

ledger_store = LedgerStore(db)

# 항목 추가 (잔액 연쇄 자동 계산)
entry = await ledger_store.append_entry(
    bank_id, "2026-03-01", "Groceries", debit="200", reference_kind=ReferenceKind.TRANSACTION
)

# 잔액 조회
balance = await ledger_store.compute_balance(bank_id)
```
"""

from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.ledger.types import LedgerEntry

__all__ = [
    "LedgerStore",
    "LedgerEntry",
    "init_ledger_schema",
]
