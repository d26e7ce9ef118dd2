"""
Ledger Engine

은행 원장/카드/대출/거래/IPO를 서로 일관되게 유지하는 엔진.
UI/봇 등 외부 협력자는 이 패키지의 LedgerEngine을 통해서만 잔액에 영향을 주는 쓰기를 한다.

사용 예시:
```python
from core.engine import LedgerEngine

engine = LedgerEngine(db, config)

bank = await engine.banks.create_bank("HDFC", opening_balance="1000")
txn = await engine.transactions.create("2026-03-01", "Lunch", "300", "Raj", bank.bank_id)
await engine.loans.repay(txn.created_loan_id, "300", bank.bank_id)
```
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.accounts.persons import PersonRegistry
from core.accounts.registry import AccountRegistry
from core.config.loader import AppConfig
from core.engine.credit_cards import CardPayment, CardSpend, CreditCardOrchestrator
from core.engine.dashboard import DashboardService, DashboardStats, ExpenseSummary
from core.engine.ipo import IPOOrchestrator
from core.engine.transactions import TransactionOrchestrator
from core.ledger.store import LedgerStore
from core.loans.tracker import LoanTracker
from core.utils.locks import LockSet

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter


class LedgerEngine:
    """엔진 파사드

    모든 구성 요소가 하나의 DB 어댑터와 잠금 묶음을 공유한다.

    Attributes:
        ledger: 원장 저장소
        banks: 은행 레지스트리 (AccountRegistry)
        cards: 카드 오케스트레이터 (CRUD는 registry 위임)
        loans: 대출 추적기
        transactions: 거래 오케스트레이터
        ipos: IPO 오케스트레이터
        persons: 인물 레지스트리
        dashboard: 집계 서비스

    Args:
        db: 연결된 SQLiteAdapter
        config: 애플리케이션 설정
    """

    def __init__(self, db: SQLiteAdapter, config: AppConfig | None = None):
        self.db = db
        self.config = config or AppConfig()
        self.locks = LockSet()

        self.ledger = LedgerStore(db)
        self.registry = AccountRegistry(db, self.ledger)
        self.persons = PersonRegistry(db, self.config.self_aliases)
        self.loans = LoanTracker(
            db,
            self.ledger,
            loan_locks=self.locks.loans,
            bank_locks=self.locks.banks,
            overpayment_policy=self.config.overpayment_policy,
        )
        self.transactions = TransactionOrchestrator(
            db, self.ledger, self.loans, self.persons, self.locks
        )
        self.card_ops = CreditCardOrchestrator(
            db,
            self.registry,
            self.ledger,
            self.loans,
            self.persons,
            self.locks,
            overpayment_policy=self.config.overpayment_policy,
        )
        self.ipos = IPOOrchestrator(db, self.ledger, self.locks)
        self.dashboard = DashboardService(db, self.ledger)

    @property
    def banks(self) -> AccountRegistry:
        return self.registry

    @property
    def cards(self) -> "CardFacade":
        return CardFacade(self.registry, self.card_ops)


class CardFacade:
    """card.* 네임스페이스 (CRUD + spend/pay)"""

    def __init__(self, registry: AccountRegistry, ops: CreditCardOrchestrator):
        self.create = registry.create_card
        self.get = registry.get_card
        self.list = registry.list_cards
        self.update = registry.update_card
        self.delete = registry.delete_card
        self.spend = ops.spend
        self.pay = ops.pay


__all__ = [
    "LedgerEngine",
    "CardFacade",
    "CardPayment",
    "CardSpend",
    "DashboardStats",
    "ExpenseSummary",
]
