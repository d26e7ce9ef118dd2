"""
core/engine/transactions.py 통합 테스트

지출 기록 (대출 생성 + 원장 debit), 수정/삭제 보상 항목
"""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from core.engine import LedgerEngine
from core.errors import ConstraintViolationError, InvalidAmountError, NotFoundError
from core.types import LedgerOrder, LoanSourceType, ReferenceKind
from core.utils.dates import today


@pytest_asyncio.fixture
async def hdfc(engine: LedgerEngine):
    return await engine.banks.create_bank("HDFC", opening_balance="1000")


class TestCreate:
    """create 테스트"""

    @pytest.mark.asyncio
    async def test_self_expense(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create("2026-03-01", "Groceries", "200", "Me", hdfc.bank_id)

        assert txn.created_loan_id is None
        assert txn.bank_name == "HDFC"
        assert await engine.loans.list_loans() == []

        entries = await engine.ledger.list_entries(hdfc.bank_id, LedgerOrder.INSERTION)
        assert entries[-1].debit == Decimal("200.00")
        assert entries[-1].description == "Groceries"
        assert entries[-1].reference_id == txn.transaction_id
        assert entries[-1].balance_after == Decimal("800.00")

    @pytest.mark.asyncio
    async def test_other_owner_creates_loan(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create("2026-03-01", "Dinner", "300", "Raj", hdfc.bank_id)

        loan = await engine.loans.get_loan(txn.created_loan_id)

        assert loan.borrower_name == "Raj"
        assert loan.principal_amount == Decimal("300.00")
        assert loan.outstanding_amount == Decimal("300.00")
        assert loan.source_type == LoanSourceType.BANK_EXPENSE
        assert loan.source_ref == hdfc.bank_id
        assert (await engine.banks.get_bank(hdfc.bank_id)).balance == Decimal("700.00")

    @pytest.mark.asyncio
    async def test_unknown_bank_leaves_nothing(self, engine: LedgerEngine) -> None:
        with pytest.raises(NotFoundError):
            await engine.transactions.create(None, "x", "10", "Raj", "bnk-missing")

        assert await engine.transactions.list() == []
        assert await engine.loans.list_loans() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-10", "ten", "1e30"])
    async def test_invalid_amount(self, engine: LedgerEngine, hdfc, amount: str) -> None:
        with pytest.raises(InvalidAmountError):
            await engine.transactions.create(None, "x", amount, "Me", hdfc.bank_id)

        assert await engine.ledger.count_entries(hdfc.bank_id) == 1

    @pytest.mark.asyncio
    async def test_owner_required(self, engine: LedgerEngine, hdfc) -> None:
        with pytest.raises(ValueError):
            await engine.transactions.create(None, "x", "10", "  ", hdfc.bank_id)

    @pytest.mark.asyncio
    async def test_default_date_is_today(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create(None, "x", "10", "Me", hdfc.bank_id)
        assert txn.txn_date == today()


class TestList:
    """list 필터 테스트"""

    @pytest.mark.asyncio
    async def test_filters(self, engine: LedgerEngine, hdfc) -> None:
        sbi = await engine.banks.create_bank("SBI", opening_balance="500")
        await engine.transactions.create("2026-03-01", "a", "10", "Me", hdfc.bank_id)
        await engine.transactions.create("2026-03-05", "b", "20", "Raj", hdfc.bank_id)
        await engine.transactions.create("2026-03-10", "c", "30", "Me", sbi.bank_id)

        everything = await engine.transactions.list()
        by_bank = await engine.transactions.list(bank_id=sbi.bank_id)
        by_range = await engine.transactions.list(start="2026-03-02", end="2026-03-10")
        by_owner = await engine.transactions.list(owner_name="raj")
        paged = await engine.transactions.list(limit=1, offset=1)

        assert [t.description for t in everything] == ["c", "b", "a"]
        assert [t.description for t in by_bank] == ["c"]
        assert [t.description for t in by_range] == ["c", "b"]
        assert [t.description for t in by_owner] == ["b"]
        assert [t.description for t in paged] == ["b"]


class TestUpdate:
    """update 테스트"""

    @pytest.mark.asyncio
    async def test_description_only_keeps_ledger(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create("2026-03-01", "Tea", "10", "Me", hdfc.bank_id)
        before = await engine.ledger.count_entries(hdfc.bank_id)

        updated = await engine.transactions.update(
            txn.transaction_id, txn_date="2026-03-02", description="Green tea"
        )

        assert updated.description == "Green tea"
        assert updated.txn_date == date(2026, 3, 2)
        assert await engine.ledger.count_entries(hdfc.bank_id) == before

    @pytest.mark.asyncio
    async def test_amount_change_posts_reversal(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create("2026-03-01", "Tea", "100", "Me", hdfc.bank_id)

        await engine.transactions.update(txn.transaction_id, amount="150")

        entries = await engine.ledger.list_entries(hdfc.bank_id, LedgerOrder.INSERTION)
        reversal, repost = entries[-2], entries[-1]

        assert reversal.reference_kind == ReferenceKind.REVERSAL
        assert reversal.credit == Decimal("100.00")
        assert reversal.description == "Reversal - Tea"
        assert repost.debit == Decimal("150.00")
        assert repost.entry_date == date(2026, 3, 1)
        assert (await engine.banks.get_bank(hdfc.bank_id)).balance == Decimal("850.00")

    @pytest.mark.asyncio
    async def test_bank_change_moves_debit(self, engine: LedgerEngine, hdfc) -> None:
        sbi = await engine.banks.create_bank("SBI", opening_balance="500")
        txn = await engine.transactions.create("2026-03-01", "Tea", "100", "Raj", hdfc.bank_id)

        updated = await engine.transactions.update(txn.transaction_id, bank_id=sbi.bank_id)

        assert updated.bank_id == sbi.bank_id
        assert (await engine.banks.get_bank(hdfc.bank_id)).balance == Decimal("1000.00")
        assert (await engine.banks.get_bank(sbi.bank_id)).balance == Decimal("400.00")

        loan = await engine.loans.get_loan(txn.created_loan_id)
        assert loan.source_ref == sbi.bank_id

    @pytest.mark.asyncio
    async def test_untouched_loan_follows_amount(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create(None, "Dinner", "300", "Raj", hdfc.bank_id)

        await engine.transactions.update(txn.transaction_id, amount="250", owner_name="Raju")

        loan = await engine.loans.get_loan(txn.created_loan_id)
        assert loan.principal_amount == Decimal("250.00")
        assert loan.outstanding_amount == Decimal("250.00")
        assert loan.borrower_name == "Raju"

    @pytest.mark.asyncio
    async def test_touched_loan_blocks_amount_change(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create(None, "Dinner", "300", "Raj", hdfc.bank_id)
        await engine.loans.repay(txn.created_loan_id, "100")
        before = await engine.ledger.count_entries(hdfc.bank_id)

        with pytest.raises(ConstraintViolationError):
            await engine.transactions.update(txn.transaction_id, amount="400")

        assert await engine.ledger.count_entries(hdfc.bank_id) == before
        assert (await engine.transactions.get(txn.transaction_id)).amount == Decimal("300.00")

    @pytest.mark.asyncio
    async def test_touched_loan_allows_bank_change(self, engine: LedgerEngine, hdfc) -> None:
        sbi = await engine.banks.create_bank("SBI")
        txn = await engine.transactions.create(None, "Dinner", "300", "Raj", hdfc.bank_id)
        await engine.loans.repay(txn.created_loan_id, "100")

        await engine.transactions.update(txn.transaction_id, bank_id=sbi.bank_id)

        loan = await engine.loans.get_loan(txn.created_loan_id)
        assert loan.source_ref == hdfc.bank_id
        assert loan.outstanding_amount == Decimal("200.00")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("old_owner,new_owner", [("Me", "Raj"), ("Raj", "Me")])
    async def test_self_switch_rejected(
        self, engine: LedgerEngine, hdfc, old_owner: str, new_owner: str
    ) -> None:
        txn = await engine.transactions.create(None, "x", "10", old_owner, hdfc.bank_id)

        with pytest.raises(ConstraintViolationError):
            await engine.transactions.update(txn.transaction_id, owner_name=new_owner)

    @pytest.mark.asyncio
    async def test_unknown_new_bank(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create(None, "x", "10", "Me", hdfc.bank_id)

        with pytest.raises(NotFoundError):
            await engine.transactions.update(txn.transaction_id, bank_id="bnk-missing")


class TestDelete:
    """delete 테스트"""

    @pytest.mark.asyncio
    async def test_delete_self_expense(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create("2026-03-01", "Tea", "100", "Me", hdfc.bank_id)

        await engine.transactions.delete(txn.transaction_id)

        with pytest.raises(NotFoundError):
            await engine.transactions.get(txn.transaction_id)

        entries = await engine.ledger.list_entries(hdfc.bank_id, LedgerOrder.INSERTION)
        assert len(entries) == 3
        assert entries[-1].reference_kind == ReferenceKind.REVERSAL
        assert entries[-1].credit == Decimal("100.00")
        assert (await engine.banks.get_bank(hdfc.bank_id)).balance == Decimal("1000.00")

    @pytest.mark.asyncio
    async def test_delete_removes_untouched_loan(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create(None, "Dinner", "300", "Raj", hdfc.bank_id)

        await engine.transactions.delete(txn.transaction_id)

        with pytest.raises(NotFoundError):
            await engine.loans.get_loan(txn.created_loan_id)

    @pytest.mark.asyncio
    async def test_delete_blocked_by_repayment(self, engine: LedgerEngine, hdfc) -> None:
        txn = await engine.transactions.create(None, "Dinner", "300", "Raj", hdfc.bank_id)
        await engine.loans.repay(txn.created_loan_id, "300")

        with pytest.raises(ConstraintViolationError):
            await engine.transactions.delete(txn.transaction_id)

        assert (await engine.transactions.get(txn.transaction_id)).amount == Decimal("300.00")

    @pytest.mark.asyncio
    async def test_delete_unknown(self, engine: LedgerEngine) -> None:
        with pytest.raises(NotFoundError):
            await engine.transactions.delete("txn-missing")
