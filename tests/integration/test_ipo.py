"""
core/engine/ipo.py 통합 테스트

청약 보류, 배정 부분 환불, 전액 환불, 상태 전이 제한
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from core.engine import LedgerEngine
from core.errors import InvalidAmountError, InvalidStateError, NotFoundError
from core.types import IPOStatus, LedgerOrder, ReferenceKind


@pytest_asyncio.fixture
async def bank(engine: LedgerEngine):
    return await engine.banks.create_bank("HDFC", opening_balance="800")


async def _balance(engine: LedgerEngine, bank_id: str) -> Decimal:
    return (await engine.banks.get_bank(bank_id)).balance


class TestApply:
    """apply 테스트"""

    @pytest.mark.asyncio
    async def test_apply_debits_bank(self, engine: LedgerEngine, bank) -> None:
        ipo = await engine.ipos.apply("Acme", "2026-03-01", "10000", 100, bank.bank_id)

        assert ipo.status == IPOStatus.APPLIED
        assert ipo.shares_allotted is None
        assert await _balance(engine, bank.bank_id) == Decimal("-9200.00")

        entries = await engine.ledger.entries_for_reference(ReferenceKind.IPO_APPLY, ipo.ipo_id)
        assert entries[0].description == "IPO Application - Acme"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("shares", [0, -1, "x", 1.5])
    async def test_invalid_shares(self, engine: LedgerEngine, bank, shares: object) -> None:
        with pytest.raises(InvalidAmountError):
            await engine.ipos.apply("Acme", None, "1000", shares, bank.bank_id)

    @pytest.mark.asyncio
    async def test_unknown_bank(self, engine: LedgerEngine) -> None:
        with pytest.raises(NotFoundError):
            await engine.ipos.apply("Acme", None, "1000", 10, "bnk-missing")

        assert await engine.ipos.list() == []


class TestAllot:
    """allot 테스트"""

    @pytest.mark.asyncio
    async def test_allot_with_refund(self, engine: LedgerEngine, bank) -> None:
        ipo = await engine.ipos.apply("Acme", "2026-03-01", "10000", 100, bank.bank_id)

        allotted = await engine.ipos.allot(ipo.ipo_id, 60, "4000", "2026-03-05")

        assert allotted.status == IPOStatus.ALLOTTED
        assert allotted.shares_allotted == 60
        assert await _balance(engine, bank.bank_id) == Decimal("-5200.00")

        refunds = await engine.ledger.entries_for_reference(ReferenceKind.IPO_REFUND, ipo.ipo_id)
        assert refunds[0].description == "IPO Refund - Acme"
        assert refunds[0].credit == Decimal("4000.00")

    @pytest.mark.asyncio
    async def test_allot_without_refund(self, engine: LedgerEngine, bank) -> None:
        ipo = await engine.ipos.apply("Acme", None, "1000", 10, bank.bank_id)

        await engine.ipos.allot(ipo.ipo_id, 10)

        assert await engine.ledger.count_entries(bank.bank_id) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("shares,refund", [(11, "0"), (5, "1000.01"), (5, "-1")])
    async def test_out_of_range(self, engine: LedgerEngine, bank, shares: int, refund: str) -> None:
        ipo = await engine.ipos.apply("Acme", None, "1000", 10, bank.bank_id)

        with pytest.raises(InvalidAmountError):
            await engine.ipos.allot(ipo.ipo_id, shares, refund)

        assert (await engine.ipos.get(ipo.ipo_id)).status == IPOStatus.APPLIED

    @pytest.mark.asyncio
    async def test_terminal_state(self, engine: LedgerEngine, bank) -> None:
        ipo = await engine.ipos.apply("Acme", None, "1000", 10, bank.bank_id)
        await engine.ipos.allot(ipo.ipo_id, 10)
        before = await engine.ledger.count_entries(bank.bank_id)

        with pytest.raises(InvalidStateError):
            await engine.ipos.allot(ipo.ipo_id, 10)
        with pytest.raises(InvalidStateError):
            await engine.ipos.refund(ipo.ipo_id)

        assert await engine.ledger.count_entries(bank.bank_id) == before


class TestRefund:
    """refund 테스트"""

    @pytest.mark.asyncio
    async def test_full_refund(self, engine: LedgerEngine, bank) -> None:
        ipo = await engine.ipos.apply("Acme", None, "1000", 10, bank.bank_id)

        refunded = await engine.ipos.refund(ipo.ipo_id)

        assert refunded.status == IPOStatus.REFUNDED
        assert refunded.shares_allotted == 0
        assert await _balance(engine, bank.bank_id) == Decimal("800.00")

        entries = await engine.ledger.list_entries(bank.bank_id, LedgerOrder.INSERTION)
        assert entries[-1].description == "IPO Full Refund - Acme"

    @pytest.mark.asyncio
    async def test_refund_twice(self, engine: LedgerEngine, bank) -> None:
        ipo = await engine.ipos.apply("Acme", None, "1000", 10, bank.bank_id)
        await engine.ipos.refund(ipo.ipo_id)

        with pytest.raises(InvalidStateError):
            await engine.ipos.refund(ipo.ipo_id)

        assert await _balance(engine, bank.bank_id) == Decimal("800.00")


class TestListingAndList:
    """상장가 / 목록 테스트"""

    @pytest.mark.asyncio
    async def test_listing_gain(self, engine: LedgerEngine, bank) -> None:
        ipo = await engine.ipos.apply(
            "Acme", None, "1500", 10, bank.bank_id, issue_price="150"
        )
        await engine.ipos.allot(ipo.ipo_id, 5, "750")

        updated = await engine.ipos.set_listing_price(ipo.ipo_id, "180")

        assert updated.listing_gain == Decimal("150.00")
        assert await _balance(engine, bank.bank_id) == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_list_by_status(self, engine: LedgerEngine, bank) -> None:
        a = await engine.ipos.apply("A", "2026-03-01", "100", 1, bank.bank_id)
        b = await engine.ipos.apply("B", "2026-03-02", "100", 1, bank.bank_id)
        await engine.ipos.refund(a.ipo_id)

        pending = await engine.ipos.list(status=IPOStatus.APPLIED)
        everything = await engine.ipos.list()

        assert [i.ipo_id for i in pending] == [b.ipo_id]
        assert [i.ipo_id for i in everything] == [b.ipo_id, a.ipo_id]
