"""
adapters/db/sqlite_adapter.py 테스트

WAL 설정, 트랜잭션 커밋/롤백, 중첩 합류, 외래 키
"""

import asyncio
import sqlite3
from pathlib import Path

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema


class TestConnection:
    """연결 설정 테스트"""

    @pytest.mark.asyncio
    async def test_wal_and_foreign_keys(self, temp_dir: Path) -> None:
        async with SQLiteAdapter(temp_dir / "sub" / "a.db") as adapter:
            assert adapter.is_connected

            journal = await adapter.fetchone("PRAGMA journal_mode")
            fk = await adapter.fetchone("PRAGMA foreign_keys")

            assert journal[0].lower() == "wal"
            assert fk[0] == 1

        assert not adapter.is_connected

    @pytest.mark.asyncio
    async def test_execute_without_connection(self, temp_dir: Path) -> None:
        adapter = SQLiteAdapter(temp_dir / "a.db")

        with pytest.raises(RuntimeError):
            await adapter.execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_init_schema_idempotent(self, db: SQLiteAdapter) -> None:
        await init_schema(db)

        for table in (
            "banks",
            "credit_cards",
            "loans",
            "transactions",
            "ipo_applications",
            "persons",
            "bank_ledger",
        ):
            assert await db.table_exists(table)

        columns = {row[1] for row in await db.fetchall("PRAGMA table_info(banks)")}
        assert "balance" not in columns


class TestTransaction:
    """transaction() 테스트"""

    @pytest.mark.asyncio
    async def test_commit(self, db: SQLiteAdapter) -> None:
        async with db.transaction():
            await db.execute(
                "INSERT INTO banks (bank_id, name) VALUES (?, ?)", ("bnk-1", "HDFC")
            )

        row = await db.fetchone_dict("SELECT * FROM banks WHERE bank_id = ?", ("bnk-1",))
        assert row is not None
        assert row["name"] == "HDFC"

    @pytest.mark.asyncio
    async def test_rollback_on_error(self, db: SQLiteAdapter) -> None:
        with pytest.raises(ValueError):
            async with db.transaction():
                await db.execute(
                    "INSERT INTO banks (bank_id, name) VALUES (?, ?)", ("bnk-1", "HDFC")
                )
                raise ValueError("abort")

        assert await db.fetchone("SELECT * FROM banks") is None
        assert not db.in_transaction

    @pytest.mark.asyncio
    async def test_nested_joins_outer(self, db: SQLiteAdapter) -> None:
        """중첩 transaction()은 바깥 트랜잭션과 함께 롤백"""
        with pytest.raises(ValueError):
            async with db.transaction():
                async with db.transaction():
                    await db.execute(
                        "INSERT INTO banks (bank_id, name) VALUES (?, ?)", ("bnk-1", "HDFC")
                    )
                assert db.in_transaction
                raise ValueError("abort")

        assert await db.fetchall("SELECT * FROM banks") == []

    @pytest.mark.asyncio
    async def test_concurrent_transactions_serialized(self, db: SQLiteAdapter) -> None:
        """다른 태스크의 트랜잭션은 순서대로 실행"""
        order: list[str] = []

        async def work(name: str) -> None:
            async with db.transaction():
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(work("a"), work("b"))

        assert order in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )


class TestForeignKeys:
    """외래 키 제약 테스트"""

    @pytest.mark.asyncio
    async def test_transaction_requires_bank(self, db: SQLiteAdapter) -> None:
        with pytest.raises(sqlite3.IntegrityError):
            await db.execute(
                """
                INSERT INTO transactions
                    (transaction_id, txn_date, amount, expense_owner, bank_id)
                VALUES ('txn-1', '2026-03-01', '10.00', 'Me', 'bnk-missing')
                """
            )

    @pytest.mark.asyncio
    async def test_ledger_cascades_with_bank(self, db: SQLiteAdapter) -> None:
        await db.execute("INSERT INTO banks (bank_id, name) VALUES ('bnk-1', 'HDFC')")
        await db.execute(
            """
            INSERT INTO bank_ledger
                (entry_id, bank_id, entry_date, description, debit, credit,
                 balance_after, reference_kind)
            VALUES ('led-1', 'bnk-1', '2026-03-01', 'Opening balance',
                    '0.00', '100.00', '100.00', 'opening_balance')
            """
        )

        await db.execute("DELETE FROM banks WHERE bank_id = 'bnk-1'")

        assert await db.fetchall("SELECT * FROM bank_ledger") == []
