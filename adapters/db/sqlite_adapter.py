"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Web과 스크립트가 동시에 접근 가능하도록 설정.

트랜잭션은 명시적으로 관리 (autocommit 연결 + BEGIN IMMEDIATE).
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)


async def create_connection(db_path: Path | str) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    if db_path_str != ":memory:":
        # 디렉토리가 없으면 생성
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    # isolation_level=None: 드라이버 암묵 트랜잭션 비활성화 (BEGIN/COMMIT 직접 관리)
    conn = await aiosqlite.connect(db_path_str, isolation_level=None)

    await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화 (원장 CASCADE, 거래 RESTRICT)
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info("SQLite 연결 생성", extra={"db_path": db_path_str})

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    하나의 연결을 여러 코루틴이 공유하므로 쓰기 트랜잭션은
    연결 단위로 직렬화된다 (SQLite는 단일 writer).
    은행이 달라도 쓰기 트랜잭션은 한 번에 하나씩만 실행된다.
    같은 태스크 안에서 중첩된 transaction()은 바깥 트랜잭션에 합류한다.

    Args:
        db_path: DB 파일 경로

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        await adapter.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self._conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()
        self._tx_owner: asyncio.Task[Any] | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """현재 태스크가 트랜잭션을 보유 중인지 확인"""
        return self._tx_owner is not None and self._tx_owner is asyncio.current_task()

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def fetchone_dict(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> dict[str, Any] | None:
        """단일 행 조회 (컬럼명 dict)"""
        cursor = await self.execute(sql, parameters)
        row = await cursor.fetchone()

        if not row:
            return None

        columns = [desc[0] for desc in cursor.description]
        return dict(zip(columns, row))

    async def fetchall_dict(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[dict[str, Any]]:
        """전체 행 조회 (컬럼명 dict)"""
        cursor = await self.execute(sql, parameters)
        rows = await cursor.fetchall()

        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in rows]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.
        BEGIN IMMEDIATE로 시작하여 읽기-후-쓰기 구간 동안
        다른 연결의 쓰기를 막는다.

        사용 예시:
        ```python
        async with adapter.transaction():
            balance = await store.compute_balance(bank_id)
            await adapter.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if self.in_transaction:
            # 바깥 트랜잭션에 합류
            yield self._conn
            return

        async with self._write_lock:
            self._tx_owner = asyncio.current_task()
            await self._conn.execute("BEGIN IMMEDIATE")
            try:
                yield self._conn
            except BaseException:
                await self._conn.execute("ROLLBACK")
                raise
            else:
                await self._conn.execute("COMMIT")
            finally:
                self._tx_owner = None

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    계정/대출/거래/IPO/인물 테이블을 만들고
    은행 원장 스키마(core.ledger.schema)를 이어서 초기화한다.

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    from core.ledger.schema import init_ledger_schema

    # banks (잔액 컬럼 없음 - 항상 원장에서 계산)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS banks (
            bank_id          TEXT PRIMARY KEY,
            name             TEXT NOT NULL,
            account_number   TEXT NOT NULL DEFAULT '',
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # credit_cards (outstanding은 누적 저장값)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS credit_cards (
            card_id          TEXT PRIMARY KEY,
            name             TEXT NOT NULL,
            credit_limit     TEXT NOT NULL DEFAULT '0',
            outstanding      TEXT NOT NULL DEFAULT '0',
            due_day          INTEGER NOT NULL,
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # loans
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS loans (
            loan_id            TEXT PRIMARY KEY,
            borrower_name      TEXT NOT NULL,
            principal_amount   TEXT NOT NULL,
            outstanding_amount TEXT NOT NULL,
            is_paid            INTEGER NOT NULL DEFAULT 0,
            source_type        TEXT NOT NULL,
            source_ref         TEXT,
            created_at         TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at         TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # transactions
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS transactions (
            transaction_id   TEXT PRIMARY KEY,
            txn_date         TEXT NOT NULL,
            description      TEXT NOT NULL DEFAULT '',
            amount           TEXT NOT NULL,
            expense_owner    TEXT NOT NULL,
            bank_id          TEXT NOT NULL,
            created_loan_id  TEXT,
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now')),
            FOREIGN KEY (bank_id) REFERENCES banks(bank_id) ON DELETE RESTRICT,
            FOREIGN KEY (created_loan_id) REFERENCES loans(loan_id)
        )
    """)

    # ipo_applications
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS ipo_applications (
            ipo_id           TEXT PRIMARY KEY,
            company_name     TEXT NOT NULL,
            application_date TEXT NOT NULL,
            allotment_date   TEXT,
            amount           TEXT NOT NULL,
            shares_applied   INTEGER NOT NULL,
            shares_allotted  INTEGER,
            issue_price      TEXT,
            listing_price    TEXT,
            bank_id          TEXT NOT NULL,
            status           TEXT NOT NULL DEFAULT 'APPLIED',
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now')),
            FOREIGN KEY (bank_id) REFERENCES banks(bank_id) ON DELETE RESTRICT
        )
    """)

    # persons
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS persons (
            person_id        TEXT PRIMARY KEY,
            name             TEXT NOT NULL UNIQUE COLLATE NOCASE,
            is_self          INTEGER NOT NULL DEFAULT 0,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # 인덱스 생성
    await adapter.execute("CREATE INDEX IF NOT EXISTS ix_transactions_bank ON transactions(bank_id)")
    await adapter.execute("CREATE INDEX IF NOT EXISTS ix_transactions_date ON transactions(txn_date)")
    await adapter.execute("CREATE INDEX IF NOT EXISTS ix_loans_paid ON loans(is_paid)")
    await adapter.execute("CREATE INDEX IF NOT EXISTS ix_loans_borrower ON loans(borrower_name)")
    await adapter.execute("CREATE INDEX IF NOT EXISTS ix_ipo_status ON ipo_applications(status)")
    await adapter.execute("CREATE INDEX IF NOT EXISTS ix_ipo_bank ON ipo_applications(bank_id)")

    await init_ledger_schema(adapter)

    logger.info("스키마 초기화 완료")
