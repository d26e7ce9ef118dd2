"""
은행 원장 스키마 초기화

Web 시작 시 자동으로 원장 테이블과 View 생성.
CREATE IF NOT EXISTS / DROP VIEW IF EXISTS 패턴으로 안전하게 동작.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """원장 스키마 초기화 (테이블 + View)

    banks 테이블이 먼저 존재해야 한다 (FK 참조).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await _create_ledger_tables(db)
    await _create_ledger_views(db)
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """원장 테이블 생성

    seq는 삽입 순서이며 잔액 계산의 유일한 기준이다.
    항목은 추가만 되고 수정되지 않는다.
    """
    await db.execute("""
        CREATE TABLE IF NOT EXISTS bank_ledger (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_id         TEXT NOT NULL UNIQUE,
            bank_id          TEXT NOT NULL,
            entry_date       TEXT NOT NULL,
            description      TEXT NOT NULL DEFAULT '',
            debit            TEXT NOT NULL DEFAULT '0',
            credit           TEXT NOT NULL DEFAULT '0',
            balance_after    TEXT NOT NULL,
            reference_kind   TEXT NOT NULL,
            reference_id     TEXT,
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            FOREIGN KEY (bank_id) REFERENCES banks(bank_id) ON DELETE CASCADE
        )
    """)

    await db.execute("CREATE INDEX IF NOT EXISTS idx_bank_ledger_bank ON bank_ledger(bank_id, seq)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_bank_ledger_date ON bank_ledger(bank_id, entry_date)")
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_bank_ledger_ref ON bank_ledger(reference_kind, reference_id)"
    )

    logger.debug("Ledger 테이블 생성 완료")


async def _create_ledger_views(db: "SQLiteAdapter") -> None:
    """대시보드 조회용 View 생성

    View는 항상 DROP 후 CREATE하여 스키마 변경 시에도 안전.
    """

    # 은행별 마지막 항목의 balance_after (집계용 스냅샷)
    await db.execute("DROP VIEW IF EXISTS v_bank_latest_balance")
    await db.execute("""
        CREATE VIEW v_bank_latest_balance AS
        SELECT
            b.bank_id,
            b.name,
            COALESCE(bl.balance_after, '0') AS balance,
            bl.seq AS last_seq,
            bl.entry_date AS last_entry_date
        FROM banks b
        LEFT JOIN bank_ledger bl
            ON bl.seq = (
                SELECT MAX(seq) FROM bank_ledger WHERE bank_id = b.bank_id
            )
    """)

    logger.debug("Ledger View 생성 완료")
