"""
pytest 공통 fixture 정의

임시 SQLite DB, 스키마 초기화, LedgerEngine 구성
"""

import tempfile
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import AppConfig, SessionConfig, Settings
from core.engine import LedgerEngine
from core.types import OverpaymentPolicy

TEST_PIN = "4321"


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def reset_settings() -> Iterator[None]:
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def app_config(temp_dir: Path) -> AppConfig:
    """테스트용 설정 (PIN 설정, REQUESTED 정책)"""
    return AppConfig(
        db_path=temp_dir / "test_ledger.db",
        self_aliases=("Me",),
        overpayment_policy=OverpaymentPolicy.REQUESTED,
        session=SessionConfig(pin=TEST_PIN, ttl_minutes=30),
    )


@pytest_asyncio.fixture
async def db(app_config: AppConfig) -> AsyncIterator[SQLiteAdapter]:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(app_config.db_path)
    await adapter.connect()
    await init_schema(adapter)

    yield adapter

    await adapter.close()


@pytest.fixture
def engine(db: SQLiteAdapter, app_config: AppConfig) -> LedgerEngine:
    """LedgerEngine (REQUESTED 정책)"""
    return LedgerEngine(db, app_config)


@pytest.fixture
def applied_engine(db: SQLiteAdapter, app_config: AppConfig) -> LedgerEngine:
    """LedgerEngine (APPLIED 정책)"""
    config = AppConfig(
        db_path=app_config.db_path,
        self_aliases=app_config.self_aliases,
        overpayment_policy=OverpaymentPolicy.APPLIED,
        session=app_config.session,
    )
    return LedgerEngine(db, config)
