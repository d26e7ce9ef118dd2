"""
키 단위 잠금

은행/카드/대출별 read-modify-write 구간을 직렬화.
서로 다른 키는 독립적으로 진행되므로 전역 잠금을 두지 않는다.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class KeyedLock:
    """키별 asyncio.Lock 레지스트리

    여러 키를 동시에 잡을 때는 정렬된 순서로 획득하여
    교착 상태를 방지한다.

    사용 예시:
    ```python
    bank_locks = KeyedLock("bank")

    async with bank_locks.hold(bank_id):
        balance = await store.compute_balance(bank_id)
        ...
    ```
    """

    def __init__(self, name: str):
        self.name = name
        self._locks: dict[str, asyncio.Lock] = {}
        # 키별 보유/대기 중인 hold() 수. 0이 되면 잠금을 레지스트리에서 제거
        self._users: dict[str, int] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def is_locked(self, key: str) -> bool:
        """해당 키가 현재 잠겨 있는지 확인"""
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, *keys: str | None) -> AsyncIterator[None]:
        """하나 이상의 키 잠금 획득

        None 키는 무시하고, 중복 키는 한 번만 잡는다.
        """
        ordered = sorted({k for k in keys if k is not None})
        for key in ordered:
            self._users[key] = self._users.get(key, 0) + 1
        try:
            async with AsyncExitStack() as stack:
                for key in ordered:
                    await stack.enter_async_context(self._lock_for(key))
                yield
        finally:
            for key in ordered:
                self._release(key)

    def _release(self, key: str) -> None:
        remaining = self._users[key] - 1
        if remaining:
            self._users[key] = remaining
        else:
            del self._users[key]
            self._locks.pop(key, None)

    def keys(self) -> Iterable[str]:
        """현재 보유 또는 대기 중인 키 목록 (테스트/디버깅용)"""
        return list(self._users.keys())


@dataclass
class LockSet:
    """엔진이 공유하는 키별 잠금 묶음

    여러 종류를 함께 잡을 때 순서:
    transactions → loans → cards → ipos → banks
    """

    transactions: KeyedLock = field(default_factory=lambda: KeyedLock("transaction"))
    loans: KeyedLock = field(default_factory=lambda: KeyedLock("loan"))
    cards: KeyedLock = field(default_factory=lambda: KeyedLock("card"))
    ipos: KeyedLock = field(default_factory=lambda: KeyedLock("ipo"))
    banks: KeyedLock = field(default_factory=lambda: KeyedLock("bank"))
