"""
core/utils/locks.py 테스트

키별 잠금: 같은 키는 직렬화, 다른 키는 병렬
"""

import asyncio

import pytest

from core.utils.locks import KeyedLock, LockSet


class TestKeyedLock:
    """KeyedLock 테스트"""

    @pytest.mark.asyncio
    async def test_same_key_serialized(self) -> None:
        """같은 키의 구간은 겹치지 않음"""
        locks = KeyedLock("bank")
        active = 0
        max_active = 0

        async def worker() -> None:
            nonlocal active, max_active
            async with locks.hold("bnk-1"):
                active += 1
                max_active = max(max_active, active)
                await asyncio.sleep(0.01)
                active -= 1

        await asyncio.gather(*(worker() for _ in range(5)))

        assert max_active == 1

    @pytest.mark.asyncio
    async def test_different_keys_parallel(self) -> None:
        """다른 키는 동시에 진행"""
        locks = KeyedLock("bank")
        inside = asyncio.Event()
        release = asyncio.Event()

        async def holder() -> None:
            async with locks.hold("bnk-1"):
                inside.set()
                await release.wait()

        task = asyncio.create_task(holder())
        await inside.wait()

        # bnk-1이 잡혀 있어도 bnk-2는 즉시 획득
        async with locks.hold("bnk-2"):
            assert locks.is_locked("bnk-1")
            assert locks.is_locked("bnk-2")

        release.set()
        await task
        assert not locks.is_locked("bnk-1")

    @pytest.mark.asyncio
    async def test_multiple_keys_dedup_and_none(self) -> None:
        """중복 키와 None은 한 번만/무시"""
        locks = KeyedLock("bank")

        async with locks.hold("b", None, "a", "b"):
            assert locks.is_locked("a")
            assert locks.is_locked("b")
            assert sorted(locks.keys()) == ["a", "b"]

        assert not locks.is_locked("a")

    @pytest.mark.asyncio
    async def test_opposite_order_no_deadlock(self) -> None:
        """역순으로 요청해도 정렬 획득으로 교착 없음"""
        locks = KeyedLock("bank")

        async def hold(*keys: str) -> None:
            async with locks.hold(*keys):
                await asyncio.sleep(0.01)

        await asyncio.wait_for(
            asyncio.gather(hold("x", "y"), hold("y", "x"), hold("x", "y")),
            timeout=2,
        )

    @pytest.mark.asyncio
    async def test_released_on_error(self) -> None:
        """예외 시에도 해제"""
        locks = KeyedLock("card")

        with pytest.raises(RuntimeError):
            async with locks.hold("crd-1"):
                raise RuntimeError("boom")

        assert not locks.is_locked("crd-1")

    @pytest.mark.asyncio
    async def test_idle_keys_evicted(self) -> None:
        """해제 후 대기자가 없으면 레지스트리에서 제거"""
        locks = KeyedLock("transaction")

        for i in range(100):
            async with locks.hold(f"txn-{i}"):
                pass

        assert list(locks.keys()) == []

    @pytest.mark.asyncio
    async def test_waiter_keeps_lock(self) -> None:
        """대기 중인 태스크가 있으면 같은 잠금을 유지"""
        locks = KeyedLock("bank")
        order: list[str] = []
        inside = asyncio.Event()
        release = asyncio.Event()

        async def first() -> None:
            async with locks.hold("bnk-1"):
                inside.set()
                await release.wait()
                order.append("first")

        async def second() -> None:
            async with locks.hold("bnk-1"):
                order.append("second")

        t1 = asyncio.create_task(first())
        await inside.wait()
        t2 = asyncio.create_task(second())
        await asyncio.sleep(0)

        assert list(locks.keys()) == ["bnk-1"]

        release.set()
        await asyncio.gather(t1, t2)

        assert order == ["first", "second"]
        assert list(locks.keys()) == []


class TestLockSet:
    """LockSet 테스트"""

    def test_independent_registries(self) -> None:
        lock_set = LockSet()

        assert lock_set.banks is not lock_set.cards
        assert lock_set.banks.name == "bank"
        assert lock_set.loans.name == "loan"
        assert lock_set.ipos.name == "ipo"
