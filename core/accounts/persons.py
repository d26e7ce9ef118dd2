"""
인물 레지스트리

지출 주체가 본인인지 판별하는 데만 사용.
본인 = 설정의 self_aliases 또는 is_self로 표시된 인물 (대소문자 무시, 앞뒤 공백 무시)
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

from core.constants import Defaults
from core.domain.models import Person
from core.errors import ConstraintViolationError, NotFoundError
from core.utils.ids import IdPrefix, make_id

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """비교용 이름 정규화"""
    return " ".join(name.split()).casefold()


class PersonRegistry:
    """인물 레지스트리

    Args:
        db: SQLite 어댑터
        self_aliases: 본인을 뜻하는 이름 목록
    """

    def __init__(self, db: SQLiteAdapter, self_aliases: tuple[str, ...] = Defaults.SELF_ALIASES):
        self.db = db
        self._aliases = frozenset(normalize_name(a) for a in self_aliases)

    async def create_person(self, name: str, is_self: bool = False) -> Person:
        """인물 등록

        Raises:
            ValueError: 빈 이름
            ConstraintViolationError: 같은 이름의 인물이 이미 존재
        """
        clean = " ".join(name.split())
        if not clean:
            raise ValueError("Person name is required")

        person_id = make_id(IdPrefix.PERSON)
        try:
            async with self.db.transaction():
                await self.db.execute(
                    "INSERT INTO persons (person_id, name, is_self) VALUES (?, ?, ?)",
                    (person_id, clean, 1 if is_self else 0),
                )
        except sqlite3.IntegrityError as e:
            raise ConstraintViolationError(f"Person already exists: {clean}") from e

        logger.info("Person created", extra={"person_id": person_id, "is_self": is_self})
        return await self.get_person(person_id)

    async def get_person(self, person_id: str) -> Person:
        row = await self.db.fetchone_dict(
            "SELECT * FROM persons WHERE person_id = ?", (person_id,)
        )
        if row is None:
            raise NotFoundError("person", person_id)
        return Person.from_row(row)

    async def list_persons(self) -> list[Person]:
        rows = await self.db.fetchall_dict("SELECT * FROM persons ORDER BY name")
        return [Person.from_row(r) for r in rows]

    async def delete_person(self, person_id: str) -> None:
        """인물 삭제 (대출 기록은 이름으로 보존됨)"""
        await self.get_person(person_id)
        async with self.db.transaction():
            await self.db.execute("DELETE FROM persons WHERE person_id = ?", (person_id,))
        logger.info("Person deleted", extra={"person_id": person_id})

    async def is_self(self, owner_name: str) -> bool:
        """지출 주체가 본인인지 판별

        Args:
            owner_name: 지출 주체 이름

        Returns:
            본인이면 True (대출 생성 안 함)
        """
        key = normalize_name(owner_name or "")
        if not key:
            return False
        if key in self._aliases:
            return True

        row = await self.db.fetchone(
            "SELECT 1 FROM persons WHERE is_self = 1 AND name = ? COLLATE NOCASE",
            (" ".join(owner_name.split()),),
        )
        return row is not None
