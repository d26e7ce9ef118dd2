"""
유틸리티 패키지

금액 정규화, ID 생성, 날짜 처리, 키 단위 잠금 등 공통 유틸리티
"""

from core.utils.dates import IST, month_start, now_utc, to_date, today
from core.utils.ids import IdPrefix, make_id, parse_prefix
from core.utils.locks import KeyedLock, LockSet
from core.utils.money import ZERO, from_db, money, to_amount

__all__ = [
    "IST",
    "month_start",
    "now_utc",
    "to_date",
    "today",
    "IdPrefix",
    "make_id",
    "parse_prefix",
    "KeyedLock",
    "LockSet",
    "ZERO",
    "from_db",
    "money",
    "to_amount",
]
