"""
계정 패키지

은행/신용카드 레지스트리와 인물 레지스트리
"""

from core.accounts.persons import PersonRegistry, normalize_name
from core.accounts.registry import AccountRegistry

__all__ = [
    "AccountRegistry",
    "PersonRegistry",
    "normalize_name",
]
