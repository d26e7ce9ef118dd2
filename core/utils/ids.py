"""
식별자 유틸리티

엔티티 ID 생성 및 파싱 기능 제공
규칙: {prefix}-{uuid hex 12자리}
"""

import uuid


class IdPrefix:
    """엔티티별 ID 접두사"""

    BANK = "bnk"
    LEDGER_ENTRY = "led"
    CARD = "crd"
    LOAN = "lon"
    TRANSACTION = "txn"
    IPO = "ipo"
    PERSON = "per"
    SESSION = "ses"


def make_id(prefix: str) -> str:
    """새 엔티티 ID 생성

    Args:
        prefix: IdPrefix 상수

    Returns:
        {prefix}-{12자리 hex} 형식 ID

    Example:
        >>> make_id(IdPrefix.BANK)  # doctest: +SKIP
        'bnk-3f2a9c0d1e4b'
    """
    if not prefix:
        raise ValueError("prefix는 비어 있을 수 없습니다")

    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def parse_prefix(entity_id: str) -> str | None:
    """ID에서 접두사 추출

    Example:
        >>> parse_prefix("lon-3f2a9c0d1e4b")
        'lon'
        >>> parse_prefix("nodash")
    """
    if not entity_id or "-" not in entity_id:
        return None

    prefix, _, rest = entity_id.partition("-")
    return prefix if prefix and rest else None
