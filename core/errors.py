"""
도메인 예외

오케스트레이터가 호출자(Web/Bot)에 전달하는 오류 종류.
저장소 계층 오류는 변환 없이 그대로 전파한다.
"""


class LedgerError(Exception):
    """도메인 예외 기본 클래스"""

    pass


class NotFoundError(LedgerError):
    """참조한 은행/카드/대출/거래/IPO가 존재하지 않음"""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class InvalidAmountError(LedgerError):
    """금액이 숫자가 아니거나 허용 범위를 벗어남"""

    pass


class InvalidStateError(LedgerError):
    """허용되지 않은 상태 전이"""

    pass


class ConstraintViolationError(LedgerError):
    """참조 무결성 또는 이력 보존 규칙 위반"""

    pass
