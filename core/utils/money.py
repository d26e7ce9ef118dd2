"""
금액 유틸리티

모든 금액은 소수점 2자리 Decimal로 정규화.
DB에는 문자열(TEXT)로 저장하여 부동소수점 오차를 피한다.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from core.constants import MoneyFormat
from core.errors import InvalidAmountError

ZERO = Decimal("0.00")


def money(value: Any) -> Decimal:
    """2자리 Decimal로 변환 (HALF_UP 반올림)

    Args:
        value: 숫자, 문자열 또는 Decimal (None이면 0)

    Returns:
        정규화된 Decimal

    Raises:
        InvalidAmountError: 숫자로 해석할 수 없거나 유한하지 않은 값
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidAmountError(f"Not a numeric amount: {value!r}")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmountError(f"Not a numeric amount: {value!r}") from e

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite: {value!r}")

    try:
        return amount.quantize(Decimal(MoneyFormat.QUANTUM), rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        # 2자리로 맞추면 Decimal 정밀도(28자리)를 넘는 값
        raise InvalidAmountError(f"Amount out of range: {value!r}") from e


def to_amount(value: Any, allow_zero: bool = False) -> Decimal:
    """양수 금액 검증

    Args:
        value: 입력 금액
        allow_zero: 0 허용 여부 (IPO 환불액 등)

    Returns:
        검증된 Decimal

    Raises:
        InvalidAmountError: 음수, 0(미허용 시), 숫자가 아닌 값
    """
    if value is None:
        raise InvalidAmountError("Amount is required")

    amount = money(value)

    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmountError(f"Amount must be positive: {value!r}")

    return amount


def from_db(value: str | None) -> Decimal:
    """DB TEXT 컬럼을 Decimal로 변환"""
    return Decimal(value) if value is not None else ZERO
