"""
날짜 유틸리티

원장 항목은 타임스탬프가 아닌 달력 날짜(YYYY-MM-DD)로 기록.
내부 시각: UTC | 날짜 기준: IST (UTC+5:30)
"""

from datetime import date, datetime, timedelta, timezone

# IST 타임존 (UTC+5:30)
IST = timezone(timedelta(hours=5, minutes=30))


def now_utc() -> datetime:
    """현재 UTC 시각"""
    return datetime.now(timezone.utc)


def today() -> date:
    """IST 기준 오늘 날짜"""
    return now_utc().astimezone(IST).date()


def month_start(day: date | None = None) -> date:
    """해당 월의 1일

    Example:
        >>> month_start(date(2026, 3, 17))
        datetime.date(2026, 3, 1)
    """
    day = day or today()
    return day.replace(day=1)


def to_date(value: date | datetime | str | None) -> date:
    """입력을 date로 정규화 (None이면 오늘)

    Raises:
        ValueError: ISO 형식이 아닌 문자열
    """
    if value is None:
        return today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)

    # 날짜+시각 (YYYY-MM-DDTHH:MM:SS[Z])
    if len(text) > 10 and text[10] in "T ":
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text).date()

    raise ValueError(f"Invalid ISO date: {value!r}")
