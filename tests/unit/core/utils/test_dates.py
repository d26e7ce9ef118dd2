"""
core/utils/dates.py 테스트
"""

from datetime import date, datetime, timezone

import pytest

from core.utils.dates import IST, month_start, now_utc, to_date, today


class TestToday:
    """today/now_utc 테스트"""

    def test_now_utc_is_aware(self) -> None:
        assert now_utc().tzinfo is timezone.utc

    def test_today_uses_ist(self) -> None:
        assert today() == now_utc().astimezone(IST).date()


class TestToDate:
    """to_date 테스트"""

    def test_none_is_today(self) -> None:
        assert to_date(None) == today()

    def test_date_passthrough(self) -> None:
        assert to_date(date(2026, 3, 1)) == date(2026, 3, 1)

    def test_datetime(self) -> None:
        assert to_date(datetime(2026, 3, 1, 23, 59)) == date(2026, 3, 1)

    def test_iso_string(self) -> None:
        assert to_date("2026-03-01") == date(2026, 3, 1)
        assert to_date("2026-03-01T10:00:00Z") == date(2026, 3, 1)

    def test_invalid_string(self) -> None:
        with pytest.raises(ValueError):
            to_date("01/03/2026")

    @pytest.mark.parametrize("value", ["2026-03-019", "2026-03-01x", "2026-03-01T99:00"])
    def test_malformed_string_rejected(self, value: str) -> None:
        """앞 10자만 유효한 문자열도 거부"""
        with pytest.raises(ValueError):
            to_date(value)

    def test_datetime_string_with_offset(self) -> None:
        assert to_date("2026-03-01 23:30:00+05:30") == date(2026, 3, 1)


class TestMonthStart:
    def test_month_start(self) -> None:
        assert month_start(date(2026, 3, 17)) == date(2026, 3, 1)
