"""
core/config/loader.py 테스트

settings.yaml 파싱 및 Settings 싱글턴
"""

from pathlib import Path

import pytest

from core.config.loader import (
    AppConfig,
    SettingsLoadError,
    get_settings,
    load_config,
    parse_config,
)
from core.constants import PROJECT_ROOT, Defaults
from core.types import OverpaymentPolicy


class TestParseConfig:
    """parse_config 테스트"""

    def test_defaults(self) -> None:
        """빈 매핑이면 기본값"""
        config = parse_config({})

        assert config.self_aliases == Defaults.SELF_ALIASES
        assert config.overpayment_policy == OverpaymentPolicy.REQUESTED
        assert config.session.pin is None
        assert config.session.ttl_minutes == Defaults.SESSION_TTL_MINUTES

    def test_full_mapping(self, temp_dir: Path) -> None:
        db_path = temp_dir / "ledger.db"
        config = parse_config(
            {
                "db_path": str(db_path),
                "self_aliases": ["Me", " Myself "],
                "overpayment_policy": "APPLIED",
                "session": {"pin": 1234, "ttl_minutes": "15"},
            }
        )

        assert config.db_path == db_path
        assert config.self_aliases == ("Me", "Myself")
        assert config.overpayment_policy == OverpaymentPolicy.APPLIED
        assert config.session.pin == "1234"
        assert config.session.ttl_minutes == 15

    def test_relative_db_path_resolved_from_root(self) -> None:
        config = parse_config({"db_path": "data/x.db"})
        assert config.db_path == PROJECT_ROOT / "data" / "x.db"

    def test_single_alias_string(self) -> None:
        config = parse_config({"self_aliases": "Self"})
        assert config.self_aliases == ("Self",)

    def test_empty_aliases_rejected(self) -> None:
        with pytest.raises(SettingsLoadError):
            parse_config({"self_aliases": []})

    @pytest.mark.parametrize("aliases", [[" "], ["", "  "], " "])
    def test_blank_aliases_rejected(self, aliases: object) -> None:
        """공백뿐인 별칭만 있으면 거부"""
        with pytest.raises(SettingsLoadError):
            parse_config({"self_aliases": aliases})

    def test_aliases_stripped(self) -> None:
        config = parse_config({"self_aliases": [" Me ", "", "Self"]})
        assert config.self_aliases == ("Me", "Self")

    def test_invalid_policy(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            parse_config({"overpayment_policy": "whatever"})

        assert "overpayment_policy" in str(exc_info.value)

    def test_empty_pin_is_none(self) -> None:
        config = parse_config({"session": {"pin": ""}})
        assert config.session.pin is None

    @pytest.mark.parametrize("ttl", [0, -5, "abc"])
    def test_invalid_ttl(self, ttl: object) -> None:
        with pytest.raises(SettingsLoadError):
            parse_config({"session": {"ttl_minutes": ttl}})

    def test_session_must_be_mapping(self) -> None:
        with pytest.raises(SettingsLoadError):
            parse_config({"session": "1234"})


class TestLoadConfig:
    """load_config 테스트"""

    def test_missing_file(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError):
            load_config(temp_dir / "nope.yaml")

    def test_missing_file_allowed(self, temp_dir: Path) -> None:
        assert load_config(temp_dir / "nope.yaml", allow_missing=True) == AppConfig()

    def test_empty_file(self, temp_dir: Path) -> None:
        path = temp_dir / "settings.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == AppConfig()

    def test_yaml_file(self, temp_dir: Path) -> None:
        path = temp_dir / "settings.yaml"
        path.write_text(
            "overpayment_policy: applied\n"
            "self_aliases:\n"
            "  - Me\n"
            "  - Family\n"
            "session:\n"
            "  pin: '0000'\n",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.overpayment_policy == OverpaymentPolicy.APPLIED
        assert config.self_aliases == ("Me", "Family")
        assert config.session.pin == "0000"

    def test_malformed_yaml(self, temp_dir: Path) -> None:
        path = temp_dir / "settings.yaml"
        path.write_text("key: [unclosed\n", encoding="utf-8")

        with pytest.raises(SettingsLoadError):
            load_config(path)

    def test_top_level_must_be_mapping(self, temp_dir: Path) -> None:
        path = temp_dir / "settings.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(SettingsLoadError):
            load_config(path)


class TestSettings:
    """Settings 싱글턴 테스트"""

    def test_singleton(self, temp_dir: Path) -> None:
        path = temp_dir / "settings.yaml"
        path.write_text("overpayment_policy: applied\n", encoding="utf-8")

        first = get_settings(path)
        second = get_settings()

        assert first is second
        assert second.overpayment_policy == OverpaymentPolicy.APPLIED
