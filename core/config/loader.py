"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import PROJECT_ROOT, Defaults, Paths
from core.types import OverpaymentPolicy


@dataclass(frozen=True)
class SessionConfig:
    """세션(PIN) 설정

    pin이 비어 있으면 세션을 열 수 없다 (fail-closed).
    """

    pin: str | None = None
    ttl_minutes: int = Defaults.SESSION_TTL_MINUTES


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path = Paths.DEFAULT_DB
    self_aliases: tuple[str, ...] = Defaults.SELF_ALIASES
    overpayment_policy: OverpaymentPolicy = OverpaymentPolicy.REQUESTED
    session: SessionConfig = field(default_factory=SessionConfig)


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _parse_session(data: Any) -> SessionConfig:
    if data is None:
        return SessionConfig()
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml의 'session'은 매핑이어야 합니다")

    pin = data.get("pin")
    ttl = data.get("ttl_minutes", Defaults.SESSION_TTL_MINUTES)

    try:
        ttl = int(ttl)
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"session.ttl_minutes가 정수가 아닙니다: {ttl!r}") from e

    if ttl <= 0:
        raise SettingsLoadError(f"session.ttl_minutes는 양수여야 합니다: {ttl}")

    return SessionConfig(
        pin=str(pin) if pin not in (None, "") else None,
        ttl_minutes=ttl,
    )


def parse_config(data: dict[str, Any]) -> AppConfig:
    """YAML 매핑을 AppConfig로 변환

    Args:
        data: yaml.safe_load 결과

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 필드 형식이 잘못된 경우
        ValueError: 유효하지 않은 overpayment_policy인 경우
    """
    db_path_value = data.get("db_path")
    if db_path_value is None:
        db_path = Paths.DEFAULT_DB
    else:
        db_path = Path(str(db_path_value))
        if not db_path.is_absolute() and str(db_path) != ":memory:":
            db_path = PROJECT_ROOT / db_path

    aliases = data.get("self_aliases", list(Defaults.SELF_ALIASES))
    if isinstance(aliases, str):
        aliases = [aliases]
    if not isinstance(aliases, list):
        raise SettingsLoadError("settings.yaml의 'self_aliases'는 목록이어야 합니다")
    self_aliases = tuple(str(a).strip() for a in aliases if str(a).strip())
    if not self_aliases:
        raise SettingsLoadError("settings.yaml의 'self_aliases'는 비어 있지 않은 목록이어야 합니다")

    policy_str = data.get("overpayment_policy", Defaults.OVERPAYMENT_POLICY)
    try:
        policy = OverpaymentPolicy(str(policy_str).lower())
    except ValueError as e:
        valid = [p.value for p in OverpaymentPolicy]
        raise ValueError(
            f"유효하지 않은 overpayment_policy입니다: '{policy_str}'. "
            f"유효한 값: {valid}"
        ) from e

    return AppConfig(
        db_path=db_path,
        self_aliases=self_aliases,
        overpayment_policy=policy,
        session=_parse_session(data.get("session")),
    )


def load_config(path: Path | None = None, allow_missing: bool = False) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)
        allow_missing: 파일이 없을 때 기본값 사용 여부

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        if allow_missing:
            return AppConfig()
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return AppConfig()

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    return parse_config(data)


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(settings_path, allow_missing=settings_path is None)

    @property
    def config(self) -> AppConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.config.db_path

    @property
    def self_aliases(self) -> tuple[str, ...]:
        """본인 별칭 목록"""
        return self.config.self_aliases

    @property
    def overpayment_policy(self) -> OverpaymentPolicy:
        """초과 상환 원장 반영 정책"""
        return self.config.overpayment_policy

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로, 없으면 기본값)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
