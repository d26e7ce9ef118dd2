"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → family-ledger/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    # 본인을 나타내는 지출 주체 이름 (대출 생성 억제)
    SELF_ALIASES: tuple[str, ...] = ("Me",)

    OVERPAYMENT_POLICY: str = "requested"
    SESSION_TTL_MINUTES: int = 30

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 목록 조회 기본 페이지 크기
    PAGE_LIMIT: int = 100
    RECENT_TRANSACTIONS: int = 5


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    DEFAULT_DB: Path = DATA_DIR / "family_ledger.db"


class MoneyFormat:
    """금액 표현 규칙"""

    # 소수점 2자리 (INR 기준 paise)
    QUANTUM: str = "0.01"
