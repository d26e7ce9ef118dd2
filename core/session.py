"""
세션

PIN 확인 후 발급되는 명시적 세션 객체.
만료 시각은 데이터로 들고 다니며, 프로세스 전역 "인증됨" 플래그는 두지 않는다.
"""

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from core.config.loader import AppConfig
from core.utils.dates import now_utc
from core.utils.ids import IdPrefix, make_id

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """세션 발급/검증 실패"""

    pass


@dataclass(frozen=True)
class Session:
    """PIN 세션

    Attributes:
        session_id: 세션 ID
        opened_at: 발급 시각 (UTC)
        expires_at: 만료 시각 (UTC)
    """

    session_id: str
    opened_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """만료 여부"""
        return (now or now_utc()) >= self.expires_at


def open_session(pin: str, config: AppConfig, now: datetime | None = None) -> Session:
    """PIN 확인 후 세션 발급

    설정에 PIN이 없으면 항상 실패한다.

    Args:
        pin: 입력 PIN
        config: 애플리케이션 설정
        now: 기준 시각 (테스트용, 기본: 현재 UTC)

    Returns:
        새 Session

    Raises:
        SessionError: PIN 미설정 또는 불일치
    """
    expected = config.session.pin
    if not expected:
        raise SessionError("PIN is not configured")

    if not hmac.compare_digest(str(pin).encode("utf-8"), expected.encode("utf-8")):
        logger.warning("PIN verification failed")
        raise SessionError("Invalid PIN")

    opened = now or now_utc()
    session = Session(
        session_id=make_id(IdPrefix.SESSION),
        opened_at=opened,
        expires_at=opened + timedelta(minutes=config.session.ttl_minutes),
    )
    logger.info("Session opened", extra={"session_id": session.session_id})
    return session


class SessionRegistry:
    """발급된 세션 보관소 (프로세스 내)

    Web 앱 인스턴스마다 하나씩 생성되어 app.state에 보관된다.
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self._sessions: dict[str, Session] = {}

    def open(self, pin: str, now: datetime | None = None) -> Session:
        """PIN 검증 후 세션 발급 (만료 세션은 이때 함께 정리)"""
        session = open_session(pin, self.config, now)
        self.purge_expired(now)
        self._sessions[session.session_id] = session
        return session

    def resolve(self, session_id: str | None, now: datetime | None = None) -> Session:
        """세션 ID로 유효한 세션 조회

        Raises:
            SessionError: 없는 세션 또는 만료된 세션
        """
        if not session_id:
            raise SessionError("Session required")

        session = self._sessions.get(session_id)
        if session is None:
            raise SessionError("Unknown session")

        if session.is_expired(now):
            self._sessions.pop(session_id, None)
            raise SessionError("Session expired")

        return session

    def close(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def purge_expired(self, now: datetime | None = None) -> int:
        """만료 세션 정리, 정리한 수 반환"""
        expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)
