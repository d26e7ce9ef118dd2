"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
엔진과 세션 보관소는 lifespan에서 생성되어 app.state에 보관된다.
"""

from fastapi import Depends, Header, HTTPException, Request, status

from core.engine import LedgerEngine
from core.session import Session, SessionError, SessionRegistry


def get_engine(request: Request) -> LedgerEngine:
    """LedgerEngine 반환 (앱 전체 공유)"""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Engine not initialized",
        )
    return engine


def get_sessions(request: Request) -> SessionRegistry:
    """세션 보관소 반환"""
    sessions = getattr(request.app.state, "sessions", None)
    if sessions is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session registry not initialized",
        )
    return sessions


def require_session(
    x_session_id: str | None = Header(default=None),
    sessions: SessionRegistry = Depends(get_sessions),
) -> Session:
    """쓰기 요청용 세션 확인

    X-Session-Id 헤더의 세션이 유효해야 한다.

    Raises:
        HTTPException: 401 (세션 없음/만료)
    """
    try:
        return sessions.resolve(x_session_id)
    except SessionError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        ) from e
