"""
세션 라우트

POST   /api/session - PIN 확인 후 세션 발급
DELETE /api/session - 세션 종료
"""

from fastapi import APIRouter, Depends, HTTPException, status

from core.session import Session, SessionError, SessionRegistry
from web.dependencies import get_sessions, require_session
from web.models.requests import SessionOpenRequest
from web.models.responses import SessionResponse

router = APIRouter(prefix="/api/session", tags=["Session"])


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def open_session(
    request: SessionOpenRequest,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """세션 발급 (PIN 미설정 시 항상 거부)"""
    try:
        session = sessions.open(request.pin)
    except SessionError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e

    return SessionResponse(
        session_id=session.session_id,
        opened_at=session.opened_at,
        expires_at=session.expires_at,
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session: Session = Depends(require_session),
    sessions: SessionRegistry = Depends(get_sessions),
) -> None:
    """세션 종료"""
    sessions.close(session.session_id)
