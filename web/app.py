"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config.loader import get_settings
from core.errors import (
    ConstraintViolationError,
    InvalidAmountError,
    InvalidStateError,
    LedgerError,
    NotFoundError,
)
from core.logging import setup_logging
from web.models.responses import ErrorResponse

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import (
    banks,
    cards,
    dashboard,
    health,
    ipos,
    loans,
    persons,
    session,
    transactions,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리

    쓰기 가능한 DB 연결 하나를 열고 스키마를 초기화한 뒤
    LedgerEngine과 SessionRegistry를 app.state에 보관한다.
    """
    from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
    from core.engine import LedgerEngine
    from core.session import SessionRegistry

    settings = get_settings()

    db = SQLiteAdapter(settings.db_path)
    await db.connect()

    # 시작 시 - DB 스키마 자동 초기화
    await init_schema(db)

    app.state.engine = LedgerEngine(db, settings.config)
    app.state.sessions = SessionRegistry(settings.config)

    if not settings.config.session.pin:
        logger.warning("Web: session.pin 미설정, 쓰기 API가 모두 거부됩니다")

    logger.info("Web: LedgerEngine 초기화 완료", extra={"db_path": str(settings.db_path)})

    try:
        yield
    finally:
        # 종료 시 - 리소스 정리
        await db.close()
        app.state.engine = None
        app.state.sessions = None


app = FastAPI(
    title="Family Ledger API",
    description="은행 원장/카드/대출/IPO 일관성 엔진 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================================================
# 도메인 예외 → HTTP 응답
# =========================================================================

_ERROR_STATUS: dict[type[Exception], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidAmountError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidStateError: status.HTTP_409_CONFLICT,
    ConstraintViolationError: status.HTTP_409_CONFLICT,
}


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """도메인 예외를 HTTP 상태 코드로 변환"""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_type, code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code = code
            break

    logger.info(
        f"{request.method} {request.url.path} → {status_code}: {exc}",
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """필수 입력 누락 등 검증 오류"""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(error="ValidationError", detail=str(exc)).model_dump(),
    )


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(session.router)
app.include_router(banks.router)
app.include_router(cards.router)
app.include_router(loans.router)
app.include_router(transactions.router)
app.include_router(ipos.router)
app.include_router(persons.router)
app.include_router(dashboard.router)
