"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 핸들러 및 라우터 등록.

FastAPI application entry point — Middleware, exception handler and router registration.
Domain errors are mapped to JSON responses using the status code carried by
each MembershipError subclass (4xx validation, 5xx store access).
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from membership.api import api_router
from membership.config import settings
from membership.database import engine, init_db
from membership.logging_config import setup_logging
from membership.middleware.request_logging import RequestLoggingMiddleware
from membership.utils.exceptions import MembershipError


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """앱 시작 시 로깅 설정 및 문서 테이블 생성 (Configure logging, ensure the documents table)."""
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    await init_db()
    yield
    await engine.dispose()


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# 요청 로깅 미들웨어 — Request/response logging (stdlib logging + optional Axiom)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(MembershipError)
async def membership_error_handler(_: Request, exc: MembershipError) -> JSONResponse:
    """도메인 예외를 HTTP 응답으로 변환합니다 (Map domain errors to HTTP responses)."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


app.include_router(api_router, prefix="/api/v1")
