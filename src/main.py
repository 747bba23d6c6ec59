"""src.main
FastAPI 애플리케이션 진입점
"""
import time
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from src.core.config import settings
from src.core.exceptions import CustomError
from src.core.logging import setup_logging
from src.apis.research_router import router as research_router
from src.utils.common import mask_sensitive_data

# 로깅 초기화
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션 수명주기 관리

    앱 시작 시: 외부 API 설정 상태 출력
    """
    logger.info("=== 애플리케이션 시작: 초기화 중 ===")
    logger.info(
        f"OpenAI model={settings.OPENAI_MODEL}, "
        f"OPENAI_API_KEY={mask_sensitive_data(settings.OPENAI_API_KEY)}, "
        f"MAPBOX_TOKEN={mask_sensitive_data(settings.MAPBOX_TOKEN)}"
    )
    logger.info("=== 애플리케이션 준비 완료 ===")

    yield  # 애플리케이션 실행

    logger.info("=== 애플리케이션 종료 중 ===")


app = FastAPI(
    title="Trip Research API",
    description="여행지 후보 장소를 LLM으로 생성하고 Mapbox로 좌표를 확정합니다.",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs/swagger",
    redoc_url="/docs/redoc"
)


# 라우터 등록
app.include_router(research_router)


@app.exception_handler(CustomError)
async def custom_error_handler(request: Request, error: CustomError):
    """서비스 예외 → text/plain 응답"""
    if error.status_code >= 500:
        logger.error(f"요청 처리 실패: {request.method} {request.url.path} - {error.message}", exc_info=error)
    else:
        logger.warning(f"잘못된 요청: {request.method} {request.url.path} - {error.message}")
    return PlainTextResponse(error.message or "Server error", status_code=error.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, error: Exception):
    """예기치 않은 예외 → 500 text/plain 응답"""
    logger.error(f"처리되지 않은 예외: {request.method} {request.url.path}", exc_info=error)
    return PlainTextResponse(str(error) or "Server error", status_code=500)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, error: StarletteHTTPException):
    """405는 text/plain으로 응답, 나머지는 FastAPI 기본 처리"""
    if error.status_code == 405:
        logger.warning(f"허용되지 않은 메서드: {request.method} {request.url.path}")
        return PlainTextResponse("Method Not Allowed", status_code=405)
    return await http_exception_handler(request, error)


@app.get("/health", status_code=200)
async def health_check():
    """상태 확인"""
    return {"status": "ok"}


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """요청 처리 시간 측정 미들웨어"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    # 응답 헤더에 처리 시간 추가
    response.headers["X-Process-Time"] = f"{process_time:.4f}"

    logger.info(
        f"요청 처리 완료: {request.method} {request.url.path} - {process_time:.4f}초"
    )

    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001, loop="asyncio")
