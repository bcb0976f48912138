from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from sqlalchemy import text

from order_notes.core.exceptions import OrderNotesError, ValidationError
from order_notes.core.redis import async_redis
from order_notes.db.session import engine, init_db
from order_notes.routers import admin_router, note_router, order_router, product_router
from order_notes.schemas.api import APIInfoResponse, HealthCheckResponse

import uvicorn

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def check_database():
    """数据库不可用时拒绝启动"""
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    init_db()


async def check_redis() -> bool:
    """Redis 只用于商品缓存，不可用时降级运行"""
    try:
        await async_redis.ping()
    except Exception as e:
        logger.warning(f"⚠️  Redis unavailable, product lookups go straight to the database: {e}")
        return False
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting order notes service...")

    try:
        check_database()
        logger.info("✅ Database ready")
    except Exception as e:
        logger.error("❌ Database unavailable: %s", e)
        raise

    if await check_redis():
        logger.info("✅ Redis cache ready")

    yield

    logger.info("Order notes service stopped")


app = FastAPI(
    title="笔记订单服务 API",
    description="多用户笔记服务，订单以结构化内容保存在笔记中",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境中应该指定具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (note_router, order_router, product_router, admin_router):
    app.include_router(module.router, prefix=API_PREFIX)


# ==================== 全局异常处理 ====================
# 所有错误响应统一为 {"success": false, "message": ..., ...}

def error_response(status_code: int, message, headers=None, **extra) -> JSONResponse:
    content = {"success": False, "message": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(OrderNotesError)
async def business_exception_handler(request: Request, exc: OrderNotesError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")

    extra = {"code": exc.code}
    if isinstance(exc, ValidationError) and exc.errors:
        extra["details"] = exc.errors
    return error_response(exc.status_code, exc.message, **extra)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    logger.info(f"{request.method} {request.url.path} -> invalid request: {details}")
    return error_response(422, "请求参数验证失败", details=details)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return error_response(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return error_response(500, "服务器内部错误")


@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    return HealthCheckResponse()


@app.get("/", response_model=APIInfoResponse)
async def read_root():
    return APIInfoResponse()


if __name__ == "__main__":
    uvicorn.run(
        "order_notes.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
