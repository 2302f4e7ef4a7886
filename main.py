"""
Mood Journal 主应用程序

基于FastAPI和Uvicorn的日记与AI情绪评分服务
"""
# 标准库导包
import asyncio
import logging
from contextlib import asynccontextmanager

# 第三方库导包
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# 项目内部导包
from config import settings
from exceptions import JournalError
from llm.client import LLMClient
from models import ErrorResponse
from redis_client import close_redis_pool
from routers import basic, auth, journal, persons
from routers.services.rating_backfill_service import run_backfill_once
from storage.database import init_db, cleanup_db, async_session_factory

# 配置日志
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


async def rating_backfill_worker():
    """定期补齐近期无评分条目的后台任务"""
    llm_client = LLMClient()
    while True:
        try:
            await run_backfill_once(async_session_factory, llm_client)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"评分补齐任务执行失败: {str(e)}")
        await asyncio.sleep(settings.RATING_BACKFILL_INTERVAL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用程序生命周期管理
    """
    backfill_task = None
    # 启动时初始化数据库
    try:
        await init_db()
        if settings.RATING_BACKFILL_ENABLED:
            backfill_task = asyncio.create_task(rating_backfill_worker())
            logger.info(f"评分补齐任务已启动，间隔 {settings.RATING_BACKFILL_INTERVAL} 秒")
        logger.info("应用程序启动完成")
        yield
    except Exception as e:
        logger.error(f"应用程序启动失败: {str(e)}")
        raise
    finally:
        # 关闭时停止后台任务并清理连接
        try:
            if backfill_task is not None:
                backfill_task.cancel()
                try:
                    await backfill_task
                except asyncio.CancelledError:
                    pass
            await cleanup_db()
            await close_redis_pool()
            logger.info("应用程序关闭完成")
        except Exception as e:
            logger.error(f"应用程序关闭时发生错误: {str(e)}")

# 创建FastAPI应用实例
app = FastAPI(
    title=settings.APP_NAME,
    description="日记记录与AI情绪评分服务",
    version=settings.APP_VERSION,
    docs_url=settings.DOCS_URL,
    redoc_url=settings.REDOC_URL,
    openapi_url=settings.OPENAPI_URL,
    lifespan=lifespan
)

# 添加CORS中间件
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.exception_handler(JournalError)
async def journal_error_handler(request: Request, exc: JournalError):
    """业务异常统一转换为错误响应"""
    body = ErrorResponse(error=exc.kind, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """请求参数校验失败，返回字段级错误信息"""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    body = ErrorResponse(error="ValidationError", message="请求参数不合法", details=details)
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """未预期的异常只返回通用信息，不暴露内部细节"""
    logger.error(f"未处理的异常: path={request.url.path}, error={type(exc).__name__}: {str(exc)}")
    body = ErrorResponse(error="InternalError", message="服务器内部错误")
    return JSONResponse(status_code=500, content=body.model_dump())


# 注册路由
app.include_router(basic.router)
app.include_router(auth.router)
app.include_router(journal.router)
app.include_router(persons.router)


def main():
    """
    应用程序入口点
    """
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL,
        workers=settings.WORKERS
    )


if __name__ == "__main__":
    main()
