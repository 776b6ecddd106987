# main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from sqlalchemy import text
from slowapi.errors import RateLimitExceeded
import logging
from app.core.admin import setup_admin
from app.core.rate_limit import limiter
from app.api.v1.routes import api_router
from app.api.v1.routes import ws
from app.core.config import settings
from app.core.database import db_helper
from app.core.exceptions import AppException, RateLimitError
from app.services.achievement_service import seed_achievement_catalog
from app.services.concurrency import UserLockRegistry
from app.services.ws_manager import NotificationManager

# Настройка логирования
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def render_app_exception(exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error": type(exc).__name__,
            "timestamp": utc_timestamp()
        },
        headers=exc.headers
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Контекстный менеджер для жизненного цикла приложения"""
    # Startup
    logger.info(f"Starting {settings.app_name} in {'DEBUG' if settings.debug else 'PRODUCTION'} mode")

    # Маскируем пароль в URL для логов
    masked_db_url = settings.db.DATABASE_URL
    if settings.db.DB_PASSWORD.get_secret_value():
        masked_db_url = masked_db_url.replace(
            settings.db.DB_PASSWORD.get_secret_value(), "***"
        )
    logger.info(f"Database: {masked_db_url}")

    # Проверка подключения к базе данных при старте
    try:
        async with db_helper.session_factory() as session:
            await session.execute(text("SELECT 1"))
            await seed_achievement_catalog(session)
        logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise

    setup_admin(app, db_helper.engine)

    yield

    # Shutdown
    await db_helper.dispose()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Один экземпляр на процесс, в обработчики попадают через Depends
    app.state.notifier = NotificationManager()
    app.state.user_locks = UserLockRegistry()
    app.state.limiter = limiter

    # Настройка CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Подключение роутеров
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(ws.router)

    @app.get("/", summary="Root endpoint", tags=["root"])
    async def root():
        """Корневой эндпоинт API"""
        return {
            "message": f"Welcome to {settings.app_name} API",
            "docs": {
                "swagger": "/docs",
                "redoc": "/redoc"
            } if settings.debug else None,
            "environment": "development" if settings.debug else "production",
            "timestamp": utc_timestamp()
        }

    @app.get("/health", summary="Health check", tags=["health"])
    async def health_check():
        """Проверка здоровья приложения"""
        try:
            # Проверяем подключение к БД
            async with db_helper.session_factory() as session:
                result = await session.execute(text("SELECT 1"))
                db_value = result.scalar()

            return {
                "status": "healthy",
                "timestamp": utc_timestamp(),
                "environment": "development" if settings.debug else "production",
                "database": "connected",
                "database_ping": db_value,
                "app_name": settings.app_name,
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {
                "status": "unhealthy",
                "timestamp": utc_timestamp(),
                "database": "connection failed",
                "error": str(e) if settings.debug else "Database connection error"
            }

    # Глобальный обработчик исключений
    @app.exception_handler(AppException)
    async def app_exception_handler(request, exc: AppException):
        """Глобальный обработчик кастомных исключений"""
        if exc.status_code >= 500:
            logger.error(f"AppException: {exc.detail} (type: {type(exc).__name__})")
        else:
            logger.info(f"AppException: {exc.detail} (type: {type(exc).__name__})")

        return render_app_exception(exc)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded: {exc.detail}")
        return render_app_exception(RateLimitError(f"Too many requests: {exc.detail}"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc: Exception):
        """Глобальный обработчик всех исключений"""
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error": "InternalServerError",
                "timestamp": utc_timestamp(),
                "debug_info": str(exc) if settings.debug else None
            }
        )

    # Обработчик для 404 ошибок
    @app.exception_handler(404)
    async def not_found_handler(request, exc):
        return JSONResponse(
            status_code=404,
            content={
                "detail": getattr(exc, "detail", None) or "Not Found",
                "error": "NotFoundError",
                "timestamp": utc_timestamp()
            }
        )

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
        access_log=False  # Логи доступа лучше настраивать через Nginx или подобное
    )
