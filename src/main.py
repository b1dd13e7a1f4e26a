import logging
import uvicorn
from typing import Any
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.app import IncludeAPIRouter, logger_instance
from src.core.exceptions import register_exception_handlers
from src.core.logging import LoggingMiddleware, setup_logging, shutdown_logging
from src.market_insight.services.aggregator_service import MarketInsightService
from src.middleware.rate_limiter import RateLimitConfig, RateLimitMiddleware
from src.utils.config import Settings, get_settings
from src.utils.http_client_pool import HTTPClientManager


settings = get_settings()
setup_logging(level=settings.LOG_LEVEL, use_json=settings.LOG_FORMAT.lower() == "json")

logger = logger_instance.get_logger(__name__)


# lifespan (app lifecycle management, default is None).
def get_application(lifespan: Any = None, settings: Settings = settings):
    IS_PROD = settings.ENV_STATE == "prod"

    _app = FastAPI(lifespan=lifespan,
                   title=settings.API_NAME,
                   description=settings.API_DESCRIPTION,
                   version=settings.API_VERSION,
                   # Disable docs & openapi when in production
                   docs_url=None if IS_PROD else "/docs",
                   redoc_url=None if IS_PROD else "/redoc",
                   openapi_url=None if IS_PROD else "/openapi.json",
                   )

    _app.include_router(IncludeAPIRouter())
    register_exception_handlers(_app)

    # Last added runs first: rate limiting sits inside request logging
    _app.add_middleware(
        RateLimitMiddleware,
        config=RateLimitConfig.from_settings(settings),
    )

    _app.add_middleware(LoggingMiddleware)

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return _app


# Manage the lifecycle of asynchronous applications.
# Perform actions when the application starts and shuts down
@asynccontextmanager
async def app_lifespan(app: FastAPI):

    # ----------------------------------------------------
    # PHASE 1: STARTUP LOGIC (ALL code BEFORE the single 'yield')
    # ----------------------------------------------------
    logger.info("Starting application...")

    http_manager = HTTPClientManager(settings)
    app.state.market_insight_service = MarketInsightService(settings, http_manager)

    status = settings.provider_status()
    logger.info("=" * 60)
    logger.info("PROVIDER KEYS")
    for name, configured in status.items():
        logger.info(f"  - {name}: {'configured' if configured else 'missing'}")
    logger.info("=" * 60)

    logger.info('event=app-startup')

    yield # Application START accepting requests HERE

    # ----------------------------------------------------
    # PHASE 2: SHUTDOWN LOGIC (ALL code AFTER the single 'yield')
    # ----------------------------------------------------
    await app.state.market_insight_service.close()

    logger.info('event=app-shutdown message="All connections are closed."')
    shutdown_logging()


# Create FastAPI application object
app = get_application(lifespan=app_lifespan)


class EndpointFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.getMessage().find('/ping') == -1


if __name__ == '__main__':
    logging.getLogger("uvicorn.access").addFilter(EndpointFilter())

    uvicorn.run('src.main:app',
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
        workers=settings.UVICORN_WORKERS,
        reload=settings.UVICORN_RELOAD,
    )
