import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.shared.dtos import HealthCheckResponse
from api.shared.entities.registry import BaseEntity
from api.shared.exceptions import (
    ConflictError,
    EventBotException,
    NotFoundError,
    ValidationError,
)
from api.shared.response import ResponseModel
from core.settings import SETTINGS
from di.container import ApplicationContainer as DependencyContainer

# Configure logging
logging.basicConfig(
    level=SETTINGS.APP.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("eventbot")


class CustomFastAPI(FastAPI):
    container: DependencyContainer


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    logger.info("Starting application initialization...")
    start_time = time.time()

    try:
        logger.info("Initializing database connection...")
        db_start = time.time()
        db_resource = _app.container.infrastructure.database()
        await db_resource.init()
        await db_resource.ping()
        if SETTINGS.DATABASE.DB_CREATE_TABLES:
            await db_resource.create_tables(BaseEntity)
            logger.info("Database tables ensured")
        logger.info(f"Database connection established in {time.time() - db_start:.2f}s")

        if SETTINGS.SESSION.SESSION_BACKEND == "redis":
            logger.info("Initializing Redis connection...")
            redis_start = time.time()
            redis_resource = _app.container.infrastructure.redis_db()
            await redis_resource.connect()
            logger.info(f"Redis connection established in {time.time() - redis_start:.2f}s")

        logger.info(f"Application startup completed in {time.time() - start_time:.2f}s")
    except Exception as e:
        logger.exception(f"Failed to initialize application: {str(e)}")
        raise

    yield

    redis_resource = _app.container.infrastructure.redis_db()
    await redis_resource.disconnect()
    db_resource = _app.container.infrastructure.database()
    await db_resource.shutdown()
    logger.info("Application shutdown complete")


def create_fastapi_app() -> CustomFastAPI:
    _app = CustomFastAPI(
        title="Event List Bot API",
        description="LINE event registration bot and its persistence API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Initialize dependency container
    _app.container = DependencyContainer()
    _app.container.infrastructure.config.from_dict(SETTINGS.model_dump())
    _app.container.wire(modules=[sys.modules[__name__]])
    _app.container.init_resources()

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include feature routers
    from api.features.events.router import router as events_router
    from api.features.participants.router import router as participants_router
    from api.features.users.router import router as users_router
    from api.features.webhook.router import router as webhook_router

    _app.include_router(users_router, tags=["Users"])
    _app.include_router(events_router, prefix="/event", tags=["Events"])
    _app.include_router(participants_router, prefix="/participant", tags=["Participants"])
    _app.include_router(webhook_router, tags=["Webhook"])

    return _app


app = create_fastapi_app()


@app.get("/health", response_model=ResponseModel[HealthCheckResponse])
async def health():
    return ResponseModel.success(
        data=HealthCheckResponse(status="healthy", dependencies={"database": "ok"}),
        message="Event list bot is running",
    )


# Exception handlers. Errors are answered as plain text.
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return PlainTextResponse(exc.message, status_code=404)


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return PlainTextResponse(exc.message, status_code=409)


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return PlainTextResponse(exc.message, status_code=422)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return PlainTextResponse(str(exc), status_code=422)


@app.exception_handler(EventBotException)
async def event_bot_exception_handler(request: Request, exc: EventBotException):
    logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return PlainTextResponse(exc.message, status_code=500)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return PlainTextResponse("An unexpected error occurred", status_code=500)
