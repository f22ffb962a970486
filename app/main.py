import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.v1.endpoints.appsettings import router as settings_router
from app.api.v1.endpoints.auth import router as auth_router
from app.api.v1.endpoints.messages import router as messages_router
from app.api.v1.endpoints.realtime import router as realtime_router
from app.api.v1.endpoints.users import router as users_router
from app.api.v1.endpoints.vivaquestions import router as viva_questions_router
from app.core.config import settings
from app.core.database import session_manager
from app.core.exceptions import ChatAppError
from app.core.ratelimit import limiter
from app.services.ConnectionManager import connection_manager
from app.services.ModerationService import seed_default_settings
from app.services.RegistrationService import pending_store
from app.utils.schedulers.sweeppendingregistrations import pending_registration_sweeper
from app.utils.uploads.store_upload import UPLOADS_URL_PREFIX, upload_dir

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

scheduler_tasks = []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async context manager for app lifespan events"""

    try:
        logger.info(f"🚀 Starting chat backend ({settings.ENVIRONMENT})...")

        logger.info("🔌 Initializing database connection pool...")
        await session_manager.init()
        logger.info("✅ Database ready")

        if settings.SEED_SETTINGS_ON_STARTUP:
            async with session_manager.get_session() as db:
                created = await seed_default_settings(db)
            if created:
                logger.info(f"✅ Seeded settings: {created}")

        if settings.PENDING_SWEEP_INTERVAL_SECONDS > 0:
            task = asyncio.create_task(
                pending_registration_sweeper(pending_store, settings.PENDING_SWEEP_INTERVAL_SECONDS)
            )
            scheduler_tasks.append(task)
            logger.info("✅ Pending registration sweeper started")

    except Exception as e:
        logger.critical(f"🔥 Application startup failed: {str(e)}")
        raise

    try:
        logger.info("🏁 Chat backend startup complete")
        yield
    finally:
        logger.info("🛑 Beginning application shutdown...")

        for task in scheduler_tasks:
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    logger.info("✅ Sweeper stopped")
        scheduler_tasks.clear()

        logger.info("🔌 Closing database connections...")
        await session_manager.close()
        logger.info("👋 Application shutdown complete")


app = FastAPI(
    title="Chat App API",
    description="Group chat, viva questions board and admin moderation",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Request: {request.method} {request.url}")
    response = await call_next(request)
    logger.info(f"Response status: {response.status_code}")
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ChatAppError)
async def chat_app_exception_handler(request: Request, exc: ChatAppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation Error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.get("/", tags=["Health Check"])
async def health_check():
    try:
        await session_manager.ping()
        return {
            "status": "healthy",
            "service": "Chat App API",
            "database": "connected",
            "realtime_sessions": connection_manager.active_count,
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "service": "Chat App API",
            "database": "disconnected",
            "error": str(e)
        }


app.include_router(auth_router, prefix=settings.API_PREFIX, tags=["Authentication"])
app.include_router(users_router, prefix=settings.API_PREFIX, tags=["Users"])
app.include_router(messages_router, prefix=settings.API_PREFIX, tags=["Messages"])
app.include_router(viva_questions_router, prefix=settings.API_PREFIX, tags=["Viva Questions"])
app.include_router(settings_router, prefix=settings.API_PREFIX, tags=["Settings"])
app.include_router(realtime_router, tags=["Realtime"])

app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=str(upload_dir())), name="uploads")

logger.info(f"✅ Loaded {len(app.routes)} routes")
