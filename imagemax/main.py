"""
Main FastAPI application for the ImageMax generation API.
Serves health, generation, chat history and metrics.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from imagemax.api.routes import chats, generations, health
from imagemax.core.config import settings
from imagemax.core.errors import ImageMaxError, InvalidRequestError, UnauthorizedError
from imagemax.core.logging import configure_logging
from imagemax.db.base import Base
from imagemax.db.session import engine
from imagemax.services.auth import get_current_user
from imagemax.storage import build_storage
from imagemax.utils.metrics import router as metrics_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if settings.db_auto_create:
        import imagemax.models  # noqa: F401  (register tables)

        Base.metadata.create_all(bind=engine)
    app.state.storage = build_storage(settings)
    logger.info(
        "app_started",
        extra={"backend": app.state.storage.backend_name, "status": "mock" if settings.mock_images else "live"},
    )
    try:
        yield
    finally:
        app.state.storage.close()


app = FastAPI(
    title="ImageMax API",
    description="Multi-provider image generation with chat history",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
origins = settings.cors_origins_list
if not origins:
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ImageMaxError)
async def imagemax_error_handler(request: Request, exc: ImageMaxError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body parsing runs before route dependencies; authentication still decides first
    try:
        get_current_user(request)
    except UnauthorizedError as auth_error:
        return await imagemax_error_handler(request, auth_error)
    logger.info("request_invalid", extra={"path": request.url.path, "error": str(exc.errors()[:1])})
    return await imagemax_error_handler(request, InvalidRequestError("Invalid request"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request_unhandled_error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


# Routers
app.include_router(health.router, tags=["health"])
app.include_router(generations.router)
app.include_router(chats.router)
app.include_router(metrics_router)

# Local blob storage is served by the app itself
if settings.storage_backend == "local":
    app.mount(
        "/static/generated",
        StaticFiles(directory=settings.storage_base_path, check_dir=False),
        name="generated",
    )
