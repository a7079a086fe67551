"""PhotoShare Application - FastAPI Entry Point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import config
from .database import create_connection, init_db
from .exceptions import AccessDenied, NotFound, StorageError, ValidationError
from .infrastructure.repositories import SessionRepository
from .logging_config import configure_logging
from .middleware import AuthMiddleware
from .routes.deps import get_user_service

# Import routers
from .routes.auth import router as auth_router
from .routes.photos import router as photos_router
from .routes.shares import router as shares_router
from .routes.comments import router as comments_router
from .routes.albums import router as albums_router
from .routes.admin import router as admin_router

logger = logging.getLogger(__name__)


def bootstrap() -> None:
    """Create schema, drop expired sessions and seed the first administrator."""
    config.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
    db = create_connection()
    try:
        init_db(db)
        removed = SessionRepository(db).cleanup_expired()
        if removed:
            logger.info("Removed %d expired sessions", removed)
        get_user_service(db).ensure_admin(
            config.DEFAULT_ADMIN_USERNAME,
            config.DEFAULT_ADMIN_EMAIL,
            config.DEFAULT_ADMIN_PASSWORD,
        )
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: runs before the application starts accepting requests
    configure_logging(config.LOG_LEVEL)
    bootstrap()
    yield


app = FastAPI(title="PhotoShare", lifespan=lifespan)

app.add_middleware(AuthMiddleware)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AccessDenied)
async def access_denied_handler(request: Request, exc: AccessDenied):
    return JSONResponse(status_code=403, content={"detail": "Access denied"})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": "Not found"})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Storage unavailable, please try again later"}
    )


# Include routers
app.include_router(auth_router)
app.include_router(photos_router)
app.include_router(shares_router)
app.include_router(comments_router)
app.include_router(albums_router)
app.include_router(admin_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
