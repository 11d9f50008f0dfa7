from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from storefront import __version__
from storefront.api.responses import status_for_error
from storefront.api.v1.router import api_router
from storefront.core.config import settings
from storefront.core.database import close_db, get_session_local, init_db
from storefront.core.exceptions import (
    ErrorCode,
    RequestValidationFailed,
    StorefrontError,
    UploadError,
    error_response,
)
from storefront.core.logging_config import logger
from storefront.core.middleware import RequestLoggingMiddleware, RequestSizeLimitMiddleware
from storefront.core.rate_limiter import limiter, rate_limit_exceeded_handler
from storefront.models.role import Role
from storefront.repositories.user_repository import RoleRepository
from storefront.web import pages


def check_startup_config() -> None:
    """Refuse to start without a store URL or a real signing secret"""
    problems = []
    if not settings.DATABASE_URL:
        problems.append("DATABASE_URL is empty")
    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        problems.append("JWT_SECRET_KEY is empty or still the placeholder")

    for problem in problems:
        logger.critical(f"Startup aborted: {problem}")
    if problems:
        raise RuntimeError("; ".join(problems))

    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        logger.warning("DEBUG is on in production")


async def seed_roles():
    """Create the default and admin roles on first start"""
    async with get_session_local()() as session:
        roles = RoleRepository(session)
        for name, description in (
            (settings.DEFAULT_ROLE_NAME, "Default role"),
            (settings.ADMIN_ROLE_NAME, "Administrator"),
        ):
            if await roles.find_by_name(name) is None:
                await roles.add(Role(name=name, description=description))
                logger.info(f"Seeded role '{name}'")
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"{settings.APP_NAME} {__version__} starting",
        extra={"environment": settings.ENVIRONMENT, "api_version": settings.API_VERSION},
    )
    check_startup_config()
    await init_db()
    await seed_roles()

    yield

    logger.info(f"{settings.APP_NAME} stopping")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Product catalog, reviews, uploads and user management",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Outermost last
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    RequestSizeLimitMiddleware,
    max_size=settings.UPLOAD_MAX_FILE_SIZE * settings.UPLOAD_MAX_FILES + 1024 * 1024,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationFailed)
async def request_validation_failed_handler(request: Request, exc: RequestValidationFailed):
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": exc.message, "errors": exc.errors},
    )


@app.exception_handler(RequestValidationError)
async def fastapi_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
            "message": error.get("msg", "Invalid value"),
            "value": error.get("input") if isinstance(error.get("input"), (str, int, float, bool)) else None,
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


@app.exception_handler(UploadError)
async def upload_error_handler(request: Request, exc: UploadError):
    return JSONResponse(status_code=400, content={"success": False, "message": exc.message})


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=status_for_error(exc.code), content=error_response(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error": ErrorCode.INTERNAL_ERROR.value,
        },
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness check"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": __version__,
        "environment": settings.ENVIRONMENT,
    }


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")
app.include_router(pages.router)

Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


def run():
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
