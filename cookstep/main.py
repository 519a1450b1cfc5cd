"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from cookstep import __version__
from cookstep.api.routes import health, recipes
from cookstep.config import settings
from cookstep.core.request_id import get_request_id
from cookstep.middleware.logging import RequestLoggingMiddleware
from cookstep.middleware.rate_limit import get_rate_limit_exceeded_handler, limiter
from cookstep.middleware.security import SecurityHeadersMiddleware, setup_compression, setup_cors
from cookstep.utils.exceptions import CookStepException, ValidationError
from cookstep.utils.logging_config import setup_logging

# Setup logging
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CookStep API",
    description="Recipe page extraction and step-by-step instruction breakdown",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, get_rate_limit_exceeded_handler())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors with detailed messages."""
    request_id = get_request_id()

    logger.warning(
        f"Validation error: {str(exc)}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation error",
            "detail": jsonable_errors(exc),
            "request_id": request_id,
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Field errors without the raw input/context objects."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


@app.exception_handler(CookStepException)
async def cookstep_exception_handler(request: Request, exc: CookStepException) -> JSONResponse:
    """Map domain exceptions to their status and user-facing message."""
    request_id = get_request_id()

    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"Exception: {type(exc).__name__}: {exc}",
        extra={"request_id": request_id, "path": request.url.path, "status_code": exc.status_code},
    )

    content = {"error": exc.public_message, "request_id": request_id}
    if isinstance(exc, ValidationError):
        content["detail"] = str(exc)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = get_request_id()

    logger.error(
        f"Unexpected exception: {str(exc)}",
        extra={"request_id": request_id},
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred",
            "request_id": request_id,
        },
    )


# Add middleware (last added runs first)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
setup_compression(app)
setup_cors(app)

app.include_router(health.router)
app.include_router(recipes.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event."""
    logger.info("CookStep API starting up...")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Rate limit: {settings.rate_limit_per_hour} requests/hour")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set; instructions will be processed by the rule-based tier only")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event."""
    logger.info("CookStep API shutting down...")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "CookStep API",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cookstep.main:app", host=settings.host, port=settings.port)
