import uvicorn as uvicorn
from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
import redis.asyncio as redis
import logging

from src.config.settings import settings
from src.config.database import startDB
from src.commonUtils.exceptions import CartServiceError
from src.routes import cartRoute, wishlistRoute

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def rate_limit(times: int, seconds: int) -> list:
    # RateLimiter needs FastAPILimiter.init, which only runs when limiting is on
    if not settings.RATE_LIMITING_ENABLED:
        return []
    return [Depends(RateLimiter(times=times, seconds=seconds))]


# Initialize FastAPI app with lifespan context
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize database connection and models (startup logic)
    await startDB()

    # Initialize rate limiter
    redis_connection = None
    if settings.RATE_LIMITING_ENABLED:
        redis_connection = redis.from_url(settings.REDIS_URL, encoding="utf-8")
        await FastAPILimiter.init(redis_connection)

    logger.info(f"✓ Cart & Wishlist server is running ({settings.ENVIRONMENT})")

    yield

    if redis_connection is not None:
        await FastAPILimiter.close()


app = FastAPI(
    lifespan=lifespan,
    docs_url=None if settings.ENVIRONMENT.lower() == "production" else "/docs",
    redoc_url=None if settings.ENVIRONMENT.lower() == "production" else "/redoc"
)


def error_response(status_code: int, message) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message}
    )


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler that formats all errors as the API envelope"""
    # Classified failures carry their own status; message goes out verbatim
    if isinstance(exc, CartServiceError):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message)

    # Handle HTTP exceptions (404, 405, etc.)
    if isinstance(exc, StarletteHTTPException):
        return error_response(exc.status_code, exc.detail)

    # Handle validation errors
    if isinstance(exc, RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"success": False, "message": "Validation error", "errors": jsonable_errors(exc)}
        )

    # Log unexpected errors
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
    return error_response(500, str(exc))


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# Register the handler for all exceptions
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(CartServiceError, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cartRoute.router, tags=['cart'], prefix='/api',
                   dependencies=rate_limit(times=100, seconds=60))
app.include_router(wishlistRoute.router, tags=['wishlist'], prefix='/api',
                   dependencies=rate_limit(times=100, seconds=60))


@app.get("/api/healthchecker", dependencies=rate_limit(times=100, seconds=60))
def root():
    return {"success": True, "message": "Cart & Wishlist server is running"}


if __name__ == "__main__":
    uvicorn.run("src.main:app", host="0.0.0.0", port=settings.PORT, reload=True, log_level="info")
