from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from complaint_desk.config import settings
from complaint_desk.api.v1.router import api_router
from complaint_desk.database import async_session_factory
from complaint_desk.database_init import startup_initialization


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Create tables when AUTO_CREATE_TABLES is set
    - Seed default statuses/types and the first admin
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    await startup_initialization()

    yield

    logger.info("Shutting down...")


OPENAPI_TAGS = [
    {"name": "Authentication", "description": "Credential login with an httpOnly session cookie"},
    {"name": "Complaints", "description": "Complaint records, audit trail and uploads"},
    {"name": "Attachments", "description": "Files attached to complaints"},
    {"name": "Notifications", "description": "Per-user in-app notifications"},
]

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"error": message}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are a 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unexpected faults server-side; the caller only sees a generic 500."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")

    response = JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )

    # Errors bypass CORSMiddleware, so add the headers here
    origin = request.headers.get("origin", "")
    if origin in settings.CORS_ORIGINS or "*" in settings.CORS_ORIGINS:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"

    return response


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database validation."""
    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown"
        }
    }

    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except Exception:
        logger.exception("Health check could not reach the database")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = "error"

    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status
