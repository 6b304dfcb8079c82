from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import uuid

import structlog

from seatfinder.core.config import settings
from seatfinder.logging import configure_logging
from seatfinder.middleware.logging import LoggingMiddleware
from seatfinder.api.routes import router as api_router
from seatfinder.services.availability import DeclaredPopularitySignalProvider
from seatfinder.services.places import GooglePlacesClient

configure_logging()
logger = structlog.get_logger(__name__)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("application_startup", version=settings.VERSION)
    app.state.places_client = GooglePlacesClient()
    app.state.signal_provider = DeclaredPopularitySignalProvider()
    if not settings.GOOGLE_PLACES_API_KEY:
        logger.warning("places_api_key_missing", detail="nearby search and geocoding will return errors")

    yield

    logger.info("application_shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.BRIEF_DESCRIPTION,
    lifespan=lifespan,
)

# --- Middleware ---
# The map UI is served from a different origin
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.add_middleware(LoggingMiddleware)

# --- API Routes ---
app.include_router(api_router, prefix="/api")


# --- Health Check Endpoint ---
@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "ok",
        "version": settings.VERSION,
        "places_configured": bool(settings.GOOGLE_PLACES_API_KEY),
    }


# --- Global Exception Handler (for unhandled errors) ---
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_id = str(uuid.uuid4())
    logger.error("unhandled_exception", error_id=error_id, error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": {
                "error": "INTERNAL_SERVER_ERROR",
                "detail": "An unexpected error occurred. Please report this error ID.",
                "error_id": error_id
            }
        }
    )
