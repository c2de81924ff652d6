from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
import logging

from glow_wizard.core.config import settings
from glow_wizard.core.exceptions import AuthenticationError, GlowWizardException, InternalError, error_body
from glow_wizard.core.monitoring import setup_metrics
from glow_wizard.database import connect_to_mongo, close_mongo_connection
from glow_wizard.api.v1 import recommendations, profile

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME} backend ({settings.ENVIRONMENT})...")
    connect_to_mongo()
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Closing database connections...")
    close_mongo_connection()
    logger.info("Application shutdown complete")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Glow Wizard - skincare recommendation gateway",
    lifespan=lifespan
)

if settings.ENABLE_METRICS:
    setup_metrics(app).instrument(app).expose(app, endpoint="/metrics")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
)

# Include routers
app.include_router(recommendations.router, tags=["Recommendations"])
app.include_router(profile.router, tags=["Profile"])

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Liveness probe"""
    return {
        "status": "OK",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT
    }

@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers={"WWW-Authenticate": "Bearer"}
    )

@app.exception_handler(GlowWizardException)
async def glow_wizard_exception_handler(request: Request, exc: GlowWizardException):
    # Internal failures only expose their message in debug mode
    include_message = settings.DEBUG or not isinstance(exc, InternalError)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc, include_message=include_message)
    )

@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    error_details = [
        {
            "field": ".".join(str(loc_part) for loc_part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.info(f"Rejected request to {request.url.path}: {error_details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "INVALID_REQUEST", "details": error_details}
    )

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "INTERNAL_ERROR"}
    )
