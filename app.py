"""
Main Application for the Minka Crowdfunding Platform
Campaign service consumed by the campaign-creation wizard: drafts, updates,
media, uploads, legal entities and verification intake
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging
from contextlib import asynccontextmanager

from config import get_settings
from database import init_db, check_db_health, db_manager
from campaign_routes import campaign_router, limiter
from verification_routes import verification_router
from upload_routes import upload_router
from legal_entity_routes import legal_entity_router
from storage_service import get_storage_service

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format=settings.log_format
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {settings.app_name} API")
    logger.info(f"Environment: {settings.environment}")
    init_db()
    get_storage_service().ensure_bucket()
    yield
    db_manager.close_connections()
    logger.info(f"Shutting down {settings.app_name} API")


# Create FastAPI application
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Campaign drafts, publication and verification intake for the Minka platform",
    version=settings.app_version,
    lifespan=lifespan
)

# ===== RATE LIMITING =====

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ===== CORS CONFIGURATION =====

if settings.cors_origins == ["*"] and not settings.is_development:
    logger.warning("No CORS origins configured, allowing all origins")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# ===== ROUTE INCLUSION =====

# Verification paths are registered before the /{campaign_id} routes
app.include_router(verification_router, prefix="/api/campaign", tags=["Verification"])
app.include_router(campaign_router, prefix="/api/campaign", tags=["Campaigns"])
app.include_router(upload_router, prefix="/api", tags=["Uploads"])
app.include_router(legal_entity_router, prefix="/api", tags=["Legal Entities"])

# Uploaded objects are served from the bucket directory
app.mount("/media", StaticFiles(directory=settings.upload_directory, check_dir=False), name="media")

# ===== ROOT ROUTES =====


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"{settings.app_name} API",
        "version": settings.app_version,
        "status": "running",
        "environment": settings.environment
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    database = check_db_health()
    return {
        "status": "healthy" if database["connected"] else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": database,
        "available_endpoints": {
            "draft": "/api/campaign/draft",
            "campaign": "/api/campaign/{campaign_id}",
            "upload": "/api/upload",
            "legal_entities": "/api/legal-entities",
            "verification": "/api/campaign/verification"
        }
    }


# ===== EXCEPTION HANDLERS =====

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request data on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid data", "details": jsonable_encoder(
            [{"loc": e["loc"], "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
        )}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
