"""
Super Admin Dashboard - Main Application

FastAPI backend with:
- MongoDB for every document (faculty, students, internships, tests, ...)
- Change streams for realtime collection snapshots
- JWT sessions for the super admin

Run: uvicorn superadmin.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from superadmin.api.routes import api_router
from superadmin.core.config import get_settings
from superadmin.core.errors import DashboardError, describe_error
from superadmin.core.logging_config import configure_logging
from superadmin.db.mongodb import init_mongo_indexes, close_mongo_client, test_mongo_connection

settings = get_settings()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Super Admin Dashboard",
    description="""
    Manage faculty, students, internships and skills tests.

    ## Features
    - **Authentication**: email/password sign-in with revocable JWT sessions
    - **Faculty**: accounts + profiles, derived internshipsPosted counter
    - **Students**: search, filters, activate/deactivate
    - **Internships**: faculty linking, faculty names joined on read
    - **Tests**: skills tests and assignments to applicants
    - **Realtime**: WebSocket snapshot streams per collection
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    """Every dashboard failure becomes {detail, code} with a readable message."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": describe_error(exc), "code": exc.code},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc), "code": "invalid-argument"})


# Startup event
@app.on_event("startup")
async def startup_event():
    """Configure logging and initialize MongoDB indexes on startup."""
    configure_logging(settings.log_level)
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except PyMongoError as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.on_event("shutdown")
async def shutdown_event():
    close_mongo_client()


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Super Admin Dashboard"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
