"""
Boxflow - Document Box Lifecycle Service
FastAPI application entry point
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.database import engine, Base
from app.core.logging_config import configure_logging
from app.api import organizations, boxes, documents, checklist
# Import models to ensure they're registered with Base.metadata
from app.models import Organization, Membership, Contact, Box, Document, ActivityLog

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create database tables
async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Status workflow, checklists and validation for accounting document boxes",
    version=settings.VERSION,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
app.include_router(boxes.router, prefix="/boxes", tags=["boxes"])
app.include_router(checklist.router, prefix="/boxes", tags=["checklist"])
app.include_router(documents.router, tags=["documents"])

@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    await init_db()
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)

@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION
    }

@app.get("/health")
async def health():
    """Detailed health check"""
    return {
        "status": "healthy",
        "database": "connected",
        "rules": "loaded"
    }
