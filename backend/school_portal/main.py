"""
School Portal - FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from school_portal.api.v1.api import api_router
from school_portal.core.config import settings
from school_portal.core.database import Database
from school_portal.core.exceptions import setup_exception_handlers
from school_portal.core.logging import configure_logging
from school_portal.domains.accounts import seed_default_admin
from school_portal.domains.news import NewsImageStorage, NewsRepository
from school_portal.domains.school import seed_default_school_info


async def seed_default_data(database: Database) -> None:
    """Insert the bootstrap admin, school profile and news categories if missing."""
    async with database.session() as session:
        await seed_default_admin(session)
        await seed_default_school_info(session)
        await NewsRepository(session).seed_default_categories()


# Create FastAPI app
app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="School administration backend: news, graduation records and school profile",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    openapi_url="/openapi.json" if settings.ENVIRONMENT != "production" else None,
)

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup exception handlers
setup_exception_handlers(app)

# Include API routers
app.include_router(api_router)


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    configure_logging()
    logger.info(f"Starting {settings.APP_NAME} API ({settings.ENVIRONMENT})...")

    database = Database.from_settings()
    if not await database.wait_until_ready():
        logger.error("Database is not ready; aborting startup.")
        raise RuntimeError("Database connection failed during startup")

    if settings.is_sqlite:
        # PostgreSQL schema is managed by alembic
        await database.create_all()

    if settings.SEED_DEFAULT_DATA:
        await seed_default_data(database)

    app.state.database = database
    app.state.image_storage = NewsImageStorage.from_settings()
    logger.info("Application startup complete!")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info(f"Shutting down {settings.APP_NAME} API...")
    database = getattr(app.state, "database", None)
    if database is not None:
        await database.close()


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "service": "school-portal-api",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT
        }
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return JSONResponse(
        status_code=200,
        content={
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": settings.VERSION,
            "docs": "/docs" if settings.ENVIRONMENT != "production" else "Not available in production",
            "health": "/health"
        }
    )
