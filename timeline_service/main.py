"""
FastAPI application for Timeline Service
"""
from fastapi import FastAPI, Depends, HTTPException, status, Query
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging

from .config import settings
from .database import db
from .dependencies import get_current_user_optional, get_timeline_service
from .models import TimelineTab
from .pagination import coerce_int
from .schemas import User, TimelinePage, ComposerSuggestionsResponse
from .service import TimelineService

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Starting Timeline Service...")

    await db.connect()
    logger.info("Database connected")

    logger.info(f"Timeline Service started successfully on port {settings.PORT}")

    yield

    # Shutdown
    logger.info("Shutting down Timeline Service...")
    await db.disconnect()
    logger.info("Timeline Service shut down successfully")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Ranked, searchable and paginated code-snippet timelines",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


@app.get(
    "/api/v1/timeline",
    response_model=TimelinePage,
    tags=["Timeline"],
    summary="Get a timeline page",
)
async def get_timeline(
    tab: Optional[str] = Query(TimelineTab.FOR_YOU.value, description="for-you, latest or following"),
    page: Optional[str] = Query(None, description="Page number (1-indexed)"),
    limit: Optional[str] = Query(None, description="Items per page"),
    q: Optional[str] = Query(None, description="Search, e.g. 'tag:react lang:ts useState'"),
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: TimelineService = Depends(get_timeline_service),
):
    """
    Get one page of a timeline

    - **for-you**: ranked by engagement, recency and (when signed in) taste
    - **latest**: newest first
    - **following**: newest first from followed authors, empty when signed out
    - Out of range page and limit values are clamped
    """
    user_id = current_user.id if current_user else None

    try:
        return await service.get_timeline_page(
            tab=tab,
            user_id=user_id,
            page=coerce_int(page, 1),
            limit=coerce_int(limit, settings.DEFAULT_PAGE_SIZE),
            query=q,
        )
    except Exception as e:
        logger.error(f"Error getting {tab} timeline for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve timeline"
        )


@app.get(
    "/api/v1/composer/suggestions",
    response_model=ComposerSuggestionsResponse,
    tags=["Composer"],
    summary="Get composer suggestions",
)
async def get_composer_suggestions(
    service: TimelineService = Depends(get_timeline_service),
):
    """Languages, versions and tags for post composer autocomplete"""
    try:
        return await service.get_composer_suggestions()
    except Exception as e:
        logger.error(f"Error getting composer suggestions: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve suggestions"
        )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "timeline_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
