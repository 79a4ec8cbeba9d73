# mentor_portal/main.py
import logging
from pathlib import Path
from fastapi import FastAPI
from sqlalchemy import text
from starlette.staticfiles import StaticFiles

from .config import get_settings
from .database import create_db_and_tables, SessionLocal
from .core.change_feed import ChangeFeed
from .routers import (
    auth_router, profile_router, mentorship_router, query_router, notification_router,
    dashboard_router, admin_router, feedback_router, frontend_router,
)

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Mentor Portal API",
    description="Mentorship requests, queries and dashboards for a university mentoring programme.",
    version="1.0.0",
)

# One change feed per process; services get it through app.state
app.state.change_feed = ChangeFeed()

# Uploaded avatars
avatar_dir = Path(settings.AVATAR_STORAGE_DIR)
avatar_dir.mkdir(parents=True, exist_ok=True)
app.mount(settings.AVATAR_PUBLIC_PATH, StaticFiles(directory=str(avatar_dir)), name="avatars")

# Include routers
app.include_router(auth_router.router)
app.include_router(profile_router.router)
app.include_router(mentorship_router.router)
app.include_router(query_router.router)
app.include_router(notification_router.router)
app.include_router(dashboard_router.router)
app.include_router(admin_router.router)
app.include_router(feedback_router.router)
app.include_router(frontend_router.router)

@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("Application startup event triggered.")
    try:
        create_db_and_tables()
        logger.info("Startup sequence completed successfully.")
    except Exception as e:
        logger.critical(f"Critical error during startup: {e}", exc_info=True)
        raise

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "ok",
            "notification_subscribers": app.state.change_feed.subscriber_count,
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
