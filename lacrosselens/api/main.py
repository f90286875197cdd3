"""FastAPI application setup."""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lacrosselens.api.routers import analytics, auth, dashboard, teams, thumbnails, videos
from lacrosselens.config.settings import get_settings
from lacrosselens.database.connection import Base, engine
from lacrosselens.processing.tasks import ProcessingTaskManager

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the background processing tasks for the lifetime of the app."""
    task_manager = ProcessingTaskManager()
    task_manager.bind(asyncio.get_running_loop())
    task_manager.start_watchdog()
    app.state.task_manager = task_manager
    logger.info("Processing watchdog started")
    try:
        yield
    finally:
        await task_manager.shutdown()
        logger.info("Processing tasks shut down")


app = FastAPI(
    title="LacrosseLens",
    description="AI analysis of lacrosse game and practice videos",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api")
app.include_router(videos.router, prefix="/api")
app.include_router(teams.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(analytics.router, prefix="/api")
app.include_router(thumbnails.router, prefix="/api")


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root():
    """Root endpoint with API info."""
    return {
        "name": "LacrosseLens API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }
