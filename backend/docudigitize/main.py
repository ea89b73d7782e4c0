from contextlib import asynccontextmanager
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import backup, files, search, settings, uploads, users
from .routers import dependencies
from .api.error_handler import register_exception_handlers
from .core.config import CORS_ORIGINS, STORE_TYPE, AI_PROVIDER
from .core.logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the workspace on startup and close it on shutdown."""
    logger.info("=" * 60)
    logger.info("Starting DocuDigitize Backend...")
    logger.info("=" * 60)

    try:
        import fastapi
        import uvicorn
        logger.info("Framework & Server:")
        logger.info(f"  → FastAPI Version: {fastapi.__version__}")
        logger.info(f"  → Uvicorn Version: {uvicorn.__version__}")
        logger.info(f"  → Python Version: {sys.version.split()[0]}")
    except ImportError as e:
        logger.debug(f"Could not get framework versions: {e}")

    logger.info("Configuration:")
    logger.info(f"  → Environment: {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"  → Store Type: {STORE_TYPE}")
    logger.info(f"  → AI Provider: {AI_PROVIDER}")
    logger.info(f"  → Allowed Origins: {', '.join(CORS_ORIGINS)}")

    dependencies.initialize_store()
    dependencies.initialize_services()

    logger.info("API Routes:")
    logger.info(f"  → Total Routes: {len(app.routes)}")
    logger.info("✅ DocuDigitize Backend ready")

    yield

    logger.info("Shutting down DocuDigitize Backend...")
    dependencies.shutdown_services()
    logger.info("✅ Shutdown complete")


app = FastAPI(
    title="DocuDigitize API",
    description="Local document digitization workspace with AI OCR, backups and merge",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(files.router, tags=["Files"])
app.include_router(search.router, tags=["Search"])
app.include_router(uploads.router, tags=["Uploads"])
app.include_router(settings.router, tags=["Settings"])
app.include_router(users.router, tags=["Users"])
app.include_router(backup.router, tags=["Backup"])


@app.get("/health")
async def health_check():
    store = dependencies.store
    return {
        "status": "healthy",
        "store": store.get_stats() if store is not None else None,
    }
