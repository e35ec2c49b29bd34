import logging
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import settings
from app.core.database import check_connection, init_db
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.storage.local_storage import storage
from app.api.routes import auth, products

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: Verify the database and create tables; failure aborts startup
    """
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception("Database unreachable, server not started")
        raise
    logger.info(f"Marketplace API started ({settings.ENVIRONMENT})")
    yield
    logger.info("Marketplace API stopped")


app = FastAPI(
    title="Marketplace API",
    description="Vendor marketplace: accounts, product listings and image uploads",
    version="1.0.0",
    lifespan=lifespan
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# All routes are prefixed with /api for consistency
app.include_router(auth.router, prefix="/api")
app.include_router(products.router, prefix="/api")

# Product images, addressed by the path stored on each product
app.mount(storage.url_prefix, StaticFiles(directory=storage.upload_dir), name="uploads")


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {"message": "Marketplace API", "version": "1.0.0"}


if not settings.is_production:
    @app.get("/api/health")
    async def health():
        """Health check endpoint - development only"""
        try:
            check_connection()
            database = "connected"
        except SQLAlchemyError as e:
            logger.warning(f"Health check could not reach database: {e}")
            database = "unreachable"
        return {
            "status": "ok",
            "database": database,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def run() -> None:
    """Console entry point: serve the app with uvicorn"""
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
