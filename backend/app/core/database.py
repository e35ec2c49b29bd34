import logging
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings

logger = logging.getLogger(__name__)

# SQLite connections are shared across the threadpool FastAPI runs sync code in
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Create database engine - manages connection pool
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

# Create session factory - each request gets a new session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes, even if the
    handler raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection() -> None:
    """Round-trip a trivial query; raises if the database is unreachable"""
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def init_db() -> None:
    """
    Verify connectivity and create any missing tables.

    Called from the app lifespan. Errors propagate so that an unreachable
    database halts startup.
    """
    # Register models with Base.metadata before create_all
    from app.models import product, user  # noqa: F401

    logger.info("Connecting to database...")
    check_connection()
    Base.metadata.create_all(bind=engine)
    logger.info("Database ready")
