import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from config import DATABASE_URL
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str):
    """Create an engine with per-dialect settings."""
    engine_args = {}
    if url.startswith("sqlite"):
        engine_args["connect_args"] = {"check_same_thread": False}
        # In-memory SQLite lives on a single connection; share it across sessions
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine_args["poolclass"] = StaticPool
    else:
        # Production settings for PostgreSQL
        engine_args.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,
        })
    return create_engine(url, **engine_args, echo=False)


def build_session_factory(url: str):
    """Engine + sessionmaker pair with all tables created."""
    engine = build_engine(url)
    create_tables(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


try:
    engine = build_engine(DATABASE_URL)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
except Exception as e:
    logger.error(f"Failed to create engine: {e}")
    raise e


def create_tables(bind) -> None:
    # Import all models so they register with Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def init_db():
    """Create the data/ directory if it doesn't exist, then create all tables."""
    if DATABASE_URL.startswith("sqlite:///./"):
        os.makedirs(os.path.dirname(DATABASE_URL[len("sqlite:///"):]), exist_ok=True)

    try:
        create_tables(engine)
        logger.info("Database initialized successfully.")
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        raise
