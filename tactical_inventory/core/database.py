"""
Tactical Inventory Database Configuration
SQLAlchemy engine construction and schema bootstrap
"""
from sqlalchemy import create_engine, MetaData, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from typing import Optional

from .config import Settings, settings as default_settings
from .logging import get_logger

logger = get_logger("database")

# Metadata with naming convention for constraints
Base = declarative_base(metadata=MetaData(naming_convention={
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}))


def build_engine(config: Optional[Settings] = None) -> Engine:
    """
    Create the SQLAlchemy engine for the configured backend

    Connection pooling applies to the server backends; SQLite keeps the
    driver defaults and is opened for use across threads.
    """
    config = config or default_settings
    url = config.database_url

    if config.backend == "sqlite":
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=config.DEBUG,
        )

    return create_engine(
        url,
        pool_size=config.DATABASE_POOL_SIZE,
        max_overflow=config.DATABASE_MAX_OVERFLOW,
        pool_recycle=config.DATABASE_POOL_RECYCLE,
        pool_pre_ping=True,  # Validate connections before use
        echo=config.DEBUG,  # Log SQL queries in debug mode
    )


def init_db(engine: Engine):
    """
    Initialize database tables

    This function creates all tables defined in models
    """
    try:
        # Import all models to ensure they are registered with Base
        from tactical_inventory.models import inventory, movements, cyclic  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


def check_db_connection(engine: Engine) -> bool:
    """
    Check if database connection is working

    Returns:
        True if connection is successful, False otherwise
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
