"""Database engine, session factory and schema bootstrap."""

from collections.abc import Generator
import logging
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from dairycart.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(config: Settings) -> dict[str, Any]:
    """Pool and driver options for the configured backend.

    Keepalive settings are psycopg connect args and only apply to Postgres.
    """
    if config.is_postgres:
        return {
            "pool_pre_ping": True,
            "pool_recycle": 1800,
            "pool_size": 5,
            "max_overflow": 10,
            "connect_args": {
                "connect_timeout": 10,
                "keepalives": 1,
                "keepalives_idle": 30,
                "keepalives_interval": 10,
                "keepalives_count": 5,
            },
        }
    if config.database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True,
    **_engine_options(settings),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_fresh_session() -> Session:
    """Open a new session outside any request, retrying once on a dropped pool.

    Used by background work that runs after the request session is closed.
    """
    try:
        return SessionLocal()
    except (OperationalError, DisconnectionError) as e:
        logger.warning(f"Connection error creating session: {e}, retrying...")
        engine.dispose()
        return SessionLocal()


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session; commit when the handler returns cleanly."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create any missing tables for the registered models."""
    from dairycart.db import models  # noqa: F401
    from dairycart.db.base import Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ensured")
