"""Database session dependency."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from dairycart.db.session import get_db


def get_session() -> Generator[Session, None, None]:
    """Request-scoped session; see ``get_db`` for commit and rollback."""
    yield from get_db()
