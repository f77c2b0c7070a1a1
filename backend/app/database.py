"""
SQLAlchemy engine and session. Supports PostgreSQL and SQLite (for local testing without Docker).
Sync usage; every topic/profile query is scoped by owner_id.
SQLite connections turn on foreign keys so topics.parent_id ON DELETE CASCADE removes whole subtrees.
"""
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import settings

logger = logging.getLogger(__name__)


def _is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ships with foreign key enforcement off; cascade deletes depend on it."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str) -> Engine:
    """Create an engine for url; SQLite engines get check_same_thread=False and the foreign key pragma."""
    is_sqlite = _is_sqlite_url(url)
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    eng = create_engine(
        url,
        pool_pre_ping=not is_sqlite,
        connect_args=connect_args,
        echo=settings.debug,
    )
    if is_sqlite:
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def import_models() -> None:
    """Import all models so they register with Base before create_all."""
    from app.models import topic, profile, rate_limit  # noqa: F401


def init_sqlite_db(bind: Engine | None = None) -> None:
    """When using SQLite: create tables. Call once at app startup (PostgreSQL uses Alembic)."""
    target = bind or engine
    if not _is_sqlite_url(str(target.url)):
        return
    import_models()
    Base.metadata.create_all(bind=target)
    logger.info("SQLite schema ready at %s", target.url)


def get_db():
    """Dependency: yield a DB session, close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dialect_insert(db):
    """INSERT construct with on_conflict_do_update for the session's dialect (SQLite or PostgreSQL)."""
    if db.get_bind().dialect.name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert
    return insert
