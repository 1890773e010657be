"""
Database configuration.
Connection and SQLModel session management.
"""
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session
from typing import Any, Dict, Generator
import logging

from inpatient.config import settings

logger = logging.getLogger("inpatient.database")


def build_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """
    Creates an engine with the options each backend needs.

    SQLite connections are shared between threads and enforce foreign keys.
    """
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)

    new_engine = create_engine(url, echo=echo, connect_args=connect_args, **kwargs)

    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)

    return new_engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables(target_engine: Engine = None) -> None:
    """
    Creates every table in the database.
    Called on application startup.
    """
    # Models must be imported so their tables are registered in the metadata
    import inpatient.models  # noqa: F401

    SQLModel.metadata.create_all(target_engine or engine)


def get_session() -> Generator[Session, None, None]:
    """
    Session generator for FastAPI dependency injection.

    Usage:
        @router.get("/endpoint")
        def endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session


def check_database_health(target_engine: Engine = None) -> Dict[str, Any]:
    """
    Runs a trivial query to confirm the database answers.

    Returns:
        Dict with `healthy` flag and the dialect name or error
    """
    target = target_engine or engine
    try:
        with target.connect() as connection:
            connection.execute(text("SELECT 1"))
        return {"healthy": True, "dialect": target.dialect.name}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"healthy": False, "error": str(e)}
