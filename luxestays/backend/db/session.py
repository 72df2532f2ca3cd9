"""Database engine and session management."""
import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from luxestays.backend.core.config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine, preparing the SQLite file location when needed."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, pool_pre_ping=True)
    
    db_path = database_url.replace("sqlite:///", "")
    if db_path != ":memory:":
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    
    sqlite_engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
    
    return sqlite_engine


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency for FastAPI to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
