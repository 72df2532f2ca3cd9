"""Initialize database tables."""
import logging
from luxestays.backend.db.session import engine
from luxestays.backend.db.models import Base

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)
    
    logger.info("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
