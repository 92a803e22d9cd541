"""
Database initialization utilities.

Schema migrations are managed outside this service; ``init_db`` only creates
the tables that do not exist yet, which is enough for fresh development and
test databases.
"""

from sqlalchemy.engine import Engine

from cms_admin.models import Base
from cms_admin.structlog_config import get_logger

logger = get_logger(__name__)


def init_db(engine: Engine):
    """Create any missing content schema tables."""
    logger.info("Initializing database...", operation="init_db")

    Base.metadata.create_all(bind=engine)

    logger.info(
        "Database initialization complete.",
        operation="init_db",
        tables=sorted(Base.metadata.tables),
    )
