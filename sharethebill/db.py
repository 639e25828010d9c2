import logging
import os

from alembic.config import Config
from sqlalchemy import Connection, create_engine, make_url
from sqlalchemy.engine import Engine

from alembic import command
from sharethebill.settings import settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_connection: Connection | None = None


def get_engine() -> Engine:
    """Engine for the key-value tables. Raises when SHARETHEBILL_DB_URL is unset."""
    global _engine
    if _engine is None:
        url = settings.get_db_url()
        _engine = create_engine(url, pool_pre_ping=True, pool_recycle=1800)
        logger.info("Ledger store engine created (backend=%s)", make_url(url).get_backend_name())
    return _engine


def get_connection() -> Connection:
    """Process-wide connection for the admin console.

    HTTP requests get their own connection from DBConnectionMiddleware.
    """
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Console store connection opened")
    return _connection


def _get_alembic_config() -> Config:
    """Locate alembic.ini next to the package, else in the working directory."""
    ini_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), "alembic.ini")
    if not os.path.exists(ini_path):
        ini_path = os.path.join(os.getcwd(), "alembic.ini")
    return Config(ini_path)


def initialize_db() -> None:
    """Create or upgrade the kv_entries / kv_set_members tables."""
    logger.info("Upgrading ledger store schema")
    command.upgrade(_get_alembic_config(), "head")
    logger.info("Ledger store schema is at head")
