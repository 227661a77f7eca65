import logging
import threading

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import sessionmaker
from tenacity import retry, stop_after_attempt, wait_fixed

from models import Base, SequenceCounter

logger = logging.getLogger(__name__)


class DriverUnavailable(Exception):
    """The configured driver could not be loaded or the URL is malformed."""


class Database:
    """Lazily builds the engine so a bad driver fails the request, not the process."""

    def __init__(self, settings, engine_options=None):
        self.settings = settings
        self.engine_options = engine_options or {}
        self._engine = None
        self._sessionmaker = None
        # Les premières requêtes arrivent en parallèle depuis le threadpool
        self._lock = threading.RLock()

    @property
    def engine(self):
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    try:
                        self._engine = create_engine(self.settings.url(), **self.engine_options)
                    except (ArgumentError, ImportError) as e:
                        # NoSuchModuleError (dialecte inconnu) est une ArgumentError,
                        # un paquet DBAPI absent lève ImportError.
                        raise DriverUnavailable(str(e)) from e
        return self._engine

    def sessionmaker(self):
        if self._sessionmaker is None:
            with self._lock:
                if self._sessionmaker is None:
                    self._sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self._sessionmaker

    def dispose(self):
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()


# Création de la table avec un retry et un délai entre les tentatives
@retry(stop=stop_after_attempt(5), wait=wait_fixed(2))
def create_tables_with_retry(engine):
    inspector = inspect(engine)
    if not inspector.has_table(SequenceCounter.__tablename__):
        logger.info("Creating tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created.")
    else:
        logger.info("Tables already exist.")


@retry(stop=stop_after_attempt(10), wait=wait_fixed(3))
def wait_for_database(engine):
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database is reachable.")
