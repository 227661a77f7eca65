import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import Database
from main import create_app
from models import Base, SequenceCounter


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{tmp_path / 'counter.db'}")


@pytest.fixture
def database(settings):
    # TestClient exécute les endpoints sync dans un autre thread
    database = Database(settings, engine_options={"connect_args": {"check_same_thread": False}})
    Base.metadata.create_all(bind=database.engine)
    yield database
    database.dispose()


@pytest.fixture
def seed(database):
    def _seed(*rows):
        with database.sessionmaker()() as db:
            for id_, name, count in rows:
                db.add(SequenceCounter(id=id_, sequence_name=name, sequence_count=count))
            db.commit()
    return _seed


@pytest.fixture
def stored(database):
    """Current rows as {sequence_name: (id, sequence_count)}."""
    def _stored():
        with database.sessionmaker()() as db:
            return {c.sequence_name: (c.id, c.sequence_count) for c in db.query(SequenceCounter)}
    return _stored


@pytest.fixture
def client(settings, database):
    return TestClient(create_app(settings, database))
