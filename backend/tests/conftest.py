import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from billiards.core.config import settings
from billiards.db.init_db import drop_db, init_db
from billiards.db.session import get_db, make_engine
from billiards.main import app
from billiards.services.badges import seed_badges
from billiards.services.players import create_player


@pytest.fixture()
def engine():
    # one shared in-memory database for every session and thread in a test
    eng = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=eng)
    yield eng
    drop_db(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    seed_badges(session)
    yield session
    session.close()


@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    monkeypatch.setattr(settings, "PAYER_PRIORITY", "")
    monkeypatch.setattr(settings, "TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "BADGES_ENABLED", True)
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")


@pytest.fixture()
def client(db, session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: startup migration and default seeding stay off
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def players(db):
    """A, B and C registered in that order."""
    return [create_player(db, name) for name in ("A", "B", "C")]
