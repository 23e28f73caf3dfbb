import os

# settings and the engine are built at import time
os.environ.setdefault("ENCRYPTION_KEY", "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY=")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "local"
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("YAHOO_CLIENT_ID", "test-client")
os.environ.setdefault("YAHOO_CLIENT_SECRET", "test-secret")
os.environ.setdefault("YAHOO_REDIRECT_URI", "https://testserver/auth/callback")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base
from app.db.session import get_db
from app.deps import get_current_user
from app.main import app
from app.schemas.stats import TeamPeriodStats
from app.schemas.team import TeamIdentity
from app.services import cache

TEST_GUID = "GUID-TEST-1"
LEAGUE_KEY = "458.l.1000"


@pytest.fixture(autouse=True)
def _clear_route_caches():
    cache._CACHES.clear()
    yield
    cache._CACHES.clear()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user] = lambda: TEST_GUID
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_team():
    def _make(team_key, name, stats=None, *, error=False, week=1):
        return TeamPeriodStats(
            team=TeamIdentity(team_key=team_key, name=name, manager_name=f"{name} GM"),
            league_key=LEAGUE_KEY,
            week=week,
            year=2024,
            stats=stats or {},
            error=error,
        )
    return _make
