# tests/conftest.py
import itertools
import os

# Keep the app's own engine off the filesystem; tests use the engine below.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
# --- Enable test mode so idempotency decorator auto-fills keys ---
os.environ["TESTING"] = "1"

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

# Make sure models are imported so Base has all tables
from league_table import models  # noqa: F401,E402
from league_table.db import Base, get_db  # noqa: E402
from league_table.main import app  # noqa: E402
from league_table.utils.idempotency import clear_idempotency_store  # noqa: E402

# Single in-memory DB shared across the whole process
TEST_DATABASE_URL = "sqlite+pysqlite://"

_seq = itertools.count(1)


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # <<< key: share the same memory DB
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db_session):
    # Override app DB dependency to use our shared in-memory session
    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    clear_idempotency_store()

    from starlette.testclient import TestClient

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# ---------- small API builders ----------


@pytest.fixture()
def make_league(client):
    def _make(name: str | None = None) -> dict:
        r = client.post("/leagues/", json={"name": name or f"League {next(_seq)}"})
        assert r.status_code == 200, r.text
        return r.json()

    return _make


@pytest.fixture()
def make_team(client):
    def _make(league_id: int, name: str) -> dict:
        r = client.post(f"/leagues/{league_id}/teams", json={"name": name})
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture()
def make_match(client):
    def _make(league_id: int, home_id: int, away_id: int, home_score=None, away_score=None, when=None) -> dict:
        body = {
            "home_team_id": home_id,
            "away_team_id": away_id,
            "date_time": when or f"2025-03-{(next(_seq) % 28) + 1:02d}T15:00:00",
            "home_score": home_score,
            "away_score": away_score,
        }
        r = client.post(f"/leagues/{league_id}/matches", json=body)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture()
def team_by_name(client):
    def _get(league_id: int) -> dict:
        r = client.get(f"/leagues/{league_id}/teams")
        assert r.status_code == 200, r.text
        return {t["name"]: t for t in r.json()}

    return _get
