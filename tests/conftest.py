import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RATE_LIMIT_MAX_CALLS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.db.session import Base, SessionLocal, engine, init_db
from app.main import app


@pytest.fixture(autouse=True)
def _tables():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_client():
    """Each client keeps its own cookie jar, i.e. its own login."""
    clients = []

    def _make(username=None, password="secret1"):
        client = TestClient(app)
        clients.append(client)
        if username:
            r = client.post("/api/register", json={"username": username, "password": password})
            assert r.status_code == 201, r.text
        return client

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def anon(make_client):
    return make_client()


@pytest.fixture
def alice(make_client):
    return make_client("alice")


@pytest.fixture
def bob(make_client):
    return make_client("bob")


@pytest.fixture
def root(make_client):
    return make_client("root")
