# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from photo_posts.api import create_app
from photo_posts.config import Settings
from photo_posts.db import PostStore


@pytest.fixture()
def store():
    # One shared in-memory connection, so every session sees the same tables.
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    s = PostStore(engine)
    s.init_db()
    yield s
    s.dispose()


@pytest.fixture()
def settings():
    return Settings(database_url="sqlite://")


@pytest.fixture()
def client(store, settings):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as c:
        yield c
