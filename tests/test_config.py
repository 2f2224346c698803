import pytest
from fastapi.testclient import TestClient

from photo_posts.api import create_app
from photo_posts.config import Settings


def test_from_env_defaults(monkeypatch):
    for name in ("HOST", "PORT", "DATABASE_URL", "DATABASE_KEY", "CORS_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.host == "0.0.0.0"
    assert s.port == 8080
    assert s.database_url is None
    assert s.cors_origins == ["*"]
    assert s.log_level == "INFO"


def test_from_env_reads_variables(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://app@db.example.com:5432/posts")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5500, http://127.0.0.1:5500")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    s = Settings.from_env()
    assert s.port == 9000
    assert s.database_url.startswith("postgresql+psycopg://")
    assert s.cors_origins == ["http://localhost:5500", "http://127.0.0.1:5500"]
    assert s.log_level == "DEBUG"


def test_store_url_uses_access_key_as_password():
    s = Settings(
        database_url="postgresql+psycopg://app@db.example.com:5432/posts",
        database_key="s3cret",
    )
    url = s.store_url()
    assert url.password == "s3cret"
    assert url.username == "app"
    assert url.host == "db.example.com"


def test_store_url_without_key_is_unchanged():
    s = Settings(database_url="sqlite:///posts.db")
    assert s.store_url().database == "posts.db"


def test_startup_without_database_url_fails():
    app = create_app(settings=Settings(database_url=None))
    with pytest.raises(RuntimeError):
        with TestClient(app):
            pass
