from __future__ import annotations

import os

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel
from sqlalchemy.engine import URL, make_url

# Loads the .env next to the repo root. Existing environment variables win.
load_dotenv(find_dotenv(usecwd=True))


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    database_url: str | None = None
    database_key: str | None = None
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            database_url=os.getenv("DATABASE_URL") or None,
            database_key=os.getenv("DATABASE_KEY") or None,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def store_url(self) -> URL:
        """
        SQLAlchemy URL of the store, with DATABASE_KEY as password if set.
        """
        if not self.database_url:
            raise RuntimeError(
                "No database URL configured. Please set DATABASE_URL."
            )
        url = make_url(self.database_url)
        if self.database_key:
            url = url.set(password=self.database_key)
        return url
