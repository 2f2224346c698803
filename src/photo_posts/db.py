from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, Session, create_engine, select

from .config import Settings
from .models import Post


class StoreError(Exception):
    """Any failure while talking to the store (connection, constraint, ...)."""


# Primary keys are signed 64-bit integers on every supported backend.
MAX_ID = 2**63 - 1


def _parse_id(post_id: int | str) -> int | None:
    try:
        pk = int(post_id)
    except (TypeError, ValueError):
        return None
    if not -MAX_ID - 1 <= pk <= MAX_ID:
        return None
    return pk


class PostStore:
    """
    Data access for the posts table. One instance per process, handed to
    the app factory; every method opens its own short session.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> "PostStore":
        engine = create_engine(settings.store_url(), echo=False, pool_pre_ping=True)
        return cls(engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine) as session:
                yield session
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def init_db(self) -> None:
        try:
            SQLModel.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def dispose(self) -> None:
        self.engine.dispose()

    def count_posts(self) -> int:
        with self._session() as session:
            return session.exec(select(func.count()).select_from(Post)).one()

    def list_posts(self) -> list[dict]:
        with self._session() as session:
            stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
            posts = session.exec(stmt).all()
            return [p.model_dump() for p in posts]

    def get_post(self, post_id: int | str) -> dict | None:
        pk = _parse_id(post_id)
        if pk is None:
            return None
        with self._session() as session:
            post = session.get(Post, pk)
            return post.model_dump() if post else None

    def create_post(self, caption: str, image_url: str) -> dict:
        with self._session() as session:
            post = Post(caption=caption, image_url=image_url)
            session.add(post)
            session.commit()
            session.refresh(post)
            return post.model_dump()

    def update_post(self, post_id: int | str, caption: str, image_url: str) -> dict | None:
        pk = _parse_id(post_id)
        if pk is None:
            return None
        with self._session() as session:
            post = session.get(Post, pk)
            if post is None:
                return None
            post.caption = caption
            post.image_url = image_url
            session.add(post)
            session.commit()
            session.refresh(post)
            return post.model_dump()

    def delete_post(self, post_id: int | str) -> bool:
        pk = _parse_id(post_id)
        if pk is None:
            return False
        with self._session() as session:
            post = session.get(Post, pk)
            if post is None:
                return False
            session.delete(post)
            session.commit()
            return True
