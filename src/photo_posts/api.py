from __future__ import annotations

from contextlib import asynccontextmanager, contextmanager
from datetime import datetime
from typing import Iterator

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from .config import Settings
from .db import PostStore, StoreError
from .errors import (
    NOT_FOUND_MESSAGE,
    REQUIRED_FIELDS_MESSAGE,
    ApiError,
    ErrorKind,
    register_error_handlers,
)
from .logging_config import configure_logging

logger = structlog.get_logger(__name__)


class PostIn(BaseModel):
    caption: str | None = None
    image_url: str | None = None


class PostOut(BaseModel):
    id: int
    caption: str
    image_url: str
    created_at: datetime


class PostEnvelope(BaseModel):
    success: bool = True
    post: PostOut


class PostListEnvelope(BaseModel):
    success: bool = True
    posts: list[PostOut]


class MessageEnvelope(BaseModel):
    success: bool = True
    message: str


class DbStatusOut(BaseModel):
    message: str
    posts_count: int


def get_store(request: Request) -> PostStore:
    return request.app.state.store


@contextmanager
def store_call(failure_message: str) -> Iterator[None]:
    """
    Turns any failure below the route (StoreError or otherwise) into a
    500 with a generic message. The cause is only logged.
    """
    try:
        yield
    except ApiError:
        raise
    except StoreError as exc:
        logger.exception("store_call_failed", error=failure_message)
        raise ApiError(ErrorKind.OPERATION_FAILED, failure_message) from exc
    except Exception as exc:
        logger.exception("store_call_crashed", error=failure_message)
        raise ApiError(ErrorKind.OPERATION_FAILED, failure_message) from exc


FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_post_in(request: Request) -> PostIn:
    """Post fields from a JSON body, or from a form-encoded one."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(FORM_CONTENT_TYPES):
            data = dict(await request.form())
        else:
            data = await request.json()
        return PostIn.model_validate(data)
    except (ValueError, ValidationError) as exc:
        raise ApiError(ErrorKind.VALIDATION, REQUIRED_FIELDS_MESSAGE) from exc


def _require_fields(payload: PostIn) -> tuple[str, str]:
    if not payload.caption or not payload.image_url:
        raise ApiError(ErrorKind.VALIDATION, REQUIRED_FIELDS_MESSAGE)
    return payload.caption, payload.image_url


def create_app(settings: Settings | None = None, store: PostStore | None = None) -> FastAPI:
    """
    Build the application. Without a store, one is built from the
    settings at startup and disposed again on shutdown.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.store is None
        if owned:
            app.state.store = PostStore.from_settings(settings)
        app.state.store.init_db()
        yield
        if owned:
            app.state.store.dispose()
            app.state.store = None

    app = FastAPI(
        title="Photo Posts",
        description="REST API for image posts with captions.",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/", summary="Health message")
    def root():
        return {"message": "Photo Posts API is running!"}

    @app.get("/test-db", response_model=DbStatusOut, summary="Check the store connection")
    def test_db(store: PostStore = Depends(get_store)):
        with store_call("Failed to connect to the database"):
            count = store.count_posts()
        return {"message": "Database connected successfully!", "posts_count": count}

    @app.get("/posts", response_model=PostListEnvelope, summary="List posts, newest first")
    def list_posts(store: PostStore = Depends(get_store)):
        with store_call("Failed to get posts"):
            posts = store.list_posts()
        return {"success": True, "posts": posts}

    @app.get("/posts/{post_id}", response_model=PostEnvelope, summary="Get post by ID")
    def get_post(post_id: str, store: PostStore = Depends(get_store)):
        with store_call("Failed to get post"):
            post = store.get_post(post_id)
        if not post:
            raise ApiError(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        return {"success": True, "post": post}

    @app.post("/posts", response_model=PostEnvelope, status_code=201, summary="Create a new post")
    def create_post(payload: PostIn = Depends(read_post_in), store: PostStore = Depends(get_store)):
        caption, image_url = _require_fields(payload)
        with store_call("Failed to create post"):
            post = store.create_post(caption, image_url)
        return {"success": True, "post": post}

    @app.put("/posts/{post_id}", response_model=PostEnvelope, summary="Replace caption and image_url")
    def update_post(
        post_id: str,
        payload: PostIn = Depends(read_post_in),
        store: PostStore = Depends(get_store),
    ):
        caption, image_url = _require_fields(payload)
        with store_call("Failed to update post"):
            post = store.update_post(post_id, caption, image_url)
        if not post:
            raise ApiError(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
        return {"success": True, "post": post}

    @app.delete("/posts/{post_id}", response_model=MessageEnvelope, summary="Delete post by ID")
    def delete_post(post_id: str, store: PostStore = Depends(get_store)):
        # Existence check and delete are two round trips, not atomic.
        with store_call("Failed to delete post"):
            existing = store.get_post(post_id)
            if not existing:
                raise ApiError(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
            store.delete_post(post_id)
        return {"success": True, "message": "Post deleted successfully"}

    return app
