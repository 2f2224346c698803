import pytest
from sqlmodel import SQLModel

from photo_posts.db import PostStore, StoreError


def test_create_assigns_id_and_timestamp(store):
    post = store.create_post("hello", "http://x/1.png")
    assert post["id"] is not None
    assert post["created_at"] is not None
    assert store.count_posts() == 1


def test_get_post_accepts_string_ids(store):
    post = store.create_post("hello", "http://x/1.png")
    assert store.get_post(str(post["id"])) == post
    assert store.get_post("not-a-number") is None
    assert store.get_post(12345) is None


def test_list_posts_newest_first(store):
    first = store.create_post("a", "http://x/a.png")
    second = store.create_post("b", "http://x/b.png")
    third = store.create_post("c", "http://x/c.png")

    assert [p["id"] for p in store.list_posts()] == [third["id"], second["id"], first["id"]]


def test_update_post(store):
    post = store.create_post("a", "http://x/a.png")

    updated = store.update_post(post["id"], "b", "http://x/b.png")
    assert updated["caption"] == "b"
    assert updated["image_url"] == "http://x/b.png"
    assert updated["created_at"] == post["created_at"]

    assert store.update_post(999, "b", "http://x/b.png") is None
    assert store.update_post("abc", "b", "http://x/b.png") is None


def test_delete_post_is_idempotent(store):
    post = store.create_post("a", "http://x/a.png")

    assert store.delete_post(post["id"]) is True
    assert store.delete_post(post["id"]) is False
    assert store.get_post(post["id"]) is None
    assert store.count_posts() == 0


def test_store_errors_are_wrapped(store):
    SQLModel.metadata.drop_all(store.engine)

    with pytest.raises(StoreError):
        store.list_posts()
    with pytest.raises(StoreError):
        store.create_post("a", "http://x/a.png")


def test_from_settings_requires_database_url():
    from photo_posts.config import Settings

    with pytest.raises(RuntimeError):
        PostStore.from_settings(Settings(database_url=None))


def test_ids_outside_64_bit_range_never_match(store):
    assert store.get_post(2**63) is None
    assert store.get_post("-99999999999999999999") is None
    assert store.update_post(str(2**64), "b", "http://x/b.png") is None
    assert store.delete_post(2**63) is False


def test_created_at_column_is_timezone_aware():
    from photo_posts.models import Post

    assert Post.__table__.c.created_at.type.timezone is True
    assert Post.__table__.c.created_at.nullable is False
