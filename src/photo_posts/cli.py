from pathlib import Path

import uvicorn
from dotenv import load_dotenv

SAMPLE_POSTS = [
    ("Cute cat!", "https://example.com/images/cat.png"),
    ("Walk by the lake.", "https://example.com/images/lake.jpg"),
    ("Vegan lunch", "https://example.com/images/meal.jpg"),
]


def _load_env_local():
    # src/photo_posts/cli.py -> parents[2] == repo root
    repo_root = Path(__file__).resolve().parents[2]
    env_file = repo_root / ".env.local"
    if env_file.exists():
        load_dotenv(env_file, override=False)


def seed():
    _load_env_local()
    from .config import Settings
    from .db import PostStore

    store = PostStore.from_settings(Settings.from_env())
    try:
        store.init_db()
        for caption, image_url in SAMPLE_POSTS:
            store.create_post(caption, image_url)
    finally:
        store.dispose()
    print(f"Seeded {len(SAMPLE_POSTS)} posts.")


def start_api():
    _load_env_local()
    from .config import Settings

    settings = Settings.from_env()
    src_dir = Path(__file__).resolve().parents[1]  # .../src
    uvicorn.run(
        "photo_posts.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        reload_dirs=[str(src_dir)],
    )
