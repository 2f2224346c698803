import uvicorn
import structlog

from .config import Settings
from .logging_config import configure_logging


def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    structlog.get_logger(__name__).info(
        "server_starting", url=f"http://{settings.host}:{settings.port}"
    )
    uvicorn.run("photo_posts.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
