import logging

from papyros.app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or settings.LOG_LEVEL, format=LOG_FORMAT)
    # SQL echo is driven by SQL_ECHO, keep the engine logger quiet otherwise
    if not settings.SQL_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
