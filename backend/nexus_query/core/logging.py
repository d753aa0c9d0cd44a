"""NEXUS Query — Logging setup."""
import logging

from nexus_query.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Set root level/format once at startup. Modules just call logging.getLogger(__name__)."""
    level = (level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("nexus_query").setLevel(level)
