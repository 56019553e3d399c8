import logging
import os

LOG_LEVEL_ENV = "OAKHAVEN_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def configure_logging(default_level: int = logging.INFO) -> None:
    """Configure the root logger for the CLI.

    OAKHAVEN_LOG_LEVEL (a level name such as "debug", or a number) overrides
    ``default_level``; unknown names are ignored.
    """
    level = default_level
    raw = os.getenv(LOG_LEVEL_ENV, "").strip()
    if raw.isdigit():
        level = int(raw)
    elif raw:
        level = getattr(logging, raw.upper(), default_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(__name__).debug("Logging configured at level %s", logging.getLevelName(level))
