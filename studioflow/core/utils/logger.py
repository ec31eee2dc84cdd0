import logging
from logging.handlers import RotatingFileHandler

from studioflow.config import LOG_FILE, LOG_FORMAT, LOG_LEVEL, LOG_PATH

MAX_LOG_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3

# Noisy third-party loggers
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "urllib3")


def setup_logger(
    name: str,
    level: int = LOG_LEVEL,
    log_to_file: bool = True,
) -> logging.Logger:
    """Return a named logger with console and rotating file handlers.

    Handlers are attached once per name, so calling this at module import time
    from several modules is safe.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        LOG_PATH.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=MAX_LOG_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    for quiet in _QUIET_LOGGERS:
        logging.getLogger(quiet).setLevel(logging.WARNING)

    return logger
