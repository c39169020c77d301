import logging
from typing import Any

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def _level_from_value(value: Any, fallback: int = logging.INFO) -> int:
    if value is None:
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if isinstance(level, int):
            return level
    return fallback


def setup_logging(level: str | int | None = 'INFO') -> logging.Logger:
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    root_logger.setLevel(_level_from_value(level))
    return root_logger
