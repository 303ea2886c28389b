"""
Logging setup for Flashy.

One ``flashy`` logger feeds a console stream and a rotating ``flashy.log``
file. ``app.logger`` is pointed at the same handlers so module code can keep
using ``current_app.logger``.
"""

import logging
import logging.handlers
import os
from typing import List, Optional

ROOT_LOGGER_NAME = 'flashy'
LOG_FILE_NAME = 'flashy.log'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

TEXT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
JSON_FORMAT = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'


def _default_log_dir() -> str:
    package_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    return os.path.join(package_root, 'logs')


def _build_handlers(log_dir: str, level: int, formatter: logging.Formatter) -> List[logging.Handler]:
    stream = logging.StreamHandler()
    rotating = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8',
    )
    for handler in (stream, rotating):
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return [stream, rotating]


def _attach_flask_logger(app, handlers: List[logging.Handler], level: int) -> None:
    app.logger.handlers.clear()
    app.logger.setLevel(level)
    for handler in handlers:
        app.logger.addHandler(handler)
    app.logger.propagate = False
    # Request lines from the dev server are noise at INFO
    logging.getLogger('werkzeug').setLevel(logging.WARNING)


def setup_logging(
    app=None,
    log_level: str = 'INFO',
    log_dir: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """
    Configure the ``flashy`` logger.

    Args:
        app: Flask application whose ``app.logger`` should share the handlers
        log_level: Level name such as DEBUG, INFO or WARNING
        log_dir: Directory for ``flashy.log`` (default: ``logs/`` next to the package)
        json_format: Emit one JSON object per line instead of plain text

    Returns:
        The configured ``flashy`` logger
    """
    log_dir = log_dir or _default_log_dir()
    os.makedirs(log_dir, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter(JSON_FORMAT if json_format else TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    handlers = _build_handlers(log_dir, level, formatter)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        logger.addHandler(handler)

    if app is not None:
        _attach_flask_logger(app, handlers, level)

    logger.info("Logging initialized: level=%s, dir=%s", log_level, log_dir)
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return ``name`` as a child of the ``flashy`` logger (``study`` -> ``flashy.study``)."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
