import sys
import logging
import pathlib
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger

from leitner_review.config import settings

LOG_MAX_SIZE = 10 * 1024 * 1024
LOG_MAX_FILES = 7


def get_logger(name: str = 'leitner_review'):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level.upper())

    # Console handler
    ch = logging.StreamHandler(sys.stderr)
    if settings.log_format == 'json':
        fmt = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    else:
        fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # Rotating file handlers, only when a log directory is configured
    if settings.log_file_path:
        log_path = pathlib.Path(settings.log_file_path)
        if not log_path.is_absolute():
            log_path = pathlib.Path.cwd() / log_path
        log_path.mkdir(parents=True, exist_ok=True)

        combined = RotatingFileHandler(log_path / 'combined.log', maxBytes=LOG_MAX_SIZE, backupCount=LOG_MAX_FILES)
        combined.setFormatter(fmt)
        logger.addHandler(combined)

        errors = RotatingFileHandler(log_path / 'error.log', maxBytes=LOG_MAX_SIZE, backupCount=LOG_MAX_FILES)
        errors.setLevel(logging.ERROR)
        errors.setFormatter(fmt)
        logger.addHandler(errors)

    return logger


def log_progress_change(user_id: str, item_id: int, action: str, box_level: int, next_review_date):
    logger = get_logger()
    logger.info('progress_change', extra={
        'user_id': user_id,
        'item_id': item_id,
        'action': action,
        'box_level': box_level,
        'next_review_date': str(next_review_date) if next_review_date else None,
    })
