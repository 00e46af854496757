"""JSON log output."""

import logging
from pythonjsonlogger import jsonlogger


def setup_logger(level: int = logging.INFO) -> logging.Logger:
    """Attach a JSON handler to the root logger."""
    logHandler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    )
    logHandler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.addHandler(logHandler)
    logger.setLevel(level)
    return logger
