import logging
from typing import Union

from semantic_index import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Union[int, str, None] = None) -> logging.Logger:
    """
    Attach one stream handler to the package logger.
    Calling it again only updates the level.
    """
    logger = logging.getLogger("semantic_index")
    logger.setLevel(level or config.LOG_LEVEL)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
