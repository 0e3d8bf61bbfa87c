import logging

from semantic_index.utils.logger import LOG_FORMAT, setup_logging


def test_setup_logging_is_idempotent():
    logger = setup_logging("DEBUG")
    handlers = list(logger.handlers)
    again = setup_logging("WARNING")

    assert again is logger
    assert again.handlers == handlers
    assert len(handlers) == 1
    assert handlers[0].formatter._fmt == LOG_FORMAT
    assert logger.level == logging.WARNING
