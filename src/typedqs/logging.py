"""Logging helpers for typedqs."""
import logging
import sys

default_handler = logging.StreamHandler(sys.stderr)
default_handler.setFormatter(
    logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s")
)


def has_level_handler(logger):
    level = logger.getEffectiveLevel()
    current = logger
    while current:
        if any(handler.level <= level for handler in current.handlers):
            return True
        if not current.propagate:
            break
        current = current.parent
    return False


def create_logger(name=None, debug=False):
    """Return the ``typedqs`` logger (or a child of it).

    In debug mode the logger is set to ``DEBUG`` unless a level was already
    configured. The default stderr handler is only attached when no handler
    up the hierarchy would receive the logger's records.
    """
    logger = logging.getLogger(name or "typedqs")
    if debug and not logger.level:
        logger.setLevel(logging.DEBUG)
    if not has_level_handler(logger):
        logger.addHandler(default_handler)
    return logger
