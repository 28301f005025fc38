import logging
import config as _cfg

LOG_LEVEL = getattr(_cfg, "LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured: list[logging.Logger] = []


def _level(name: str) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


def get_logger(name: str = "chatnotepad"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_level(LOG_LEVEL))
        # Our own handler already prints; don't duplicate through root
        logger.propagate = False
        _configured.append(logger)
    return logger


def set_level(name: str) -> None:
    """Change the level of every logger handed out by get_logger (CLI -v / -q)."""
    level = _level(name)
    for logger in _configured:
        logger.setLevel(level)
