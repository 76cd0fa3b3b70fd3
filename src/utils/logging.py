"""Logging helper shared by the geometry modules.

Wraps Python's standard logging module so every module logs with the
same format.  Geometry routines only log recovered degeneracies at
DEBUG level and refinement ceilings at WARNING level; callers that
want to see them lower the level on the ``src`` logger.
"""

import logging


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a configured logger with a preset format.

    Parameters
    ----------
    name : str
        Logger name, normally the calling module's ``__name__``.
    level : int
        Level set on the logger the first time it is configured.

    Returns
    -------
    logging.Logger
        Logger with a single stream handler attached.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='[%(asctime)s] [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
