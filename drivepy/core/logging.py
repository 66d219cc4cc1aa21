"""
Named loggers for drivepy.

Every module logs through a child of the ``drivepy`` logger so that
applications can tune upload, task and batch chatter separately.
"""
import logging


PACKAGE_LOGGERS = (
    'drivepy',
    'drivepy.api',
    'drivepy.api.http',
    'drivepy.batch',
    'drivepy.tasks',
    'drivepy.upload',
    'drivepy.upload.fragment',
    'drivepy.upload.reader',
)


def get_logger(name: str) -> logging.Logger:
    """
    Return a propagating package logger.

    When the application has not configured the root logger yet, the
    logger is held at WARNING so library debug output stays quiet; once
    basicConfig() has run, levels are left to the application.

    Args:
        name: Dotted name under 'drivepy'
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(logging.WARNING)

    return logger


def setup_logging(level: int = logging.INFO) -> None:
    """Set the level of every drivepy logger at once."""
    for name in PACKAGE_LOGGERS:
        package_logger = logging.getLogger(name)
        package_logger.setLevel(level)
        package_logger.propagate = True
