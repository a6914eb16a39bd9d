"""
Logging setup for the Inventory Tracker.

Module loggers are children of the "inventory_tracker" logger and carry no
handlers of their own. setup_logging() attaches a colored console handler
and a rotating file handler to the package logger, driven by the
application section of InventoryTrackerConfig (LOG_LEVEL, LOG_DIR, DEBUG_MODE).
"""

import logging
import logging.handlers
import sys
from pathlib import Path

import colorlog


PACKAGE_LOGGER = "inventory_tracker"
LOG_FILE_NAME = "inventory_tracker.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


def _line_format(debug_mode: bool, colored: bool) -> str:
    # Debug mode adds function and line number
    origin = "%(name)s.%(funcName)s:%(lineno)d" if debug_mode else "%(name)s"
    color = "%(log_color)s" if colored else ""
    return f"{color}%(asctime)s [%(levelname)8s] {origin} - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger for a module.

    Names outside the package (e.g. "__main__") are nested under it so every
    record reaches the handlers installed by setup_logging().
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(app_config=None) -> logging.Logger:
    """
    Configure the package logger. Safe to call more than once; previous
    handlers are closed and replaced.

    Args:
        app_config: ApplicationConfig to use; read from get_config() when omitted.
            Invalid settings fall back to the defaults so that a broken
            environment can still be reported.

    Returns:
        The configured package logger
    """
    from inventory_tracker.utils.config import ApplicationConfig, get_config

    fallback_reason = None
    if app_config is None:
        try:
            app_config = get_config().app
        except ValueError as e:
            app_config = ApplicationConfig()
            fallback_reason = str(e)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, app_config.log_level, logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = colorlog.StreamHandler(sys.stdout)
    console_handler.setFormatter(colorlog.ColoredFormatter(
        _line_format(app_config.debug_mode, colored=True),
        datefmt=DATE_FORMAT,
        log_colors=LOG_COLORS,
    ))
    logger.addHandler(console_handler)

    if app_config.log_dir:
        log_dir = Path(app_config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=5,
            encoding='utf-8',
            delay=True
        )
        file_handler.setFormatter(logging.Formatter(
            _line_format(app_config.debug_mode, colored=False), datefmt=DATE_FORMAT
        ))
        logger.addHandler(file_handler)

    logger.propagate = False

    if fallback_reason:
        logger.warning(f"Logging uses default settings: {fallback_reason}")
    logger.debug(
        f"Logging initialized: level={app_config.log_level}, "
        f"handlers={[h.__class__.__name__ for h in logger.handlers]}"
    )
    return logger
