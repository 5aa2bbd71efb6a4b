# extension_suite/logging_setup.py
import logging
import logging.handlers  # For RotatingFileHandler
from typing import Optional

from extension_suite import config

_HANDLER_MARKER = "_extension_suite_handler"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger with a rotating file handler and a console handler.

    Calling it again replaces the handlers it installed earlier instead of
    stacking duplicates.

    Args:
        level: Logging level name. Defaults to config.LOG_LEVEL.
        log_file: Path for the rotating log file. Defaults to config.LOG_FILE;
            an empty string disables file logging.
    """
    level = (level or config.LOG_LEVEL).upper()
    log_file = config.LOG_FILE if log_file is None else log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root_logger.removeHandler(handler)
            handler.close()

    # Quieten the reactive library if root is DEBUG
    if root_logger.level == logging.DEBUG:
        logging.getLogger("reactivex").setLevel(logging.INFO)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024, # 10 MB per file
            backupCount=5
        )
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        setattr(file_handler, _HANDLER_MARKER, True)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')) # Simpler format for console
    setattr(console_handler, _HANDLER_MARKER, True)
    root_logger.addHandler(console_handler)

    return root_logger


def setup_logging_from_settings(settings: "config.ExtensionSettings") -> logging.Logger:
    return setup_logging(level=settings.logging.level, log_file=settings.logging.file or "")
