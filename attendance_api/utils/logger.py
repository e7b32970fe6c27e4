import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "attendance_api"

FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def configure_logging(level="INFO", log_file=None):
    """
    Attach a console handler (and a rotating file handler when log_file is
    given) to the application logger tree. Safe to call more than once.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    formatter = logging.Formatter(FORMAT)

    if not any(getattr(h, "_attendance_console", False) for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler._attendance_console = True
        logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file).resolve()
        if not any(getattr(h, "baseFilename", None) == str(path) for h in logger.handlers):
            path.parent.mkdir(parents=True, exist_ok=True)
            # Rotates at 5MB
            file_handler = RotatingFileHandler(
                path,
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
