# logger.py
import logging
import os

LOGGER_NAME = "rektcaptcha"


class ColoredFormatter(logging.Formatter):
    COLORS = {
        logging.ERROR: "\033[38;2;128;0;0m",    # Red
        logging.CRITICAL: "\033[38;2;128;0;0m", # Red
        logging.WARNING: "\033[33m",  # Yellow
        logging.INFO: "\033[0m",      # Default (reset)
        logging.DEBUG: "\033[0m",     # Default (reset)
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelno, self.RESET)
        message = super().format(record)
        return f"{color}{message}{self.RESET}"


def debug_enabled(name: str = LOGGER_NAME) -> bool:
    """
    Mirrors the `DEBUG=namespace` switch: a comma separated list of namespaces,
    `*` enables everything.
    """
    value = os.environ.get("DEBUG", "")
    namespaces = [part.strip() for part in value.split(",") if part.strip()]
    return "*" in namespaces or name in namespaces


def setup_logger(verbose: bool = False) -> logging.Logger:
    """
    Returns the shared `rektcaptcha` logger. Verbose or the DEBUG switch turn
    on debug output; otherwise a level set earlier, by a verbose solver or the
    host application, is left alone.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ColoredFormatter('%(asctime)s - [%(levelname)s] - %(message)s'))
        logger.addHandler(console_handler)
        logger.propagate = False

    if verbose or debug_enabled():
        logger.setLevel(logging.DEBUG)
    elif logger.level == logging.NOTSET:
        logger.setLevel(logging.WARNING)
    return logger
