"""
Logging for the city_explorer package.

`setup_logging` attaches one file handler and one console handler to the
package logger. It runs from the console entry point and again from the
app lifespan (so `uvicorn city_explorer.api.main:app` logs too); a second
call swaps the package's handlers instead of stacking duplicates.
"""

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "city_explorer"
FILE_HANDLER = "city_explorer.file"
CONSOLE_HANDLER = "city_explorer.console"

# Third-party loggers that drown out lookups at DEBUG/INFO
QUIET_LOGGERS = ("urllib3", "httpx", "httpcore", "sqlalchemy.engine")


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.set_name(FILE_HANDLER)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(CONSOLE_HANDLER)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%H:%M:%S"))
    return handler


def setup_logging(level: str = "INFO", log_file: str = "logs/city_explorer.log") -> logging.Logger:
    """
    Configure the package logger and return it.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            The file always receives DEBUG.
        log_file: Path of the log file; its directory is created.
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in package_logger.handlers[:]:
        if handler.get_name() in (FILE_HANDLER, CONSOLE_HANDLER):
            package_logger.removeHandler(handler)
            handler.close()

    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(_file_handler(log_path))
    package_logger.addHandler(_console_handler(getattr(logging, level.upper(), logging.INFO)))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    package_logger.debug("Logging configured: level=%s, file=%s", level, log_path)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Logger under the city_explorer namespace.

    Module `__name__`s inside the package are used as-is; anything else
    is nested under the package logger so its records reach the handlers.
    """
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
