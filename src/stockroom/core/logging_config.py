import logging
import sys
from typing import Optional

from .config import LOG_LEVEL


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True # If no namespaces are specified, allow all records
        # Allow record if its name starts with any of the allowed namespaces
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def setup_logging(level: str = LOG_LEVEL, allowed_namespaces: Optional[list[str]] = None) -> logging.Logger:
    """
    Configures the 'stockroom' application logger.

    Modules use logging.getLogger(__name__), so every logger under
    'stockroom.' inherits the level and handler set here. Calling this
    more than once replaces the console handler instead of stacking a
    second one.

    Args:
        level: Name of the logging level for the application logger.
        allowed_namespaces: Optional logger name prefixes; when given, only
            records from these namespaces reach the console.

    Returns:
        The configured application logger.
    """
    app_logger = logging.getLogger("stockroom")
    app_logger.setLevel(level)

    for handler in list(app_logger.handlers):
        if getattr(handler, "_stockroom_console", False):
            app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler._stockroom_console = True
    if allowed_namespaces:
        console_handler.addFilter(NamespaceFilter(allowed_namespaces))
    app_logger.addHandler(console_handler)

    # Per-namespace overrides, e.g. more detail from the report queries:
    # logging.getLogger("stockroom.features.reports").setLevel(logging.DEBUG)
    #
    # To see the SQL Tortoise issues:
    # logging.getLogger("tortoise.db_client").setLevel(logging.DEBUG)
    return app_logger
