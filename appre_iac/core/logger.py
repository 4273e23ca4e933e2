"""
Logging for deployment runs.

Every record is stamped with the Pulumi stack being deployed, so output
from concurrent `pulumi up` runs against several environments stays
attributable. Records go to stderr; the Pulumi engine relays it as
program diagnostics.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(stack)s] %(levelname)s %(name)s: %(message)s"

# Chatty provider and transport loggers
QUIET_LOGGERS = ("urllib3", "botocore", "grpc")


class StackContextFilter(logging.Filter):
    """Attach the deploying stack's name to every record."""

    def __init__(self, stack: str) -> None:
        super().__init__()
        self.stack = stack

    def filter(self, record: logging.LogRecord) -> bool:
        record.stack = self.stack
        return True


def configure_logging(level: str | int = logging.INFO, stack: str = "-") -> logging.Handler:
    """
    Route root logging to stderr with the stack name in every line.

    Args:
        level: Root log level name or number
        stack: Pulumi stack name ('-' outside a deployment)

    Returns:
        The installed handler
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(StackContextFilter(stack))
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
