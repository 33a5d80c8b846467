"""
Logging configuration for jinntap

Compilation and document walks log through an IndentLogger, which prefixes
each message with a tree branch reflecting how deeply nested the current
step is.
"""

import logging
import sys
from contextlib import contextmanager

LOGGER_NAME = "jinntap"
LOG_FORMAT = "%(levelname)8s %(message)s"


class GlobalIndent:
    """Nesting depth shared by every IndentLogger"""

    depth = 0

    @classmethod
    def reset(cls) -> None:
        """Back to the top level (used between tests)"""
        cls.depth = 0

    @classmethod
    def get_indent(cls) -> str:
        if cls.depth <= 0:
            return ""
        return "│   " * (cls.depth - 1) + "├──"


class IndentLogger:
    """Wraps a logging.Logger and prefixes messages with the tree indent"""

    def __init__(self, base_logger: logging.Logger) -> None:
        self._logger = base_logger

    def log(self, level: int, msg: str, *args, **kwargs) -> None:
        self._logger.log(level, GlobalIndent.get_indent() + msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    @contextmanager
    def indent_block(self, heading: str | None = None):
        """
        Nest every message logged inside the block one level deeper

        Args:
            heading: Debug message logged at the current level before nesting
        """
        if heading:
            self.debug(heading)
        GlobalIndent.depth += 1
        try:
            yield self
        finally:
            GlobalIndent.depth = max(GlobalIndent.depth - 1, 0)


def setup_logging(level: int = logging.INFO) -> IndentLogger:
    """
    Send jinntap log records to stderr

    Args:
        level: Threshold for the jinntap logger and its handler

    Returns:
        IndentLogger over the configured logger
    """
    base_logger = logging.getLogger(LOGGER_NAME)
    base_logger.setLevel(level)
    base_logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    base_logger.addHandler(handler)

    return IndentLogger(base_logger)


logger = IndentLogger(logging.getLogger(LOGGER_NAME))
