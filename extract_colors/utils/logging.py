"""
Extract-Colors Logging
loguru setup shared by the API and the CLI.

One stderr sink (stdout carries CLI output), level and JSON serialization from
config. Per-call fields go through ``bind``; request-wide fields go through
``contextualize`` so stage logs deep in the pipeline carry them too.
"""
import sys
from typing import Any, Callable, ContextManager, Dict, Optional, TextIO, Union

from loguru import logger

from extract_colors.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"

Sink = Union[TextIO, Callable[[Any], None]]


def _stderr_sink(message) -> None:
    # sys.stderr is resolved per write so redirection is followed
    sys.stderr.write(message)


class StructuredLogger:
    """Facade over the global loguru logger owning the single output sink."""

    def __init__(self, sink: Optional[Sink] = None, level: Optional[str] = None,
                 serialize: Optional[bool] = None):
        logger.remove()
        self.level = level or config.LOG_LEVEL
        self.handler_id = logger.add(
            sink if sink is not None else _stderr_sink,
            format=LOG_FORMAT,
            level=self.level,
            serialize=config.LOG_JSON if serialize is None else serialize,
        )

    def log(self, level: str, message: str, extra: Optional[Dict[str, Any]] = None):
        logger.bind(**(extra or {})).log(level, message)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("DEBUG", message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log("ERROR", message, extra)

    @staticmethod
    def contextualize(**fields: Any) -> ContextManager:
        """Attach ``fields`` to every record logged inside the block, in any module."""
        return logger.contextualize(**fields)


_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create the process-wide logger."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger


def configure_logging(sink: Optional[Sink] = None, level: Optional[str] = None,
                      serialize: Optional[bool] = None) -> StructuredLogger:
    """Replace the process-wide sink (CLI verbosity, tests)."""
    global _logger
    _logger = StructuredLogger(sink=sink, level=level, serialize=serialize)
    return _logger
