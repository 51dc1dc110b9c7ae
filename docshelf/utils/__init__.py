from docshelf.utils.logging import get_logger, setup_logging, log_with_context
from docshelf.utils.base import utc_now


__all__ = [
    "get_logger",
    "setup_logging",
    "log_with_context",
    "utc_now",
]
