"""
Shared utilities, constants and the logger.
"""

from courier_tracker.common.logger import get_logger, log_info, log_error, log_warning, log_debug
from courier_tracker.common.constants import TypeMsg

__all__ = [
    "get_logger",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "TypeMsg",
]
