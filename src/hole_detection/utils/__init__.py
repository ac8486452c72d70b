"""Hole detection utility modules."""

from .logging_utils import (
    setup_logging, get_logger, log_processing_stats, configure_opencv_logging, HoleFormatter
)

__all__ = [
    'setup_logging', 'get_logger', 'log_processing_stats', 'configure_opencv_logging',
    'HoleFormatter'
]
