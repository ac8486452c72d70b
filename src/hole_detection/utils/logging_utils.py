"""
Logging setup for the hole detector.

Console output goes through rich when available on a terminal, or through a
plain stream handler with one of three line formats. Each detection run is
wrapped in ``log_processing_stats``, which collects the per-frame counters
and reports them once the frame is done.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional, Union

import cv2
from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LINE_FORMATS = {
    "minimal": "%(asctime)s - %(levelname)s - %(message)s",
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s - %(message)s",
}

_OPENCV_LEVELS = (
    (logging.DEBUG, cv2.utils.logging.LOG_LEVEL_DEBUG),
    (logging.INFO, cv2.utils.logging.LOG_LEVEL_INFO),
    (logging.WARNING, cv2.utils.logging.LOG_LEVEL_WARNING),
    (logging.ERROR, cv2.utils.logging.LOG_LEVEL_ERROR),
)


class HoleFormatter(logging.Formatter):
    """Plain-text formatter for one of the ``minimal``/``simple``/``detailed`` styles."""

    def __init__(self, style: str = "detailed"):
        if style not in _LINE_FORMATS:
            raise ValueError(f"Unknown log format style: {style}")
        self.style_name = style
        super().__init__(_LINE_FORMATS[style], datefmt=_DATE_FORMAT)


def _console_handler(use_rich: bool, format_style: str) -> logging.Handler:
    if use_rich:
        handler = RichHandler(
            console=console,
            show_time=format_style != "minimal",
            show_path=format_style == "detailed",
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        return handler

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(HoleFormatter(format_style))
    return handler


def configure_opencv_logging(level: int) -> None:
    """Align OpenCV's own log output with the Python log level."""
    for threshold, cv_level in _OPENCV_LEVELS:
        if level <= threshold:
            cv2.utils.logging.setLogLevel(cv_level)
            return
    cv2.utils.logging.setLogLevel(cv2.utils.logging.LOG_LEVEL_SILENT)


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    use_rich: bool = True,
    format_style: str = "detailed"
) -> logging.Logger:
    """
    Configure the root logger for a detector run.

    Existing root handlers are replaced, so calling this again (for example
    once a config file has been read) is safe.

    Args:
        level: Console logging level (name or number)
        log_file: Optional file that receives every record down to DEBUG
        use_rich: Whether to log to the console through rich
        format_style: Console format style ('simple', 'detailed', 'minimal')

    Returns:
        Configured root logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = _console_handler(use_rich, format_style)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    root_level = level
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(HoleFormatter("detailed"))
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)
        root_level = logging.DEBUG

    root_logger.setLevel(root_level)
    configure_opencv_logging(level)
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)


def _format_rejections(rejections: Dict[str, int]) -> str:
    parts = [f"{reason}={count}" for reason, count in sorted(rejections.items()) if count]
    return ", ".join(parts) if parts else "none"


@contextmanager
def log_processing_stats(
    operation: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO
) -> Generator[Dict[str, Any], None, None]:
    """
    Collect and report the counters of one detection run.

    The caller fills the yielded dict. On exit the hole counts, the rejection
    breakdown (``stats["rejections"]``, if set) and the duration are logged.
    A failing run is logged at error level and the exception re-raised.

    Args:
        operation: Name of the run in log messages
        logger: Logger instance (uses root if None)
        level: Logging level for the summary

    Yields:
        Counter dictionary, also returned to callers through the result
    """
    if logger is None:
        logger = logging.getLogger()

    stats: Dict[str, Any] = {
        "operation": operation,
        "start_time": time.time(),
        "holes_found": 0,
        "holes_accepted": 0,
        "holes_rejected": 0,
    }
    started = time.perf_counter()
    logger.debug(f"Starting {operation}")

    try:
        yield stats
    except Exception as e:
        logger.error(f"Failed {operation} after {time.perf_counter() - started:.3f}s: {e}")
        raise

    stats["duration"] = time.perf_counter() - started
    logger.log(level,
               f"Completed {operation}: "
               f"found={stats['holes_found']}, "
               f"accepted={stats['holes_accepted']}, "
               f"rejected={stats['holes_rejected']} "
               f"({_format_rejections(stats.get('rejections', {}))}), "
               f"duration={stats['duration']:.3f}s")
