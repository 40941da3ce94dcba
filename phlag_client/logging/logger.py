"""
Core Logger Implementation
==========================

All client loggers live under the ``phlag`` namespace. As a library the
namespace only carries a NullHandler until an application opts in with
configure_logging(), which attaches a non-blocking QueueHandler. A listener
thread drains the queue into the console and file handlers so log I/O never
stalls the event loop.

Example outputs:
    [PhlagClient]  ● [INFO]    Loaded 12 flags for production
    [FlagCache]    ⚠ [WARNING] Unable to write cache file /tmp/phlag_cache_ab12.json
"""

import atexit
from datetime import datetime
import logging
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import Queue
import sys

ROOT_LOGGER_NAME = "phlag"

# Bounded so a stalled listener cannot grow memory without limit
_log_queue: Queue = Queue(maxsize=10000)
_listener: QueueListener | None = None
_queue_handler: QueueHandler | None = None

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class ConsoleFormatter(logging.Formatter):
    """
    Console formatter with colors and standard level tags.
    Format: [Module]  Symbol [LEVEL] Message
    """

    COLORS = {
        "DEBUG": "\033[90m",  # Gray
        "INFO": "\033[37m",  # White
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    SYMBOLS = {
        "DEBUG": "·",
        "INFO": "●",
        "WARNING": "⚠",
        "ERROR": "✗",
        "CRITICAL": "✗",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def __init__(self, use_colors: bool | None = None):
        super().__init__()
        if use_colors is None:
            use_colors = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        module = _module_name(record.name)
        module_tag = f"[{module}]".ljust(14)
        level_tag = f"[{record.levelname}]".ljust(10)
        symbol = self.SYMBOLS.get(record.levelname, "●")

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS["INFO"])
            dim = self.DIM
            reset = self.RESET
        else:
            color = dim = reset = ""

        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{dim}{module_tag}{reset} {color}{symbol}{reset} {color}{level_tag}{reset} {message}"


class FileFormatter(logging.Formatter):
    """
    Detailed formatter for log files.
    Format: TIMESTAMP [LEVEL] [Module] Message
    """

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] [%(module_name)-12s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "module_name"):
            record.module_name = _module_name(record.name)
        return super().format(record)


def _module_name(logger_name: str) -> str:
    prefix = f"{ROOT_LOGGER_NAME}."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix):]
    return logger_name


def configure_logging(
    console_output: bool = True,
    file_output: bool = False,
    log_level: str = "INFO",
    log_dir: str | Path | None = None,
) -> None:
    """Route ``phlag`` log records to console and/or file handlers.

    Calling it again replaces the previous configuration.

    Args:
        console_output: Write formatted records to stderr
        file_output: Write records to a dated file in log_dir
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the log file (default: ./logs)
    """
    global _listener, _queue_handler

    shutdown_logging()

    level = getattr(logging, log_level.upper(), logging.INFO)
    handlers: list[logging.Handler] = []

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(ConsoleFormatter())
        handlers.append(console_handler)

    if file_output:
        log_dir_path = Path(log_dir) if log_dir is not None else Path.cwd() / "logs"
        log_dir_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d")
        file_handler = logging.FileHandler(
            log_dir_path / f"phlag_{timestamp}.log", encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(FileFormatter())
        handlers.append(file_handler)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    if not handlers:
        return

    _queue_handler = QueueHandler(_log_queue)
    root.addHandler(_queue_handler)

    _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
    _listener.start()


def shutdown_logging() -> None:
    """Stop the listener and detach the queue handler, flushing pending records."""
    global _listener, _queue_handler

    if _queue_handler is not None:
        logging.getLogger(ROOT_LOGGER_NAME).removeHandler(_queue_handler)
        _queue_handler = None

    if _listener is not None:
        _listener.stop()
        for handler in _listener.handlers:
            handler.close()
        _listener = None


atexit.register(shutdown_logging)


def get_logger(name: str = "Main") -> logging.Logger:
    """
    Get a logger inside the ``phlag`` namespace.

    Args:
        name: Module name (e.g., "PhlagClient", "FlagCache")

    Returns:
        The stdlib logger ``phlag.<name>``
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
