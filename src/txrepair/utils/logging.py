"""Console and file logging for the txrepair CLI.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
CLI calls ``setup_logging`` once to route the ``txrepair`` logger tree to
a rich console handler and, optionally, a debug log file.
"""

import logging
import time
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# -q, default, -v
LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def setup_logging(verbosity: int = 1, log_file: Path | str | None = None) -> logging.Logger:
    """Route txrepair log records to the console and an optional file.

    Args:
        verbosity: 0 for warnings only, 1 for progress, 2 for debug.
        log_file: File receiving every record at debug level.

    Returns:
        The configured ``txrepair`` logger.
    """
    console_level = LEVELS[min(max(verbosity, 0), len(LEVELS) - 1)]

    root = logging.getLogger("txrepair")
    root.handlers.clear()
    root.setLevel(logging.DEBUG if log_file is not None else console_level)

    console = RichHandler(show_time=False, show_path=False, rich_tracebacks=True)
    console.setLevel(console_level)
    root.addHandler(console)

    if log_file is not None:
        to_file = logging.FileHandler(log_file)
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(to_file)

    return root


class Timer:
    """Log the wall time of a block at info level.

    Example:
        >>> with Timer("Transcript extension", logger):
        ...     correct_annotations(records, exons, cdss)
    """

    def __init__(self, label: str, logger: logging.Logger) -> None:
        self.label = label
        self.logger = logger
        self.elapsed = 0.0
        self._start = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.elapsed = time.perf_counter() - self._start
        self.logger.info(f"{self.label} finished in {self.elapsed:.2f}s")
