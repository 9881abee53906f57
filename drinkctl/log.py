"""Timestamped, append-only log shared by the whole controller."""

from __future__ import annotations

import datetime
import sys
import threading
from pathlib import Path
from typing import TextIO

CLOCK_FORMAT = "%d/%m-%Y@%H:%M:%S"
DATE_FORMAT = "%d%m%Y"


def get_time(with_clock: bool = False, now: datetime.datetime | None = None) -> str:
    """Format a moment as a date stamp, or with the clock as a log stamp."""
    moment = datetime.datetime.now() if now is None else now
    return moment.strftime(CLOCK_FORMAT if with_clock else DATE_FORMAT)


class Logger:
    """Appends lines to a file named after today's date in a directory.

    Without a directory the lines go to standard error.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self._lock = threading.Lock()
        self._file: TextIO | None = None
        self.path: Path | None = None
        if directory is not None:
            self.path = Path(directory) / get_time(False)
            self._file = open(self.path, "a", encoding="utf-8")

    def log(self, data: str) -> None:
        """Write one stamped line and flush it."""
        line = f"{get_time(True)}:\t{data}\n"
        with self._lock:
            stream = sys.stderr if self._file is None else self._file
            stream.write(line)
            stream.flush()

    def close(self) -> None:
        """Close the log file, if one is open."""
        with self._lock:
            if self._file is not None and not self._file.closed:
                self._file.close()

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


_instance: Logger | None = None
_instance_lock = threading.Lock()


def get_logger() -> Logger:
    """Return the shared logger, creating one on first use."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = Logger()
        return _instance


def set_logger(logger: Logger) -> None:
    """Replace the shared logger."""
    global _instance
    with _instance_lock:
        _instance = logger