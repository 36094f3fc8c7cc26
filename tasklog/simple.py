"""
Loggers that write synchronously, without a LoggerThread.

They share the level and prefix API of the task loggers and are handy for
single-threaded tools and for tests.
"""
import threading
from typing import List, Optional

from tasklog.base import AbstractLogger
from tasklog.destination import Destination, resolve_destination
from tasklog.level import Level
from tasklog.prefix import NullPrefixFormatter, PrefixFormatter
from tasklog.task import LINE_SEPARATOR


class StringLogger(AbstractLogger):
    """
    Gathers log lines in memory.

    Uses NullPrefixFormatter unless told otherwise, since a StringLogger is
    normally used to gobble output, like io.StringIO.
    """

    def __init__(self, prefix: Optional[PrefixFormatter] = None, level: Level = Level.INFO):
        super().__init__(prefix if prefix is not None else NullPrefixFormatter.instance(), level)
        self._lines: List[str] = []
        self._lock = threading.Lock()

    def _write_line(self, level: Level, text: str) -> None:
        line = self.render_prefix(level) + text
        with self._lock:
            self._lines.append(line)

    def new_line(self) -> None:
        with self._lock:
            self._lines.append("")

    def get_string(self) -> str:
        """Return the collected text and clear the buffer."""
        with self._lock:
            text = LINE_SEPARATOR.join(self._lines)
            self._lines = []
        return text

    def peek_string(self) -> str:
        """Return the collected text without clearing it."""
        with self._lock:
            return LINE_SEPARATOR.join(self._lines)

    def clear(self) -> None:
        with self._lock:
            self._lines = []

    def close(self) -> None:
        # Nothing to release; use clear() to drop the collected text
        pass


class StreamLogger(AbstractLogger):
    """
    Writes each line straight to a destination, under a lock.

    Args:
        target: A Destination, text sink or byte stream (see resolve_destination)
        prefix: Prefix formatter, SimplePrefixFormatter by default
        level: Threshold
        encoding: Used when `target` is a byte stream
    """

    def __init__(
        self,
        target=None,
        prefix: Optional[PrefixFormatter] = None,
        level: Level = Level.INFO,
        encoding: str = "utf-8",
        auto_flush: bool = True
    ):
        super().__init__(prefix, level)
        self._destination: Destination = resolve_destination(target, encoding=encoding, auto_flush=auto_flush)

    @property
    def destination(self) -> Destination:
        return self._destination

    def _write_line(self, level: Level, text: str) -> None:
        self._destination.write(f"{self.render_prefix(level)}{text}{LINE_SEPARATOR}")

    def new_line(self) -> None:
        self._destination.write(LINE_SEPARATOR)

    def flush(self) -> None:
        self._destination.flush()

    def close(self) -> None:
        self._destination.close()


class ConsoleLogger(StreamLogger):
    """A StreamLogger on standard output. Closing it leaves stdout open."""

    def __init__(self, prefix: Optional[PrefixFormatter] = None, level: Level = Level.INFO):
        super().__init__(Destination.console(), prefix=prefix, level=level)
