"""
Level, prefix and convenience API shared by every tasklog logger.

Subclasses decide where a rendered line goes by implementing _write_line(),
new_line() and close().
"""
import traceback
from typing import Optional

from tasklog.level import Level
from tasklog.prefix import PrefixFormatter, SimplePrefixFormatter
from tasklog.stream import LoggerStream


def render_message(message) -> str:
    """Render a log message; exceptions come with their traceback."""
    if isinstance(message, BaseException):
        return "".join(traceback.format_exception(type(message), message, message.__traceback__)).rstrip("\n")
    return str(message)


class AbstractLogger:
    def __init__(self, prefix: Optional[PrefixFormatter] = None, level: Level = Level.INFO):
        self._prefix = prefix if prefix is not None else SimplePrefixFormatter()
        self._level = Level.parse(level)
        self._prefix_string: Optional[str] = None

    # ---- configuration ----

    def set_level(self, level: Level) -> None:
        self._level = Level.parse(level)

    def get_level(self) -> Level:
        return self._level

    def set_prefix_formatter(self, prefix: PrefixFormatter) -> None:
        self._prefix = prefix

    def get_prefix_formatter(self) -> PrefixFormatter:
        return self._prefix

    def set_prefix_string(self, prefix_string: Optional[str]) -> None:
        self._prefix_string = prefix_string

    def get_prefix_string(self) -> Optional[str]:
        return self._prefix_string

    def is_enabled(self, level: Level) -> bool:
        return Level.parse(level).enabled_under(self._level)

    # ---- logging ----

    def log(self, level: Level, message) -> None:
        """
        Log a message at the given level.

        Disabled levels return immediately. A multi-line message gets the
        prefix once, on its first line.
        """
        level = Level.parse(level)
        if not level.enabled_under(self._level):
            return
        self._write_line(level, render_message(message))

    def trace(self, message) -> None:
        self.log(Level.TRACE, message)

    def debug(self, message) -> None:
        self.log(Level.DEBUG, message)

    def info(self, message) -> None:
        self.log(Level.INFO, message)

    def warning(self, message) -> None:
        self.log(Level.WARNING, message)

    def error(self, message) -> None:
        self.log(Level.ERROR, message)

    def fatal(self, message) -> None:
        self.log(Level.FATAL, message)

    def render_prefix(self, level: Level) -> str:
        return self._prefix.format(level, self._prefix_string)

    def to_stream(self, level: Level = Level.INFO, close_logger: bool = False) -> LoggerStream:
        """
        Return a writable text stream whose lines are logged at `level`.

        Args:
            level: Level used for every line written to the stream
            close_logger: Close this logger when the stream is closed
        """
        return LoggerStream(self, level, close_logger=close_logger)

    # ---- output ----

    def _write_line(self, level: Level, text: str) -> None:
        raise NotImplementedError

    def new_line(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
