import io
import threading

from tasklog.level import Level


class LoggerStream(io.TextIOBase):
    """
    A writable text stream that forwards complete lines to a logger.

    Text without a trailing newline is held until the next newline, flush()
    or close(). Useful to capture the output of code that expects a file,
    e.g. contextlib.redirect_stdout(logger.to_stream()).
    """

    def __init__(self, logger, level: Level = Level.INFO, close_logger: bool = False):
        super().__init__()
        self._logger = logger
        self._level = level
        self._close_logger = close_logger
        self._pending = ""
        self._lock = threading.Lock()

    @property
    def level(self) -> Level:
        return self._level

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed LoggerStream")
        with self._lock:
            self._pending += text
            *lines, self._pending = self._pending.split("\n")
            for line in lines:
                self._logger.log(self._level, line.rstrip("\r"))
        return len(text)

    def flush(self) -> None:
        if self.closed:
            return
        with self._lock:
            pending, self._pending = self._pending, ""
            if pending:
                self._logger.log(self._level, pending)

    def close(self) -> None:
        if self.closed:
            return
        self.flush()
        super().close()
        if self._close_logger:
            self._logger.close()
