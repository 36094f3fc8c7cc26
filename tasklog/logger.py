"""
Task based loggers: the producer side of a LoggerThread.

A TaskLogger never touches the destination. Each log call renders its line
in the calling thread, packs it in a LogTask and hands it to the enqueue
callable the logger was built with. Only the owning writer runs tasks.
"""
import threading
from typing import Callable, List, Optional

from tasklog.base import AbstractLogger
from tasklog.errors import EnqueueError
from tasklog.level import Level
from tasklog.prefix import PrefixFormatter
from tasklog.task import LINE_SEPARATOR, LogTask

Enqueue = Callable[[LogTask], None]
CloseCallback = Callable[['TaskLogger'], None]


class TaskLogger(AbstractLogger):
    """
    Logger that turns every call into a LogTask for a writer queue.

    Args:
        prefix: Prefix formatter; shared or owned, as the builder decided
        level: Threshold below which calls are dropped
        enqueue: Hands a task to the writer. Raises EnqueueError if the queue
            refused it; must never run the task inline
        on_close: Called once, with this logger, on the first close()
    """

    def __init__(
        self,
        prefix: PrefixFormatter,
        level: Level,
        enqueue: Enqueue,
        on_close: Optional[CloseCallback] = None
    ):
        super().__init__(prefix, level)
        self._enqueue = enqueue
        self._on_close = on_close
        self._closed = False
        self._close_lock = threading.Lock()
        self._reporting = threading.local()

    @property
    def closed(self) -> bool:
        return self._closed

    def _write_line(self, level: Level, text: str) -> None:
        if self._closed:
            return
        self._submit(LogTask.line(self.render_prefix(level), text))

    def new_line(self) -> None:
        if self._closed:
            return
        self._submit(LogTask.new_line())

    def _submit(self, task: LogTask) -> None:
        try:
            self._enqueue(task)
        except EnqueueError as e:
            self._report_enqueue_failure(e)

    def _report_enqueue_failure(self, error: EnqueueError) -> None:
        """Report a refused task through this logger's own ERROR level."""
        if getattr(self._reporting, "active", False):
            # The report itself was refused; the writer has counted the drop
            return
        self._reporting.active = True
        try:
            self.error(f"{error}: {error.text.rstrip(LINE_SEPARATOR)}")
        finally:
            self._reporting.active = False

    def _mark_closed(self) -> bool:
        """Flip the closed flag. True only for the first caller."""
        with self._close_lock:
            if self._closed:
                return False
            self._closed = True
            return True

    def close(self) -> None:
        """
        Detach this logger from its writer.

        Closing twice has no effect. Later log calls are silently ignored.
        """
        if not self._mark_closed():
            return
        if self._on_close is not None:
            self._on_close(self)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(level={self._level.name}, "
                f"prefix_string={self._prefix_string!r}, closed={self._closed})")


class BufferedTaskLogger(TaskLogger):
    """
    A TaskLogger that keeps its lines in a private buffer.

    Nothing reaches the writer until flush() or close(); each flush submits
    the whole buffer as one task, so the lines of one flush are written
    together and in order.
    """

    def __init__(
        self,
        prefix: PrefixFormatter,
        level: Level,
        enqueue: Enqueue,
        on_close: Optional[CloseCallback] = None
    ):
        super().__init__(prefix, level, enqueue, on_close)
        self._buffer: List[str] = []
        # Reentrant: a failed flush reports into this same buffer
        self._buffer_lock = threading.RLock()

    def _write_line(self, level: Level, text: str) -> None:
        line = f"{self.render_prefix(level)}{text}{LINE_SEPARATOR}"
        with self._buffer_lock:
            if self._closed:
                return
            self._buffer.append(line)

    def new_line(self) -> None:
        with self._buffer_lock:
            if self._closed:
                return
            self._buffer.append(LINE_SEPARATOR)

    @property
    def buffered(self) -> str:
        """Text waiting for the next flush."""
        with self._buffer_lock:
            return "".join(self._buffer)

    def flush(self) -> None:
        """
        Submit the buffered lines to the writer as a single task.

        Does nothing when the buffer is empty. If the writer refuses the
        task the text goes back to the front of the buffer.
        """
        with self._buffer_lock:
            if not self._buffer:
                return
            text = "".join(self._buffer)
            self._buffer = []
            try:
                self._enqueue(LogTask.block(text))
            except EnqueueError as e:
                self._buffer.insert(0, text)
                self._report_enqueue_failure(e)

    def close(self) -> None:
        """Flush whatever is buffered, then detach from the writer."""
        with self._buffer_lock:
            if not self._mark_closed():
                return
        self.flush()
        if self._on_close is not None:
            self._on_close(self)
