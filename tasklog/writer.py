"""
The consumer side: one thread that owns the log destination.

Producers get TaskLogger / BufferedTaskLogger instances from a LoggerBuilder.
Their log calls become LogTasks in this writer's queue, and only the writer
thread runs them against the destination, so lines from different threads
never interleave and each producer's lines keep their order.

Usage:
    writer = LoggerThread()
    writer.set_log_destination(open("app.log", "wb"))
    writer.start()
    logger = writer.get_logger_builder().set_prefix_string("worker-1").get_logger()
    logger.info("hello")
    writer.shutdown(5)
"""
import queue
import threading
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Set

from tasklog import console
from tasklog.config import WriterSettings
from tasklog.destination import Destination, resolve_destination
from tasklog.errors import ConfigurationError, EnqueueError
from tasklog.level import Level
from tasklog.logger import BufferedTaskLogger, TaskLogger
from tasklog.prefix import PrefixFormatter, SimplePrefixFormatter
from tasklog.task import LogTask

# Wakes an idle writer so shutdown doesn't wait for the next poll
_WAKE_UP = object()

# Seconds an aborted loop gets to finish its current task and write the notice
ABORT_GRACE = 2.0


class WriterState(str, Enum):
    CREATED = "CREATED"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"


class LoggerThread:
    """
    Owns one log destination and serializes every write to it.

    The destination must be bound exactly once, before start(). shutdown()
    must be called before the application exits; it closes every child
    logger, drains the queue and closes the destination.
    """

    def __init__(self, settings: Optional[WriterSettings] = None):
        self.settings = settings or WriterSettings()
        self.name = self.settings.name
        self._queue: queue.Queue = queue.Queue(maxsize=self.settings.queue_capacity)
        self._destination: Optional[Destination] = None
        self._thread: Optional[threading.Thread] = None
        self._state = WriterState.CREATED
        self._state_lock = threading.Lock()
        self._stop = threading.Event()
        self._abort = threading.Event()
        self._stopped = threading.Event()
        self._graceful = True

        self._children: Set[TaskLogger] = set()
        self._children_lock = threading.Lock()
        self._level = self.settings.level
        self._prefix: PrefixFormatter = SimplePrefixFormatter(self.settings.pattern)

        self._counter_lock = threading.Lock()
        self._dropped = 0
        self._failed = 0

    # ---- destination ----

    def set_destination(self, destination: Destination) -> None:
        """
        Bind the destination. Allowed once, before start().

        Raises:
            ConfigurationError: If a destination is already bound or the
                thread has been started
        """
        with self._state_lock:
            if self._destination is not None:
                raise ConfigurationError("log destination is already set, cannot modify!")
            if self._state != WriterState.CREATED:
                raise ConfigurationError(f"cannot set log destination of a {self._state.value} LoggerThread")
            self._destination = destination

    def set_log_destination(
        self,
        target,
        encoding: Optional[str] = None,
        auto_flush: Optional[bool] = None
    ) -> Destination:
        """
        Bind a stream, text sink or Destination (None means stdout).

        Byte streams are encoded with `encoding`, defaulting to the settings.

        Returns:
            The bound Destination
        """
        destination = resolve_destination(
            target,
            encoding=encoding or self.settings.encoding,
            auto_flush=self.settings.auto_flush if auto_flush is None else auto_flush
        )
        self.set_destination(destination)
        return destination

    @property
    def destination(self) -> Optional[Destination]:
        return self._destination

    # ---- lifecycle ----

    @property
    def state(self) -> WriterState:
        return self._state

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Start the writer loop.

        Raises:
            ConfigurationError: If no destination is bound or the thread was
                already started
        """
        with self._state_lock:
            if self._destination is None:
                raise ConfigurationError("log destination must be set before starting the LoggerThread")
            if self._state != WriterState.CREATED:
                raise ConfigurationError(f"LoggerThread is already {self._state.value}")
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=self.settings.daemon)
            self._state = WriterState.RUNNING
        self._thread.start()

    def _run(self) -> None:
        with console.writer_scope(self.name):
            try:
                self._loop()
            finally:
                self._close_destination()

    def _loop(self) -> None:
        if self.settings.start_banner:
            started = datetime.now().strftime("%Y/%m/%d-%H:%M:%S")
            self._execute(LogTask.line("", f"{self.name} started at [{started}]"))

        while not self._abort.is_set():
            try:
                task = self._queue.get(timeout=self.settings.poll_interval)
            except queue.Empty:
                if self._stop.is_set():
                    break
                continue
            if task is _WAKE_UP:
                if self._stop.is_set() and self._queue.empty():
                    break
                continue
            self._execute(task)

        if self._abort.is_set():
            pending = self._discard_pending()
            self._execute(LogTask.block(
                f"{self.name} interrupted! {pending} pending log task(s) discarded\n"
                f"Closing {self.name}..\n"
            ))
        if self._dropped:
            self._execute(LogTask.line("", f"{self.name} dropped {self._dropped} log task(s)"))

    def _discard_pending(self) -> int:
        """Empty the queue and return how many log tasks were in it."""
        discarded = 0
        while True:
            try:
                task = self._queue.get_nowait()
            except queue.Empty:
                return discarded
            if task is not _WAKE_UP:
                discarded += 1

    def _execute(self, task: LogTask) -> None:
        try:
            task(self._destination)
        except Exception as e:
            with self._counter_lock:
                self._failed += 1
            console.report(f"Failed to write log task: {e}", "error")

    def _close_destination(self) -> None:
        if self._destination is None:
            return
        try:
            self._destination.close()
        except Exception as e:
            console.report(f"Failed to close log destination: {e}", "warning", writer=self.name)

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the writer after draining every queued task.

        Every child logger is closed first, so buffered loggers flush. Then
        this waits at most `timeout` seconds for the queue to drain; 0 means
        wait indefinitely. If the wait times out the loop is aborted, a
        notice is written to the destination (best effort) and the remaining
        tasks are discarded.
        The destination is closed when this returns. Concurrent or repeated
        calls wait for the first one to finish and return its result.

        Args:
            timeout: Seconds to wait; defaults to settings.shutdown_timeout

        Returns:
            True if the queue was drained, False if the wait timed out
        """
        if timeout is None:
            timeout = self.settings.shutdown_timeout

        with self._state_lock:
            stopping = self._state in (WriterState.STOPPING, WriterState.STOPPED)
            started = self._state == WriterState.RUNNING
            if not stopping:
                self._state = WriterState.STOPPING
        if stopping:
            self._stopped.wait()
            return self._graceful

        try:
            self._graceful = self._stop_and_drain(started, timeout)
        finally:
            self._close_destination()
            self._state = WriterState.STOPPED
            self._stopped.set()
        return self._graceful

    def _stop_and_drain(self, started: bool, timeout: float) -> bool:
        # Children flush before the stop token is set, so the loop can't
        # exit between the token and their last tasks
        for child in self.children():
            child.close()
        self._stop.set()

        if not started:
            return True
        self._wake_up()
        self._thread.join(timeout or None)
        if not self._thread.is_alive():
            return True

        console.report(f"did not drain within {timeout}s, aborting", "warning", writer=self.name)
        self._abort.set()
        self._thread.join(ABORT_GRACE)
        return False

    def _wake_up(self) -> None:
        try:
            self._queue.put_nowait(_WAKE_UP)
        except queue.Full:
            # A full queue wakes the loop by itself
            pass

    def __enter__(self):
        if self._destination is None:
            self.set_log_destination(None)
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False

    # ---- producer side ----

    def _enqueue(self, task: LogTask) -> None:
        """
        Queue a task for the writer loop.

        Waits up to settings.enqueue_timeout on a full queue, then retries
        once without blocking. A task still refused is counted; during
        shutdown it is dropped silently, otherwise EnqueueError is raised so
        the producing logger can report it.
        """
        if self._state == WriterState.STOPPED:
            self._count_drop()
            return
        try:
            self._queue.put(task, timeout=self.settings.enqueue_timeout)
            return
        except queue.Full:
            pass
        try:
            self._queue.put_nowait(task)
            return
        except queue.Full:
            self._count_drop()
        if self._state != WriterState.STOPPING:
            raise EnqueueError(f"{self.name} queue is full", text=task.text)

    def _count_drop(self) -> None:
        with self._counter_lock:
            self._dropped += 1

    @property
    def dropped_tasks(self) -> int:
        """Tasks refused by the queue or submitted after the writer stopped."""
        return self._dropped

    @property
    def failed_tasks(self) -> int:
        """Tasks whose write raised."""
        return self._failed

    @property
    def pending_tasks(self) -> int:
        return self._queue.qsize()

    # ---- children ----

    def _register(self, logger: TaskLogger) -> None:
        with self._children_lock:
            self._children.add(logger)

    def _unregister(self, logger: TaskLogger) -> None:
        with self._children_lock:
            self._children.discard(logger)

    def children(self) -> List[TaskLogger]:
        """Snapshot of the live child loggers."""
        with self._children_lock:
            return list(self._children)

    def get_logger_builder(self) -> 'LoggerBuilder':
        """Get a new builder for child loggers of this writer."""
        return LoggerBuilder(self)

    # ---- defaults ----

    def set_level(self, level: Level) -> None:
        """Default level of loggers built from now on. Existing children keep theirs."""
        self._level = Level.parse(level)

    def get_level(self) -> Level:
        return self._level

    def is_enabled(self, level: Level) -> bool:
        """True if loggers built now would log at `level`."""
        return Level.parse(level).enabled_under(self._level)

    def set_prefix_formatter(self, prefix: PrefixFormatter) -> None:
        """Default formatter of loggers built from now on. Existing children keep theirs."""
        self._prefix = prefix

    def get_prefix_formatter(self) -> PrefixFormatter:
        return self._prefix

    def set_log_level_all_children(self, level: Level) -> None:
        """Set the default level and the level of every live child."""
        self.set_level(level)
        for child in self.children():
            child.set_level(self._level)

    def set_prefix_all_children(self, transform: Callable[[PrefixFormatter], PrefixFormatter]) -> None:
        """
        Replace the default formatter and every live child's formatter with
        transform(current formatter).

        Example:
            writer.set_prefix_all_children(lambda p: p.duplicate().set_pattern("[%l] "))
        """
        self._prefix = transform(self._prefix)
        for child in self.children():
            child.set_prefix_formatter(transform(child.get_prefix_formatter()))

    def __repr__(self) -> str:
        return f"LoggerThread(name={self.name!r}, state={self._state.value}, children={len(self._children)})"


class LoggerBuilder:
    """
    Builds child loggers bound to one LoggerThread.

    Level and prefix formatter default to the writer's values at the time
    the builder was created; the prefix string defaults to None. The
    formatter is shared among built loggers unless
    set_clone_prefix_formatter(True) is used, in which case every logger
    gets its own duplicate.
    """

    def __init__(self, writer: LoggerThread):
        self._writer = writer
        self._prefix = writer.get_prefix_formatter()
        self._level = writer.get_level()
        self._prefix_string: Optional[str] = None
        self._clone_prefix = False

    def set_level(self, level: Level) -> 'LoggerBuilder':
        self._level = Level.parse(level)
        return self

    def set_prefix_formatter(self, prefix: PrefixFormatter) -> 'LoggerBuilder':
        """
        Specify the prefix formatter.

        The instance is shared by every logger built afterwards, so changing
        its pattern affects all of them, unless cloning is enabled.
        """
        self._prefix = prefix
        return self

    def set_prefix_string(self, prefix_string: Optional[str]) -> 'LoggerBuilder':
        self._prefix_string = prefix_string
        return self

    def set_clone_prefix_formatter(self, clone: bool) -> 'LoggerBuilder':
        self._clone_prefix = clone
        return self

    def _formatter(self) -> PrefixFormatter:
        return self._prefix.duplicate() if self._clone_prefix else self._prefix

    def _build(self, logger_class):
        writer = self._writer
        logger = logger_class(self._formatter(), self._level, writer._enqueue, writer._unregister)
        logger.set_prefix_string(self._prefix_string)
        writer._register(logger)
        return logger

    def get_logger(self) -> TaskLogger:
        """A TaskLogger that queues a task on every log call."""
        return self._build(TaskLogger)

    def get_buffered_logger(self) -> BufferedTaskLogger:
        """A BufferedTaskLogger that queues only on flush() or close()."""
        return self._build(BufferedTaskLogger)
