"""
Output destinations for a LoggerThread.

A destination wraps the one text sink a writer owns. Writes and close are
guarded by a lock, and close happens once no matter how many paths ask for
it. Writes after close are ignored.
"""
import io
import sys
import threading
from typing import BinaryIO, List, Optional, TextIO


class Destination:
    """
    A text sink owned by a LoggerThread.

    Args:
        sink: Any object with write() (and optionally flush()/close())
        auto_flush: Flush the sink after every write
        close_sink: Close the underlying sink when the destination closes;
            use False for sinks the caller keeps using (sys.stdout, StringIO)
    """

    def __init__(self, sink: TextIO, auto_flush: bool = True, close_sink: bool = True):
        self._sink = sink
        self._auto_flush = auto_flush
        self._close_sink = close_sink
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO,
        encoding: str = "utf-8",
        auto_flush: bool = True,
        close_sink: bool = True
    ) -> 'Destination':
        """Wrap a byte stream, encoding log text with the given encoding."""
        return _EncodedDestination(stream, encoding, auto_flush, close_sink)

    @classmethod
    def console(cls, auto_flush: bool = True) -> 'Destination':
        """Standard output; never closed by the writer."""
        return cls(sys.stdout, auto_flush=auto_flush, close_sink=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, text: str) -> None:
        with self._lock:
            if self._closed:
                return
            self._sink.write(text)
            if self._auto_flush:
                self._flush_sink()

    def flush(self) -> None:
        with self._lock:
            if not self._closed:
                self._flush_sink()

    def close(self) -> bool:
        """Close the destination. Returns True only for the call that closed it."""
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            try:
                self._flush_sink()
            finally:
                self._release_sink()
            return True

    def _flush_sink(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()

    def _release_sink(self) -> None:
        if self._close_sink:
            close = getattr(self._sink, "close", None)
            if close is not None:
                close()


class _EncodedDestination(Destination):
    """A byte stream behind a TextIOWrapper."""

    def __init__(self, stream: BinaryIO, encoding: str, auto_flush: bool, close_sink: bool):
        wrapper = io.TextIOWrapper(stream, encoding=encoding, newline="")
        super().__init__(wrapper, auto_flush=auto_flush, close_sink=close_sink)
        self.encoding = encoding

    def _release_sink(self) -> None:
        if self._close_sink:
            self._sink.close()
        else:
            # Leave the byte stream open for its owner
            self._sink.detach()


class StringDestination(Destination):
    """
    Collects log text in memory.

    The collected text stays readable after the destination is closed.
    """

    def __init__(self):
        super().__init__(io.StringIO(), auto_flush=False, close_sink=False)

    def getvalue(self) -> str:
        with self._lock:
            return self._sink.getvalue()

    def lines(self) -> List[str]:
        return self.getvalue().splitlines()


def resolve_destination(target: Optional[object], encoding: str = "utf-8", auto_flush: bool = True) -> Destination:
    """
    Turn a user supplied target into a Destination.

    None means the console; a Destination is used as is; objects that accept
    bytes (binary files, BytesIO) are wrapped with the encoding; anything else
    is treated as a text sink.
    """
    if target is None:
        return Destination.console(auto_flush=auto_flush)
    if isinstance(target, Destination):
        return target
    if isinstance(target, (io.RawIOBase, io.BufferedIOBase)) or "b" in getattr(target, "mode", ""):
        return Destination.from_stream(target, encoding=encoding, auto_flush=auto_flush)
    return Destination(target, auto_flush=auto_flush)
