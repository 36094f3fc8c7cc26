import pytest

from tasklog.config import WriterSettings
from tasklog.destination import StringDestination
from tasklog.prefix import SimplePrefixFormatter
from tasklog.writer import LoggerThread, WriterState


@pytest.fixture
def destination():
    return StringDestination()


@pytest.fixture
def writer(destination):
    """A running writer with a "[Thread %p] " prefix, shut down after the test."""
    lt = LoggerThread(WriterSettings(daemon=True, poll_interval=0.01))
    lt.set_prefix_formatter(SimplePrefixFormatter("[Thread %p] "))
    lt.set_destination(destination)
    lt.start()
    yield lt
    if lt.state != WriterState.STOPPED:
        lt.shutdown(5)


class RecordingQueue:
    """Stands in for a writer queue: records every task it is given."""

    def __init__(self):
        self.tasks = []

    def __call__(self, task):
        self.tasks.append(task)

    @property
    def text(self):
        return "".join(task.text for task in self.tasks)


@pytest.fixture
def recording_queue():
    return RecordingQueue()
