class TaskLogError(Exception):
    """Base class for tasklog errors."""


class ConfigurationError(TaskLogError):
    """A LoggerThread was configured in a way it cannot honour.

    Raised when the destination is bound twice or after start, or when the
    thread is started without a destination or started twice.
    """


class EnqueueError(TaskLogError):
    """The writer queue refused a log task, even after a non-blocking retry."""

    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        self.text = text
