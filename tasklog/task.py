from enum import Enum

from pydantic import BaseModel, ConfigDict

LINE_SEPARATOR = "\n"


class TaskKind(str, Enum):
    LINE = "line"
    BLOCK = "block"
    NEW_LINE = "new_line"


class LogTask(BaseModel):
    """
    A deferred write against the writer's destination.

    The text is rendered by the producer when the task is created, so running
    the task is a single write and the prefix reflects the producing thread,
    not the writer thread.
    """
    model_config = ConfigDict(frozen=True)

    kind: TaskKind
    text: str

    @classmethod
    def line(cls, prefix: str, message: str) -> 'LogTask':
        return cls(kind=TaskKind.LINE, text=f"{prefix}{message}{LINE_SEPARATOR}")

    @classmethod
    def block(cls, text: str) -> 'LogTask':
        """A block of already terminated lines, e.g. a flushed buffer."""
        return cls(kind=TaskKind.BLOCK, text=text)

    @classmethod
    def new_line(cls) -> 'LogTask':
        return cls(kind=TaskKind.NEW_LINE, text=LINE_SEPARATOR)

    def __call__(self, destination) -> None:
        destination.write(self.text)
