from enum import IntEnum
from typing import Union


class Level(IntEnum):
    """Log levels in order of severity."""
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5

    def enabled_under(self, threshold: 'Level') -> bool:
        """True if a message at this level passes the given threshold."""
        return self >= threshold

    @classmethod
    def parse(cls, value: Union['Level', str, int]) -> 'Level':
        """
        Resolve a level from a Level, a name (case-insensitive) or a number.

        "WARN" is accepted as an alias of WARNING.

        Raises:
            ValueError: If the value names no level
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        if name == "WARN":
            name = "WARNING"
        try:
            return cls[name]
        except KeyError:
            choices = ", ".join(level.name for level in cls)
            raise ValueError(f"Unknown log level: {value!r} (expected one of {choices})") from None
