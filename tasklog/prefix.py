"""
Prefix formatters render the text written in front of every log line.

A formatter is mutable (its pattern can change), so loggers either share one
instance, in which case a pattern change is seen by every holder, or own a
copy obtained from duplicate().
"""
import re
import threading
from datetime import datetime
from typing import Optional

from tasklog.level import Level

DEFAULT_PATTERN = "[%l] [%t] [%d] %p"

# %l level, %t thread, %d or %d{strftime}, %p instance prefix, %% literal
_TOKEN = re.compile(r"%(?:d(?:\{([^}]*)\})?|[ltp%])")


class PrefixFormatter:
    """Base class for pattern-driven prefix renderers."""

    def __init__(self, pattern: Optional[str] = None):
        self._pattern = pattern

    def set_pattern(self, pattern: str) -> 'PrefixFormatter':
        self._pattern = pattern
        return self

    def get_pattern(self) -> Optional[str]:
        return self._pattern

    def format(self, level: Level, prefix: Optional[str] = None) -> str:
        raise NotImplementedError

    def duplicate(self) -> 'PrefixFormatter':
        """Return an independent formatter with the same pattern."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f'{type(self).__name__}(pattern="{self._pattern}")'


class SimplePrefixFormatter(PrefixFormatter):
    """
    Renders the pattern mini-language.

    Tokens:
        %l           level name
        %t           name of the calling thread
        %d{format}   current local time through strftime; a bare %d is empty
        %p           the logger's prefix string, empty if unset
        %%           a literal percent sign

    Substitution is a single left-to-right pass, so a prefix string or a
    thread name containing '%' is never expanded again.
    """

    def __init__(self, pattern: str = DEFAULT_PATTERN):
        super().__init__(pattern)

    def format(self, level: Level, prefix: Optional[str] = None) -> str:
        if not self._pattern:
            return ""
        now = None

        def substitute(match):
            nonlocal now
            token = match.group(0)
            if token.startswith("%d"):
                date_format = match.group(1)
                if not date_format:
                    return ""
                if now is None:
                    now = datetime.now()
                return now.strftime(date_format)
            if token == "%l":
                return level.name
            if token == "%t":
                return threading.current_thread().name
            if token == "%p":
                return prefix if prefix is not None else ""
            return "%"

        return _TOKEN.sub(substitute, self._pattern)

    def duplicate(self) -> 'SimplePrefixFormatter':
        return SimplePrefixFormatter(self._pattern)


class NullPrefixFormatter(PrefixFormatter):
    """
    A formatter that never renders anything.

    There is nothing to configure, so one shared instance is enough; use
    NullPrefixFormatter.instance().
    """

    _instance: Optional['NullPrefixFormatter'] = None

    @classmethod
    def instance(cls) -> 'NullPrefixFormatter':
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def set_pattern(self, pattern: str) -> 'NullPrefixFormatter':
        return self

    def format(self, level: Level, prefix: Optional[str] = None) -> str:
        return ""

    def duplicate(self) -> 'NullPrefixFormatter':
        return self
