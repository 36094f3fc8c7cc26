"""
Diagnostics channel for tasklog itself.

Log lines go to a writer's destination. This channel carries what happens
around them (failed tasks, shutdown timeouts, CLI progress) and always goes
to stderr, so a broken or redirected destination cannot swallow it.

A writer thread binds its name with writer_scope(); reports made inside the
scope, or naming a writer explicitly, are tagged "[<writer>] ".
"""
import threading
from contextlib import contextmanager
from typing import Optional

import click

_lock = threading.Lock()
_bound = threading.local()

RULE = "=" * 60

# severity -> (icon, color)
_STYLES = {
    "info": ("", None),
    "success": ("✅ ", "green"),
    "warning": ("⚠️  ", "yellow"),
    "error": ("❌ ", "red"),
}


@contextmanager
def writer_scope(name: str):
    """Tag this thread's reports with the writer `name` until the block exits."""
    previous = getattr(_bound, 'writer', None)
    _bound.writer = name
    try:
        yield
    finally:
        _bound.writer = previous


def current_writer() -> Optional[str]:
    return getattr(_bound, 'writer', None)


def report(message: str, severity: str = "info", writer: Optional[str] = None) -> None:
    """
    Write one diagnostic line to stderr.

    Args:
        message: Text of the report
        severity: "info", "success", "warning" or "error"; picks icon and color
        writer: Writer name to tag the line with; defaults to the bound scope

    Raises:
        KeyError: If severity is unknown
    """
    icon, color = _STYLES[severity]
    writer = writer or current_writer()
    tag = f"[{writer}] " if writer else ""
    with _lock:
        click.secho(f"{tag}{icon}{message}", fg=color, err=True)


def banner(title: str, *rows: str) -> None:
    """Write a title and indented rows framed by rules, without interleaving."""
    with _lock:
        click.echo(RULE, err=True)
        click.echo(title, err=True)
        for row in rows:
            click.echo(f"   {row}", err=True)
        click.echo(RULE, err=True)
