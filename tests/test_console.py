import threading

import pytest

from tasklog import console
from tasklog.config import WriterSettings
from tasklog.destination import Destination
from tasklog.writer import LoggerThread


def test_report_without_writer(capsys):
    console.report("plain")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "plain\n"


def test_report_severity_icons(capsys):
    console.report("careful", "warning")
    console.report("broken", "error", writer="W")
    assert capsys.readouterr().err == "⚠️  careful\n[W] ❌ broken\n"


def test_unknown_severity():
    with pytest.raises(KeyError):
        console.report("x", "loud")


def test_writer_scope_is_per_thread_and_nests(capsys):
    with console.writer_scope("outer"):
        with console.writer_scope("inner"):
            console.report("a")
        console.report("b")

        t = threading.Thread(target=console.report, args=("other",))
        t.start()
        t.join()
    assert console.current_writer() is None

    assert capsys.readouterr().err == "[inner] a\n[outer] b\nother\n"


def test_banner(capsys):
    console.banner("Title", "one", "two")
    assert capsys.readouterr().err == f"{console.RULE}\nTitle\n   one\n   two\n{console.RULE}\n"


class BrokenSink:
    def write(self, text):
        raise OSError("disk full")


def test_writer_failures_are_tagged_with_writer_name(capsys):
    writer = LoggerThread(WriterSettings(name="Audit", daemon=True, poll_interval=0.01, pattern=""))
    writer.set_destination(Destination(BrokenSink(), close_sink=False))
    writer.start()
    writer.get_logger_builder().get_logger().info("lost")
    writer.shutdown(5)

    assert "[Audit] ❌ Failed to write log task: disk full" in capsys.readouterr().err
