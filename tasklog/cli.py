"""
tasklog command line.

Usage:
    tasklog pipe app.out --output app.log --prefix app
    some_command | tasklog pipe --level warning
    tasklog demo --loggers 10 --messages 5 --buffered
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Optional

import click

from tasklog import console
from tasklog.config import WriterSettings
from tasklog.level import Level
from tasklog.writer import LoggerThread

LEVEL_CHOICE = click.Choice([level.name for level in Level], case_sensitive=False)


def _start_writer(settings: WriterSettings, output: Optional[str]) -> LoggerThread:
    """Start a writer on `output` (a file path) or on stdout."""
    writer = LoggerThread(settings)
    if output:
        writer.set_log_destination(open(output, 'wb'))
    else:
        writer.set_log_destination(None)
    writer.start()
    return writer


@click.group()
@click.option('--env-file', type=click.Path(dir_okay=False), help='.env file with TASKLOG_* settings')
@click.pass_context
def main(ctx, env_file: Optional[str]):
    """tasklog - funnel log lines from many threads into one writer."""
    ctx.ensure_object(dict)
    ctx.obj['env_file'] = env_file


@main.command()
@click.argument('input_file', type=click.File('r'), default='-')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Log file (default: stdout)')
@click.option('--level', '-l', type=LEVEL_CHOICE, default='INFO', help='Level of every piped line')
@click.option('--threshold', type=LEVEL_CHOICE, help='Writer threshold (default: TASKLOG_LEVEL or INFO)')
@click.option('--pattern', help='Prefix pattern, e.g. "[%l] [%d{%H:%M:%S}] %p "')
@click.option('--prefix', 'prefix_string', help='Value of the %p token')
@click.option('--buffered', is_flag=True, help='Buffer lines and write them in one block at the end')
@click.pass_context
def pipe(ctx, input_file, output, level, threshold, pattern, prefix_string, buffered):
    """Log every line of INPUT_FILE (default: stdin) through a LoggerThread."""
    settings = WriterSettings.from_env(ctx.obj['env_file'], level=threshold, pattern=pattern)
    writer = _start_writer(settings, output)

    builder = writer.get_logger_builder().set_prefix_string(prefix_string)
    logger = builder.get_buffered_logger() if buffered else builder.get_logger()
    line_level = Level.parse(level)

    count = 0
    with logger:
        for line in input_file:
            logger.log(line_level, line.rstrip("\n"))
            count += 1

    if not writer.shutdown():
        console.report("Writer did not drain cleanly", "warning", writer=writer.name)
    console.report(f"📝 Piped {count} line(s)")


def _produce(logger, messages: int, buffered: bool) -> int:
    for i in range(messages):
        logger.info(f"message {i}")
    if buffered:
        logger.flush()
    return messages


@main.command()
@click.option('--loggers', '-n', default=10, type=click.IntRange(min=1), help='Number of producer threads')
@click.option('--messages', '-m', default=5, type=click.IntRange(min=0), help='Messages per producer')
@click.option('--buffered', is_flag=True, help='Use buffered loggers, flushed once per producer')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Log file (default: stdout)')
@click.option('--pattern', default='[%l] [%t] [%p] ', show_default=True, help='Prefix pattern')
@click.option('--timeout', default=5.0, type=float, show_default=True, help='Shutdown timeout in seconds')
@click.pass_context
def demo(ctx, loggers: int, messages: int, buffered: bool, output: Optional[str], pattern: str, timeout: float):
    """Run concurrent producers against one writer and report the result."""
    settings = WriterSettings.from_env(ctx.obj['env_file'], pattern=pattern)
    writer = _start_writer(settings, output)

    console.banner(
        "🚀 tasklog demo",
        f"Producers: {loggers}",
        f"Messages per producer: {messages}",
        f"Buffered: {buffered}",
    )

    start_time = datetime.now()
    produced = 0
    errors = []

    futures = {}
    with ThreadPoolExecutor(max_workers=loggers, thread_name_prefix="producer") as executor:
        for i in range(loggers):
            builder = writer.get_logger_builder().set_prefix_string(str(i))
            logger = builder.get_buffered_logger() if buffered else builder.get_logger()
            futures[executor.submit(_produce, logger, messages, buffered)] = i

        for future in as_completed(futures):
            try:
                produced += future.result()
            except Exception as e:
                errors.append(f"producer {futures[future]}: {e}")

    graceful = writer.shutdown(timeout)
    elapsed = datetime.now() - start_time

    console.banner(
        "📊 Demo Complete",
        f"Lines produced: {produced}",
        f"Dropped tasks: {writer.dropped_tasks}",
        f"Failed tasks: {writer.failed_tasks}",
        f"Duration: {elapsed}",
    )

    if not graceful:
        console.report("Shutdown timed out", "warning", writer=writer.name)
    if errors:
        for err in errors:
            console.report(err, "error")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
