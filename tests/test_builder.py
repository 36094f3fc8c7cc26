from tasklog.level import Level
from tasklog.logger import BufferedTaskLogger, TaskLogger
from tasklog.prefix import NullPrefixFormatter, SimplePrefixFormatter


def test_builder_defaults_come_from_writer(writer):
    writer.set_level(Level.DEBUG)
    logger = writer.get_logger_builder().get_logger()

    assert isinstance(logger, TaskLogger)
    assert logger.get_level() is Level.DEBUG
    assert logger.get_prefix_formatter() is writer.get_prefix_formatter()
    assert logger.get_prefix_string() is None


def test_builder_snapshots_defaults_at_creation(writer):
    builder = writer.get_logger_builder()
    writer.set_level(Level.FATAL)
    assert builder.get_logger().get_level() is Level.INFO


def test_builder_settings(writer):
    formatter = SimplePrefixFormatter("%l ")
    logger = writer.get_logger_builder() \
        .set_level("warning") \
        .set_prefix_formatter(formatter) \
        .set_prefix_string("db") \
        .get_buffered_logger()

    assert isinstance(logger, BufferedTaskLogger)
    assert logger.get_level() is Level.WARNING
    assert logger.get_prefix_formatter() is formatter
    assert logger.get_prefix_string() == "db"
    assert logger in writer.children()


def test_shared_formatter_pattern_change_affects_all(writer, destination):
    formatter = SimplePrefixFormatter("a:")
    builder = writer.get_logger_builder().set_prefix_formatter(formatter)
    first = builder.get_logger()
    second = builder.get_logger()

    formatter.set_pattern("b:")
    first.info("1")
    second.info("2")
    writer.shutdown(5)

    assert destination.getvalue() == "b:1\nb:2\n"


def test_cloned_formatter_is_independent(writer, destination):
    formatter = SimplePrefixFormatter("a:")
    logger = writer.get_logger_builder() \
        .set_prefix_formatter(formatter) \
        .set_clone_prefix_formatter(True) \
        .get_logger()

    assert logger.get_prefix_formatter() is not formatter
    formatter.set_pattern("b:")
    logger.info("1")
    writer.shutdown(5)

    assert destination.getvalue() == "a:1\n"


def test_set_log_level_all_children(writer):
    existing = writer.get_logger_builder().get_logger()
    closed = writer.get_logger_builder().get_logger()
    closed.close()

    writer.set_log_level_all_children(Level.ERROR)

    assert writer.get_level() is Level.ERROR
    assert existing.get_level() is Level.ERROR
    assert closed.get_level() is Level.INFO
    assert writer.get_logger_builder().get_logger().get_level() is Level.ERROR


def test_set_level_does_not_touch_children(writer):
    existing = writer.get_logger_builder().get_logger()
    writer.set_level(Level.TRACE)
    assert existing.get_level() is Level.INFO
    assert writer.is_enabled(Level.TRACE)


def test_set_prefix_all_children(writer, destination):
    first = writer.get_logger_builder().set_prefix_string("1").get_logger()
    second = writer.get_logger_builder().set_clone_prefix_formatter(True).set_prefix_string("2").get_logger()

    writer.set_prefix_all_children(lambda p: p.duplicate().set_pattern("<%p> "))
    first.info("x")
    second.info("y")
    writer.get_logger_builder().set_prefix_string("3").get_logger().info("z")
    writer.shutdown(5)

    assert destination.getvalue() == "<1> x\n<2> y\n<3> z\n"


def test_set_prefix_formatter_only_for_new_loggers(writer, destination):
    old = writer.get_logger_builder().set_prefix_string("old").get_logger()
    writer.set_prefix_formatter(NullPrefixFormatter.instance())
    new = writer.get_logger_builder().get_logger()

    old.info("a")
    new.info("b")
    writer.shutdown(5)

    assert destination.getvalue() == "[Thread old] a\nb\n"
