import logging

from morphsync_request.ops.logger import LogSink, channel_logger_name, setup_logger


def test_setup_logger_creates_console_and_file_handlers(tmp_path):
    logger = setup_logger(logs_dir=str(tmp_path))
    try:
        # Two handlers: console + file
        assert len(logger.handlers) == 2
        levels = sorted(handler.level for handler in logger.handlers)
        assert logging.DEBUG in levels
        assert logging.INFO in levels

        assert (tmp_path / "debug.log").exists()
    finally:
        # Clean up handlers so later tests can reconfigure logging
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def test_setup_logger_without_dir_is_console_only():
    logger = setup_logger(name="morphsync_request.console_only")
    try:
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
    finally:
        logger.handlers.clear()


def test_channel_logger_name():
    assert channel_logger_name("request/error") == "morphsync_request.request.error"
    assert channel_logger_name("/audit/") == "morphsync_request.audit"


def test_log_sink_writes_under_channel_logger(caplog):
    sink = LogSink()

    with caplog.at_level(logging.ERROR):
        sink.write("General error:boom", "request/error")

    records = [r for r in caplog.records if r.name == "morphsync_request.request.error"]
    assert len(records) == 1
    assert records[0].getMessage() == "General error:boom"
    assert records[0].levelno == logging.ERROR


def test_log_sink_appends_channel_file(tmp_path):
    sink = LogSink(logs_dir=str(tmp_path), level="ERROR")
    try:
        sink.write('Error response: {"error":"bad name"}', "request/error")
        sink.write("General error:boom", "request/error")
    finally:
        sink.close()

    lines = (tmp_path / "request" / "error.log").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].endswith('Error response: {"error":"bad name"}')
    assert "ERROR" in lines[1]
    assert not logging.getLogger("morphsync_request.request.error").handlers


def test_log_sink_below_warning_reaches_handlers_without_logs_dir(caplog):
    # Root stays at its default WARNING level; the channel logger must still emit INFO.
    sink = LogSink(level="INFO")

    sink.write("General error:boom", "audit/info")

    records = [r for r in caplog.records if r.name == "morphsync_request.audit.info"]
    assert len(records) == 1
    assert records[0].levelno == logging.INFO


def test_log_sinks_sharing_a_file_share_one_handler(tmp_path):
    first = LogSink(logs_dir=str(tmp_path))
    second = LogSink(logs_dir=str(tmp_path))
    logger = logging.getLogger(channel_logger_name("shared/error"))
    try:
        first.write("General error:one", "shared/error")
        second.write("General error:two", "shared/error")
        assert len(logger.handlers) == 1

        first.close()
        second.write("General error:three", "shared/error")
        assert len(logger.handlers) == 1
    finally:
        first.close()
        second.close()

    assert logger.handlers == []
    lines = (tmp_path / "shared" / "error.log").read_text(encoding="utf-8").splitlines()
    assert [line.rsplit(" - ", 1)[1] for line in lines] == [
        "General error:one",
        "General error:two",
        "General error:three",
    ]
