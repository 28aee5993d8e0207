import logging

from deepzoom.util.logging_setup import frame_tag, get_logger, logging_initialiser, logging_session


def test_session_writes_parent_and_worker_records(tmp_path):
    log_file = tmp_path / "run.log"
    with logging_session(level=logging.INFO, console=False, log_file=str(log_file)) as queue:
        get_logger().info("parent record")
        get_logger().debug("filtered out")
        queue.put(logging.LogRecord("deepzoom", logging.WARNING, __file__, 1, "worker record", None, None))

    text = log_file.read_text(encoding="utf-8")
    assert "INFO deepzoom - parent record" in text
    assert "WARNING deepzoom - worker record" in text
    assert "filtered out" not in text


def test_in_process_initialiser_keeps_handlers():
    logger = get_logger()
    handler = logging.NullHandler()
    logger.addHandler(handler)
    logging_initialiser(None, logging.DEBUG)
    assert handler in logger.handlers


def test_frame_tag():
    assert frame_tag("000012") == "[Frame 000012]"
    assert frame_tag(None) == "[Frame -]"
