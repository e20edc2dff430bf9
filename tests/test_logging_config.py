import io
import logging

from ldtk2tscn.logging_config import get_logger, resolve_level, setup_logging


def test_resolve_level():
    assert resolve_level() == logging.WARNING
    assert resolve_level(verbose=True) == logging.INFO
    assert resolve_level(quiet=True) == logging.ERROR
    assert resolve_level(verbose=True, debug=True, quiet=True) == logging.DEBUG


def test_module_loggers_share_namespace():
    assert get_logger().name == "ldtk2tscn"
    assert get_logger("converter").name == "ldtk2tscn.converter"


def test_setup_logging_writes_to_stream():
    stream = io.StringIO()
    logger = setup_logging(verbose=True, stream=stream)
    get_logger("converter").info("converted Level_0")
    assert logger.level == logging.INFO
    assert "ldtk2tscn.converter - INFO - converted Level_0" in stream.getvalue()
