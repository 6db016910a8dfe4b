import json
import logging

import pytest

from cinline import logging as cinline_logging
from tests.utils import config, reset_logging


def test_get_logger_namespaces_names():
    assert cinline_logging.get_logger().name == "cinline"
    assert cinline_logging.get_logger("cache").name == "cinline.cache"
    assert cinline_logging.get_logger("cinline.emitter").name == "cinline.emitter"


def test_parse_level():
    assert cinline_logging._parse_level(None, logging.INFO) == logging.INFO
    assert cinline_logging._parse_level("debug", logging.INFO) == logging.DEBUG
    assert cinline_logging._parse_level("15", logging.INFO) == 15
    with pytest.raises(ValueError):
        cinline_logging._parse_level("chatty", logging.INFO)


def test_console_only_by_default(config, reset_logging):
    state = cinline_logging.configure_logging(config)
    assert len(cinline_logging.get_logger().handlers) == 2
    assert state.log_dir is None
    assert state.text_log_path is None
    assert state.console_level == logging.INFO


def test_configure_is_idempotent_until_forced(config, reset_logging):
    first = cinline_logging.configure_logging(config)
    second = cinline_logging.configure_logging(config, console_level_override="DEBUG")
    assert second is first

    forced = cinline_logging.configure_logging(config, console_level_override="DEBUG", force_reconfigure=True)
    assert forced.console_level == logging.DEBUG


def test_file_and_jsonl_logs(config, reset_logging, tmp_path):
    state = cinline_logging.configure_logging(
        config,
        log_dir_override=str(tmp_path),
        enable_jsonl_override=True,
        disable_color=True,
    )
    cinline_logging.get_logger("cache").info("loaded %d entries", 3)
    for handler in cinline_logging.get_logger().handlers:
        handler.flush()

    with open(state.text_log_path, encoding="utf-8") as f:
        assert "loaded 3 entries" in f.read()
    with open(state.jsonl_log_path, encoding="utf-8") as f:
        record = json.loads(f.readline())
    assert record["message"] == "loaded 3 entries"
    assert record["logger"] == "cinline.cache"
    assert record["level"] == "INFO"


def test_error_traceback_in_jsonl(config, reset_logging, tmp_path):
    state = cinline_logging.configure_logging(config, log_dir_override=str(tmp_path), enable_jsonl_override=True)
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        cinline_logging.get_logger("translator").exception("failed")
    for handler in cinline_logging.get_logger().handlers:
        handler.flush()

    with open(state.jsonl_log_path, encoding="utf-8") as f:
        record = json.loads(f.readline())
    assert record["level"] == "ERROR"
    assert "RuntimeError: boom" in record["exc_info"]
