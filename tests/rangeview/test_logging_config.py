import logging

from pythonjsonlogger import jsonlogger

from rangeview.logging_config import configure_logging


def _restore(handlers, level):
    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_is_the_default(monkeypatch):
    monkeypatch.delenv("RANGEVIEW_LOG_FORMAT", raising=False)
    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        configure_logging()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    finally:
        _restore(*saved)


def test_env_var_and_argument_select_format(monkeypatch):
    monkeypatch.setenv("RANGEVIEW_LOG_FORMAT", "plain")
    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        configure_logging(logging.DEBUG)
        assert not isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
        assert root.level == logging.DEBUG

        configure_logging(force_format="json")
        configure_logging(force_format="json")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    finally:
        _restore(*saved)
