import logging

from virtualpet.logging_config import configure_logging


def test_env_var_overrides_level(monkeypatch):
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setenv("VP_LOG_LEVEL", "error")
    try:
        configure_logging(logging.DEBUG)
        assert root.level == logging.ERROR
        configure_logging(logging.DEBUG)
        assert len(root.handlers) == 1
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
