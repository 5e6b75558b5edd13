"""Tests for painter_utils.logging_config.

Run:
    pytest tests/test_logging_config.py -v
"""

import json
import logging
import logging.handlers
import sys

import pytest

from painter_utils import logging_config


@pytest.fixture(autouse=True)
def restore_root():
    """Put the root logger and context back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    hook = sys.excepthook
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    logging_config._installed.clear()
    root.setLevel(level)
    logging_config.clear_context()
    sys.excepthook = hook


def test_setup_replaces_own_handlers(tmp_path):
    log_path = tmp_path / "test.log"

    logging_config.setup_logging(
        "INFO", str(log_path), json=True, to_stderr=False, context={"app": "test"},
    )
    logging.getLogger("robot_painter.test").info("hello")

    handlers = logging_config.setup_logging("INFO", str(log_path), json=True, to_stderr=False)
    logging.getLogger("robot_painter.test").info("world")

    assert len(handlers) == 1
    lines = log_path.read_text().strip().splitlines()
    assert len(lines) == 2

    rec = json.loads(lines[0])
    assert rec["msg"] == "hello"
    assert rec["lvl"] == "INFO"
    assert rec["logger"] == "robot_painter.test"
    assert rec["app"] == "test"


def test_setup_keeps_foreign_handlers():
    foreign = logging.NullHandler()
    logging.getLogger().addHandler(foreign)
    logging_config.setup_logging("INFO", to_stderr=True)
    logging_config.setup_logging("INFO", to_stderr=True)

    root = logging.getLogger()
    assert foreign in root.handlers
    assert sum(isinstance(h.formatter, logging_config.PainterFormatter) for h in root.handlers) == 1
    root.removeHandler(foreign)


def test_human_format(tmp_path):
    log_path = tmp_path / "human.log"
    logging_config.setup_logging("DEBUG", str(log_path), to_stderr=False)
    logging_config.push_context(image="cat.png")
    logging.getLogger("robot_painter.planner.scan").debug("block %d", 3)

    line = log_path.read_text().strip()
    assert "| DEBUG    | scan | image=cat.png | block 3" in line
    assert line.endswith("block 3")


def test_json_includes_traceback(tmp_path):
    log_path = tmp_path / "exc.log"
    logging_config.setup_logging("INFO", str(log_path), json=True, to_stderr=False)
    try:
        raise KeyError("slot")
    except KeyError:
        logging.getLogger("robot_painter").exception("failed")

    rec = json.loads(log_path.read_text())
    assert "KeyError" in rec["exc"]


def test_context_push_and_reset():
    logging_config.push_context(app="paint")
    token = logging_config.push_context(image="a.png")
    assert logging_config.get_context() == {"app": "paint", "image": "a.png"}

    logging_config.reset_context(token)
    assert logging_config.get_context() == {"app": "paint"}

    logging_config.clear_context()
    assert logging_config.get_context() == {}


def test_log_context_scopes_fields():
    logging_config.push_context(app="paint")
    with logging_config.log_context(image="b.png", mode="dry-run"):
        assert logging_config.get_context() == {"app": "paint", "image": "b.png", "mode": "dry-run"}
    assert logging_config.get_context() == {"app": "paint"}


def test_log_context_restores_on_error():
    with pytest.raises(RuntimeError):
        with logging_config.log_context(image="c.png"):
            raise RuntimeError("boom")
    assert logging_config.get_context() == {}


def test_quiet_libs():
    logging_config.setup_logging("DEBUG", to_stderr=False, quiet_libs=["PIL"])
    assert logging.getLogger("PIL").level == logging.WARNING


def test_unknown_level():
    with pytest.raises(ValueError, match="log level"):
        logging_config.setup_logging("LOUD", to_stderr=False)


def test_size_rotation(tmp_path):
    handlers = logging_config.setup_logging(
        "INFO", str(tmp_path / "rot.log"), to_stderr=False, rotate_bytes=1000, backups=1,
    )
    assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)
    assert handlers[0].backupCount == 1


def test_bad_rotation_size(tmp_path):
    with pytest.raises(ValueError, match="rotate_bytes"):
        logging_config.setup_logging(
            "INFO", str(tmp_path / "x.log"), to_stderr=False, rotate_bytes=0,
        )


def test_excepthook_logs(tmp_path):
    log_path = tmp_path / "crash.log"
    logging_config.setup_logging("INFO", str(log_path), to_stderr=False)
    logging_config.install_excepthook()

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        sys.excepthook(*sys.exc_info())

    assert "Uncaught exception" in log_path.read_text()
