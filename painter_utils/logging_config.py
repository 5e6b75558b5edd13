"""Logging setup for the painter entry points.

Console lines are written for someone watching the editor window:

    2026-10-19 14:02:11.482 | INFO     | executor | image=cat.png | Progress: 120/480 blocks

The optional log file receives the same lines, or with ``json=True`` one
object per record:

    {"t": "2026-10-19T14:02:11.482+00:00", "lvl": "INFO", "logger": "robot_painter.hardware.executor", "msg": "...", "image": "cat.png"}

Fields given to :func:`push_context` or :func:`log_context` are attached to
every record emitted afterwards in the same thread or task.  Calling
:func:`setup_logging` again swaps out only the handlers it installed
previously; handlers owned by someone else (pytest's caplog) stay.
"""

import contextlib
import contextvars
import json as jsonlib
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional


_fields: contextvars.ContextVar[Mapping[str, Any]] = contextvars.ContextVar(
    "painter_log_fields", default={}
)

# Handlers added by the last setup_logging() call
_installed: List[logging.Handler] = []


class PainterFormatter(logging.Formatter):
    """Render records as aligned text or JSON, with the context fields.

    Parameters
    ----------
    as_json : bool
        Emit one JSON object per record instead of a text line.
    color : bool
        Color the level name (text mode only).
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[2m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, as_json: bool = False, color: bool = False):
        super().__init__()
        self.as_json = as_json
        self.color = color and not as_json

    def format(self, record: logging.LogRecord) -> str:
        when = datetime.fromtimestamp(record.created, tz=timezone.utc)
        fields = _fields.get()
        if self.as_json:
            payload: Dict[str, Any] = {
                "t": when.isoformat(timespec="milliseconds"),
                "lvl": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
                **fields,
            }
            if record.exc_info:
                payload["exc"] = self.formatException(record.exc_info)
            return jsonlib.dumps(payload, default=str)

        level = f"{record.levelname:<8}"
        if self.color and record.levelname in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelname]}{level}{self.RESET}"
        columns = [
            when.strftime("%Y-%m-%d %H:%M:%S.") + f"{int(record.msecs):03d}",
            level,
            record.name.rpartition(".")[2],
        ]
        if fields:
            columns.append(" ".join(f"{k}={v}" for k, v in fields.items()))
        columns.append(record.getMessage())
        text = " | ".join(columns)
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def _file_handler(path: str, rotate_bytes: Optional[int], backups: int) -> logging.Handler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    if rotate_bytes is None:
        return logging.FileHandler(path, encoding="utf-8")
    if rotate_bytes < 1:
        raise ValueError(f"rotate_bytes must be positive, got {rotate_bytes}")
    return logging.handlers.RotatingFileHandler(
        path, maxBytes=rotate_bytes, backupCount=backups, encoding="utf-8"
    )


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    rotate_bytes: Optional[int] = None,
    backups: int = 3,
    quiet_libs: Iterable[str] = (),
    context: Optional[Mapping[str, Any]] = None,
) -> List[logging.Handler]:
    """Install console and file handlers on the root logger.

    Parameters
    ----------
    log_level : str
        Root level name, e.g. "INFO".
    log_file : str, optional
        Also write records to this file.
    json : bool
        JSON objects in the file instead of text lines.
    color : bool
        Color level names on the console when it is a terminal.
    to_stderr : bool
        Log to stderr.
    rotate_bytes : int, optional
        Roll the log file over at this size.
    backups : int
        Rolled-over files to keep.
    quiet_libs : iterable of str
        Third-party loggers held at WARNING.
    context : mapping, optional
        Fields pushed onto the logging context.

    Returns
    -------
    list of logging.Handler
        The handlers now installed.

    Raises
    ------
    ValueError
        For an unknown level name or a non-positive ``rotate_bytes``.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root = logging.getLogger()
    while _installed:
        old = _installed.pop()
        root.removeHandler(old)
        old.close()

    handlers: List[logging.Handler] = []
    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(PainterFormatter(color=color and sys.stderr.isatty()))
        handlers.append(console)
    if log_file:
        file_handler = _file_handler(log_file, rotate_bytes, backups)
        file_handler.setFormatter(PainterFormatter(as_json=json))
        handlers.append(file_handler)

    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)
    _installed.extend(handlers)

    for name in quiet_libs:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.captureWarnings(True)

    if context:
        push_context(**context)
    return handlers


def push_context(**fields: Any) -> contextvars.Token:
    """Attach *fields* to subsequent records; returns a token for :func:`reset_context`."""
    return _fields.set({**_fields.get(), **fields})


def reset_context(token: contextvars.Token) -> None:
    _fields.reset(token)


def clear_context() -> None:
    _fields.set({})


def get_context() -> Dict[str, Any]:
    return dict(_fields.get())


@contextlib.contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Scope context fields to a ``with`` block.

    Examples
    --------
    >>> with log_context(image="cat.png", mode="dry-run"):
    ...     logger.info("Scanning")  # -> "... | image=cat.png mode=dry-run | Scanning"
    """
    token = push_context(**fields)
    try:
        yield
    finally:
        reset_context(token)


def install_excepthook(logger_name: str = "robot_painter") -> None:
    """Send uncaught exceptions through logging; Ctrl+C keeps the default hook."""
    log = logging.getLogger(logger_name)

    def hook(exc_type, exc_value, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, tb)
            return
        log.critical("Uncaught exception", exc_info=(exc_type, exc_value, tb))

    sys.excepthook = hook
