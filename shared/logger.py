"""
Bombe Structured Logger
========================

:class:`BombeLogger` binds a stdlib logger to one Bombe component. Records
go to a Rich handler, on stderr or on a console shared with the progress
bar, and, when a log file is configured, to a rotating file as plain text
or JSON lines.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LEVEL_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
    }
)

_PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class _JSONLinesFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp``, ``level``, ``logger``, ``message`` and, when set,
    ``component``, ``operation``, ``extra`` (keyword arguments passed to
    the log call) and ``exc_info``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in ("component", "operation"):
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        payload = getattr(record, "bombe_extra", None)
        if payload:
            entry["extra"] = payload
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _console_handler(level: int, console: Console | None) -> RichHandler:
    if console is None:
        console = Console(theme=_LEVEL_THEME, stderr=True)
    return RichHandler(
        level=level,
        console=console,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )


def _file_handler(path: Path, level: int, json_lines: bool, max_bytes: int, backups: int) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(
        _JSONLinesFormatter() if json_lines else logging.Formatter(_PLAIN_FORMAT)
    )
    return handler


class _Stopwatch:
    __slots__ = ("start",)

    def __init__(self) -> None:
        self.start = time.perf_counter()

    @property
    def elapsed(self) -> float:
        """Seconds since the stopwatch was created."""
        return time.perf_counter() - self.start


class BombeLogger:
    """Logger for one component, e.g. ``"engine"``.

    Keyword arguments other than ``exc_info``/``stack_info``/``stacklevel``
    given to a log call are attached to the record and written as the
    ``extra`` object of the JSON log file.

    Usage::

        log = BombeLogger("engine", log_file="logs/bombe.log", json_logs=True)
        log.info("Searching %d keys", 3_163_680, workers=4)
        with log.operation("search"), log.timed("key search"):
            ...

    Args:
        component:      The stdlib logger is named ``bombe.<component>``.
        log_level:      Minimum level name.
        log_file:       Rotating log file; ``None`` disables file logging.
        json_logs:      Write the log file as JSON lines.
        max_bytes:      Rotation size of the log file.
        backup_count:   Rotated files kept.
        console_output: Attach the Rich console handler.
        console:        Rich console for that handler, e.g. the one drawing a
                        live progress bar; defaults to a new stderr console.
    """

    _PASSTHROUGH = frozenset({"exc_info", "stack_info", "stacklevel"})

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
        console: Console | None = None,
    ) -> None:
        self._component = component
        self._operation: str | None = None
        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

        self._logger = logging.getLogger(f"bombe.{component}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        # A second logger for the same component replaces the handlers
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        if console_output:
            self._logger.addHandler(_console_handler(level, console))
        if log_file is not None:
            self._logger.addHandler(
                _file_handler(Path(log_file), level, json_logs, max_bytes, backup_count)
            )

    @classmethod
    def from_config(
        cls, component: str, settings: Any, console: Console | None = None
    ) -> BombeLogger:
        """Build a logger from a :class:`~shared.config.GlobalConfig`."""
        return cls(
            component,
            log_level="DEBUG" if settings.debug else settings.log_level,
            log_file=settings.log_file,
            json_logs=settings.log_json,
            console=console,
        )

    @property
    def component(self) -> str:
        return self._component

    @property
    def underlying(self) -> logging.Logger:
        return self._logger

    # ------------------------------------------------------------------ #
    #  Log calls
    # ------------------------------------------------------------------ #

    def _log(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        options = {k: kwargs.pop(k) for k in list(kwargs) if k in self._PASSTHROUGH}
        extra = {
            "component": self._component,
            "operation": self._operation,
            "bombe_extra": kwargs,
        }
        self._logger.log(level, msg, *args, extra=extra, **options)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, args, kwargs)

    # ------------------------------------------------------------------ #
    #  Scopes
    # ------------------------------------------------------------------ #

    @contextmanager
    def operation(self, name: str) -> Iterator[BombeLogger]:
        """Tag records logged inside the block with *name*."""
        previous, self._operation = self._operation, name
        try:
            yield self
        finally:
            self._operation = previous

    @contextmanager
    def timed(self, label: str) -> Iterator[_Stopwatch]:
        """Log the start (DEBUG) and the duration (INFO) of a block."""
        watch = _Stopwatch()
        self.debug("Started: %s", label)
        try:
            yield watch
        finally:
            self.info("Completed: %s (%.3f sec)", label, watch.elapsed)
