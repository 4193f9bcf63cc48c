"""Loguru-style logger backed by stdlib logging + rich.

Usage::

    from agentcloud.observability.logger import logger

    log = logger.bind(component="instance", instance_id="a1b2")
    log.info("Node {node} is up", node="agents-1f2e3d4c")
"""

from __future__ import annotations

import gzip
import inspect
import logging
import logging.handlers
import os
import shutil
import sys
from types import FrameType
from typing import TextIO

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "agentcloud"

_root = logging.getLogger(ROOT_LOGGER_NAME)


def _caller() -> FrameType | None:
    frame = inspect.currentframe()
    while frame is not None and frame.f_globals.get("__name__") == __name__:
        frame = frame.f_back
    return frame


def _format_message(msg: str, args: tuple[object, ...], kwargs: dict[str, object]) -> str:
    if kwargs:
        return msg.format(**kwargs)
    if args:
        return msg.format(*args)
    return msg


def _context_suffix(extras: dict[str, object]) -> str:
    if not extras:
        return ""
    return " [" + " ".join(f"{k}={v}" for k, v in extras.items()) + "]"


class BoundLogger:
    __slots__ = ("_extras",)

    def __init__(self, extras: dict[str, object] | None = None) -> None:
        self._extras = extras or {}

    @property
    def extras(self) -> dict[str, object]:
        return dict(self._extras)

    def bind(self, **kwargs: object) -> BoundLogger:
        return BoundLogger({**self._extras, **kwargs})

    def _log(self, level: int, message: str, /, *args: object, **kwargs: object) -> None:
        if _root.disabled:
            return
        exc_info = kwargs.pop("exc_info", False)
        # No frame without CPython frame support; attribute to the root logger.
        frame = _caller()
        module = ROOT_LOGGER_NAME
        fn, lno, func = "", 0, None
        if frame is not None:
            module = frame.f_globals.get("__name__", ROOT_LOGGER_NAME)
            fn, lno, func = frame.f_code.co_filename, frame.f_lineno, frame.f_code.co_name
        if not module.startswith(ROOT_LOGGER_NAME + "."):
            module = ROOT_LOGGER_NAME
        lib_logger = logging.getLogger(module)
        if not lib_logger.isEnabledFor(level):
            return
        text = _format_message(message, args, kwargs) + _context_suffix(self._extras)
        record = lib_logger.makeRecord(
            name=lib_logger.name,
            level=level,
            fn=fn,
            lno=lno,
            msg=text,
            args=(),
            exc_info=sys.exc_info() if exc_info else None,
            func=func,
        )
        for k, v in self._extras.items():
            setattr(record, k, v)
        record.extras = self._extras  # type: ignore[attr-defined]
        lib_logger.handle(record)

    def debug(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, /, *args: object, **kwargs: object) -> None:
        kwargs["exc_info"] = True
        self._log(logging.ERROR, message, *args, **kwargs)


_handler_counter = 0
_handlers: dict[int, logging.Handler] = {}


def _namer(name: str) -> str:
    return name + ".gz"


def _rotator(source: str, dest: str) -> None:
    with open(source, "rb") as f_in, gzip.open(dest, "wb") as f_out:
        shutil.copyfileobj(f_in, f_out)
    os.remove(source)


def _parse_rotation_bytes(rotation: str) -> int:
    parts = rotation.strip().split()
    match parts:
        case [num, unit] if unit.upper() == "MB":
            return int(num) * 1024 * 1024
        case [num, unit] if unit.upper() == "KB":
            return int(num) * 1024
        case _:
            return 50 * 1024 * 1024


def _make_file_handler(
    path: str,
    *,
    level: int,
    rotation: str | None,
    retention: int | None,
    compression: bool,
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=_parse_rotation_bytes(rotation) if rotation else 50 * 1024 * 1024,
        backupCount=retention if retention is not None else 10,
    )
    if compression:
        handler.namer = _namer
        handler.rotator = _rotator
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(levelname)-8s | "
        "%(name)s:%(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    return handler


def _make_console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        level=level,
        show_time=True,
        show_level=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    return handler


class Logger:
    def __init__(self) -> None:
        self._bound = BoundLogger()

    def bind(self, **kwargs: object) -> BoundLogger:
        return self._bound.bind(**kwargs)

    def debug(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.debug(message, *args, **kwargs)

    def info(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.info(message, *args, **kwargs)

    def warning(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.warning(message, *args, **kwargs)

    def error(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.error(message, *args, **kwargs)

    def exception(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._bound.exception(message, *args, **kwargs)

    def add(
        self,
        sink: str | TextIO,
        *,
        level: str = "DEBUG",
        rotation: str | None = None,
        retention: int | None = None,
        compression: bool = False,
    ) -> int:
        global _handler_counter
        numeric_level = getattr(logging, level.upper(), logging.DEBUG)

        match sink:
            case str() as path:
                handler = _make_file_handler(
                    path,
                    level=numeric_level,
                    rotation=rotation,
                    retention=retention,
                    compression=compression,
                )
            case _:
                handler = _make_console_handler(numeric_level)

        _root.addHandler(handler)
        _handler_counter += 1
        _handlers[_handler_counter] = handler
        return _handler_counter

    def remove(self, handler_id: int | None = None) -> None:
        if handler_id is None:
            for h in list(_handlers.values()):
                _root.removeHandler(h)
                h.close()
            _handlers.clear()
            return
        if h := _handlers.pop(handler_id, None):
            _root.removeHandler(h)
            h.close()

    def enable(self) -> None:
        _root.disabled = False

    def disable(self) -> None:
        _root.disabled = True


logger = Logger()

_root.setLevel(logging.DEBUG)
_root.propagate = False
