"""Shared logging helpers and error types for VCF header merging.

The module wires the ``vcf_header_merge`` logger to the console using a
consistent timestamped format. Importing the module applies the default
configuration; :func:`configure_logging` is an idempotent entry point for
customising it: call it with ``log_level`` to adjust verbosity, ``log_file``
to add a persistent file trail, disable either handler, or provide
``create_dirs`` when the log directory needs to be created. Repeated
invocations clear previous handlers so no duplicate output accumulates.

For error handling the module defines :class:`HeaderMergeError` and its
specialised subclasses. :func:`handle_critical_error` records fatal problems at
``ERROR`` and ``CRITICAL`` level before raising, while
:func:`handle_non_critical_error` and :func:`warning_sink` route recoverable
conflicts to the log as warnings.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, Iterable, Sequence

LOG_FORMAT = "%(asctime)s : %(levelname)s : %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("vcf_header_merge")
logger.propagate = False


def _normalize_level(level: int | str) -> int:
    """Return a numeric logging level for *level*."""
    if isinstance(level, str):
        name = level.upper()
        try:
            return logging._nameToLevel[name]  # type: ignore[attr-defined]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {level}") from exc
    return int(level)


def _clear_handlers(existing: Iterable[logging.Handler]) -> None:
    for h in list(existing):
        try:
            h.close()
        finally:
            logger.removeHandler(h)


def configure_logging(
    *,
    log_level: int | str = logging.INFO,
    log_file: str | os.PathLike[str] | None = None,
    enable_file_logging: bool = True,
    enable_console: bool = True,
    create_dirs: bool = True,
) -> None:
    """Idempotent logger setup for header merging.

    A file handler is only attached when ``log_file`` is given and
    ``enable_file_logging`` is true.
    """
    level = _normalize_level(log_level)
    _clear_handlers(logger.handlers)
    logger.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if enable_file_logging and log_file:
        path = os.fspath(log_file)
        if create_dirs:
            d = os.path.dirname(path)
            if d:
                os.makedirs(d, exist_ok=True)
        fh = logging.FileHandler(path)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    if enable_console:
        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        logger.addHandler(sh)


class HeaderMergeError(RuntimeError):
    """Base exception for unrecoverable errors while merging headers."""


class HeaderSourceError(HeaderMergeError):
    """Raised when a header cannot be read from one of the inputs."""


class IncompatibleHeadersError(HeaderMergeError):
    """Raised when two header lines cannot be unified.

    ``lines`` holds the conflicting declarations for diagnostics.
    """

    def __init__(self, message: str, lines: Sequence[object] = ()) -> None:
        super().__init__(message)
        self.lines = tuple(lines)


class MalformedHeaderLineError(IncompatibleHeadersError):
    """Raised when a header line does not follow its expected micro-format."""


class ProcessLogFormatError(MalformedHeaderLineError):
    """Raised when a ``vcfProcessLog`` value lacks one of its sub-fields."""


def log_message(
    message: str,
    verbose: bool = False,
    level: int = logging.INFO,
    *,
    exc_info: BaseException | bool | None = None,
) -> None:
    """Log *message* at the requested level and optionally echo it to stdout."""

    logger.log(level, message, exc_info=exc_info)
    if verbose:
        print(message)


def handle_critical_error(
    message: str,
    exc_cls=None,
    *,
    exc_info: BaseException | bool | None = None,
    **exc_kwargs,
) -> None:
    """Log and raise a fatal error.

    Extra keyword arguments are forwarded to the exception constructor.
    """

    log_message(message, level=logging.ERROR)
    logger.critical(message, exc_info=exc_info)
    exception_class = exc_cls or HeaderMergeError
    if isinstance(exc_info, BaseException):
        raise exception_class(message, **exc_kwargs) from exc_info
    raise exception_class(message, **exc_kwargs)


def handle_non_critical_error(message: str, verbose: bool = False) -> None:
    """Log a recoverable error as a warning."""

    log_message(message, verbose, level=logging.WARNING)


def warning_sink(verbose: bool = False) -> Callable[[str], None]:
    """Return a diagnostic sink that logs conflict messages as warnings."""

    def _sink(message: str) -> None:
        handle_non_critical_error(message, verbose)

    return _sink


__all__ = [
    "configure_logging",
    "logger",
    "log_message",
    "handle_critical_error",
    "handle_non_critical_error",
    "warning_sink",
    "HeaderMergeError",
    "HeaderSourceError",
    "IncompatibleHeadersError",
    "MalformedHeaderLineError",
    "ProcessLogFormatError",
]

# Default configuration: console only at INFO level.
configure_logging()
