"""
Logging configuration — one call from main.py, inherited everywhere.

Modules only ever do ``logger = logging.getLogger(__name__)``.

Console level, highest precedence first:
    --debug  >  --verbose  >  --quiet  >  DEVINIT_LOG_LEVEL  >  WARNING

DEVINIT_LOG_FILE adds a file handler; DEVINIT_LOG_FILE_LEVEL lets it be
chattier than the console (e.g. DEBUG to disk, WARNING on screen).

Diagnostics only. What the person watching the hook reads goes
through ``Reporter``, not through here.
"""

from __future__ import annotations

import logging
import sys

# (upper bound, format, datefmt): the first row whose bound is >= level wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d | %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d | %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# urllib3 shows up when pip-installed tools share the interpreter
_NOISY_LOGGERS = ("urllib3", "charset_normalizer")


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Replace the root logger's handlers with devinit's.

    Args:
        level: Console level name; unknown names mean WARNING.
        log_file: Append diagnostics to this path as well.
        log_file_level: Level for ``log_file`` (default: same as ``level``).
        quiet_third_party: Pin chatty libraries to WARNING unless at DEBUG.
    """
    console_level = _to_level(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_console_handler(console_level))
    root_level = console_level

    if log_file:
        file_level = _to_level(log_file_level) if log_file_level else console_level
        root.addHandler(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    root.setLevel(root_level)

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # A broken handler must never take the hook down with it
    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next((f, d) for bound, f, d in _CONSOLE_FORMATS if level <= bound)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _to_level(name: str | None) -> int:
    """``"debug"`` → ``logging.DEBUG``; anything unrecognised → WARNING."""
    if not name:
        return logging.WARNING
    return logging.getLevelNamesMapping().get(name.strip().upper(), logging.WARNING)
