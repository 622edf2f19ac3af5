"""
debug_trace.py

Debug instrumentation for the application shell.

Tracing is on when the GUIFORGE_TRACE environment variable is set to a
non-empty value other than "0". Trace lines go to stderr and, if enabled,
to a log file in the platform log directory. Records logged by the model
modules through :mod:`logging` are routed into the same stream by
:func:`install_log_handler`.
"""

import logging
import os
import sys
import traceback
from datetime import datetime
from functools import wraps
from pathlib import Path

import platformdirs

DEBUG_TRACE = os.environ.get("GUIFORGE_TRACE", "") not in ("", "0")

# Set to True to trace pointer-move events (very verbose)
TRACE_POINTER = False

# Log file name inside the user log dir (None for stderr only)
LOG_FILE = "guiforge_debug.log"

_log_file = None


def _get_log_file():
    global _log_file
    if LOG_FILE and _log_file is None:
        try:
            log_dir = Path(platformdirs.user_log_dir("guiforge"))
            log_dir.mkdir(parents=True, exist_ok=True)
            _log_file = open(log_dir / LOG_FILE, "w", encoding="utf-8")
        except OSError as e:
            print(f"debug_trace: cannot open log file: {e}", file=sys.stderr)
            globals()["LOG_FILE"] = None
    return _log_file


def trace(msg: str, category: str = "INFO"):
    """Print a trace message with timestamp."""
    if not DEBUG_TRACE:
        return
    if category == "POINTER" and not TRACE_POINTER:
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"

    print(line, file=sys.stderr, flush=True)

    log_file = _get_log_file()
    if log_file:
        log_file.write(line + "\n")
        log_file.flush()


def trace_exception(msg: str = "Exception"):
    """Print the exception currently being handled."""
    if not DEBUG_TRACE:
        return
    trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def trace_call(category: str = "CALL"):
    """Decorator to trace function calls."""
    def decorator(func):
        if not DEBUG_TRACE:
            return func

        @wraps(func)
        def wrapper(*args, **kwargs):
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
                trace(f"<<< {func_name}", category)
                return result
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
        return wrapper
    return decorator


class TraceHandler(logging.Handler):
    """Forwards :mod:`logging` records to :func:`trace`, tagged by level."""

    def emit(self, record: logging.LogRecord) -> None:
        msg = f"{record.name}: {record.getMessage()}"
        if DEBUG_TRACE:
            trace(msg, record.levelname)
        else:
            print(f"[{record.levelname}] {msg}", file=sys.stderr, flush=True)


def install_log_handler(level: int = logging.DEBUG) -> None:
    """Route model-layer log records into the trace stream (once)."""
    root = logging.getLogger()
    if any(isinstance(h, TraceHandler) for h in root.handlers):
        return
    root.addHandler(TraceHandler())
    root.setLevel(level if DEBUG_TRACE else logging.WARNING)


def close_log():
    """Close log file."""
    global _log_file
    if _log_file:
        _log_file.close()
        _log_file = None
