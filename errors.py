from __future__ import annotations
import faulthandler
import os
import sys
import threading
import traceback
from datetime import datetime, timezone
from typing import Callable, Optional
import logging

logger = logging.getLogger("Errors")

_CRASH_DIR = os.path.abspath("logs")
_CRASH_DUMP = os.path.join(_CRASH_DIR, "crash.dump")

# Keep a strong ref so faulthandler's file isn't GC'd
_faulthandler_file: Optional[object] = None


class CrtError(Exception):
    """Base class for every failure that aborts a render."""


class DecodeFailure(CrtError):
    """Source image is missing, unreadable or corrupt."""


class IOFailure(CrtError):
    """Output directory or file could not be created or written."""


class EncodeFailure(CrtError):
    """Rendered buffer could not be serialized to PNG."""


class InvalidConfiguration(CrtError, ValueError):
    """Parameters that would make the mask or scanline math undefined."""


def _ensure_dirs():
    os.makedirs(_CRASH_DIR, exist_ok=True)

def _write_dump(prefix: str, exc_text: str) -> None:
    _ensure_dirs()
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    path = os.path.join(_CRASH_DIR, f"{prefix}_{ts}.dump")
    with open(path, "w", encoding="utf-8") as f:
        f.write(exc_text)
    logger.error("Wrote exception dump: %s", path)

def install_global_exception_hooks(crash_dir: Optional[str] = None) -> None:
    """
    Capture: sys.excepthook, threading.excepthook, sys.unraisablehook,
    and native crashes via faulthandler.
    """
    global _faulthandler_file, _CRASH_DIR, _CRASH_DUMP
    if crash_dir:
        _CRASH_DIR = os.path.abspath(crash_dir)
        _CRASH_DUMP = os.path.join(_CRASH_DIR, "crash.dump")
    _ensure_dirs()

    # 1) Python uncaught exceptions
    def excepthook(exc_type, exc, tb):
        buf = "".join(traceback.format_exception(exc_type, exc, tb))
        logger.critical("Uncaught exception:\n%s", buf)
        _write_dump("uncaught", buf)
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = excepthook

    # 2) Threading exceptions (band workers, watchdog observer)
    def threading_hook(args: threading.ExceptHookArgs):
        buf = "".join(traceback.format_exception(args.exc_type, args.exc_value, args.exc_traceback))
        logger.critical("Thread exception in %s:\n%s", getattr(args.thread, "name", "<unknown>"), buf)
        _write_dump("thread", buf)
    threading.excepthook = threading_hook

    # 3) Unraisable exceptions
    def unraisable_hook(unraisable):
        buf = "".join(traceback.format_exception(unraisable.exc_type, unraisable.exc_value, unraisable.exc_traceback))
        where = getattr(unraisable, "object", None)
        logger.error("Unraisable exception in %r:\n%s", where, buf)
        _write_dump("unraisable", buf)
    sys.unraisablehook = unraisable_hook

    # 4) Faulthandler for native crashes: requires a *binary* file kept alive
    try:
        _faulthandler_file = open(_CRASH_DUMP, "ab", buffering=0)
        faulthandler.enable(file=_faulthandler_file, all_threads=True)
        logger.info("Faulthandler enabled: %s", _CRASH_DUMP)
    except OSError as e:
        logger.warning("Failed to enable faulthandler: %s", e)

def safe_slot(fn: Callable) -> Callable:
    """Decorator for watcher callbacks: logs exceptions instead of letting them kill the observer thread."""
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except Exception:
            buf = traceback.format_exc()
            logger.error("Exception in slot %s:\n%s", getattr(fn, "__name__", str(fn)), buf)
            _write_dump("slot", buf)
    wrapper.__name__ = getattr(fn, "__name__", "wrapper")
    return wrapper
