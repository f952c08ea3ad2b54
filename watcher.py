from __future__ import annotations
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
import threading
import time
import os
import logging
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".gif", ".webp"}

DEFAULT_SETTLE = 1.0

Signature = Tuple[int, int]


def is_image_path(path: str) -> bool:
    _, ext = os.path.splitext(path.lower())
    return ext in IMAGE_EXTS


def list_images(path: str) -> List[str]:
    names = sorted(os.listdir(path))
    return [os.path.join(path, n) for n in names if is_image_path(n) and os.path.isfile(os.path.join(path, n))]


def file_signature(path: str) -> Optional[Signature]:
    """(mtime_ns, size) of a regular file, or None if it is gone."""
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size)


class _EnqueueHandler(FileSystemEventHandler):
    def __init__(self, callback: Callable[[List[str]], None]):
        self.cb = callback

    def _forward(self, event, path: str):
        if event.is_directory:
            return
        if is_image_path(path):
            self.cb([path])

    def on_created(self, event):
        self._forward(event, event.src_path)

    def on_modified(self, event):
        # copies land in several writes; every chunk restarts the settle timer
        self._forward(event, event.src_path)

    def on_closed(self, event):
        self._forward(event, event.src_path)

    def on_moved(self, event):
        # editors and downloaders often write a temp file, then rename
        self._forward(event, event.dest_path)


class FolderWatcher:
    """
    Watches one folder and hands image paths to `callback` once they stop
    changing.

    Filesystem events only mark a path as pending. `poll()` releases a
    pending path after its (mtime, size) has held still for `settle`
    seconds, so a file copied in chunks is rendered once, complete. A path
    is released again only if its signature changes afterwards.
    """

    def __init__(self, callback: Callable[[List[str]], None], settle: float = DEFAULT_SETTLE):
        self._obs: Optional[Observer] = None
        self._path: Optional[str] = None
        self._cb = callback
        self._settle = float(settle)
        self._lock = threading.Lock()
        self._pending: Dict[str, Tuple[Signature, float]] = {}
        self._done: Dict[str, Signature] = {}

    def start(self, path: str):
        self.stop()
        self._path = path
        handler = _EnqueueHandler(self.note)
        self._obs = Observer()
        self._obs.schedule(handler, path, recursive=False)
        self._obs.start()
        logger.info("Watch started: %s", path)

    def stop(self):
        if self._obs:
            self._obs.stop()
            self._obs.join(timeout=2.0)
            self._obs = None
            logger.info("Watch stopped: %s", self._path)
            self._path = None

    def is_running(self) -> bool:
        return self._obs is not None

    def path(self) -> Optional[str]:
        return self._path

    def mark_done(self, paths: List[str]) -> None:
        """Record paths as already rendered at their current signature."""
        with self._lock:
            for p in paths:
                sig = file_signature(p)
                if sig is not None:
                    self._done[p] = sig

    def note(self, paths: List[str], now: Optional[float] = None) -> None:
        now = time.monotonic() if now is None else now
        with self._lock:
            for p in paths:
                sig = file_signature(p)
                if sig is None:
                    self._pending.pop(p, None)
                    continue
                prev = self._pending.get(p)
                if prev is None or prev[0] != sig:
                    self._pending[p] = (sig, now)

    def poll(self, now: Optional[float] = None) -> List[str]:
        """Release settled paths to the callback; returns what was released."""
        now = time.monotonic() if now is None else now
        ready: List[str] = []
        with self._lock:
            for p, (sig, since) in list(self._pending.items()):
                cur = file_signature(p)
                if cur is None:
                    del self._pending[p]
                    continue
                if cur != sig:
                    self._pending[p] = (cur, now)
                    continue
                if now - since < self._settle:
                    continue
                del self._pending[p]
                if self._done.get(p) == sig:
                    logger.debug("Unchanged since last render: %s", p)
                    continue
                self._done[p] = sig
                ready.append(p)
        if ready:
            ready.sort()
            self._cb(ready)
        return ready
