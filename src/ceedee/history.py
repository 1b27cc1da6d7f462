"""
ceedee History - Shell history ranking

Turns the user's shell history into ranking signal:
- HistoryWatcher polls the history file (watchdog) and hands over the
  bytes appended since the last read
- HistoryIngestor parses `cd` invocations out of each delta and credits
  the visited paths in the DirectoryStore

History only re-ranks directories the indexer already knows about; it
never creates index entries on its own.

Record grammar understood by parse_cd_target:

    record  := [metadata ';']* command
    command := ws* 'cd' ws+ target ws*
    target  := '/' path | '~' | '~/' path     (optionally quoted)

zsh extended history lines (": 1700000000:0;cd ~/src") carry the command
in the last ';' field.
"""

import os
import sys
import threading
from collections import Counter
from typing import Callable, Dict, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers.polling import PollingObserver

from .errors import HistoryWatchError
from .store import DirectoryStore

# Anything after one of these belongs to another command
SHELL_OPERATORS = ('&&', '||', '|', '&')


# ============================================================================
# Parsing
# ============================================================================

def _strip_operators(target: str) -> str:
    for op in SHELL_OPERATORS:
        idx = target.find(op)
        if idx != -1:
            target = target[:idx]
    return target.strip()


def parse_cd_target(line: str, home: str) -> Optional[str]:
    """
    Extract the absolute directory a history line cd's into.

    Returns None for anything that is not `cd <absolute-or-~-path>`.
    """
    command = line.rsplit(';', 1)[-1].strip()
    parts = command.split(None, 1)
    if len(parts) != 2 or parts[0] != 'cd':
        return None

    target = _strip_operators(parts[1])
    if len(target) >= 2 and target[0] == target[-1] and target[0] in '"\'':
        target = target[1:-1]

    if target == '~':
        path = home
    elif target.startswith('~/'):
        path = home.rstrip('/') + target[1:]
    elif target.startswith('/'):
        path = target
    else:
        return None

    path = path.rstrip('/')
    return path or None


def parse_history(text: str, home: str) -> Dict[str, int]:
    """Count cd targets per distinct path across every line of `text`."""
    counts: Counter = Counter()
    for line in text.splitlines():
        path = parse_cd_target(line, home)
        if path:
            counts[path] += 1
    return dict(counts)


# ============================================================================
# Ingestion
# ============================================================================

class HistoryIngestor:
    """Feeds aggregated history counts into the store, one batch per delta."""

    def __init__(self, store: DirectoryStore, home: str, verbose: bool = False):
        self.store = store
        self.home = home
        self.verbose = verbose
        self.running = True
        self.error: Optional[str] = None
        self.deltas = 0
        self.credited = 0
        self.dropped = 0

    def ingest(self, delta: bytes):
        if not delta or not self.running:
            return
        self.deltas += 1
        self._debug(f"Processing {len(delta)} received bytes from history")

        counts = parse_history(delta.decode('utf-8', errors='replace'), self.home)
        if not counts:
            return
        applied = self.store.apply_history(counts)
        self.credited += applied
        self.dropped += len(counts) - applied

    def stop(self, reason=None):
        """Stop ranking updates; the store keeps what it has."""
        if not self.running:
            return
        self.running = False
        self.error = str(reason) if reason else None
        print(f"[history] Ingestion stopped: {self.error or 'shutdown'}")

    def stats(self) -> dict:
        return {
            'running': self.running,
            'error': self.error,
            'deltas': self.deltas,
            'credited': self.credited,
            'dropped': self.dropped,
        }

    def _debug(self, message: str):
        if self.verbose:
            print(f"[history] {message}", file=sys.stderr)


# ============================================================================
# File Watcher
# ============================================================================

class HistoryWatcher(FileSystemEventHandler):
    """
    Delivers appended bytes of one file to `on_delta`.

    The file's existing content is the first delta. A file renamed over
    the watched one is read as a rewrite. Errors (file removed,
    unreadable, missing at start) go to `on_error` once, then the watcher
    stops.
    """

    def __init__(self, path: str, interval: float,
                 on_delta: Callable[[bytes], None],
                 on_error: Callable[[Exception], None],
                 verbose: bool = False):
        self.path = os.path.abspath(path)
        self.interval = interval
        self.on_delta = on_delta
        self.on_error = on_error
        self.verbose = verbose
        self.offset = 0
        self.stopped = False

        self._lock = threading.Lock()
        self._observer: Optional[PollingObserver] = None

    def start(self) -> bool:
        if not os.path.isfile(self.path):
            self._fail(HistoryWatchError(f"History file not found: {self.path}"))
            return False

        self._observer = PollingObserver(timeout=self.interval)
        self._observer.schedule(self, os.path.dirname(self.path), recursive=False)
        self._observer.start()
        print(f"[history] Launching history watcher for file {self.path}")

        self.read_delta()
        return not self.stopped

    def stop(self):
        with self._lock:
            self.stopped = True
        observer = self._observer
        if observer is None:
            return
        observer.stop()
        if observer is not threading.current_thread():
            observer.join()
        self._observer = None

    def read_delta(self) -> bytes:
        """Read and deliver everything appended since the last read."""
        with self._lock:
            if self.stopped:
                return b''
            try:
                size = os.path.getsize(self.path)
                if size < self.offset:
                    self._debug(f"{self.path} was truncated, reading from start")
                    self.offset = 0
                if size == self.offset:
                    return b''
                with open(self.path, 'rb') as f:
                    f.seek(self.offset)
                    data = f.read()
                    self.offset = f.tell()
            except OSError as e:
                self._fail(HistoryWatchError(f"Unable to read {self.path}: {e}"))
                return b''
            self.on_delta(data)
            return data

    # watchdog callbacks

    def _is_history(self, event) -> bool:
        return not event.is_directory and os.path.abspath(event.src_path) == self.path

    def on_modified(self, event):
        if self._is_history(event):
            self.read_delta()

    def on_created(self, event):
        if self._is_history(event):
            self.read_delta()

    def on_deleted(self, event):
        if self._is_history(event):
            self._replaced_or_gone("removed")

    def on_moved(self, event):
        if event.is_directory:
            return
        if os.path.abspath(event.dest_path) == self.path or self._is_history(event):
            self._replaced_or_gone("moved")

    def _replaced_or_gone(self, what: str):
        # Shells save history by renaming a fresh file over the old one
        if os.path.isfile(self.path):
            self._debug(f"{self.path} was replaced, re-reading")
            self.read_delta()
        else:
            self._fail(HistoryWatchError(f"History file {what}: {self.path}"))

    def _fail(self, err: Exception):
        if self.stopped:
            return
        self.stopped = True
        self._debug(f"Received error from watcher: {err}")
        if self._observer is not None:
            self._observer.stop()
        self.on_error(err)

    def _debug(self, message: str):
        if self.verbose:
            print(f"[history] {message}", file=sys.stderr)
