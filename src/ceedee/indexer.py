"""
ceedee Filesystem Indexer

Walks the configured root and keeps the DirectoryStore in step with disk:
- every non-skipped directory becomes a path candidate for its base name
- directories gone since the previous pass are swept (generation-based)

Directory I/O happens without the store lock; the finished pass is then
applied as one locked operation, so lookups see either the previous pass
or the complete new one.
"""

import os
import sys
import threading
import time
from dataclasses import dataclass, asdict, field
from typing import Iterable, List, Optional, Tuple

from .errors import CeedeeError
from .store import DirectoryStore


@dataclass
class IndexPass:
    generation: int
    seen: int
    added: int
    removed: List[str] = field(default_factory=list)
    errors: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data['removed'] = len(self.removed)
        return data


class FilesystemIndexer:
    """Indexes every directory under one root into a DirectoryStore."""

    def __init__(self, store: DirectoryStore, root: str,
                 skip_list: Optional[Iterable[str]] = None,
                 interval: float = 3600.0, verbose: bool = False):
        self.store = store
        self.root = os.path.abspath(root)
        self.skip_list = set(skip_list or [])
        self.interval = interval
        self.verbose = verbose
        self.last_pass: Optional[IndexPass] = None

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def is_skipped(self, path: str) -> bool:
        """A directory is skipped when its base name or full path is listed."""
        return os.path.basename(path) in self.skip_list or path in self.skip_list

    def walk(self) -> Tuple[List[str], int]:
        """
        Collect every directory under the root that should be indexed.

        Returns (paths, error_count). Unreadable or vanished nodes are
        logged and skipped; skipped directories are not descended into.
        """
        if not os.path.isdir(self.root):
            raise CeedeeError(f"Index root is not a directory: {self.root}")

        errors = []

        def on_error(err: OSError):
            errors.append(err)
            self._debug(f"Walk error: {err}")

        if self.is_skipped(self.root):
            self._debug(f"Skipping {self.root}")
            return [], 0

        paths = [self.root]
        for dirpath, dirnames, _ in os.walk(self.root, onerror=on_error):
            kept = []
            for name in dirnames:
                full = os.path.join(dirpath, name)
                if self.is_skipped(full):
                    self._debug(f"Skipping {full}")
                    continue
                # Symlinked directories are neither indexed nor followed
                if os.path.islink(full):
                    continue
                kept.append(name)
                paths.append(full)
            dirnames[:] = kept

        return paths, len(errors)

    def reindex(self) -> IndexPass:
        """Run one full pass: walk, upsert every directory, sweep stale paths."""
        start = time.time()
        paths, errors = self.walk()
        generation, added, removed = self.store.apply_pass(paths)
        elapsed = time.time() - start

        self.last_pass = IndexPass(
            generation=generation,
            seen=len(paths),
            added=added,
            removed=removed,
            errors=errors,
            elapsed=elapsed,
        )
        print(f"[indexer] Indexed {len(paths)} directories in {elapsed:.2f}s "
              f"(+{added} -{len(removed)}, {errors} errors) root={self.root}")
        return self.last_pass

    # =========================================================================
    # Background re-indexing
    # =========================================================================

    def start(self):
        """Re-run the pass every `interval` seconds in a daemon thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='ceedee-indexer', daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    def _run(self):
        # The next pass is scheduled only after the previous one finished
        while not self._stop.wait(self.interval):
            self._debug("Kicking off directory walk..")
            try:
                self.reindex()
            except Exception as e:
                print(f"[indexer] Background index error: {e}")

    def _debug(self, message: str):
        if self.verbose:
            print(f"[indexer] {message}", file=sys.stderr)
