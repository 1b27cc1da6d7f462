"""
ceedee Directory Store

The single shared index: base name -> DirectoryEntry.

The indexer, the history ingestor and every lookup go through the
operations below, each of which holds the store lock for its whole
duration. The raw mapping is never handed out; readers get copies.

Walk liveness uses a generation counter: every path the walker confirms
is tagged with the generation of the pass that saw it, and after a pass
any path carrying an older generation is swept.
"""

import os
import sys
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from .ranking import DirectoryEntry


def base_name(path: str) -> str:
    return os.path.basename(path.rstrip(os.sep)) or path


class DirectoryStore:
    """Thread-safe base-name index of directory candidates."""

    def __init__(self, verbose: bool = False):
        self._entries: Dict[str, DirectoryEntry] = {}
        # full path -> generation of the last walk that confirmed it
        self._seen: Dict[str, int] = {}
        self.generation = 0
        self.verbose = verbose

        # Thread safety
        self.lock = threading.RLock()

    def __len__(self) -> int:
        with self.lock:
            return len(self._entries)

    def __contains__(self, name: str) -> bool:
        with self.lock:
            return name in self._entries

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, name: str) -> Optional[List[str]]:
        """Ranked candidate paths for an exact base name, or None."""
        with self.lock:
            entry = self._entries.get(name)
            if entry is None:
                return None
            return entry.candidates()

    def names_containing(self, fragment: str) -> List[str]:
        """Every base name containing `fragment`, sorted."""
        with self.lock:
            return sorted(name for name in self._entries if fragment in name)

    def entry(self, name: str) -> Optional[dict]:
        """Snapshot of one entry's ranked lists."""
        with self.lock:
            entry = self._entries.get(name)
            return entry.to_dict() if entry else None

    def stats(self) -> dict:
        with self.lock:
            return {
                'names': len(self._entries),
                'paths': sum(len(e.known_paths) for e in self._entries.values()),
                'tracked': len(self._seen),
                'generation': self.generation,
            }

    # =========================================================================
    # Writes
    # =========================================================================

    def upsert_path_candidate(self, path: str) -> bool:
        """
        Insert a directory found on disk under its base name.

        The path is tagged with the current generation so later passes
        can sweep it. Returns True if the path was new to its entry.
        """
        name = base_name(path)
        with self.lock:
            self._seen[path] = self.generation
            entry = self._entries.get(name)
            if entry is None:
                self._debug(f"Creating new directory reference for {name}")
                entry = DirectoryEntry(name)
                self._entries[name] = entry
            added = entry.add_path_candidate(path)
            if added:
                self._debug(f"Adding candidate path {path} to base {name}")
            return added

    def upsert_history_candidate(self, path: str, count: int) -> bool:
        """
        Credit history visits to a path.

        History never creates entries: if nothing on disk has this base
        name the update is dropped and False is returned.
        """
        name = base_name(path)
        with self.lock:
            entry = self._entries.get(name)
            if entry is None:
                return False
            self._debug(f"Adding/updating history link {name} -> {path} (+{count})")
            entry.add_history_candidate(path, count)
            return True

    def reconcile(self, generation: int) -> List[str]:
        """
        Sweep every tracked path not confirmed by `generation`. Returns removed paths.

        An entry is dropped, history candidates included, once none of its
        paths is confirmed on disk any more.
        """
        removed = []
        with self.lock:
            for path, seen in list(self._seen.items()):
                if seen >= generation:
                    continue
                del self._seen[path]
                name = base_name(path)
                entry = self._entries.get(name)
                if entry is None:
                    continue
                if entry.remove(path):
                    removed.append(path)
                    self._debug(f"Removed stale path {path}")
                if not any(p in self._seen for p in entry.known_paths):
                    orphans = sorted(entry.known_paths)
                    removed.extend(orphans)
                    del self._entries[name]
                    self._debug(f"Dropped {name}, nothing left on disk ({len(orphans)} history-only)")
        return removed

    # =========================================================================
    # Batches
    # =========================================================================

    def apply_pass(self, paths: Iterable[str]) -> Tuple[int, int, List[str]]:
        """
        Apply one complete walk as a single locked operation.

        Returns (generation, added, removed_paths).
        """
        with self.lock:
            self.generation += 1
            added = 0
            for path in paths:
                if self.upsert_path_candidate(path):
                    added += 1
            removed = self.reconcile(self.generation)
            return self.generation, added, removed

    def apply_history(self, counts: Dict[str, int]) -> int:
        """Apply one aggregated history batch. Returns how many paths were credited."""
        applied = 0
        with self.lock:
            for path, count in counts.items():
                if self.upsert_history_candidate(path, count):
                    applied += 1
        return applied

    def _debug(self, message: str):
        if self.verbose:
            print(f"[store] {message}", file=sys.stderr)
