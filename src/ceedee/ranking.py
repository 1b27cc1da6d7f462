"""
ceedee Ranking - Candidate lists for one directory base name

Each base name (e.g. "last") owns two ranked candidate lists:
- history: paths the user has cd'd into, most visited first
- path: paths found on disk, shallowest first

Entries are plain data; locking is the Store's job.
"""

from dataclasses import dataclass, asdict
from pathlib import PurePath
from typing import Dict, List, Set


def path_depth(path: str) -> int:
    """Number of segments in a path ("/a/b" -> 3, counting the root)."""
    return len(PurePath(path).parts)


@dataclass
class Candidate:
    path: str
    count: int = 0
    depth: int = 0


class DirectoryEntry:
    """Ranked candidates for every known directory sharing one base name."""

    def __init__(self, name: str):
        self.name = name
        self.history_candidates: List[Candidate] = []
        self.path_candidates: List[Candidate] = []
        self.known_paths: Set[str] = set()

    def add_path_candidate(self, path: str) -> bool:
        """
        Add a path seen on disk.

        Returns False when the path is already represented in either list.
        """
        if path in self.known_paths:
            return False
        self.known_paths.add(path)
        self.path_candidates.append(Candidate(path=path, depth=path_depth(path)))
        # list.sort is stable, equal depths keep insertion order
        self.path_candidates.sort(key=lambda c: c.depth)
        return True

    def add_history_candidate(self, path: str, count: int):
        """Credit `count` history visits to `path` and re-rank."""
        for candidate in self.history_candidates:
            if candidate.path == path:
                candidate.count += count
                break
        else:
            self.history_candidates.append(
                Candidate(path=path, count=count, depth=path_depth(path))
            )
            self.known_paths.add(path)
        self.history_candidates.sort(key=lambda c: c.count, reverse=True)

    def remove(self, path: str) -> bool:
        """Drop a path from both lists. Returns True if it was known."""
        if path not in self.known_paths:
            return False
        self.known_paths.discard(path)
        self.history_candidates = [c for c in self.history_candidates if c.path != path]
        self.path_candidates = [c for c in self.path_candidates if c.path != path]
        return True

    def is_empty(self) -> bool:
        return not self.history_candidates and not self.path_candidates

    def candidates(self) -> List[str]:
        """History candidates in rank order, then path candidates not already listed."""
        paths = [c.path for c in self.history_candidates]
        listed = set(paths)
        paths.extend(c.path for c in self.path_candidates if c.path not in listed)
        return paths

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'history': [asdict(c) for c in self.history_candidates],
            'paths': [asdict(c) for c in self.path_candidates],
        }
