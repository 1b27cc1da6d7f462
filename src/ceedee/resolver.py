"""
ceedee Resolver - Directory name lookup

Exact base-name hits return full paths, history-ranked first.
Otherwise every base name containing the query is returned as a partial
match, which the caller has to disambiguate and query again.

Results are Exact/Partial values internally; the "e;<path>" / "p;<name>"
wire form only exists at the transport boundary.
"""

from dataclasses import dataclass
from typing import List

from .errors import CeedeeError, NotFound
from .store import DirectoryStore

EXACT = 'e'
PARTIAL = 'p'
WIRE_SEPARATOR = ':'


@dataclass(frozen=True)
class Match:
    """One lookup result; the subclass says how to use `value`."""

    value: str
    tag = ''

    def to_wire(self) -> str:
        return f"{self.tag};{self.value}"


class Exact(Match):
    """A full path, usable directly."""

    tag = EXACT


class Partial(Match):
    """A base name that needs disambiguating before it can be used."""

    tag = PARTIAL


def parse_match(wire: str) -> Match:
    """Inverse of Match.to_wire ("e;/a/b" -> Exact("/a/b"))."""
    tag, sep, value = wire.partition(';')
    if not sep or tag not in (EXACT, PARTIAL):
        raise CeedeeError(f"Malformed match entry: {wire!r}")
    return Exact(value) if tag == EXACT else Partial(value)


def encode_matches(matches: List[Match]) -> str:
    return WIRE_SEPARATOR.join(m.to_wire() for m in matches)


def decode_matches(dirs: str) -> List[Match]:
    if not dirs:
        return []
    return [parse_match(item) for item in dirs.split(WIRE_SEPARATOR)]


class Resolver:
    """Answers lookups against a DirectoryStore."""

    def __init__(self, store: DirectoryStore):
        self.store = store
        self.queries = 0
        self.misses = 0

    def resolve(self, name: str) -> List[Match]:
        """
        Resolve a directory name.

        Exact hits win; partial matches are only tried when no base name
        equals `name`. Raises NotFound when neither exists.
        """
        with self.store.lock:
            self.queries += 1
            paths = self.store.get(name)
            if paths:
                return [Exact(p) for p in paths]

            names = self.store.names_containing(name)
            if names:
                return [Partial(n) for n in names]

            self.misses += 1
        raise NotFound(name)

    def stats(self) -> dict:
        return {'queries': self.queries, 'misses': self.misses}
