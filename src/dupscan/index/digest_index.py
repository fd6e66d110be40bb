import threading
from pathlib import Path
from typing import Iterator, NamedTuple


class DuplicateGroup(NamedTuple):
    """Two or more files sharing one digest."""
    digest: bytes
    paths: tuple[Path, ...]


class DigestIndex:
    """Mapping from content digest to the paths that produced it.

    add() is safe to call from any thread; all writers serialize on a single lock that covers
    the bucket append and nothing else. Paths within a bucket are kept in insertion order,
    which under a parallel pipeline is completion order and differs between runs.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._buckets: dict[bytes, list[Path]] = {}

    def add(self, digest: bytes, path: Path) -> None:
        with self._lock:
            self._buckets.setdefault(digest, []).append(path)

    def items(self) -> Iterator[tuple[bytes, tuple[Path, ...]]]:
        with self._lock:
            snapshot = [(digest, tuple(paths)) for digest, paths in self._buckets.items()]
        yield from snapshot

    def paths(self) -> Iterator[Path]:
        for _, paths in self.items():
            yield from paths

    def __getitem__(self, digest: bytes) -> tuple[Path, ...]:
        with self._lock:
            return tuple(self._buckets[digest])

    def __contains__(self, digest: bytes) -> bool:
        with self._lock:
            return digest in self._buckets

    def __len__(self):
        with self._lock:
            return len(self._buckets)


def find_duplicates(index: DigestIndex) -> list[DuplicateGroup]:
    """Return every bucket with more than one path, in index iteration order."""
    return [DuplicateGroup(digest, paths) for digest, paths in index.items() if len(paths) > 1]
