import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .commands.digest import DigestArgs, do_digest
from .errors import FileAccessError
from .index.digest_index import DuplicateGroup, find_duplicates
from .report.statistics import StatisticsReport, collect_statistics
from .utils.processor import Processor, DEFAULT_HASH_ALGORITHM, HASH_FUNCTIONS
from .utils.progress import ProgressObserver
from .utils.walker import walk_files, filter_paths

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Everything a scan found.

    Attributes:
        files: The paths that were scanned, in traversal order
        duplicates: Groups of two or more files with identical content
        report: By-file and by-group statistics tables
        failures: Per-file errors from hashing and sizing, in the order they occurred
    """
    files: list[Path]
    duplicates: list[DuplicateGroup]
    report: StatisticsReport
    failures: list[FileAccessError] = field(default_factory=list)


class Scanner:
    """Workflow layer tying traversal, parallel hashing, grouping and statistics together.

    Failure policy is resilient by default: a file that cannot be hashed or sized is left out
    and reported in ScanResult.failures. With fail_fast, the first such file aborts the scan
    with FileAccessError.
    """

    def __init__(self, processor: Processor, hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
                 fail_fast: bool = False):
        """
        Args:
            processor: Worker pool used for hashing
            hash_algorithm: One of 'sha256', 'md5', 'mmh3'
            fail_fast: Treat any per-file error as fatal

        Raises:
            ValueError: Unknown hash algorithm
        """
        if hash_algorithm not in HASH_FUNCTIONS:
            raise ValueError(f"Unknown hash algorithm: {hash_algorithm}")

        self._processor = processor
        self._hash_algorithm = hash_algorithm
        self._fail_fast = fail_fast

    @property
    def hash_algorithm(self) -> str:
        return self._hash_algorithm

    def collect(self, root: str | os.PathLike, pattern: str = '') -> list[Path]:
        """List the regular files under root whose path contains pattern.

        Raises:
            TraversalError: root is missing, not a directory, or unreadable
        """
        return filter_paths(walk_files(Path(root)), pattern)

    def scan(self, paths: Sequence[Path], observer: ProgressObserver | None = None) -> ScanResult:
        """Find duplicates among paths and compute their statistics.

        Raises:
            FileAccessError: A file could not be hashed or sized and fail_fast is set
        """
        paths = list(paths)
        outcome = asyncio.run(do_digest(paths, DigestArgs(
            self._processor, self._hash_algorithm, self._fail_fast, observer)))

        duplicates = find_duplicates(outcome.index)
        logger.info(f"Found {len(duplicates)} duplicate groups among {len(paths)} files")

        hashed = set(outcome.index.paths())
        report = collect_statistics([path for path in paths if path in hashed], duplicates, self._fail_fast)

        return ScanResult(paths, duplicates, report, outcome.failures + report.failures)

    def run(self, root: str | os.PathLike, pattern: str = '',
            observer: ProgressObserver | None = None) -> ScanResult:
        """collect() followed by scan()."""
        return self.scan(self.collect(root, pattern), observer)
