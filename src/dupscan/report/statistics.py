"""Per-file and per-group statistics over the result of a duplicate scan."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple, Sequence

from ..errors import FileAccessError
from ..index.digest_index import DuplicateGroup

logger = logging.getLogger(__name__)


class FileStatRow(NamedTuple):
    path: Path
    is_duplicate: bool
    size: int


class GroupStatRow(NamedTuple):
    occurrences: int
    total_size: int
    potential_save: int  # bytes freed by keeping a single member
    digest: bytes


@dataclass
class StatisticsReport:
    """The two result tables of a scan.

    Attributes:
        files: One row per original path that could be sized, in input order
        groups: One row per duplicate group whose members could be sized
        failures: Paths that vanished or became unreadable between hashing and sizing
    """
    files: list[FileStatRow] = field(default_factory=list)
    groups: list[GroupStatRow] = field(default_factory=list)
    failures: list[FileAccessError] = field(default_factory=list)

    @property
    def total_potential_save(self) -> int:
        return sum(row.potential_save for row in self.groups)


def collect_statistics(paths: Sequence[Path], duplicates: Sequence[DuplicateGroup],
                       fail_fast: bool = False) -> StatisticsReport:
    """Size every path and summarize every duplicate group.

    Each path is stat-ed exactly once. A path that cannot be stat-ed is recorded as a failure
    (or raised when fail_fast is set) rather than counted as zero bytes. Group members that
    failed are left out of their group's row; a group reduced below two members has no row.

    potential_save is (occurrences - 1) times the size of one member. All members share a
    digest, so their sizes are taken to be equal.

    Raises:
        FileAccessError: A path could not be stat-ed and fail_fast is set
    """
    report = StatisticsReport()
    sizes: dict[Path, int] = {}

    for path in paths:
        if path in sizes:
            continue
        try:
            sizes[path] = path.stat().st_size
        except OSError as e:
            error = FileAccessError(path, 'stat', e.strerror or str(e))
            if fail_fast:
                raise error from e
            error.__cause__ = e
            logger.warning(str(error))
            report.failures.append(error)

    duplicated = {path for group in duplicates for path in group.paths}

    for path in paths:
        if path in sizes:
            report.files.append(FileStatRow(path, path in duplicated, sizes[path]))

    for group in duplicates:
        members = [path for path in group.paths if path in sizes]
        if len(members) < 2:
            logger.warning(f"Dropping duplicate group {group.digest.hex()}: "
                           f"only {len(members)} member(s) could be sized")
            continue

        occurrences = len(members)
        report.groups.append(GroupStatRow(
            occurrences=occurrences,
            total_size=sum(sizes[path] for path in members),
            potential_save=(occurrences - 1) * sizes[members[0]],
            digest=group.digest,
        ))

    return report
