import logging
import time
from asyncio import TaskGroup
from pathlib import Path
from typing import NamedTuple, Sequence

from ..errors import FileAccessError
from ..index.digest_index import DigestIndex
from ..utils.processor import Processor, DEFAULT_HASH_ALGORITHM, HASH_FUNCTIONS
from ..utils.progress import ProgressEvent, ProgressObserver, NullProgress, notify
from ..utils.throttler import Throttler

logger = logging.getLogger(__name__)


class DigestArgs(NamedTuple):
    """Arguments for the digest pipeline."""
    processor: Processor  # Worker pool that computes digests
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    fail_fast: bool = False  # Abort on the first file that cannot be hashed
    observer: ProgressObserver | None = None


class DigestOutcome(NamedTuple):
    """Index of every hashed file plus the files that could not be hashed."""
    index: DigestIndex
    failures: list[FileAccessError]


class DigestPipeline:
    """Hashes a list of files in parallel and groups them by digest.

    Hashing runs on the processor's worker threads; completions come back to the event loop,
    where the (digest, path) pair is appended to the shared index. A file that fails is never
    inserted. In fail-fast mode the first failure cancels every task that has not yet reached
    the index.
    """

    def __init__(self, args: DigestArgs):
        if args.hash_algorithm not in HASH_FUNCTIONS:
            raise ValueError(f"Unknown hash algorithm: {args.hash_algorithm}")

        self._processor = args.processor
        self._hash_algorithm = args.hash_algorithm
        self._fail_fast = args.fail_fast
        self._observer = args.observer if args.observer is not None else NullProgress()

        self._index = DigestIndex()
        self._failures: list[FileAccessError] = []
        self._total = 0
        self._completed = 0
        self._started_at = 0.0

    async def run(self, paths: Sequence[Path]) -> DigestOutcome:
        self._total = len(paths)
        if not paths:
            return DigestOutcome(self._index, self._failures)

        logger.info(f"Hashing {self._total} files with {self._hash_algorithm} "
                    f"on {self._processor.concurrency} workers")
        self._started_at = time.monotonic()
        notify(self._observer, 'started', self._total)
        try:
            try:
                async with TaskGroup() as tg:
                    throttler = Throttler(tg, self._processor.concurrency * 2)
                    for path in paths:
                        await throttler.schedule(self._handle_file(path))
            except ExceptionGroup as eg:
                failures, rest = eg.split(FileAccessError)
                if failures is None or rest is not None:
                    raise
                # only reachable in fail-fast mode; surface the first failure on its own
                raise failures.exceptions[0]
        finally:
            notify(self._observer, 'finished')

        logger.info(f"Hashed {self._completed - len(self._failures)} of {self._total} files "
                    f"in {time.monotonic() - self._started_at:.3f}s ({len(self._failures)} failed)")
        return DigestOutcome(self._index, self._failures)

    async def _handle_file(self, path: Path):
        try:
            digest = await self._processor.digest(self._hash_algorithm, path)
        except OSError as e:
            error = FileAccessError(path, 'hash', e.strerror or str(e))
            error.__cause__ = e
            logger.warning(str(error))
            self._failures.append(error)
            self._completed += 1
            self._report_progress()
            if self._fail_fast:
                raise error
        else:
            self._index.add(digest, path)
            self._completed += 1
            self._report_progress()

    def _report_progress(self):
        notify(self._observer, 'advanced', ProgressEvent(
            self._completed, len(self._failures), self._total, time.monotonic() - self._started_at))


async def do_digest(paths: Sequence[Path], args: DigestArgs) -> DigestOutcome:
    """Hash every path and return the digest index together with per-file failures."""
    pipeline = DigestPipeline(args)
    return await pipeline.run(paths)
