import asyncio
import hashlib
import logging
import os
import pathlib
from multiprocessing.pool import ThreadPool
from typing import Awaitable, Callable

import mmh3

logger = logging.getLogger(__name__)


def compute_sha256_for_path(path: pathlib.Path) -> bytes:
    with open(path, "rb") as f:
        # noinspection PyTypeChecker
        return hashlib.file_digest(f, hashlib.sha256).digest()


def compute_md5_for_path(path: pathlib.Path) -> bytes:
    with open(path, "rb") as f:
        # noinspection PyTypeChecker
        return hashlib.file_digest(f, hashlib.md5).digest()


def compute_mmh3_for_path(path: pathlib.Path) -> bytes:
    # x64 variant of the 128-bit hash; the whole file is held in memory
    return mmh3.hash_bytes(pathlib.Path(path).read_bytes())


# name -> (digest size, worker function)
HASH_FUNCTIONS: dict[str, tuple[int, Callable[[pathlib.Path], bytes]]] = {
    'sha256': (32, compute_sha256_for_path),
    'md5': (16, compute_md5_for_path),
    'mmh3': (16, compute_mmh3_for_path),
}

DEFAULT_HASH_ALGORITHM = 'sha256'


class Processor:
    """Bounded pool of worker threads that hash files on behalf of an asyncio event loop.

    Each call returns an awaitable resolved on the calling event loop once the worker thread
    has finished. Hashing never touches shared state, so the pool can run fully in parallel.
    """

    def __init__(self, concurrency: int | None = None):
        if concurrency is None:
            concurrency = os.cpu_count() or 1

        if concurrency < 1:
            raise ValueError(f"Concurrency must be positive, got {concurrency}")

        self._concurrency = concurrency
        self._pool: ThreadPool = ThreadPool(self._concurrency)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self._pool.close()
        self._pool.join()

    @property
    def concurrency(self):
        return self._concurrency

    def digest(self, algorithm: str, path: pathlib.Path) -> Awaitable[bytes]:
        """Hash the full content of a file with the named algorithm.

        :raise ValueError: the algorithm is unknown
        :return: awaitable resolving to the raw digest bytes, or raising the worker's OSError"""
        try:
            _, func = HASH_FUNCTIONS[algorithm]
        except KeyError:
            raise ValueError(f"Unknown hash algorithm: {algorithm}") from None

        logger.info(f"Starting {algorithm} computation for: {path}")

        async def log_and_compute():
            result = await self._evaluate(func, path)
            logger.info(f"Completed {algorithm} computation for: {path}")
            return result

        return log_and_compute()

    def _evaluate(self, func, *args):
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def resolve(v):
            if not future.cancelled():
                future.set_result(v)

        def reject(e):
            if not future.cancelled():
                future.set_exception(e)

        def post(callback, value):
            try:
                loop.call_soon_threadsafe(callback, value)
            except RuntimeError:
                # the loop is gone once a fail-fast run has cancelled the awaiting task
                logger.debug(f"Dropping result of {func.__name__}{args}: event loop is closed")

        self._pool.apply_async(func, args=args,
                               callback=lambda v: post(resolve, v),
                               error_callback=lambda e: post(reject, e))

        return future
