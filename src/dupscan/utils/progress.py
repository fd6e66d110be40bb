import logging
import sys
from typing import NamedTuple, Protocol, TextIO

from tqdm import tqdm

logger = logging.getLogger(__name__)


class ProgressEvent(NamedTuple):
    """Snapshot emitted after each file leaves the digest pipeline."""
    completed: int  # files finished so far, failures included
    failed: int
    total: int
    elapsed: float  # seconds since the pipeline started


class ProgressObserver(Protocol):
    def started(self, total: int) -> None: ...

    def advanced(self, event: ProgressEvent) -> None: ...

    def finished(self) -> None: ...


class NullProgress:
    def started(self, total: int) -> None:
        pass

    def advanced(self, event: ProgressEvent) -> None:
        pass

    def finished(self) -> None:
        pass


class TqdmProgress:
    """Renders pipeline progress as a tqdm bar (count, elapsed time, rate and ETA)."""

    def __init__(self, file: TextIO | None = None, disable: bool | None = None, desc: str = "Hashing"):
        self._file = file if file is not None else sys.stderr
        self._disable = disable
        self._desc = desc
        self._bar: tqdm | None = None

    def started(self, total: int) -> None:
        # disable=None lets tqdm turn itself off when the stream is not a terminal
        self._bar = tqdm(total=total, desc=self._desc, unit=" files", file=self._file,
                         disable=self._disable, leave=False)

    def advanced(self, event: ProgressEvent) -> None:
        if self._bar is None:
            return
        self._bar.update(event.completed - self._bar.n)
        if event.failed:
            self._bar.set_postfix(failed=event.failed, refresh=False)

    def finished(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def notify(observer: ProgressObserver, method: str, *args) -> None:
    """Invoke an observer callback, keeping its failures away from the caller.

    Progress is advisory; an observer that raises is logged and otherwise ignored.
    """
    try:
        getattr(observer, method)(*args)
    except Exception:
        logger.exception(f"Progress observer failed in {method}()")
