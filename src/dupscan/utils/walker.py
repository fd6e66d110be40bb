import logging
import os
import stat
from pathlib import Path
from typing import Iterable, Iterator

from ..errors import TraversalError

logger = logging.getLogger(__name__)


def walk(path: Path) -> Iterator[tuple[Path, os.stat_result]]:
    """Recursively traverse a directory, yielding every entry with its lstat result.

    Children are visited in name order. Symbolic links are reported but never followed.
    """
    try:
        children = sorted(path.iterdir())
    except OSError as e:
        raise TraversalError(path, f"Cannot list directory ({e.strerror or e})") from e

    for child in children:
        try:
            st = child.stat(follow_symlinks=False)
        except OSError as e:
            raise TraversalError(child, f"Cannot stat entry ({e.strerror or e})") from e

        yield child, st

        if stat.S_ISDIR(st.st_mode):
            yield from walk(child)


def walk_files(root: Path) -> Iterator[Path]:
    """Yield every regular file under root.

    Raises:
        TraversalError: root does not exist, is not a directory, or some entry below it
                        cannot be read
    """
    root = Path(root)
    try:
        st = root.stat()
    except OSError as e:
        raise TraversalError(root, f"Cannot access root ({e.strerror or e})") from e

    if not stat.S_ISDIR(st.st_mode):
        raise TraversalError(root, "Root is not a directory")

    for child, child_st in walk(root):
        if stat.S_ISREG(child_st.st_mode):
            yield child
        elif stat.S_ISLNK(child_st.st_mode):
            logger.debug(f"Skipping symbolic link: {child}")


def filter_paths(paths: Iterable[Path], pattern: str) -> list[Path]:
    """Keep the paths whose text contains pattern (case-sensitive substring match)."""
    return [path for path in paths if pattern in str(path)]
