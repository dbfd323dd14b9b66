"""Lock files and atomic writes.

Writers follow the same protocol for every mutable file in ``.kit``: the
new content goes to ``<name>.lock``, created exclusively, and is renamed
over ``<name>`` once complete. A crash leaves either the old file or the
new one, never a partial write.
"""

import os
from pathlib import Path
from typing import Union

from kit.core.errors import RepositoryLocked
from kit.utils.log import getLogger

logger = getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _create_exclusive(path: Path) -> int:
    try:
        return os.open(
            path,
            os.O_RDWR | os.O_CREAT | os.O_EXCL | getattr(os, 'O_BINARY', 0),
            0o644,
        )
    except FileExistsError as exc:
        raise RepositoryLocked(path) from exc


class LockFile:
    """
    Exclusive advisory lock held for the lifetime of a ``with`` block.

    The lock is a file created with O_EXCL; whoever creates it owns the
    lock until the file is removed. Acquisition never waits.

    Usage:
        with LockFile(repo.kit_dir / 'lock'):
            ...
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self._held = False

    def acquire(self) -> None:
        fd = _create_exclusive(self.path)
        try:
            os.write(fd, str(os.getpid()).encode())
        finally:
            os.close(fd)
        self._held = True
        logger.debug("acquired lock %s", self.path)

    def release(self) -> None:
        if not self._held:
            return
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        self._held = False
        logger.debug("released lock %s", self.path)

    @property
    def held(self) -> bool:
        return self._held

    def __enter__(self) -> 'LockFile':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"LockFile({self.path}, held={self._held})"


def atomic_write(path: PathLike, data: bytes, fsync: bool = True) -> None:
    """
    Replace the content of path with data.

    Args:
        path: Target file
        data: New content
        fsync: Flush to disk before the rename

    Raises:
        RepositoryLocked: If another writer holds ``<path>.lock``
    """
    target = Path(path)
    lock_path = target.with_name(target.name + '.lock')
    fd = _create_exclusive(lock_path)
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            if fsync:
                os.fsync(f.fileno())
        os.replace(lock_path, target)
    except BaseException:
        try:
            os.remove(lock_path)
        except FileNotFoundError:
            pass
        raise


def atomic_write_text(path: PathLike, text: str, fsync: bool = True) -> None:
    """Text variant of atomic_write (UTF-8)."""
    atomic_write(path, text.encode('utf-8'), fsync=fsync)
