"""Exception classes raised by the Kit core.

Every failure is reported by raising one of these; nothing in the core
retries or rolls back. The command line catches ``KitError`` and turns it
into a message and a non-zero exit status.
"""

from typing import Optional


class KitError(Exception):
    """Base class for all Kit errors."""


class ValidationError(KitError):
    """An argument has the wrong shape."""


class InvalidHash(ValidationError):
    """A hash is not exactly 40 hexadecimal characters."""

    def __init__(self, value: str, what: str = 'hash'):
        self.value = value
        super().__init__(f"Invalid {what}: {value!r} (expected 40 hex characters)")


class NotFound(KitError):
    """Something that was asked for does not exist."""


class ObjectNotFound(NotFound):
    """No object file exists for a hash."""

    def __init__(self, obj_hash: str):
        self.hash = obj_hash
        super().__init__(f"Object {obj_hash} not found")


class FileMissing(NotFound):
    """A working tree file does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"File not found: {path}")


class CorruptObject(KitError):
    """A stored object failed its integrity check."""

    def __init__(self, obj_hash: str, reason: str):
        self.hash = obj_hash
        self.reason = reason
        super().__init__(f"Object {obj_hash} is corrupt: {reason}")


class MalformedTree(KitError):
    """Tree content could not be parsed."""


class MalformedCommit(KitError):
    """Commit content could not be parsed."""


class WrongObjectType(KitError):
    """An object is not of the type an operation needs."""

    def __init__(self, obj_hash: str, expected: str, actual: str):
        self.hash = obj_hash
        self.expected = expected
        self.actual = actual
        super().__init__(f"Object {obj_hash} is a {actual}, not a {expected}")


class EmptyIndex(KitError):
    """Commit was requested with nothing staged."""

    def __init__(self):
        super().__init__("Nothing to commit (staging area is empty)")


class DetachedHead(KitError):
    """HEAD does not point at a branch."""

    def __init__(self, head: Optional[str] = None):
        self.head = head
        super().__init__("Cannot update branch: HEAD is detached")


class RepositoryExists(KitError):
    """A repository is already initialized at the path."""


class NotARepository(KitError):
    """No repository was found."""


class RepositoryLocked(KitError):
    """Another invocation holds the repository lock."""

    def __init__(self, lock_path):
        self.lock_path = lock_path
        super().__init__(
            f"Unable to lock repository: {lock_path} exists. "
            "Another kit process may be running; remove the file if not."
        )


class CorruptIndex(KitError):
    """The index file could not be read."""
