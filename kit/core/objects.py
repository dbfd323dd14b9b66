"""Kit objects: blobs, trees and commits, and their codecs."""

import stat
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone, timedelta
from pathlib import Path
from typing import Iterable, List, Optional

from kit.utils.log import getLogger
from .errors import MalformedTree, MalformedCommit, ValidationError
from .hash import hash_object, validate_hash, HASH_HEX_LENGTH

logger = getLogger(__name__)

BLOB = 'blob'
TREE = 'tree'
COMMIT = 'commit'
OBJECT_TYPES = (BLOB, TREE, COMMIT)

MODE_TREE = '40000'
MODE_FILE = '100644'
MODE_EXECUTABLE = '100755'

# Hash of a tree with no entries ("tree 0\0").
EMPTY_TREE_HASH = '4b825dc642cb6eb9a060e54bf8d69288fbee4904'

HASH_RAW_LENGTH = HASH_HEX_LENGTH // 2

DEFAULT_TIMEZONE = '+0000'


def object_header(obj_type: str, length: int) -> bytes:
    """Return the ``<type> <length>\\0`` header that frames object content."""
    return f"{obj_type} {length}\0".encode()


def hash_content(obj_type: str, content: bytes) -> str:
    """Compute the identity of a typed payload."""
    return hash_object(object_header(obj_type, len(content)) + content)


def mode_for_stat(st_mode: int) -> str:
    """File mode string for a stat mode: executable if any execute bit is set."""
    return MODE_EXECUTABLE if st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH) else MODE_FILE


def type_for_mode(mode: str) -> str:
    """Object type an entry with this mode points at."""
    return TREE if mode == MODE_TREE else BLOB


class KitObject(ABC):
    """
    A typed payload that can be stored in the object store.

    Subclasses set ``type_name`` and convert between their fields and the
    content bytes; the framing header and hashing are shared.
    """

    type_name: str = ''

    def __init__(self):
        self._hash: Optional[str] = None

    @abstractmethod
    def serialize(self) -> bytes:
        """Content bytes, without the header."""

    @abstractmethod
    def deserialize(self, data: bytes) -> None:
        """Replace this object's fields with those parsed from data."""

    @property
    def type(self) -> str:
        return self.type_name

    def compute_hash(self) -> str:
        """Hash of ``<type> <size>\\0<content>``, cached until the object changes."""
        if self._hash is None:
            self._hash = hash_content(self.type, self.serialize())
        return self._hash

    @property
    def hash(self) -> str:
        return self.compute_hash()

    @classmethod
    def from_content(cls, data: bytes, obj_hash: Optional[str] = None) -> 'KitObject':
        """Build an object from stored content, keeping the hash it was stored under."""
        obj = cls()
        obj.deserialize(data)
        obj._hash = obj_hash
        return obj


class Blob(KitObject):
    """Opaque file content. Names and modes belong to the tree that lists it."""

    type_name = BLOB

    def __init__(self, data: Optional[bytes] = None):
        super().__init__()
        self.data = data or b''

    def serialize(self) -> bytes:
        return self.data

    def deserialize(self, data: bytes) -> None:
        self.data = data
        self._hash = None

    @classmethod
    def from_file(cls, filepath) -> 'Blob':
        return cls(Path(filepath).read_bytes())

    def __repr__(self) -> str:
        return f"Blob(hash={self.hash[:7]}, size={len(self.data)})"


class TreeEntry:
    """
    Represents a single entry in a tree.

    Each entry contains:
    - mode: '40000' for a sub-tree, '100644' for a file, '100755' for an executable
    - type: Object type ('blob' or 'tree'), derived from the mode when omitted
    - hash: 40-character hash of the object
    - name: Filename or directory name (no '/' and no NUL)
    """

    def __init__(self, mode: str, obj_type: Optional[str], obj_hash: str, name: str):
        self.mode = mode
        self.type = obj_type or type_for_mode(mode)
        self.hash = obj_hash
        self.name = name

    @property
    def name_bytes(self) -> bytes:
        return self.name.encode('utf-8', 'surrogateescape')

    def encode(self) -> bytes:
        """Canonical encoding: ``<mode> <name>\\0<20 raw hash bytes>``."""
        return self.mode.encode('ascii') + b' ' + self.name_bytes + b'\0' + bytes.fromhex(self.hash)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeEntry):
            return NotImplemented
        return (self.mode, self.hash, self.name) == (other.mode, other.hash, other.name)

    def __hash__(self) -> int:
        return hash((self.mode, self.hash, self.name))

    def __lt__(self, other: 'TreeEntry') -> bool:
        """Sort entries by name, byte-wise."""
        return self.name_bytes < other.name_bytes

    def __repr__(self) -> str:
        return f"TreeEntry({self.mode} {self.type} {self.hash[:7]} {self.name})"


def encode_tree_entries(entries: Iterable[TreeEntry]) -> bytes:
    """
    Encode tree entries in canonical order.

    Entries are sorted by name before encoding so that the same set of
    entries always produces the same bytes, whatever order it came in.
    """
    return b''.join(entry.encode() for entry in sorted(entries))


def parse_tree_entries(content: bytes) -> List[TreeEntry]:
    """
    Parse tree content into entries, in stored order.

    Raises:
        MalformedTree: If a delimiter is missing or a hash is truncated
    """
    entries = []
    pos = 0
    end = len(content)

    while pos < end:
        space_pos = content.find(b' ', pos)
        if space_pos == -1:
            raise MalformedTree(f"missing space after mode at offset {pos}")
        try:
            mode = content[pos:space_pos].decode('ascii')
        except UnicodeDecodeError:
            raise MalformedTree(f"non-ASCII mode at offset {pos}")

        null_pos = content.find(b'\0', space_pos + 1)
        if null_pos == -1:
            raise MalformedTree(f"missing NUL after name at offset {space_pos + 1}")
        name = content[space_pos + 1:null_pos].decode('utf-8', 'surrogateescape')

        hash_start = null_pos + 1
        hash_end = hash_start + HASH_RAW_LENGTH
        if hash_end > end:
            raise MalformedTree(
                f"incomplete hash for {name!r}: {end - hash_start} of {HASH_RAW_LENGTH} bytes"
            )

        entries.append(TreeEntry(mode, None, content[hash_start:hash_end].hex(), name))
        pos = hash_end

    return entries


class Tree(KitObject):
    """
    Represents directory structure.

    A tree contains entries pointing to blobs (files) and other trees (subdirectories).
    Entry names are unique within a tree.
    """

    type_name = TREE

    def __init__(self):
        super().__init__()
        self.entries: List[TreeEntry] = []

    def add_entry(self, mode: str, obj_type: Optional[str], obj_hash: str, name: str) -> TreeEntry:
        """
        Add entry to tree.

        Args:
            mode: File mode
            obj_type: Object type ('blob' or 'tree'), or None to derive from mode
            obj_hash: Object hash
            name: Entry name

        Raises:
            ValidationError: If the name is empty, contains '/' or NUL, or is
                already present, or the mode is not octal digits
            InvalidHash: If obj_hash is not a well-formed hash
        """
        if not name or '/' in name or '\0' in name:
            raise ValidationError(f"Invalid tree entry name: {name!r}")
        if not mode or any(c not in '01234567' for c in mode):
            raise ValidationError(f"Invalid mode for tree entry {name!r}: {mode!r}")
        if any(entry.name == name for entry in self.entries):
            raise ValidationError(f"Duplicate tree entry name: {name!r}")
        obj_hash = validate_hash(obj_hash, f"hash for tree entry {name!r}")

        entry = TreeEntry(mode, obj_type, obj_hash, name)
        self.entries.append(entry)
        self.entries.sort()
        self._hash = None
        return entry

    def get_entry(self, name: str) -> Optional[TreeEntry]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def serialize(self) -> bytes:
        """
        Serialize tree.

        Format: <mode> <name>\\0<20-byte hash>, repeated, sorted by name.
        """
        return encode_tree_entries(self.entries)

    def deserialize(self, data: bytes) -> None:
        self.entries = parse_tree_entries(data)
        self._hash = None

    @classmethod
    def from_directory(cls, store, directory, exclude=('.kit',)) -> 'Tree':
        """
        Build tree from directory contents.

        Every file is written as a blob and every subdirectory as a tree
        before the entry pointing at it is added, so the returned tree only
        references objects already in the store. The returned tree itself is
        not written.

        Args:
            store: Object store (anything with ``write_object``)
            directory: Path to directory
            exclude: Entry names to skip at every level

        Returns:
            Tree: New tree object
        """
        tree = cls()

        for item in sorted(Path(directory).iterdir()):
            if item.name in exclude:
                continue

            if item.is_dir():
                subtree = cls.from_directory(store, item, exclude)
                obj_hash = store.write_object(subtree)
                tree.add_entry(MODE_TREE, TREE, obj_hash, item.name)

            elif item.is_file():
                blob = Blob.from_file(item)
                obj_hash = store.write_object(blob)
                tree.add_entry(mode_for_stat(item.stat().st_mode), BLOB, obj_hash, item.name)

        return tree

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Tree(entries={len(self.entries)})"


def _parse_signature(value: str, field: str):
    """
    Split ``<name tokens...> <timestamp> <tz-offset>``.

    A timestamp that is not an integer is read as 0 and logged; commit
    metadata is advisory, so parsing carries on.
    """
    tokens = value.split(' ')
    if len(tokens) < 2:
        return value, 0, DEFAULT_TIMEZONE

    name = ' '.join(tokens[:-2])
    raw_time, tz = tokens[-2], tokens[-1]
    try:
        seconds = int(raw_time)
    except ValueError:
        logger.warning("could not parse %s timestamp %r, using 0", field, raw_time)
        seconds = 0
    return name, seconds, tz


def _tz_to_timedelta(tz: str) -> timedelta:
    """
    Offset such as ``+0130`` or ``-0500`` as a timedelta.

    An unreadable offset, or one a tzinfo cannot represent (24h or more),
    is logged and read as UTC.
    """
    try:
        sign = -1 if tz.startswith('-') else 1
        digits = tz.lstrip('+-')
        offset = sign * timedelta(hours=int(digits[:2]), minutes=int(digits[2:4] or 0))
    except ValueError:
        offset = None
    if offset is None or abs(offset) >= timedelta(hours=24):
        logger.warning("could not parse timezone offset %r, using +0000", tz)
        return timedelta(0)
    return offset


def _check_signature(value: str, field: str) -> str:
    """Reject identities that would break the one-line header."""
    if not value or '\n' in value or '\0' in value:
        raise ValidationError(f"Invalid {field}: {value!r}")
    return value



class Commit(KitObject):
    """
    One point in the linear history: a tree snapshot, at most one parent
    (None for the root commit), author and committer signatures with
    their Unix time and offset, and a free-form message.
    """

    type_name = COMMIT

    def __init__(self):
        super().__init__()
        self.tree: str = ''
        self.parent: Optional[str] = None
        self.author: str = ''
        self.author_time: int = 0
        self.author_timezone: str = DEFAULT_TIMEZONE
        self.committer: str = ''
        self.committer_time: int = 0
        self.committer_timezone: str = DEFAULT_TIMEZONE
        self.message: str = ''

    @property
    def is_root(self) -> bool:
        return not self.parent

    @property
    def timestamp(self) -> datetime:
        """Author time as an aware datetime in the recorded offset.

        A time outside the platform range is logged and shown as the epoch.
        """
        tz = timezone(_tz_to_timedelta(self.author_timezone))
        try:
            return datetime.fromtimestamp(self.author_time, tz)
        except (OverflowError, OSError, ValueError):
            logger.warning("author time %r out of range, using 0", self.author_time)
            return datetime.fromtimestamp(0, tz)

    def serialize(self) -> bytes:
        """
        Serialize commit.

        Format:
        tree <tree-hash>
        parent <parent-hash>  (omitted for the root commit)
        author <name> <timestamp> <timezone>
        committer <name> <timestamp> <timezone>

        <commit message>
        """
        lines = [f'tree {self.tree}']
        if self.parent:
            lines.append(f'parent {self.parent}')
        lines.append(f'author {self.author} {self.author_time} {self.author_timezone}')
        lines.append(f'committer {self.committer} {self.committer_time} {self.committer_timezone}')
        lines.append('')
        lines.append(self.message.rstrip('\n'))

        return ('\n'.join(lines) + '\n').encode('utf-8')

    def deserialize(self, data: bytes) -> None:
        """
        Parse commit content.

        Headers end at the first blank line. Each header line is split once
        on the first space; unknown keys are ignored.

        Raises:
            MalformedCommit: If the content is not UTF-8 or has no tree line
        """
        try:
            content = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedCommit(f"commit is not valid UTF-8: {e}")

        lines = content.split('\n')
        message_start = len(lines)
        tree = None

        for i, line in enumerate(lines):
            if not line:
                message_start = i + 1
                break

            key, sep, value = line.partition(' ')
            if not sep:
                continue

            if key == 'tree':
                tree = value
            elif key == 'parent':
                if self.parent:
                    logger.debug("ignoring extra parent %s", value)
                else:
                    self.parent = value
            elif key == 'author':
                self.author, self.author_time, self.author_timezone = _parse_signature(value, key)
            elif key == 'committer':
                self.committer, self.committer_time, self.committer_timezone = _parse_signature(value, key)

        if tree is None:
            raise MalformedCommit("commit has no tree line")

        self.tree = tree
        self.message = '\n'.join(lines[message_start:]).strip()
        self._hash = None

    @classmethod
    def create(
        cls,
        tree_hash: str,
        parent_hash: Optional[str],
        author: str,
        committer: Optional[str],
        message: str,
        timestamp: Optional[int] = None,
        timezone: str = DEFAULT_TIMEZONE
    ) -> 'Commit':
        """
        Create a new commit.

        Args:
            tree_hash: Hash of tree object
            parent_hash: Parent commit hash, or None/'' for a root commit
            author: Author name and email (e.g., "Name <email>")
            committer: Committer name and email (defaults to author)
            message: Commit message
            timestamp: Unix timestamp (defaults to current time)
            timezone: Timezone offset (e.g., "+0000", "-0500")

        Returns:
            Commit: New commit object

        Raises:
            InvalidHash: If tree_hash, or a non-empty parent_hash, is malformed
            ValidationError: If author or committer is empty or spans lines
        """
        commit = cls()
        commit.tree = validate_hash(tree_hash, 'tree hash')
        commit.parent = validate_hash(parent_hash, 'parent hash') if parent_hash else None
        commit.author = _check_signature(author, 'author')
        commit.committer = _check_signature(committer or author, 'committer')
        commit.message = message

        if timestamp is None:
            timestamp = int(time.time())

        commit.author_time = timestamp
        commit.committer_time = timestamp
        commit.author_timezone = timezone
        commit.committer_timezone = timezone

        return commit

    def __repr__(self) -> str:
        parent_info = f", parent={self.parent[:7]}" if self.parent else ""
        msg_preview = self.message.split('\n')[0][:50]
        return f"Commit(hash={self.hash[:7]}{parent_info}, msg='{msg_preview}')"


def parse_commit(commit_hash: str, content: bytes) -> Commit:
    """Parse stored commit content, keeping the hash it was stored under."""
    return Commit.from_content(content, commit_hash)


OBJECT_CLASSES = {
    BLOB: Blob,
    TREE: Tree,
    COMMIT: Commit,
}
