"""Index (staging area) implementation."""

import json
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Optional, Dict, List

from kit.utils.lockfile import atomic_write_text
from kit.utils.log import getLogger
from .errors import CorruptIndex, FileMissing, ValidationError
from .hash import validate_hash
from .objects import Blob, Tree, BLOB, TREE, MODE_TREE, mode_for_stat

logger = getLogger(__name__)


@dataclass
class IndexEntry:
    """
    Represents a single entry in the index.

    Stores the path of a staged file, the hash of the blob holding its
    content, its mode and the size and modification time seen when it
    was staged.
    """
    path: str                  # Repository-relative path, '/' separated
    hash: str                  # Blob hash
    mode: str                  # '100644' or '100755'
    size: int                  # File size in bytes
    modified_at: datetime      # Modification time (UTC)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['modified_at'] = self.modified_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'IndexEntry':
        try:
            return cls(
                path=data['path'],
                hash=validate_hash(data['hash']),
                mode=data['mode'],
                size=int(data['size']),
                modified_at=datetime.fromisoformat(data['modified_at']),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptIndex(f"Invalid index entry {data!r}: {e}")

    def __repr__(self) -> str:
        return f"IndexEntry({self.mode} {self.hash[:7]} {self.path})"


class Index:
    """
    Kit index (staging area) implementation.

    The index maps paths to the entries that will make up the next
    commit. It is stored as a JSON document::

        {"entries": [{"path": ..., "hash": ..., "mode": ...,
                      "size": ..., "modified_at": ...}, ...]}

    A missing file is the same as an empty index.
    """

    def __init__(self, path=None):
        """
        Initialize empty index.

        Args:
            path: Index file used by ``save`` and ``add_file``
        """
        self.path: Optional[Path] = Path(path) if path else None
        self.entries: Dict[str, IndexEntry] = {}

    @classmethod
    def load(cls, path) -> 'Index':
        """Read the index stored at path."""
        index = cls(path)
        index.read(path)
        return index

    def add_entry(
        self,
        path: str,
        hash: str,
        mode: str,
        size: int,
        modified_at: Optional[datetime] = None
    ) -> IndexEntry:
        """
        Add or replace the entry for path (last write wins).

        Args:
            path: File path relative to repository root
            hash: Blob hash of file content
            mode: File mode string
            size: File size in bytes
            modified_at: Modification time (defaults to epoch)
        """
        entry = IndexEntry(
            path=path,
            hash=validate_hash(hash),
            mode=mode,
            size=size,
            modified_at=modified_at or datetime.fromtimestamp(0, timezone.utc),
        )
        self.entries[path] = entry
        return entry

    def add_file(self, repo, filepath) -> IndexEntry:
        """
        Stage a file for commit.

        Writes the file content as a blob, records its mode from the
        execute bits and persists the index.

        Args:
            repo: Repository instance
            filepath: Path to file (absolute, or relative to the work tree)

        Returns:
            IndexEntry: The new entry

        Raises:
            FileMissing: If the file does not exist
            ValidationError: If the path is not a regular file inside the work tree
        """
        file_path = Path(filepath)

        if not file_path.is_absolute():
            file_path = repo.work_tree / file_path

        try:
            st = file_path.stat()
        except FileNotFoundError:
            raise FileMissing(filepath)

        if not file_path.is_file():
            raise ValidationError(f"Not a file: {filepath}")

        try:
            # The entry keeps the name it was staged under, even for a symlink.
            rel_path = (file_path.parent.resolve() / file_path.name).relative_to(repo.work_tree)
        except ValueError:
            raise ValidationError(f"{filepath} is outside repository at {repo.work_tree}")
        if rel_path.parts and rel_path.parts[0] == repo.kit_dir.name:
            raise ValidationError(f"Refusing to stage repository metadata: {filepath}")

        blob_hash = repo.write_object(Blob.from_file(file_path))

        entry = self.add_entry(
            path=rel_path.as_posix(),
            hash=blob_hash,
            mode=mode_for_stat(st.st_mode),
            size=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, timezone.utc),
        )
        logger.debug("staged %s as %s", entry.path, blob_hash)

        # Auto-persist to disk
        if self.path:
            self.write(self.path)

        return entry

    def remove_entry(self, path: str) -> bool:
        """Remove entry from index. Returns True if it was present."""
        return self.entries.pop(path, None) is not None

    def get_entry(self, path: str) -> Optional[IndexEntry]:
        """Get entry by path."""
        return self.entries.get(path)

    def clear(self) -> None:
        """Clear all entries from index."""
        self.entries.clear()

    def sorted_entries(self) -> List[IndexEntry]:
        return [self.entries[path] for path in sorted(self.entries)]

    def write_tree(self, store) -> str:
        """
        Write the staged entries as a tree hierarchy.

        Paths are grouped by directory; each directory becomes a tree,
        written deepest first so that every tree references children that
        are already stored.

        Args:
            store: Object store (anything with ``write_object``)

        Returns:
            str: Hash of the root tree

        Raises:
            ValidationError: If a path is used both as a file and a directory
        """
        trees: Dict[PurePosixPath, Tree] = {PurePosixPath(''): Tree()}

        for entry in self.sorted_entries():
            path = PurePosixPath(entry.path)
            for parent in path.parents:
                trees.setdefault(parent, Tree())
            trees[path.parent].add_entry(entry.mode, BLOB, entry.hash, path.name)

        for dir_path in sorted(trees, key=lambda p: len(p.parts), reverse=True):
            if not dir_path.parts:
                continue
            tree_hash = store.write_object(trees[dir_path])
            trees[dir_path.parent].add_entry(MODE_TREE, TREE, tree_hash, dir_path.name)

        return store.write_object(trees[PurePosixPath('')])

    def save(self) -> None:
        """Persist the index to the file it was loaded from."""
        if not self.path:
            raise ValidationError("Index has no file to save to")
        self.write(self.path)

    def write(self, index_path) -> None:
        """
        Write index to disk as JSON, entries sorted by path.

        Args:
            index_path: Path to index file
        """
        document = {'entries': [entry.to_dict() for entry in self.sorted_entries()]}
        atomic_write_text(index_path, json.dumps(document, indent=2) + '\n')
        logger.debug("wrote index with %d entries to %s", len(self.entries), index_path)

    def read(self, index_path) -> None:
        """
        Read index from disk.

        Args:
            index_path: Path to index file

        Raises:
            CorruptIndex: If the file is not a valid index document
        """
        self.entries.clear()

        try:
            text = Path(index_path).read_text(encoding='utf-8')
        except FileNotFoundError:
            return

        try:
            document = json.loads(text)
            records = document['entries']
        except (ValueError, KeyError, TypeError) as e:
            raise CorruptIndex(f"Cannot parse index {index_path}: {e}")

        for record in records or []:
            entry = IndexEntry.from_dict(record)
            self.entries[entry.path] = entry

    def __contains__(self, path: str) -> bool:
        return path in self.entries

    def __len__(self) -> int:
        """Number of entries in index."""
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Index(entries={len(self.entries)})"
