"""Content-addressable object store."""

import zlib
from pathlib import Path
from typing import Tuple, Iterator

from kit.utils.lockfile import atomic_write
from kit.utils.log import getLogger
from .errors import CorruptObject, ObjectNotFound, ValidationError, WrongObjectType
from .hash import validate_hash
from .objects import KitObject, OBJECT_CLASSES, OBJECT_TYPES, object_header, hash_content

logger = getLogger(__name__)


class ObjectStore:
    """
    Stores typed byte payloads under the hash of their framed content.

    Each object lives at ``objects/<first 2 hex>/<remaining 38 hex>`` and
    holds the zlib-compressed bytes of ``<type> <length>\\0<content>``.
    Objects are written atomically and never deleted; writing the same
    payload twice is harmless.
    """

    def __init__(self, objects_dir):
        self.objects_dir = Path(objects_dir)

    def object_path(self, obj_hash: str) -> Path:
        """
        Get filesystem path for an object.

        Objects are stored in subdirectories named by the first 2 characters
        of the hash, with the remaining 38 characters as the filename.
        Example: ab/cdef0123456789... for hash abcdef0123456789...
        """
        return self.objects_dir / obj_hash[:2] / obj_hash[2:]

    def write(self, obj_type: str, content: bytes) -> str:
        """
        Write a typed payload.

        An existing object file is kept only if it reads back cleanly; a
        damaged one (for example truncated by a crash) is replaced.

        Args:
            obj_type: 'blob', 'tree' or 'commit'
            content: Raw object content

        Returns:
            str: 40-character hash of the framed content
        """
        if obj_type not in OBJECT_TYPES:
            raise ValidationError(f"Unknown object type: {obj_type}")

        obj_hash = hash_content(obj_type, content)
        path = self.object_path(obj_hash)

        if path.exists():
            try:
                self.read(obj_hash)
                return obj_hash
            except CorruptObject as e:
                logger.warning("rewriting damaged object %s: %s", obj_hash, e.reason)

        compressed = zlib.compress(object_header(obj_type, len(content)) + content)
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(path, compressed)
        logger.debug("wrote %s %s (%d bytes)", obj_type, obj_hash, len(content))

        return obj_hash

    def read(self, obj_hash: str) -> Tuple[str, bytes]:
        """
        Read a typed payload.

        Returns:
            (type, content)

        Raises:
            InvalidHash: If obj_hash is not 40 hex characters
            ObjectNotFound: If no object file exists for the hash
            CorruptObject: If the file does not decompress, has a bad header,
                or its content length disagrees with the header
        """
        obj_hash = validate_hash(obj_hash)
        path = self.object_path(obj_hash)

        try:
            compressed = path.read_bytes()
        except FileNotFoundError:
            raise ObjectNotFound(obj_hash)

        try:
            raw = zlib.decompress(compressed)
        except zlib.error as e:
            raise CorruptObject(obj_hash, f"decompression failed: {e}")

        null_idx = raw.find(b'\0')
        if null_idx == -1:
            raise CorruptObject(obj_hash, "missing header terminator")

        header = raw[:null_idx]
        content = raw[null_idx + 1:]

        try:
            obj_type, size_str = header.decode('ascii').split(' ', 1)
            size = int(size_str)
        except (UnicodeDecodeError, ValueError):
            raise CorruptObject(obj_hash, f"invalid header {header!r}")

        if obj_type not in OBJECT_TYPES:
            raise CorruptObject(obj_hash, f"unknown object type {obj_type!r}")

        if len(content) != size:
            raise CorruptObject(
                obj_hash, f"content length mismatch: expected {size}, got {len(content)}"
            )

        return obj_type, content

    def write_object(self, obj: KitObject) -> str:
        """Write a Blob, Tree or Commit and return its hash."""
        return self.write(obj.type, obj.serialize())

    def read_object(self, obj_hash: str, expected_type: str = None) -> KitObject:
        """
        Read and decode an object.

        Args:
            obj_hash: 40-character hash
            expected_type: If given, fail unless the object has this type

        Returns:
            KitObject: Blob, Tree or Commit

        Raises:
            WrongObjectType: If expected_type is given and does not match
        """
        obj_type, content = self.read(obj_hash)
        if expected_type is not None and obj_type != expected_type:
            raise WrongObjectType(obj_hash, expected_type, obj_type)
        return OBJECT_CLASSES[obj_type].from_content(content, obj_hash.lower())

    def exists(self, obj_hash: str) -> bool:
        """Check if an object exists in the store."""
        return self.object_path(obj_hash).exists()

    def __iter__(self) -> Iterator[str]:
        """Iterate over the hashes of all stored objects."""
        if not self.objects_dir.exists():
            return
        for subdir in sorted(self.objects_dir.iterdir()):
            if subdir.is_dir() and len(subdir.name) == 2:
                for obj_file in sorted(subdir.iterdir()):
                    if len(obj_file.name) == 38:
                        yield subdir.name + obj_file.name

    def __repr__(self) -> str:
        return f"ObjectStore({self.objects_dir})"
