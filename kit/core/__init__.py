"""Core functionality for Kit.

This module contains the core data structures:
- Kit objects (Blob, Tree, Commit) and their codecs
- Object store
- Index/staging area
- Reference management
- Configuration management
- Hashing utilities
- Errors

For lock files and logging, see kit.utils
"""

from kit.core.errors import (
    KitError, ValidationError, InvalidHash, NotFound, ObjectNotFound, FileMissing,
    CorruptObject, MalformedTree, MalformedCommit, WrongObjectType, EmptyIndex,
    DetachedHead, RepositoryExists, NotARepository, RepositoryLocked, CorruptIndex,
)
from kit.core.objects import (
    KitObject, Blob, Tree, TreeEntry, Commit, parse_commit,
    parse_tree_entries, encode_tree_entries, EMPTY_TREE_HASH,
)
from kit.core.store import ObjectStore
from kit.core.repository import Repository
from kit.core.hash import hash_object, hash_file, validate_hash
from kit.core.index import Index, IndexEntry
from kit.core.refs import RefManager
from kit.core.config import Config, get_config

__all__ = [
    'KitObject',
    'Blob',
    'Tree',
    'TreeEntry',
    'Commit',
    'parse_commit',
    'parse_tree_entries',
    'encode_tree_entries',
    'EMPTY_TREE_HASH',
    'ObjectStore',
    'Repository',
    'Index',
    'IndexEntry',
    'RefManager',
    'Config',
    'get_config',
    'hash_object',
    'hash_file',
    'validate_hash',
    'KitError',
    'ValidationError',
    'InvalidHash',
    'NotFound',
    'ObjectNotFound',
    'FileMissing',
    'CorruptObject',
    'MalformedTree',
    'MalformedCommit',
    'WrongObjectType',
    'EmptyIndex',
    'DetachedHead',
    'RepositoryExists',
    'NotARepository',
    'RepositoryLocked',
    'CorruptIndex',
]
