"""Repository management for Kit."""

from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from kit.utils.lockfile import LockFile, atomic_write_text
from kit.utils.log import getLogger
from .config import Config
from .errors import EmptyIndex, NotARepository, RepositoryExists
from .index import Index, IndexEntry
from .objects import KitObject, Tree, TreeEntry, Commit, BLOB, TREE, COMMIT
from .refs import RefManager
from .store import ObjectStore

logger = getLogger(__name__)

KIT_DIR_NAME = '.kit'


class Repository:
    """
    Represents a Kit repository.

    A repository ties together the object store, the staging index, the
    references and the configuration found under one ``.kit`` directory.
    Nothing is cached between calls: every operation reads the index and
    references from disk and writes its changes back before returning.
    """

    def __init__(self, path: Union[str, Path] = '.'):
        """
        Initialize repository.

        Args:
            path: Path to repository root (defaults to current directory)
        """
        self.work_tree = Path(path).resolve()
        self.kit_dir = self.work_tree / KIT_DIR_NAME
        self.objects_dir = self.kit_dir / 'objects'
        self.refs_dir = self.kit_dir / 'refs'
        self.heads_dir = self.refs_dir / 'heads'
        self.head_file = self.kit_dir / 'HEAD'
        self.index_file = self.kit_dir / 'index'
        self.config_file = self.kit_dir / 'config'
        self.lock_file = self.kit_dir / 'lock'

        self.store = ObjectStore(self.objects_dir)
        self.refs = RefManager(self.kit_dir)
        self.config = Config(self.config_file)

    def init(self, default_branch: Optional[str] = None) -> 'Repository':
        """
        Initialize a new repository.

        Creates the .kit directory structure:
        .kit/
        ├── objects/       # Object database
        ├── refs/
        │   └── heads/     # Branch references
        ├── HEAD           # Current branch
        ├── index          # Staging area (empty)
        └── config         # Repository configuration

        Returns:
            Repository: self for method chaining

        Raises:
            RepositoryExists: If repository already exists
        """
        if self.kit_dir.exists():
            raise RepositoryExists(f"Repository already exists at {self.kit_dir}")

        self.work_tree.mkdir(parents=True, exist_ok=True)
        self.kit_dir.mkdir()
        self.objects_dir.mkdir()
        self.refs_dir.mkdir()
        self.heads_dir.mkdir()

        atomic_write_text(self.config_file, '[core]\nrepositoryformatversion = 0\n\n')
        self.refs.set_head(default_branch or self.config.default_branch)
        Index(self.index_file).save()

        logger.debug("initialized repository at %s", self.kit_dir)
        return self

    @classmethod
    def find_repository(cls, path: Union[str, Path] = '.') -> Optional['Repository']:
        """
        Find repository by searching up the directory tree.

        Args:
            path: Starting path for search

        Returns:
            Repository if found, None otherwise
        """
        current = Path(path).resolve()

        while True:
            if (current / KIT_DIR_NAME).is_dir():
                return cls(current)

            # Reached filesystem root
            if current == current.parent:
                return None

            current = current.parent

    @classmethod
    def discover(cls, path: Union[str, Path] = '.') -> 'Repository':
        """Like find_repository, but raise NotARepository when none is found."""
        repo = cls.find_repository(path)
        if repo is None:
            raise NotARepository(f"Not a kit repository (or any parent): {Path(path).resolve()}")
        return repo

    def lock(self) -> LockFile:
        """Exclusive lock for commands that change the index or references."""
        return LockFile(self.lock_file)

    # Object store

    def write_object(self, obj: KitObject) -> str:
        return self.store.write_object(obj)

    def get_object(self, obj_hash: str, expected_type: Optional[str] = None) -> KitObject:
        """Read and decode an object (see ObjectStore.read_object)."""
        return self.store.read_object(obj_hash, expected_type)

    def hash_object(self, data: bytes, obj_type: str = BLOB) -> str:
        """Store data as an object of obj_type and return its hash."""
        return self.store.write(obj_type, data)

    def read_object(self, obj_hash: str) -> Tuple[str, bytes]:
        """Return (type, content) of a stored object."""
        return self.store.read(obj_hash)

    # Trees

    def list_tree(self, tree_hash: str) -> List[TreeEntry]:
        """
        Entries of a tree, in stored (name) order.

        Raises:
            WrongObjectType: If the hash names a blob or commit
        """
        return list(self.get_object(tree_hash, TREE).entries)

    def build_tree(self, source: Union[None, str, Path, Index] = None) -> str:
        """
        Write a tree and return its hash.

        Args:
            source: An Index to snapshot the staged entries, or a directory
                to snapshot recursively (defaults to the work tree)
        """
        if isinstance(source, Index):
            return source.write_tree(self.store)

        directory = Path(source) if source is not None else self.work_tree
        tree = Tree.from_directory(self.store, directory, exclude=(KIT_DIR_NAME,))
        return self.store.write_object(tree)

    # Commits

    def commit_tree(
        self,
        tree_hash: str,
        parent_hash: Optional[str],
        message: str,
        author: Optional[str] = None,
        timestamp: Optional[int] = None
    ) -> str:
        """
        Write a commit object.

        Args:
            tree_hash: Tree the commit snapshots
            parent_hash: Previous commit, or None/'' for a root commit
            message: Commit message
            author: 'Name <email>' (defaults to the configured identity)
            timestamp: Unix time (defaults to now)

        Returns:
            str: Hash of the new commit

        Raises:
            InvalidHash: If either hash is malformed
        """
        commit = Commit.create(
            tree_hash=tree_hash,
            parent_hash=parent_hash,
            author=author or self.config.author_identity(),
            committer=None,
            message=message,
            timestamp=timestamp,
        )
        return self.store.write_object(commit)

    # Staging

    def load_index(self) -> Index:
        return Index.load(self.index_file)

    def stage(self, *paths) -> List[IndexEntry]:
        """
        Add files to the staging index.

        Each path is written as a blob and recorded in the index, replacing
        any earlier entry for the same path. The index is saved after every
        file.

        Raises:
            FileMissing: If a file does not exist
            RepositoryLocked: If another command holds the repository lock
        """
        with self.lock():
            index = self.load_index()
            return [index.add_file(self, path) for path in paths]

    def commit(self, message: str, author: Optional[str] = None, timestamp: Optional[int] = None) -> str:
        """
        Commit the staged entries on the current branch.

        Runs four steps in order: write the tree, write the commit, move the
        branch, empty the index. Each step before the last can be repeated
        safely. If the process stops after the branch moved but before the
        index was emptied, the stale entries are committed again next time.

        Returns:
            str: Hash of the new commit

        Raises:
            EmptyIndex: If nothing is staged
            DetachedHead: If HEAD does not point at a branch
        """
        with self.lock():
            index = self.load_index()
            if not index.entries:
                raise EmptyIndex()

            tree_hash = index.write_tree(self.store)
            parent_hash = self.refs.current_commit()
            commit_hash = self.commit_tree(tree_hash, parent_hash, message, author, timestamp)
            ref = self.refs.advance(commit_hash)

            index.clear()
            index.save()

        logger.debug("committed %s on %s (tree %s)", commit_hash, ref, tree_hash)
        return commit_hash

    # History

    def log(self, start: Optional[str] = None) -> Iterator[Commit]:
        """
        Walk history backwards from start (default: the current commit).

        The head is resolved when iteration begins; each commit is read
        only when it is reached. Stops after the root commit.

        Raises:
            WrongObjectType: If the chain reaches an object that is not a commit
        """
        commit_hash = start or self.refs.current_commit()

        while commit_hash:
            commit = self.get_object(commit_hash, COMMIT)
            yield commit
            commit_hash = commit.parent

    def __repr__(self) -> str:
        return f"Repository(path={self.work_tree})"
