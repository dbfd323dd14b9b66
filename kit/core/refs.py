"""Reference management for Kit."""

from pathlib import Path
from typing import Optional

from kit.utils.lockfile import atomic_write_text
from kit.utils.log import getLogger
from .errors import DetachedHead, NotARepository, ValidationError
from .hash import validate_hash

logger = getLogger(__name__)

SYMREF_PREFIX = 'ref: '
HEADS_PREFIX = 'refs/heads/'


class RefManager:
    """
    Manages HEAD and branch references.

    HEAD is either symbolic (``ref: refs/heads/<branch>``) or, when
    detached, holds a commit hash directly. A branch ref file holds one
    commit hash followed by a newline and does not exist until the first
    commit on that branch.
    """

    def __init__(self, kit_dir):
        """
        Initialize reference manager.

        Args:
            kit_dir: Path to the repository's .kit directory
        """
        self.kit_dir = Path(kit_dir)
        self.refs_dir = self.kit_dir / 'refs'
        self.heads_dir = self.refs_dir / 'heads'
        self.head_file = self.kit_dir / 'HEAD'

    def _read_head(self) -> str:
        try:
            return self.head_file.read_text().strip()
        except FileNotFoundError:
            raise NotARepository(f"No HEAD file at {self.head_file}")

    def current_branch_ref(self) -> Optional[str]:
        """
        Get the ref HEAD points at.

        Returns:
            Ref path such as 'refs/heads/main', or None if HEAD is detached
        """
        content = self._read_head()
        if content.startswith(SYMREF_PREFIX):
            return content[len(SYMREF_PREFIX):].strip()
        return None

    def get_current_branch(self) -> Optional[str]:
        """
        Get the current branch name.

        Returns:
            Branch name or None if in detached HEAD state
        """
        ref = self.current_branch_ref()
        if ref and ref.startswith(HEADS_PREFIX):
            return ref[len(HEADS_PREFIX):]
        return ref

    def is_detached_head(self) -> bool:
        """True if HEAD holds a commit hash rather than a branch ref."""
        return self.current_branch_ref() is None

    def read_ref(self, ref_name: str) -> Optional[str]:
        """
        Read the commit hash a ref file holds.

        Returns:
            Commit hash, or None if the ref file does not exist yet
        """
        ref_path = self.kit_dir / ref_name
        try:
            return ref_path.read_text().strip() or None
        except FileNotFoundError:
            return None

    def current_commit(self) -> Optional[str]:
        """
        Resolve HEAD to a commit hash.

        Returns:
            Commit hash, or None if the current branch has no commits yet
        """
        ref = self.current_branch_ref()
        if ref is None:
            return self._read_head() or None
        return self.read_ref(ref)

    def advance(self, commit_hash: str) -> str:
        """
        Point the current branch at commit_hash.

        Args:
            commit_hash: New branch head

        Returns:
            str: The ref that was updated

        Raises:
            DetachedHead: If HEAD is not symbolic
            InvalidHash: If commit_hash is malformed
        """
        commit_hash = validate_hash(commit_hash, 'commit hash')
        ref = self.current_branch_ref()
        if ref is None:
            raise DetachedHead(self._read_head())

        ref_path = self.kit_dir / ref
        ref_path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(ref_path, commit_hash + '\n')
        logger.debug("%s -> %s", ref, commit_hash)
        return ref

    def set_head(self, target: str, symbolic: bool = True) -> None:
        """
        Set HEAD to a branch (symbolic) or to a commit hash (detached).

        The branch does not need to exist yet.
        """
        if symbolic:
            if not target.startswith(HEADS_PREFIX):
                target = HEADS_PREFIX + target
            if not target[len(HEADS_PREFIX):] or '..' in target.split('/'):
                raise ValidationError(f"Invalid branch name: {target}")
            atomic_write_text(self.head_file, f'{SYMREF_PREFIX}{target}\n')
        else:
            atomic_write_text(self.head_file, validate_hash(target, 'commit hash') + '\n')
