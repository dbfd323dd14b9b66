"""Shared pytest fixtures for Kit tests."""

import os
import pytest
import tempfile
import shutil
from pathlib import Path
from kit.core.config import Config
from kit.core.repository import Repository
from kit.core.objects import Blob, Tree, Commit


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep tests away from the user's ~/.kitconfig and KIT_* variables."""
    home = tmp_path_factory.mktemp('home')
    monkeypatch.setattr(Config, 'GLOBAL_CONFIG_PATH', home / '.kitconfig')
    for name in list(os.environ):
        if name.startswith('KIT_'):
            monkeypatch.delenv(name)
    return home


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir).resolve()
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def repo(temp_dir):
    """Create an initialized repository."""
    return Repository(temp_dir).init()


@pytest.fixture
def repo_with_config(repo):
    """Create a repository with a user identity configured."""
    repo.config_file.write_text("""[core]
repositoryformatversion = 0

[user]
name = Test User
email = test@example.com
""")
    return Repository(repo.work_tree)


@pytest.fixture
def sample_blob():
    """Create a sample blob object."""
    return Blob(b"Hello, World!\n")


@pytest.fixture
def sample_tree(repo, sample_blob):
    """Create a sample tree with one blob."""
    blob_hash = repo.write_object(sample_blob)
    tree = Tree()
    tree.add_entry('100644', 'blob', blob_hash, 'test.txt')
    return tree


@pytest.fixture
def sample_commit(sample_tree, repo):
    """Sample root commit object."""
    tree_hash = repo.write_object(sample_tree)
    return Commit.create(
        tree_hash=tree_hash,
        parent_hash=None,
        author="Test User <test@example.com>",
        committer="Test User <test@example.com>",
        message="Test commit",
        timestamp=1698660000,
    )


@pytest.fixture
def in_repo(repo, monkeypatch):
    """Run the test from inside the repository's work tree."""
    monkeypatch.chdir(repo.work_tree)
    return repo


def write_file(repo, name, content, executable=False):
    """Create a file in the work tree and return its path."""
    path = repo.work_tree / name
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        content = content.encode()
    path.write_bytes(content)
    if executable:
        path.chmod(0o755)
    else:
        path.chmod(0o644)
    return path


def make_commit(repo, message="Test commit", files=None):
    """
    Stage files (name -> content) and commit them.

    Returns:
        str: Commit hash
    """
    files = files or {f"{message.replace(' ', '_')}.txt": message}
    paths = [write_file(repo, name, content) for name, content in files.items()]
    repo.stage(*paths)
    return repo.commit(message)
