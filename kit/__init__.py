"""Kit - a minimal content-addressable version control object store."""

__version__ = '0.1.0'

from kit.core.repository import Repository
from kit.core.objects import KitObject, Blob, Tree, Commit
from kit.core.errors import KitError

__all__ = [
    'Repository',
    'KitObject',
    'Blob',
    'Tree',
    'Commit',
    'KitError',
]
