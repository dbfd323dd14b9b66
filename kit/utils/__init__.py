"""Utilities module for common helper functions.

This module contains:
- Lock files and atomic writes
- Logging setup
"""

from kit.utils.lockfile import LockFile, atomic_write, atomic_write_text
from kit.utils.log import getLogger, default_logging_config

__all__ = [
    'LockFile', 'atomic_write', 'atomic_write_text',
    'getLogger', 'default_logging_config',
]
