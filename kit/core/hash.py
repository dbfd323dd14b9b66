"""Hash utilities for Kit."""

import hashlib
import string

from .errors import InvalidHash

HASH_HEX_LENGTH = 40

_HEX_DIGITS = frozenset(string.hexdigits)


def hash_object(data: bytes) -> str:
    """
    Compute SHA-1 hash of data.
    
    Args:
        data: Bytes to hash
        
    Returns:
        40-character hex string
    """
    return hashlib.sha1(data).hexdigest()


def hash_file(filepath: str) -> str:
    """
    Compute SHA-1 hash of file.
    
    Args:
        filepath: Path to file
        
    Returns:
        40-character hex string
    """
    with open(filepath, 'rb') as f:
        return hash_object(f.read())


def is_valid_hash(value) -> bool:
    """Return True if value is a 40-character hex string."""
    return (
        isinstance(value, str)
        and len(value) == HASH_HEX_LENGTH
        and all(c in _HEX_DIGITS for c in value)
    )


def validate_hash(value, what: str = 'hash') -> str:
    """
    Check that value is a well-formed hash.
    
    Args:
        value: Candidate hash
        what: Name used in the error message (e.g. 'tree hash')
        
    Returns:
        str: The hash, lowercased
        
    Raises:
        InvalidHash: If value is not exactly 40 hex characters
    """
    if not is_valid_hash(value):
        raise InvalidHash(value, what)
    return value.lower()
