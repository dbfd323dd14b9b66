"""Hash utilities tests."""

import pytest
from kit.core.hash import hash_object, hash_file, is_valid_hash, validate_hash
from kit.core.errors import InvalidHash, ValidationError
import tempfile
from pathlib import Path


def test_hash_object_empty():
    """Test hashing empty bytes."""
    result = hash_object(b'')
    assert result == 'da39a3ee5e6b4b0d3255bfef95601890afd80709'


def test_hash_object_deterministic():
    """Test hash consistency for same input."""
    data = b'hello world'
    assert hash_object(data) == hash_object(data)


def test_hash_object_different_data():
    """Test different data produces different hashes."""
    assert hash_object(b'hello') != hash_object(b'world')


def test_hash_file():
    """Test hashing file contents."""
    with tempfile.NamedTemporaryFile(mode='wb', delete=False) as f:
        f.write(b'test content')
        temp_path = f.name

    try:
        assert hash_file(temp_path) == hash_object(b'test content')
    finally:
        Path(temp_path).unlink()


@pytest.mark.parametrize('value', ['a' * 40, 'ABCDEF0123' * 4, '0123456789' * 4])
def test_is_valid_hash_accepts(value):
    assert is_valid_hash(value)


@pytest.mark.parametrize('value', ['', 'a' * 39, 'a' * 41, 'g' * 40, None, 'a' * 38 + ' \n'])
def test_is_valid_hash_rejects(value):
    assert not is_valid_hash(value)


def test_validate_hash_lowercases():
    assert validate_hash('ABCDEF0123' * 4) == 'abcdef0123' * 4


def test_validate_hash_raises():
    """Test malformed hash raises InvalidHash, a ValidationError."""
    with pytest.raises(InvalidHash, match='tree hash'):
        validate_hash('nothex', 'tree hash')

    with pytest.raises(ValidationError):
        validate_hash('abc')
