"""Object store tests."""

import zlib
import pytest
from kit.core.store import ObjectStore
from kit.core.objects import Blob, Tree, Commit
from kit.core.errors import (InvalidHash, ObjectNotFound, CorruptObject, NotFound,
                             ValidationError, WrongObjectType)


@pytest.fixture
def store(tmp_path):
    return ObjectStore(tmp_path / 'objects')


def test_write_is_deterministic(store):
    """Writing the same payload twice yields the same hash."""
    first = store.write('blob', b'content')
    second = store.write('blob', b'content')
    assert first == second


@pytest.mark.parametrize('obj_type, content', [
    ('blob', b''),
    ('blob', b'\x00\x01binary\xff'),
    ('tree', b''),
    ('commit', b'tree ' + b'a' * 40 + b'\n\nmsg\n'),
])
def test_write_then_read(store, obj_type, content):
    """read(write(t, c)) returns (t, c) exactly."""
    obj_hash = store.write(obj_type, content)
    assert store.read(obj_hash) == (obj_type, content)


def test_object_layout(store):
    """Objects are sharded by the first two hex characters."""
    obj_hash = store.write('blob', b'test')
    path = store.object_path(obj_hash)

    assert path.exists()
    assert path.parent.name == obj_hash[:2]
    assert path.name == obj_hash[2:]
    assert zlib.decompress(path.read_bytes()) == b'blob 4\0test'


def test_write_unknown_type(store):
    with pytest.raises(ValidationError):
        store.write('tag', b'x')


@pytest.mark.parametrize('bad_hash', ['', 'abc', 'z' * 40, 'a' * 41])
def test_read_invalid_hash(store, bad_hash):
    with pytest.raises(InvalidHash):
        store.read(bad_hash)


def test_read_missing(store):
    with pytest.raises(ObjectNotFound) as exc_info:
        store.read('a' * 40)
    assert isinstance(exc_info.value, NotFound)


def test_truncated_object_is_corrupt(store):
    """Dropping one byte of compressed data is detected, never returned."""
    obj_hash = store.write('blob', b'some content worth protecting\n' * 4)
    path = store.object_path(obj_hash)
    path.write_bytes(path.read_bytes()[:-1])

    with pytest.raises(CorruptObject):
        store.read(obj_hash)


def test_rewrite_repairs_truncated_object(store):
    """Writing the same payload again replaces a damaged object file."""
    content = b'interrupted while writing\n' * 4
    obj_hash = store.write('blob', content)
    path = store.object_path(obj_hash)
    path.write_bytes(path.read_bytes()[:-5])

    assert store.write('blob', content) == obj_hash
    assert store.read(obj_hash) == ('blob', content)


def test_write_leaves_no_temporary_files(store):
    obj_hash = store.write('blob', b'abc')
    assert [p.name for p in store.object_path(obj_hash).parent.iterdir()] == [obj_hash[2:]]
    assert list(store) == [obj_hash]


def test_length_mismatch_is_corrupt(store):
    """A header length that disagrees with the content is detected."""
    obj_hash = store.write('blob', b'abc')
    store.object_path(obj_hash).write_bytes(zlib.compress(b'blob 5\0abc'))

    with pytest.raises(CorruptObject, match='length mismatch'):
        store.read(obj_hash)


def test_bad_header_is_corrupt(store):
    obj_hash = store.write('blob', b'abc')
    store.object_path(obj_hash).write_bytes(zlib.compress(b'no header here'))

    with pytest.raises(CorruptObject):
        store.read(obj_hash)


def test_not_zlib_is_corrupt(store):
    obj_hash = store.write('blob', b'abc')
    store.object_path(obj_hash).write_bytes(b'plain text')

    with pytest.raises(CorruptObject, match='decompression'):
        store.read(obj_hash)


def test_read_object_decodes(store):
    tree = Tree()
    tree.add_entry('100644', 'blob', store.write_object(Blob(b'x')), 'x.txt')
    tree_hash = store.write_object(tree)

    read_tree = store.read_object(tree_hash)
    assert isinstance(read_tree, Tree)
    assert read_tree.entries == tree.entries


def test_read_object_expected_type(store):
    blob_hash = store.write_object(Blob(b'x'))
    with pytest.raises(WrongObjectType):
        store.read_object(blob_hash, 'commit')


def test_exists_and_iter(store):
    assert list(store) == []
    first = store.write('blob', b'1')
    second = store.write('blob', b'2')

    assert store.exists(first)
    assert not store.exists('b' * 40)
    assert sorted(store) == sorted([first, second])
