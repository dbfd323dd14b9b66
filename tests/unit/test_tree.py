"""Tree object tests."""

import pytest
from kit.core.objects import (Tree, TreeEntry, Blob, parse_tree_entries,
                              encode_tree_entries, EMPTY_TREE_HASH)
from kit.core.errors import MalformedTree, ValidationError, InvalidHash


def test_tree_entry_creation():
    """Test creating a tree entry."""
    entry = TreeEntry('100644', 'blob', 'a' * 40, 'file.txt')
    assert entry.mode == '100644'
    assert entry.type == 'blob'
    assert entry.hash == 'a' * 40
    assert entry.name == 'file.txt'


def test_tree_entry_type_from_mode():
    assert TreeEntry('40000', None, 'a' * 40, 'dir').type == 'tree'
    assert TreeEntry('100755', None, 'a' * 40, 'run').type == 'blob'
    assert TreeEntry('120000', None, 'a' * 40, 'link').type == 'blob'


def test_tree_entry_sorting():
    """Test tree entries sort by name."""
    entry1 = TreeEntry('100644', 'blob', 'a' * 40, 'zebra.txt')
    entry2 = TreeEntry('100644', 'blob', 'b' * 40, 'apple.txt')
    assert entry2 < entry1


def test_tree_entry_encoding():
    """Entry encoding is mode, space, name, NUL, 20 raw hash bytes."""
    entry = TreeEntry('100644', 'blob', '0123456789abcdef0123456789abcdef01234567', 'a.txt')
    assert entry.encode() == (
        b'100644 a.txt\0' + bytes.fromhex('0123456789abcdef0123456789abcdef01234567')
    )


def test_tree_creation():
    """Test creating empty tree."""
    tree = Tree()
    assert len(tree.entries) == 0
    assert tree.type == 'tree'
    assert tree.serialize() == b''
    assert tree.hash == EMPTY_TREE_HASH


def test_tree_entries_sorted():
    """Test entries are automatically sorted."""
    tree = Tree()
    tree.add_entry('100644', 'blob', 'a' * 40, 'zebra.txt')
    tree.add_entry('100644', 'blob', 'b' * 40, 'apple.txt')
    tree.add_entry('40000', 'tree', 'c' * 40, 'middle')

    assert [e.name for e in tree.entries] == ['apple.txt', 'middle', 'zebra.txt']


def test_tree_sort_is_bytewise():
    """Upper case sorts before lower case, as raw bytes do."""
    tree = Tree()
    tree.add_entry('100644', 'blob', 'a' * 40, 'b')
    tree.add_entry('100644', 'blob', 'a' * 40, 'B')
    tree.add_entry('100644', 'blob', 'a' * 40, 'a')
    assert [e.name for e in tree.entries] == ['B', 'a', 'b']


def test_tree_order_independent():
    """Same entries in different input orders encode and hash identically."""
    entry_args = [
        ('100644', 'blob', 'a' * 40, 'one'),
        ('100755', 'blob', 'b' * 40, 'two'),
        ('40000', 'tree', 'c' * 40, 'three'),
    ]
    forward = Tree()
    for args in entry_args:
        forward.add_entry(*args)
    backward = Tree()
    for args in reversed(entry_args):
        backward.add_entry(*args)

    assert forward.serialize() == backward.serialize()
    assert forward.hash == backward.hash

    entries = [TreeEntry(*args) for args in entry_args]
    assert encode_tree_entries(entries) == encode_tree_entries(reversed(entries))


def test_tree_rejects_duplicate_names():
    tree = Tree()
    tree.add_entry('100644', 'blob', 'a' * 40, 'same')
    with pytest.raises(ValidationError, match='Duplicate'):
        tree.add_entry('100644', 'blob', 'b' * 40, 'same')


@pytest.mark.parametrize('name', ['', 'a/b', 'nul\0byte'])
def test_tree_rejects_bad_names(name):
    with pytest.raises(ValidationError):
        Tree().add_entry('100644', 'blob', 'a' * 40, name)


@pytest.mark.parametrize('mode', ['', '100644 x', '10064\0', 'rwxr-xr-x', '100648'])
def test_tree_rejects_bad_modes(mode):
    with pytest.raises(ValidationError, match='Invalid mode'):
        Tree().add_entry(mode, 'blob', 'a' * 40, 'x')


def test_tree_rejects_bad_hash():
    with pytest.raises(InvalidHash):
        Tree().add_entry('100644', 'blob', 'not-a-hash', 'x')


def test_tree_parse_roundtrip():
    """Test parsing recovers the entries that were encoded."""
    tree = Tree()
    tree.add_entry('100644', 'blob', 'a' * 40, 'file.txt')
    tree.add_entry('40000', 'tree', 'b' * 40, 'dir')

    parsed = Tree()
    parsed.deserialize(tree.serialize())

    assert [(e.mode, e.type, e.hash, e.name) for e in parsed.entries] == [
        ('40000', 'tree', 'b' * 40, 'dir'),
        ('100644', 'blob', 'a' * 40, 'file.txt'),
    ]


def test_parse_non_utf8_name_roundtrips():
    raw = b'100644 caf\xe9\0' + b'\x11' * 20
    entries = parse_tree_entries(raw)
    assert encode_tree_entries(entries) == raw


@pytest.mark.parametrize('content, reason', [
    (b'100644', 'missing space'),
    (b'100644 name-without-nul', 'missing NUL'),
    (b'100644 name\0' + b'\x00' * 19, 'incomplete hash'),
    (b'100644 a\0' + b'\x00' * 20 + b'40000', 'missing space'),
])
def test_parse_malformed(content, reason):
    with pytest.raises(MalformedTree, match=reason):
        parse_tree_entries(content)


def test_tree_from_directory(repo):
    """Files become blobs and subdirectories become trees."""
    (repo.work_tree / 'a.txt').write_bytes(b'a')
    (repo.work_tree / 'sub').mkdir()
    (repo.work_tree / 'sub' / 'b.txt').write_bytes(b'b')
    (repo.work_tree / 'empty').mkdir()

    tree = Tree.from_directory(repo.store, repo.work_tree)

    assert [e.name for e in tree.entries] == ['a.txt', 'empty', 'sub']
    assert tree.get_entry('empty').hash == EMPTY_TREE_HASH
    assert repo.store.exists(tree.get_entry('sub').hash)
    assert repo.store.read(tree.get_entry('a.txt').hash) == ('blob', b'a')
    assert tree.get_entry('.kit') is None
