"""Object-level commands: hash-object, cat-file, ls-tree, write-tree, commit-tree."""

import click
from pathlib import Path
from colorama import Fore, Style
from kit.core.repository import Repository
from kit.core.errors import KitError
from kit.core.objects import OBJECT_TYPES, BLOB, TREE, hash_content
from kit.cli.output import highlight_hash, abort


def _require_repository():
    repo = Repository.find_repository()
    if not repo:
        abort("Not a kit repository")
    return repo


@click.command('hash-object')
@click.option('-w', '--write', is_flag=True, help='Write the object into the object store')
@click.option('-t', '--type', 'obj_type', type=click.Choice(OBJECT_TYPES), default=BLOB,
              show_default=True, help='Object type')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def hash_object_cmd(write, obj_type, file):
    """
    Compute the hash of a file's content, optionally storing it.

    Examples:
        kit hash-object notes.txt
        kit hash-object -w notes.txt
    """
    data = Path(file).read_bytes()

    if not write:
        click.echo(hash_content(obj_type, data))
        return

    repo = _require_repository()
    try:
        click.echo(repo.hash_object(data, obj_type))
    except KitError as e:
        abort(str(e))


@click.command('cat-file')
@click.option('-t', '--type', 'show_type', is_flag=True, help='Show object type')
@click.option('-s', '--size', 'show_size', is_flag=True, help='Show object size')
@click.option('-p', '--pretty', is_flag=True, help='Pretty-print object content (default)')
@click.argument('object_hash')
def cat_file_cmd(show_type, show_size, pretty, object_hash):
    """
    Show object content, type, or size.

    Examples:
        kit cat-file -t <hash>     # Show object type
        kit cat-file -s <hash>     # Show object size
        kit cat-file -p <hash>     # Print object content
    """
    repo = _require_repository()

    try:
        obj_type, content = repo.read_object(object_hash)
        if obj_type == TREE and not (show_type or show_size):
            entries = repo.list_tree(object_hash)
    except KitError as e:
        abort(f"cat-file failed: {e}")

    if show_type:
        click.echo(obj_type)
    elif show_size:
        click.echo(len(content))
    elif obj_type == TREE:
        for entry in entries:
            click.echo(f"{entry.mode} {entry.type} {entry.hash}\t{entry.name}")
    else:
        click.echo(content, nl=False)


@click.command('ls-tree')
@click.option('--name-only', is_flag=True, help='Show only entry names')
@click.option('-r', '--recursive', is_flag=True, help='Recurse into sub-trees')
@click.argument('tree_hash')
def ls_tree_cmd(name_only, recursive, tree_hash):
    """
    List contents of a tree object.

    Each line shows mode, type, hash and name.

    Examples:
        kit ls-tree <tree-hash>
        kit ls-tree --name-only <tree-hash>
        kit ls-tree -r <tree-hash>
    """
    repo = _require_repository()

    try:
        display_tree(repo, tree_hash, '', name_only, recursive)
    except KitError as e:
        abort(f"ls-tree failed: {e}")


def display_tree(repo, tree_hash, prefix, name_only, recursive):
    """Display tree entries with optional recursion."""
    for entry in repo.list_tree(tree_hash):
        full_path = f"{prefix}{entry.name}"

        if recursive and entry.type == TREE:
            display_tree(repo, entry.hash, full_path + '/', name_only, recursive)
            continue

        if name_only:
            click.echo(full_path)
        else:
            name = f"{Fore.BLUE}{full_path}{Style.RESET_ALL}" if entry.type == TREE else full_path
            click.echo(f"{entry.mode} {entry.type} {highlight_hash(entry.hash)}\t{name}")


@click.command('write-tree')
@click.argument('directory', required=False, type=click.Path(exists=True, file_okay=False))
def write_tree_cmd(directory):
    """
    Snapshot a directory (default: the work tree) as tree objects.

    Prints the hash of the top-level tree.
    """
    repo = _require_repository()

    try:
        click.echo(repo.build_tree(directory))
    except KitError as e:
        abort(f"write-tree failed: {e}")


@click.command('commit-tree')
@click.argument('tree_hash')
@click.option('-p', '--parent', 'parent_hash', default='', help='Parent commit hash')
@click.option('-m', '--message', required=True, help='Commit message')
def commit_tree_cmd(tree_hash, parent_hash, message):
    """
    Create a commit object for a tree without moving any branch.

    Examples:
        kit commit-tree <tree> -m "Initial"
        kit commit-tree <tree> -p <parent> -m "Next"
    """
    repo = _require_repository()

    try:
        click.echo(repo.commit_tree(tree_hash, parent_hash, message))
    except KitError as e:
        abort(f"commit-tree failed: {e}")
