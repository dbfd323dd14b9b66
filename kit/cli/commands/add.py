"""Add command - stage files for commit."""

import click
from pathlib import Path
from kit.core.repository import Repository, KIT_DIR_NAME
from kit.core.errors import KitError
from kit.cli.output import success, info, abort


def _is_metadata(repo, file_path):
    try:
        return KIT_DIR_NAME in file_path.relative_to(repo.work_tree).parts
    except ValueError:
        return False


def expand_paths(repo, paths):
    """Resolve command line paths to files, walking directories."""
    files = []
    for path_arg in paths:
        path = Path(path_arg)
        if not path.is_absolute():
            path = Path.cwd() / path

        if not path.exists():
            abort(f"File not found: {path_arg}")

        if path.is_dir():
            for file_path in sorted(path.rglob('*')):
                if file_path.is_file() and not _is_metadata(repo, file_path):
                    files.append(file_path)
        else:
            files.append(path)
    return files


@click.command('add')
@click.argument('paths', nargs=-1, required=True)
def add_cmd(paths):
    """
    Add file contents to the staging area.

    Stage files for the next commit. Modified files must be added
    again to stage the new changes. Directories are added recursively.

    Examples:
        kit add file.txt
        kit add src/
    """
    repo = Repository.find_repository()
    if not repo:
        abort("Not a kit repository")

    files = expand_paths(repo, paths)
    if not files:
        abort("No files matched")

    try:
        entries = repo.stage(*files)
    except KitError as e:
        abort(str(e))

    click.echo(success(f"Added {len(entries)} file(s) to staging area"))
    for entry in entries:
        click.echo(info(f"  {entry.path}"))
