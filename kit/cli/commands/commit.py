"""Commit command - create a commit from staged changes."""

import click
from kit.core.repository import Repository
from kit.core.errors import KitError, EmptyIndex
from kit.cli.output import success, error, info, abort


@click.command('commit')
@click.option('-m', '--message', required=True, help='Commit message')
@click.option('--author', help='Author name and email (format: "Name <email>")')
def commit_cmd(message, author):
    """
    Record changes to the repository.

    Creates a commit from the staged changes in the index, moves the
    current branch to it and empties the index.

    Examples:
        kit commit -m "Initial commit"
        kit commit -m "Add feature" --author "Jane <jane@example.com>"
    """
    repo = Repository.find_repository()
    if not repo:
        abort("Not a kit repository")

    try:
        commit_hash = repo.commit(message, author=author)
    except EmptyIndex as e:
        click.echo(error(str(e)))
        click.echo(info("Use 'kit add <file>' to stage changes"))
        raise click.Abort()
    except KitError as e:
        abort(f"Failed to create commit: {e}")

    branch = repo.refs.get_current_branch()
    click.echo(success(f"[{branch} {commit_hash[:7]}] {message}"))
