"""Log command - show commit history."""

import click
from itertools import islice
from kit.core.repository import Repository
from kit.core.errors import KitError
from kit.cli.output import info, highlight_hash, abort


def format_timestamp(commit):
    """Format a commit's author time with its recorded offset."""
    return commit.timestamp.strftime("%a %b %d %H:%M:%S %Y %z")


@click.command('log')
@click.option('-n', '--max-count', type=click.IntRange(min=0), help='Limit the number of commits')
@click.option('--oneline', is_flag=True, help='Show each commit on one line')
def log_cmd(max_count, oneline):
    """
    Show commit history of the current branch.

    Examples:
        kit log
        kit log -n 5
        kit log --oneline
    """
    repo = Repository.find_repository()
    if not repo:
        abort("Not a kit repository")

    shown = 0
    try:
        for commit in islice(repo.log(), max_count):
            shown += 1
            if oneline:
                first_line = commit.message.split('\n')[0]
                click.echo(f"{highlight_hash(commit.hash, 7)} {first_line}")
                continue

            click.echo(f"commit {highlight_hash(commit.hash)}")
            click.echo(f"Author: {commit.author}")
            click.echo(f"Date:   {format_timestamp(commit)}")
            click.echo()
            for line in commit.message.split('\n'):
                click.echo(f"    {line}")
            click.echo()
    except KitError as e:
        abort(f"log failed: {e}")

    if not shown:
        click.echo(info("No commits yet"))
