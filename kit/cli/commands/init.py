"""Initialize a new Kit repository."""

import click
from pathlib import Path
from kit.core.repository import Repository
from kit.core.errors import KitError
from kit.cli.output import success, info, abort


@click.command('init')
@click.argument('path', default='.')
@click.option('-b', '--initial-branch', 'branch', help='Name of the branch HEAD points at')
def init_cmd(path, branch):
    """
    Initialize a new Kit repository.

    Creates a .kit directory with an empty object store, an empty
    staging index and HEAD pointing at the initial branch.

    Examples:
        kit init                    # Initialize in current directory
        kit init my-project         # Initialize in my-project directory
        kit init -b trunk           # Start on branch 'trunk'
    """
    repo_path = Path(path).resolve()

    try:
        repo = Repository(repo_path).init(default_branch=branch)
    except PermissionError:
        abort(f"Permission denied: Cannot create repository at {path}")
    except KitError as e:
        abort(str(e))

    click.echo(success(f"Initialized empty kit repository in {repo.kit_dir}"))
    click.echo(info(f"On branch {repo.refs.get_current_branch()}"))
