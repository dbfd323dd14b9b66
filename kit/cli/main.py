"""Main CLI entry point for Kit."""

import click
from colorama import init

from kit import __version__
from kit.cli.output import BANNER
from kit.cli.commands import (init_cmd, add_cmd, commit_cmd, log_cmd, config_cmd,
                              hash_object_cmd, cat_file_cmd, ls_tree_cmd,
                              write_tree_cmd, commit_tree_cmd)
from kit.utils.log import default_logging_config

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class KitGroup(click.Group):
    """Custom Group class to display banner before help."""

    def format_help(self, ctx, formatter):
        """Override to add banner before help text."""
        click.echo(BANNER)
        super().format_help(ctx, formatter)


@click.group(cls=KitGroup)
@click.version_option(version=__version__)
@click.option('-v', '--verbose', is_flag=True, help='Log debug output to stderr')
def cli(verbose):
    default_logging_config(verbose)


# Register commands
cli.add_command(init_cmd)
cli.add_command(add_cmd)
cli.add_command(commit_cmd)
cli.add_command(log_cmd)
cli.add_command(config_cmd)
cli.add_command(hash_object_cmd)
cli.add_command(cat_file_cmd)
cli.add_command(ls_tree_cmd)
cli.add_command(write_tree_cmd)
cli.add_command(commit_tree_cmd)


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
