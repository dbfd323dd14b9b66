"""Config command - manage repository configuration."""

import click
from kit.core.repository import Repository
from kit.core.config import Config, split_key
from kit.cli.output import success, info, abort


def _config_for(is_global):
    repo = Repository.find_repository()
    if repo and not is_global:
        return repo.config
    return Config()


@click.group('config')
def config_cmd():
    """Get and set repository or global options."""


@config_cmd.command('set')
@click.argument('key')
@click.argument('value')
@click.option('--global', 'is_global', is_flag=True, help='Set global config')
def config_set(key, value, is_global):
    """
    Set a config value.

    Examples:
        kit config set user.name "Your Name"
        kit config set user.email "your@email.com"
        kit config set --global user.name "Your Name"
    """
    if not is_global and not Repository.find_repository():
        abort("Not a kit repository (use --global for global config)")

    section, option = split_key(key)
    _config_for(is_global).set(section, option, value, global_config=is_global)

    scope = "global" if is_global else "repository"
    click.echo(success(f"Set {scope} config: {key} = {value}"))


@config_cmd.command('get')
@click.argument('key')
@click.option('--global', 'is_global', is_flag=True, help='Get global config only')
def config_get(key, is_global):
    """
    Get a config value.

    Examples:
        kit config get user.name
    """
    section, option = split_key(key)
    value = _config_for(is_global).get(section, option)
    if value is None:
        abort(f"Config key not found: {key}")
    click.echo(value)


@config_cmd.command('list')
@click.option('--global', 'is_global', is_flag=True, help='List global config only')
def config_list(is_global):
    """
    List all config values.

    Examples:
        kit config list
        kit config list --global
    """
    values = _config_for(is_global).list_all(global_only=is_global)
    if not values:
        click.echo(info("No configuration set"))
        return
    for section, items in sorted(values.items()):
        for key, value in sorted(items.items()):
            click.echo(f"{section}.{key}={value}")
