"""CLI commands for Kit."""

from kit.cli.commands.init import init_cmd
from kit.cli.commands.add import add_cmd
from kit.cli.commands.commit import commit_cmd
from kit.cli.commands.log import log_cmd
from kit.cli.commands.config import config_cmd
from kit.cli.commands.objects import (hash_object_cmd, cat_file_cmd, ls_tree_cmd,
                                      write_tree_cmd, commit_tree_cmd)

__all__ = ['init_cmd', 'add_cmd', 'commit_cmd', 'log_cmd', 'config_cmd',
           'hash_object_cmd', 'cat_file_cmd', 'ls_tree_cmd', 'write_tree_cmd',
           'commit_tree_cmd']
