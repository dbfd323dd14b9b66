"""Configuration management for Kit.

Settings live in INI files: ``~/.kitconfig`` for the user and
``.kit/config`` for a repository. Environment variables named
``KIT_<SECTION>_<KEY>`` override both.
"""

import io
import os
import configparser
from pathlib import Path
from typing import Optional, Dict, List, Tuple

from kit.utils.lockfile import atomic_write_text

DEFAULT_BRANCH = 'main'
DEFAULT_USER_NAME = 'kit'
DEFAULT_USER_EMAIL = 'kit@localhost'


def _env_name(section: str, key: str) -> str:
    return f"KIT_{section.upper()}_{key.upper()}"


class Config:
    """
    Layered configuration lookup.

    Priority order (highest to lowest):
    1. Environment variables (KIT_<SECTION>_<KEY>)
    2. Repository config
    3. Global config
    4. Fallback value

    Files are parsed on first use and cached for the lifetime of the
    instance.
    """

    GLOBAL_CONFIG_PATH = Path.home() / '.kitconfig'

    def __init__(self, repo_config_path: Optional[Path] = None, global_config_path: Optional[Path] = None):
        """
        Args:
            repo_config_path: The repository's config file, if in a repo
            global_config_path: Override for the global config file
        """
        self.repo_config_path = Path(repo_config_path) if repo_config_path else None
        self.global_config_path = Path(global_config_path) if global_config_path else self.GLOBAL_CONFIG_PATH
        self._parsers: Dict[Path, configparser.ConfigParser] = {}

    def _parser(self, path: Path) -> configparser.ConfigParser:
        if path not in self._parsers:
            parser = configparser.ConfigParser()
            if path.exists():
                parser.read(path)
            self._parsers[path] = parser
        return self._parsers[path]

    @property
    def global_config(self) -> configparser.ConfigParser:
        return self._parser(self.global_config_path)

    @property
    def repo_config(self) -> Optional[configparser.ConfigParser]:
        if self.repo_config_path is None:
            return None
        return self._parser(self.repo_config_path)

    def _sources(self, global_only: bool = False, repo_only: bool = False) -> List[configparser.ConfigParser]:
        """Parsers in increasing priority."""
        sources = []
        if not repo_only:
            sources.append(self.global_config)
        if not global_only and self.repo_config is not None:
            sources.append(self.repo_config)
        return sources

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """Look up section.key, see the class docstring for precedence."""
        env_value = os.environ.get(_env_name(section, key))
        if env_value is not None:
            return env_value

        for source in reversed(self._sources()):
            if source.has_option(section, key):
                return source.get(section, key)

        return fallback

    def set(self, section: str, key: str, value: str, global_config: bool = False) -> None:
        """
        Set a configuration value and rewrite the file.

        Args:
            section: Config section
            key: Config key
            value: Value to set
            global_config: If True, write to global config; otherwise repo config

        Raises:
            ValueError: If there is no repository config to write to
        """
        if global_config:
            path = self.global_config_path
        elif self.repo_config_path is None:
            raise ValueError("No repository config path available")
        else:
            path = self.repo_config_path

        parser = self._parser(path)
        if not parser.has_section(section):
            parser.add_section(section)
        parser.set(section, key, value)

        buf = io.StringIO()
        parser.write(buf)
        atomic_write_text(path, buf.getvalue())

    def list_all(self, global_only: bool = False, repo_only: bool = False) -> Dict[str, Dict[str, str]]:
        """
        Merged view of the config files, section -> {key: value}.

        Repository values override global ones with the same key.
        Environment overrides are not included.
        """
        result: Dict[str, Dict[str, str]] = {}
        for source in self._sources(global_only, repo_only):
            for section in source.sections():
                result.setdefault(section, {}).update(source.items(section))
        return result

    def get_user_identity(self) -> Tuple[Optional[str], Optional[str]]:
        """(name, email) for commits; either may be None."""
        return self.get('user', 'name'), self.get('user', 'email')

    def author_identity(self) -> str:
        """Author string for new commits: 'Name <email>'."""
        name, email = self.get_user_identity()
        return f"{name or DEFAULT_USER_NAME} <{email or DEFAULT_USER_EMAIL}>"

    @property
    def default_branch(self) -> str:
        return self.get('core', 'defaultbranch', DEFAULT_BRANCH)


def split_key(key: str) -> Tuple[str, str]:
    """Split 'section.option' into its parts; bare keys go to 'core'."""
    if '.' in key:
        section, option = key.split('.', 1)
        return section, option
    return 'core', key


def get_config(repo=None) -> Config:
    """Config for repo, or global-only config when repo is None."""
    if repo:
        return Config(repo.config_file)
    return Config()
