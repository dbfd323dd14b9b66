"""CLI output utilities and formatting."""

import click
from colorama import Fore, Style

BANNER = f"""
{Fore.CYAN}{Style.BRIGHT}  kit{Style.RESET_ALL} {Fore.WHITE}- a content-addressable version control object store{Style.RESET_ALL}
"""


def success(message: str) -> str:
    """Format success message in green."""
    return f"{Fore.GREEN}✓ {message}{Style.RESET_ALL}"


def info(message: str) -> str:
    """Format info message in cyan."""
    return f"{Fore.CYAN}→ {message}{Style.RESET_ALL}"


def warning(message: str) -> str:
    """Format warning message in yellow."""
    return f"{Fore.YELLOW}⚠ {message}{Style.RESET_ALL}"


def error(message: str) -> str:
    """Format error message in red."""
    return f"{Fore.RED}✗ {message}{Style.RESET_ALL}"


def highlight_hash(obj_hash: str, abbrev: int = 0) -> str:
    """Format a hash in yellow, optionally abbreviated."""
    shown = obj_hash[:abbrev] if abbrev else obj_hash
    return f"{Fore.YELLOW}{shown}{Style.RESET_ALL}"


def abort(message: str) -> None:
    """Print an error and stop with a non-zero exit status."""
    click.echo(error(message))
    raise click.Abort()
