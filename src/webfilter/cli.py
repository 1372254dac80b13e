"""Command-line interface for webfilter using Click."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .client import MasterClient
from .common import DEFAULT_OPEN_MINUTES
from .config import load_config
from .exceptions import ClientInputError, ConfigurationError, TransportError
from .helper import run_helper

# =============================================================================
# LOGGING SETUP
# =============================================================================


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Setup logging configuration.

    This function configures logging with an optional file handler and a
    console handler. It avoids adding duplicate handlers if called
    multiple times.

    Args:
        verbose: If True, sets log level to DEBUG; otherwise INFO.
        log_file: File receiving the log in addition to stderr.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root_logger = logging.getLogger()

    # Avoid adding duplicate handlers
    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    root_logger.setLevel(level)
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


logger = logging.getLogger(__name__)
console = Console(highlight=False)


def _load_config_or_exit(config_dir: Optional[Path]) -> dict:
    try:
        return load_config(config_dir)
    except ConfigurationError as e:
        console.print(f"\n  [red]Config error: {e}[/red]\n", highlight=False)
        sys.exit(1)


def _client(config: dict, master: Optional[str]) -> MasterClient:
    try:
        return MasterClient(master or config["master"], config["timeout"])
    except ConfigurationError as e:
        console.print(f"\n  [red]Config error: {e}[/red]\n", highlight=False)
        sys.exit(1)


config_dir_option = click.option(
    "--config-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory holding .env (default: auto-detect)",
)
master_option = click.option(
    "--master", help="Master address host:port (overrides WEBFILTER_MASTER)"
)


# =============================================================================
# CLICK CLI
# =============================================================================


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="webfilter")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def main(ctx: click.Context, no_color: bool) -> None:
    """webfilter - Host blocking with temporary open windows."""
    if no_color:
        console.no_color = True

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@main.command()
@click.option("--addr", help="Listen address host:port (overrides WEBFILTER_ADDR)")
@click.option(
    "--state-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Persisted host list (overrides WEBFILTER_STATE_FILE)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Log file (overrides WEBFILTER_LOG_FILE)",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@config_dir_option
def serve(
    addr: Optional[str],
    state_file: Optional[Path],
    log_file: Optional[Path],
    verbose: bool,
    config_dir: Optional[Path],
) -> None:
    """Run the master: decision endpoint and admin pages."""
    from .server import serve as run_server

    config = _load_config_or_exit(config_dir)
    setup_logging(verbose, log_file or config["log_file"])

    try:
        run_server(addr or config["addr"], state_file or config["state_file"])
    except ConfigurationError as e:
        console.print(f"\n  [red]Config error: {e}[/red]\n", highlight=False)
        sys.exit(1)


@main.command()
@master_option
@config_dir_option
def helper(master: Optional[str], config_dir: Optional[Path]) -> None:
    """Answer hostnames from stdin with OK or ERR, one per line."""
    config = _load_config_or_exit(config_dir)
    with _client(config, master) as client:
        try:
            run_helper(client, sys.stdin.buffer, sys.stdout)
        except TransportError as e:
            logger.error(f"Call: {e}")
            click.echo(f"Call: {e}", err=True)
            sys.exit(1)


@main.command()
@click.argument("host")
@master_option
@config_dir_option
def check(host: str, master: Optional[str], config_dir: Optional[Path]) -> None:
    """Ask the master whether HOST is allowed."""
    config = _load_config_or_exit(config_dir)
    with _client(config, master) as client:
        try:
            ok = client.validate(host)
        except TransportError as e:
            console.print(f"\n  [red]Error: {e}[/red]\n", highlight=False)
            sys.exit(1)

    if ok:
        console.print(f"  [green]Allowed: {host}[/green]")
    else:
        console.print(f"  [red]Blocked: {host}[/red]")


@main.command()
@click.argument("suffix")
@master_option
@config_dir_option
def add(suffix: str, master: Optional[str], config_dir: Optional[Path]) -> None:
    """Block hosts ending in SUFFIX."""
    config = _load_config_or_exit(config_dir)
    with _client(config, master) as client:
        try:
            client.add(suffix)
        except (ClientInputError, TransportError) as e:
            console.print(f"\n  [red]Error: {e}[/red]\n", highlight=False)
            sys.exit(1)
    console.print(f"\n  [green]Added: {suffix}[/green]\n")


@main.command(name="open")
@click.argument("suffix")
@click.argument("minutes", default=DEFAULT_OPEN_MINUTES, type=click.IntRange(min=0))
@master_option
@config_dir_option
def open_host(
    suffix: str, minutes: int, master: Optional[str], config_dir: Optional[Path]
) -> None:
    """Open SUFFIX for MINUTES (default: 30)."""
    config = _load_config_or_exit(config_dir)
    with _client(config, master) as client:
        try:
            client.open(suffix, minutes)
        except (ClientInputError, TransportError) as e:
            console.print(f"\n  [red]Error: {e}[/red]\n", highlight=False)
            sys.exit(1)
    console.print(f"\n  [yellow]Opened {suffix} for {minutes} minutes[/yellow]\n")


@main.command(name="close")
@click.argument("suffix")
@master_option
@config_dir_option
def close_host(suffix: str, master: Optional[str], config_dir: Optional[Path]) -> None:
    """Close SUFFIX immediately."""
    config = _load_config_or_exit(config_dir)
    with _client(config, master) as client:
        try:
            client.close_host(suffix)
        except (ClientInputError, TransportError) as e:
            console.print(f"\n  [red]Error: {e}[/red]\n", highlight=False)
            sys.exit(1)
    console.print(f"\n  [green]Closed: {suffix}[/green]\n")


@main.command()
@master_option
@config_dir_option
def status(master: Optional[str], config_dir: Optional[Path]) -> None:
    """Show blocked hosts and their open windows."""
    config = _load_config_or_exit(config_dir)
    with _client(config, master) as client:
        try:
            hosts = client.hosts()
        except (ClientInputError, TransportError) as e:
            console.print(f"\n  [red]Error: {e}[/red]\n", highlight=False)
            sys.exit(1)

    console.print("\n  [bold]webfilter Status[/bold]")
    console.print("  [bold]----------------[/bold]")
    console.print(f"  Master: {client.base_url}")
    console.print(f"\n  [bold]Hosts ({len(hosts)}):[/bold]")

    for host in hosts:
        suffix = host.get("suffix", "?")
        if host.get("closed", True):
            console.print(f"    🔴 {suffix:<30} [red]closed[/red]")
        else:
            mins = host.get("mins_remaining", 0)
            console.print(f"    🟢 {suffix:<30} [green]open[/green] ({mins} mins)")

    console.print()


if __name__ == "__main__":
    main()
