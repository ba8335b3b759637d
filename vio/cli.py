import json
import shutil
from datetime import datetime

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vio import __version__, api
from vio.errors import VioError
from vio.log import read_logs

REQUIRED_TOOLS = ("git", "rsync")


def _check_dependencies(console):
    for tool in REQUIRED_TOOLS:
        if shutil.which(tool) is None:
            console.print(f"[red]Unable to execute '{tool}'. Install it and make sure it is on PATH.[/red]")
            raise SystemExit(1)


def _fail(console, error):
    console.print(f"[red]{escape(str(error))}[/red]", soft_wrap=True)
    raise SystemExit(1)


def _parse_meta(ctx, param, value):
    try:
        meta = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON ({e.msg})")
    if not isinstance(meta, dict) or not all(isinstance(v, str) for v in meta.values()):
        raise click.BadParameter('expected a JSON object of strings, e.g. \'{"run": "42"}\'')
    return meta


@click.command()
@click.option("-s", "--snapshots", "snapshots_path", default=".snapshots", show_default=True,
              help="Path to where snapshots are stored.")
@click.option("-b", "--backend", "backend_type", default="posix", show_default=True,
              help="Backend to manage snapshots.")
def init(snapshots_path, backend_type):
    """Initialize vio in the current repository. Creates .vioconfig."""
    console = Console()
    try:
        config_path = api.init(snapshots_path=snapshots_path, backend_type=backend_type)
    except VioError as e:
        _fail(console, e)
    console.print(f"Created {config_path}")


@click.command()
@click.option("-m", "--meta", default="{}", callback=_parse_meta,
              help="JSON-formatted string of key-value pairs.")
def commit(meta):
    """Snapshot untracked files at the current git revision."""
    console = Console()
    try:
        version = api.commit(meta)
    except VioError as e:
        _fail(console, e)
    console.print(f"[bold green]Committed[/bold green] [cyan]{version.ref}[/cyan]")


@click.command()
@click.argument("ref")
def checkout(ref):
    """Restore the untracked files of a committed version.

    REF is revision#timestamp as shown by 'vio log', or a bare revision for
    its latest snapshot.
    """
    console = Console()
    try:
        version = api.checkout(ref)
    except VioError as e:
        _fail(console, e)
    console.print(f"[bold green]Checked out[/bold green] [cyan]{version.ref}[/cyan]")


@click.command()
def log():
    """List committed versions."""
    console = Console()
    try:
        versions = api.log()
    except VioError as e:
        _fail(console, e)

    if not versions:
        console.print("[dim]No versions committed yet.[/dim]")
        return

    table = Table(title="Versions")
    table.add_column("Version", style="bold cyan")
    table.add_column("Created", style="dim")
    table.add_column("Metadata")

    for v in versions:
        created = v.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        meta = ", ".join(f"{k}={val}" for k, val in sorted(v.metadata.items()))
        table.add_row(v.ref, created, meta)

    console.print(table)


@click.command()
def status():
    """Show repository status."""
    console = Console()
    try:
        backend = api.open_backend()
        state = backend.get_status()
        count = len(backend.get_versions())
    except VioError as e:
        _fail(console, e)
    console.print(f"Status: [bold]{state.value}[/bold]  ({count} version(s) in index)")


@click.command()
@click.option("-n", "--limit", default=20, help="Number of log entries to show.")
@click.option("--all", "show_all", is_flag=True, help="Show entries for all repositories.")
def history(limit, show_all):
    """Show the audit log of init/commit/checkout events."""
    console = Console()
    root = None if show_all else api.repo_root()
    entries = read_logs(root)

    if not entries:
        console.print("[dim]No history found.[/dim]")
        return

    table = Table(title="History")
    table.add_column("Time", style="dim")
    table.add_column("Event", style="bold")
    table.add_column("Version", style="cyan")
    table.add_column("Repository", style="dim")

    for entry in entries[-limit:]:
        ts = entry.get("timestamp", "")
        if ts:
            try:
                ts = datetime.fromisoformat(ts).strftime("%m-%d %H:%M")
            except ValueError:
                pass
        table.add_row(ts, entry.get("event", ""), entry.get("version", ""), entry.get("repo", ""))

    console.print(table)


COMMANDS = (init, commit, checkout, log, status, history)


def build_cli(commands=COMMANDS):
    """Build the vio command group from an explicit command table."""

    @click.group()
    @click.version_option(version=__version__, prog_name="vio")
    def cli():
        """vio: version the files git doesn't track."""
        _check_dependencies(Console())

    for command in commands:
        cli.add_command(command)
    return cli


def main():
    build_cli()()
