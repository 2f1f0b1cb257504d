"""CLI interface for snitch."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from yaml import YAMLError

from snitch import __version__
from snitch.config import Config, CredentialEnvironment
from snitch.credentials import HomeResolutionError, resolve_credentials
from snitch.issues import IssueAPI, IssueAPIError, find_issue_api, resolve_issue_apis
from snitch.todo import Todo

app = typer.Typer(
    name="snitch",
    help="Resolve forge credentials and mirror TODO markers as tracker issues.",
    no_args_is_help=True,
)
console = Console()


def _mask_token(token: str) -> str:
    """Show at most the last four characters of a token."""
    if not token:
        return "[dim](none)[/dim]"
    if len(token) <= 4:
        return "****"
    return f"****{token[-4:]}"


def _get_config(ctx: typer.Context) -> Config:
    config = ctx.obj
    if not isinstance(config, Config):
        config = Config()
    return config


def _get_issue_api(config: Config, host: str | None) -> IssueAPI:
    """Resolve credentials and pick the client for ``host``.

    Exits with status 1 if resolution fails or no credential matches.
    """
    target = host or config.default_host
    try:
        apis = resolve_issue_apis(CredentialEnvironment.from_environ(), config)
    except HomeResolutionError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    api = find_issue_api(apis, target)
    if api is None:
        console.print(f"[red]No credentials found for host {target}[/red]")
        console.print("[dim]Set GITLAB_PERSONAL_TOKEN or add a section to snitch/gitlab.ini[/dim]")
        raise typer.Exit(1)
    return api


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config file (default: .snitch/config.yaml)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Load configuration and set up logging for every command."""
    try:
        config = Config.load(config_path)
    except (ValidationError, YAMLError) as e:
        console.print(f"[red]Invalid config file: {e}[/red]")
        raise typer.Exit(1) from e

    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    ctx.obj = config


@app.command()
def version() -> None:
    """Show the snitch version."""
    console.print(f"snitch {__version__}")


@app.command()
def hosts(ctx: typer.Context) -> None:
    """List resolved credentials in lookup order."""
    config = _get_config(ctx)
    try:
        records = resolve_credentials(CredentialEnvironment.from_environ(), default_host=config.default_host)
    except HomeResolutionError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    if not records:
        console.print("[yellow]No credentials found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Host", style="cyan")
    table.add_column("Token")
    table.add_column("Source")
    table.add_column("Status")

    seen: set[str] = set()
    for record in records:
        status = "[dim]shadowed[/dim]" if record.host in seen else "[green]active[/green]"
        seen.add(record.host)
        table.add_row(record.host, _mask_token(record.token), record.source, status)

    console.print(table)


@app.command("get-issue")
def get_issue(
    ctx: typer.Context,
    repo: Annotated[str, typer.Argument(help="Repository identifier, e.g. owner/project")],
    issue_id: Annotated[str, typer.Argument(help="Issue reference, e.g. '#42' or 42")],
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="Tracker host (default: config default_host)"),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the raw issue JSON"),
    ] = False,
) -> None:
    """Fetch an issue from the tracker."""
    config = _get_config(ctx)
    reference = issue_id if issue_id.startswith("#") else f"#{issue_id}"

    with _get_issue_api(config, host) as api:
        try:
            fields = api.get_issue(repo, Todo(title="", id=reference))
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1) from e
        except IssueAPIError as e:
            console.print(f"[red]Failed to fetch issue {reference}: {e}[/red]")
            raise typer.Exit(1) from e

    if as_json:
        console.print_json(data=fields)
        return

    console.print(f"[bold]{reference}[/bold] {fields.get('title', '')}")
    if fields.get("state"):
        console.print(f"  State: {fields['state']}")
    if fields.get("description") or fields.get("body"):
        console.print(f"  {fields.get('description') or fields.get('body')}")


@app.command("create-issue")
def create_issue(
    ctx: typer.Context,
    repo: Annotated[str, typer.Argument(help="Repository identifier, e.g. owner/project")],
    title: Annotated[str, typer.Argument(help="Issue title")],
    body: Annotated[
        str,
        typer.Option("--body", "-b", help="Issue description"),
    ] = "",
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="Tracker host (default: config default_host)"),
    ] = None,
) -> None:
    """Create an issue for a TODO marker."""
    config = _get_config(ctx)

    with _get_issue_api(config, host) as api:
        try:
            todo = api.post_issue(repo, Todo(title=title), body)
        except IssueAPIError as e:
            console.print(f"[red]Failed to create issue: {e}[/red]")
            console.print("[dim]The issue may still have been created; check the tracker before retrying[/dim]")
            raise typer.Exit(1) from e

    console.print(f"[green]Created issue {todo.id}[/green] {todo.title}")


if __name__ == "__main__":
    app()
