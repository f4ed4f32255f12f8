from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from routewire.config import Config
from routewire.domain.models import EndpointDescriptor
from routewire.orchestrator.pipeline import run_analyze
from routewire.store.sqlite_store import ROLES, RouteWireSQLiteStore


app = typer.Typer(no_args_is_help=True, add_completion=False)

endpoints_app = typer.Typer(no_args_is_help=True)
app.add_typer(endpoints_app, name="endpoints")

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else Config.LOG_LEVEL,
        format=Config.LOG_FORMAT,
        datefmt=Config.LOG_DATE_FORMAT,
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _repo_dir(repo: str) -> Path:
    repo_path = Path(repo).expanduser().resolve()
    if not repo_path.exists():
        raise typer.BadParameter(f"Repo path does not exist: {repo_path}")
    if not repo_path.is_dir():
        raise typer.BadParameter(f"Repo path is not a directory: {repo_path}")
    return repo_path


def _endpoint_table(rows: list[EndpointDescriptor]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("COMPONENT", no_wrap=True)
    table.add_column("URI")
    table.add_column("INSTANCE", no_wrap=True)
    table.add_column("ROLE", no_wrap=True)
    table.add_column("FILE")

    for e in rows:
        table.add_row(
            e.endpoint_component_name or "-",
            e.endpoint_uri,
            e.endpoint_instance or "-",
            e.role,
            e.file_name,
        )
    return table


@app.command()
def analyze(
    repo: str = typer.Argument(..., help="Path to the repo to analyze"),
    max_files: Optional[int] = typer.Option(None, help="Limit scanned files (debug)"),
) -> None:
    repo_path = _repo_dir(repo)

    result = run_analyze(repo_path, max_files=max_files)

    console.print(f"[bold green]routewire[/bold green] analyze: {repo_path}")
    console.print(f"Python files scanned: {result.files_scanned}")
    console.print(f"Candidate route files: {len(result.candidate_files)}")
    console.print(f"Route builder classes: {result.route_classes} (skipped {result.skipped_classes})")
    if result.unparsable_files:
        console.print(f"[yellow]Unparsable files:[/yellow] {len(result.unparsable_files)}")
        for f in result.unparsable_files:
            console.print(f"  {f}")
    if result.oversized_files:
        console.print(f"[yellow]Files over the size limit (not analyzed):[/yellow] {len(result.oversized_files)}")
        for f in result.oversized_files:
            console.print(f"  {f}")

    console.print("")
    console.print(f"Endpoints found: [bold]{len(result.endpoints)}[/bold]")
    for e in result.endpoints[:50]:
        console.print(f"  {e.role:<8} {e.endpoint_uri:<40} {e.file_name}")
    if len(result.endpoints) > 50:
        console.print(f"  … and {len(result.endpoints) - 50} more")
    console.print("")
    console.print(f"DB: {result.db_path}")
    console.print("Tip: run [bold]routewire endpoints list <repo>[/bold] to query the inventory.")


@endpoints_app.command("list")
def endpoints_list(
    repo: str = typer.Argument(..., help="Path to the repo"),
    component: Optional[str] = typer.Option(None, help="Filter by component (jms, file, timer, ...)"),
    uri_contains: Optional[str] = typer.Option(None, help="Substring match on endpoint uri"),
    file_contains: Optional[str] = typer.Option(None, help="Substring match on file path"),
    role: Optional[str] = typer.Option(None, help="Filter by role: consumer|producer|mixed"),
    limit: int = typer.Option(200, help="Max rows to print"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    repo_path = _repo_dir(repo)
    if role is not None and role.lower() not in ROLES:
        raise typer.BadParameter(f"role must be one of: {', '.join(ROLES)}")
    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    db_path = RouteWireSQLiteStore.db_path_for_repo(repo_path)
    store = RouteWireSQLiteStore(db_path, repo_root=repo_path)

    rows = store.list_endpoints(
        component=component,
        uri_contains=uri_contains,
        file_contains=file_contains,
        role=role,
        limit=limit,
    )

    if fmt == "json":
        # plain stdout so the output stays pipeable
        typer.echo(json.dumps([r.model_dump() for r in rows], indent=2))
        return

    console.print(f"[bold]DB:[/bold] {db_path}")
    console.print(f"[bold]Endpoints:[/bold] {len(rows)} (showing up to {limit})")
    console.print(_endpoint_table(rows))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
